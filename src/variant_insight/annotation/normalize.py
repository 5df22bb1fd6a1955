"""Normalize heterogeneous MyVariant.info hits into EnrichedVariant records.

MyVariant.info returns most sub-documents either as a single object or as
a list of objects (one per transcript, RCV accession or database row).
Every such field is collapsed here with a "first wins" rule: the first list
element is used, no scoring decides between elements. Nothing past this
module sees a maybe-list value.
"""

from typing import Any

import structlog

from variant_insight.annotation.models import (
    NOT_REPORTED,
    UNCERTAIN,
    EnrichedVariant,
)

logger = structlog.get_logger()


def first_wins(value: Any) -> Any:
    """Collapse an object-or-list value to a single value.

    Returns the first element of a list (None for an empty list) and any
    other value unchanged.
    """
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _first_dict(value: Any) -> dict:
    """Collapse to a single dict, or {} if the value is missing or not a mapping."""
    value = first_wins(value)
    return value if isinstance(value, dict) else {}


def _as_float(value: Any) -> float | None:
    """Coerce a scalar (or first list element) to float; None if not numeric."""
    value = first_wins(value)
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> str | None:
    value = first_wins(value)
    if value is None or value == "":
        return None
    return str(value)


def is_not_found(hit: dict) -> bool:
    """Return True if the service flagged the hit as not found."""
    return bool(hit.get("notfound", False))


def extract_clinvar(hit: dict) -> tuple[str, str | None]:
    """Return (clinical significance, condition name) from a clinvar block."""
    clinvar = _first_dict(hit.get("clinvar"))
    if "rcv" not in clinvar:
        return NOT_REPORTED, None

    rcv = _first_dict(clinvar.get("rcv"))
    significance = _as_str(rcv.get("clinical_significance")) or UNCERTAIN
    conditions = _first_dict(rcv.get("conditions"))
    return significance, _as_str(conditions.get("name"))


def extract_scores(hit: dict) -> tuple[float | None, float | None]:
    """Return (CADD phred, REVEL score) from a dbNSFP block."""
    dbnsfp = _first_dict(hit.get("dbnsfp"))
    if not dbnsfp:
        return None, None

    cadd = _as_float(_first_dict(dbnsfp.get("cadd")).get("phred"))

    # Older dbNSFP builds use a flat revel_score, newer ones nest revel.score
    revel = _as_float(dbnsfp.get("revel_score"))
    if revel is None:
        revel = _as_float(_first_dict(dbnsfp.get("revel")).get("score"))

    return cadd, revel


def extract_frequency(hit: dict) -> float | None:
    """Return gnomAD genome allele frequency, None if absent."""
    gnomad = _first_dict(hit.get("gnomad_genome"))
    return _as_float(_first_dict(gnomad.get("af")).get("af"))


def extract_gene_annotation(hit: dict) -> tuple[str | None, str | None]:
    """Return (gene symbol, HGVS protein change) from a SnpEff block."""
    snpeff = _first_dict(hit.get("snpeff"))
    ann = _first_dict(snpeff.get("ann"))
    return _as_str(ann.get("gene_name")), _as_str(ann.get("hgvs_p"))


def normalize_hit(
    hit: dict,
    fallback_identifier: str | None = None,
) -> EnrichedVariant | None:
    """Convert one raw hit into an EnrichedVariant.

    Args:
        hit: Raw MyVariant.info document
        fallback_identifier: Identifier to use when the hit carries no
            "query" field (single-item lookups)

    Returns:
        EnrichedVariant, or None if the hit is flagged not found or no
        identifier can be attributed to it
    """
    if not isinstance(hit, dict) or is_not_found(hit):
        return None

    identifier = _as_str(hit.get("query")) or fallback_identifier
    if not identifier:
        logger.debug("annotation_hit_without_identifier", hit_id=hit.get("_id"))
        return None

    significance, condition = extract_clinvar(hit)
    cadd, revel = extract_scores(hit)
    gene_symbol, protein_change = extract_gene_annotation(hit)

    return EnrichedVariant(
        identifier=identifier,
        clinical_significance=significance,
        condition=condition,
        population_frequency=extract_frequency(hit),
        pathogenicity_score=cadd,
        secondary_pathogenicity_score=revel,
        gene_symbol=gene_symbol,
        protein_change=protein_change,
    )
