"""Select the variants worth sending to the summarization model.

A variant is kept when its gene is ACMG-actionable, a CPIC pharmacogene,
its ClinVar significance mentions "pathogenic", or the run is small enough
that every variant can be analysed.
"""

from dataclasses import dataclass, field

from variant_insight.annotation.models import EnrichedVariant
from variant_insight.knowledge.watchlists import is_acmg_gene, is_cpic_gene
from variant_insight.parsing.models import ParsedVariant, Zygosity

TAG_ACMG = "ACMG_73"
TAG_CPIC = "CPIC_PHARMA"
TAG_PATHOGENIC = "CLINVAR_PATHOGENIC"


@dataclass
class PrioritizedVariant:
    """A candidate variant kept for summarization, with its evidence tags."""

    variant: ParsedVariant
    enriched: EnrichedVariant | None = None
    zygosity: Zygosity = Zygosity.UNKNOWN
    tags: list[str] = field(default_factory=list)

    @property
    def gene_symbol(self) -> str | None:
        if self.enriched and self.enriched.gene_symbol:
            return self.enriched.gene_symbol.upper()
        return None

    def context_line(self) -> str:
        """One-line prompt representation of the variant."""
        ref_alt = ""
        if self.variant.reference_allele:
            ref_alt = (
                f"REF:{self.variant.reference_allele} "
                f"ALT:{self.variant.alternate_allele}"
            )
        return (
            f"ID: {self.variant.identifier} | GENE: {self.gene_symbol or '?'} | "
            f"ZYG: {self.zygosity.value} | TAGS: [{','.join(self.tags)}] | {ref_alt}"
        )


def evidence_tags(enriched: EnrichedVariant | None) -> list[str]:
    if enriched is None:
        return []
    tags = []
    if is_acmg_gene(enriched.gene_symbol):
        tags.append(TAG_ACMG)
    if is_cpic_gene(enriched.gene_symbol):
        tags.append(TAG_CPIC)
    if enriched.is_pathogenic:
        tags.append(TAG_PATHOGENIC)
    return tags


def prioritize_variants(
    candidates: list[ParsedVariant],
    enriched: list[EnrichedVariant],
    small_batch_threshold: int = 20,
) -> list[PrioritizedVariant]:
    """
    Filter candidates down to high-impact variants.

    Args:
        candidates: Parsed (or extracted) variants in input order
        enriched: Remote annotations, matched to candidates by identifier
        small_batch_threshold: Runs with fewer candidates keep every variant

    Returns:
        Kept variants in candidate order
    """
    by_identifier = {record.identifier: record for record in enriched}
    keep_all = len(candidates) < small_batch_threshold

    kept = []
    for candidate in candidates:
        record = by_identifier.get(candidate.identifier)
        tags = evidence_tags(record)
        if not (tags or keep_all):
            continue

        kept.append(
            PrioritizedVariant(
                variant=candidate,
                enriched=record,
                zygosity=candidate.zygosity,
                tags=tags,
            )
        )
    return kept
