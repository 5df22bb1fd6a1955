"""Local parsing of VCF and 23andMe raw data.

Wildtype (0/0) and no-call genotypes are dropped here so they never reach
remote enrichment or the summarization prompt. Malformed lines are skipped
rather than raised: the parser degrades to fewer records.
"""

import re

import structlog

from variant_insight.parsing.models import (
    RSID_PREFIX,
    InputFormat,
    ParsedVariant,
    Zygosity,
)

logger = structlog.get_logger()

# Genotypes meaning "reference on both copies" or "no call"
DISCARDED_GENOTYPES = frozenset({"0/0", "0|0", "./.", "."})
HETEROZYGOUS_GENOTYPES = frozenset({"0/1", "0|1", "1/0", "1|0"})
HOMOZYGOUS_GENOTYPES = frozenset({"1/1", "1|1"})

# Standard VCF column positions, used when the header omits a column
VCF_DEFAULT_COLUMNS = {
    "#CHROM": 0,
    "POS": 1,
    "ID": 2,
    "REF": 3,
    "ALT": 4,
    "FORMAT": 8,
}
VCF_MIN_COLUMNS = 8
# Single-sample VCF: the first sample column follows FORMAT
VCF_SAMPLE_COLUMN = 9

TWENTY_THREE_AND_ME_MIN_COLUMNS = 4
TWENTY_THREE_AND_ME_NO_CALL = "--"

_WHITESPACE = re.compile(r"\s+")


def detect_format(raw_input: str) -> InputFormat:
    """Detect the layout of raw genomic input.

    VCF is recognised by its fileformat meta line or by a header line
    carrying both #CHROM and POS. 23andMe exports carry a "# rsid" header
    comment and a genotype column. Anything else is unstructured.
    """
    if "##fileformat=VCF" in raw_input or _has_vcf_header_line(raw_input):
        return InputFormat.VCF
    if "# rsid" in raw_input and "genotype" in raw_input:
        return InputFormat.TWENTY_THREE_AND_ME
    return InputFormat.UNSTRUCTURED


def _has_vcf_header_line(raw_input: str) -> bool:
    return any(
        "#CHROM" in line and "POS" in line for line in raw_input.splitlines()
    )


def parse_genomic_input(raw_input: str) -> list[ParsedVariant]:
    """Parse raw input into variant records.

    Args:
        raw_input: Full text of a VCF file, 23andMe export or pasted list

    Returns:
        Parsed variants in input order. Unstructured text yields an empty
        list; identifier extraction for it is handled separately.
    """
    input_format = detect_format(raw_input)

    if input_format is InputFormat.VCF:
        variants = parse_vcf(raw_input)
    elif input_format is InputFormat.TWENTY_THREE_AND_ME:
        variants = parse_23andme(raw_input)
    else:
        variants = []

    logger.debug(
        "genomic_input_parsed",
        input_format=input_format.value,
        variant_count=len(variants),
    )
    return variants


def classify_genotype(genotype: str) -> Zygosity | None:
    """Map a VCF GT value to a zygosity.

    Returns:
        None for wildtype/no-call genotypes (the record must be dropped),
        otherwise the zygosity. Genotypes outside the common diploid forms
        that still carry an alternate allele (e.g. "1/2", "0/2") count as
        heterozygous.
    """
    if genotype in DISCARDED_GENOTYPES:
        return None
    if genotype in HETEROZYGOUS_GENOTYPES:
        return Zygosity.HETEROZYGOUS
    if genotype in HOMOZYGOUS_GENOTYPES:
        return Zygosity.HOMOZYGOUS
    if "1" in genotype or "2" in genotype:
        return Zygosity.HETEROZYGOUS
    return Zygosity.UNKNOWN


def _column(cols: list[str], col_map: dict[str, int], name: str) -> str:
    index = col_map.get(name, VCF_DEFAULT_COLUMNS[name])
    return cols[index] if index < len(cols) else ""


def parse_vcf(raw_input: str) -> list[ParsedVariant]:
    """Parse single-sample VCF text.

    Meta lines (##) are skipped and the #CHROM header builds a column
    name -> index map so reordered columns are tolerated. Data lines before
    the header, lines with fewer than 8 columns and records whose ID is not
    an rsID are skipped.
    """
    variants: list[ParsedVariant] = []
    col_map: dict[str, int] = {}
    header_found = False
    skipped = 0

    for line in raw_input.splitlines():
        if line.startswith("##"):
            continue

        if line.startswith("#CHROM"):
            cols = _WHITESPACE.split(line.strip())
            col_map = {name: idx for idx, name in enumerate(cols)}
            header_found = True
            continue

        if not header_found or not line.strip():
            continue

        cols = _WHITESPACE.split(line.strip())
        if len(cols) < VCF_MIN_COLUMNS:
            skipped += 1
            continue

        identifier = _column(cols, col_map, "ID")
        if not identifier.startswith(RSID_PREFIX):
            continue

        format_col = _column(cols, col_map, "FORMAT")
        sample_col = cols[VCF_SAMPLE_COLUMN] if len(cols) > VCF_SAMPLE_COLUMN else ""

        zygosity = Zygosity.UNKNOWN
        if format_col and sample_col:
            format_parts = format_col.split(":")
            if "GT" in format_parts:
                gt_index = format_parts.index("GT")
                sample_parts = sample_col.split(":")
                genotype = sample_parts[gt_index] if gt_index < len(sample_parts) else ""
                classified = classify_genotype(genotype)
                if classified is None:
                    continue
                zygosity = classified

        variants.append(
            ParsedVariant(
                identifier=identifier,
                chromosome=_column(cols, col_map, "#CHROM"),
                position=_column(cols, col_map, "POS"),
                reference_allele=_column(cols, col_map, "REF"),
                alternate_allele=_column(cols, col_map, "ALT"),
                zygosity=zygosity,
            )
        )

    if skipped:
        logger.debug("vcf_malformed_lines_skipped", count=skipped)

    return variants


def parse_23andme(raw_input: str) -> list[ParsedVariant]:
    """Parse a 23andMe raw data export.

    Columns are rsid, chromosome, position, genotype. The export does not
    state the reference allele, so "AA" may be wildtype or homozygous
    alternate: alleles stay empty and zygosity stays UNKNOWN for a
    reference-aware resolver downstream. "--" genotypes are no-calls.
    """
    variants: list[ParsedVariant] = []

    for line in raw_input.splitlines():
        if line.startswith("#") or not line.strip():
            continue

        cols = _WHITESPACE.split(line.strip())
        if len(cols) < TWENTY_THREE_AND_ME_MIN_COLUMNS:
            continue

        identifier, chromosome, position, genotype = cols[:4]
        if genotype == TWENTY_THREE_AND_ME_NO_CALL:
            continue
        if not identifier.startswith(RSID_PREFIX):
            continue

        variants.append(
            ParsedVariant(
                identifier=identifier,
                chromosome=chromosome,
                position=position,
                zygosity=Zygosity.UNKNOWN,
            )
        )

    return variants


ZYGOSITY_OVERRIDE_MARKER = "## OVERRIDE_ZYGOSITY_CONTEXT:"


def parse_zygosity_override(raw_input: str) -> Zygosity | None:
    """Read a manual zygosity override header, if present.

    Pasted input may start with "## OVERRIDE_ZYGOSITY_CONTEXT: 0/1 ##"
    followed by a blank line; every variant in the run then takes that
    zygosity. "1/1" wins over "0/1" when both appear in the header.
    """
    if not raw_input.startswith(ZYGOSITY_OVERRIDE_MARKER):
        return None

    header = raw_input.split("##\n\n", 1)[0]
    if "1/1" in header:
        return Zygosity.HOMOZYGOUS
    if "0/1" in header:
        return Zygosity.HETEROZYGOUS
    return None
