"""Local genomic input parsing and identifier extraction."""

from variant_insight.parsing.models import (
    RSID_PREFIX,
    InputFormat,
    ParsedVariant,
    Zygosity,
)
from variant_insight.parsing.formats import (
    classify_genotype,
    detect_format,
    parse_23andme,
    parse_genomic_input,
    parse_vcf,
    parse_zygosity_override,
)
from variant_insight.parsing.identifiers import (
    ExtractedIdentifiers,
    IdentifierExtractor,
    LLMIdentifierExtractor,
    RegexIdentifierExtractor,
    extract_gene_symbols,
    extract_rsids,
    is_valid_identifier,
)

__all__ = [
    "RSID_PREFIX",
    "InputFormat",
    "ParsedVariant",
    "Zygosity",
    "classify_genotype",
    "detect_format",
    "parse_23andme",
    "parse_genomic_input",
    "parse_vcf",
    "parse_zygosity_override",
    "ExtractedIdentifiers",
    "IdentifierExtractor",
    "LLMIdentifierExtractor",
    "RegexIdentifierExtractor",
    "extract_gene_symbols",
    "extract_rsids",
    "is_valid_identifier",
]
