"""Data models for locally parsed genomic input."""

from dataclasses import dataclass
from enum import Enum

# Standard dbSNP identifier prefix; records without it never reach the network
RSID_PREFIX = "rs"


class Zygosity(str, Enum):
    """Allele copy state of a called variant."""

    HETEROZYGOUS = "HETEROZYGOUS"
    HOMOZYGOUS = "HOMOZYGOUS"
    UNKNOWN = "UNKNOWN"


class InputFormat(str, Enum):
    """Detected layout of raw genomic input."""

    VCF = "VCF"
    TWENTY_THREE_AND_ME = "23ANDME"
    UNSTRUCTURED = "UNSTRUCTURED"


@dataclass(frozen=True)
class ParsedVariant:
    """Single variant extracted from VCF or 23andMe text.

    Attributes:
        identifier: dbSNP rsID (e.g. "rs28929474")
        chromosome: Chromosome name as written in the input
        position: Position as written in the input
        reference_allele: REF allele (empty for 23andMe input)
        alternate_allele: ALT allele (empty for 23andMe input)
        zygosity: Zygosity derived from the sample genotype

    Wildtype (0/0) and no-call records are filtered at parse time and
    never become ParsedVariant instances.
    """

    identifier: str
    chromosome: str = ""
    position: str = ""
    reference_allele: str = ""
    alternate_allele: str = ""
    zygosity: Zygosity = Zygosity.UNKNOWN
