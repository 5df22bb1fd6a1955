"""Data models for remote variant annotation (MyVariant.info)."""

from pydantic import BaseModel

MYVARIANT_BASE_URL = "https://myvariant.info/v1"

# clinvar: clinical significance + condition
# dbnsfp: CADD phred and REVEL pathogenicity predictions
# gnomad_genome: population allele frequency
# snpeff: gene symbol and protein change (HGVS.p)
MYVARIANT_FIELDS = "clinvar,dbnsfp,gnomad_genome,snpeff"

# rsIDs are matched against dbSNP when querying in batch
MYVARIANT_RSID_SCOPE = "dbsnp.rsid"

NOT_REPORTED = "Not Reported"
# ClinVar record present but no significance given
UNCERTAIN = "Uncertain"


class EnrichedVariant(BaseModel):
    """Normalized annotation for a single rsID.

    Attributes:
        identifier: Queried rsID (always set, even if the response omits it)
        clinical_significance: ClinVar significance ("Not Reported" if absent)
        condition: ClinVar condition name
        population_frequency: gnomAD genome allele frequency (0-1)
        pathogenicity_score: CADD phred score
        secondary_pathogenicity_score: REVEL score (0-1)
        gene_symbol: Gene symbol from SnpEff annotation
        protein_change: HGVS protein change (e.g. p.Val600Glu)

    CRITICAL: missing numeric values stay None. A missing frequency is
    "unknown", not "zero carriers".
    """

    identifier: str
    clinical_significance: str = NOT_REPORTED
    condition: str | None = None
    population_frequency: float | None = None
    pathogenicity_score: float | None = None
    secondary_pathogenicity_score: float | None = None
    gene_symbol: str | None = None
    protein_change: str | None = None

    @property
    def is_pathogenic(self) -> bool:
        return "pathogenic" in self.clinical_significance.lower()
