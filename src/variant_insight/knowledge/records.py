"""Compiled-in reference records for well-characterised high-impact variants.

Each record is tagged with exactly one category (oncology, pharmacogenomic
or trait) and carries the payload for that category only.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from variant_insight.analysis.models import MetabolizerStatus, VariantRiskLevel


class KnowledgeCategory(str, Enum):
    ONCOLOGY = "ONCOLOGY"
    PHARMA = "PHARMA"
    TRAIT = "TRAIT"


@dataclass(frozen=True)
class OncologyPayload:
    pathogenicity_score: float
    structural_mechanism: str
    molecular_function: str
    uniprot_id: str
    variant_position: int


@dataclass(frozen=True)
class PharmaPayload:
    phenotype: MetabolizerStatus


@dataclass(frozen=True)
class TraitPayload:
    trait: str
    category: str
    prediction: str
    confidence: str
    description: str


@dataclass(frozen=True)
class OfflineKnowledgeRecord:
    """Reference entry for one rsID.

    Attributes:
        gene: Gene symbol
        variant: Variant label (protein change, star allele or cDNA change)
        description: One-sentence clinical description
        clinical_significance: ClinVar-style significance
        risk_level: Risk classification shown to the user
        condition: Associated condition
        category: Routing category
        cadd_score: CADD phred score, if known
        revel_score: REVEL score, if known
        payload: Category-specific details
    """

    gene: str
    variant: str
    description: str
    clinical_significance: str
    risk_level: VariantRiskLevel
    condition: str
    category: KnowledgeCategory
    payload: OncologyPayload | PharmaPayload | TraitPayload
    cadd_score: float | None = None
    revel_score: float | None = None


KNOWN_VARIANTS: Mapping[str, OfflineKnowledgeRecord] = MappingProxyType({
    # Oncology: BRCA2, TP53, BRAF
    "rs111033441": OfflineKnowledgeRecord(
        gene="BRCA2",
        variant="c.5946delT",
        description=(
            "Pathogenic frameshift mutation associated with Hereditary Breast "
            "and Ovarian Cancer syndrome."
        ),
        clinical_significance="Pathogenic",
        risk_level=VariantRiskLevel.HIGH,
        condition="Hereditary Breast Ovarian Cancer",
        category=KnowledgeCategory.ONCOLOGY,
        cadd_score=28.0,
        payload=OncologyPayload(
            pathogenicity_score=0.99,
            structural_mechanism=(
                "Frameshift leading to premature stop codon -> Nonsense Mediated "
                "Decay or truncated protein loss of function."
            ),
            molecular_function="Homologous Recombination Repair",
            uniprot_id="P51587",
            variant_position=1982,
        ),
    ),
    "rs28929474": OfflineKnowledgeRecord(
        gene="TP53",
        variant="R175H",
        description=(
            "Hotspot mutation in the DNA-binding domain. One of the most common "
            "oncogenic drivers."
        ),
        clinical_significance="Pathogenic",
        risk_level=VariantRiskLevel.HIGH,
        condition="Li-Fraumeni Syndrome",
        category=KnowledgeCategory.ONCOLOGY,
        cadd_score=35.4,
        revel_score=0.95,
        payload=OncologyPayload(
            pathogenicity_score=0.98,
            structural_mechanism=(
                "Arg175His disrupts Zinc binding site, causing global unfolding "
                "of the DNA binding domain."
            ),
            molecular_function="Tumor Suppression / DNA Binding",
            uniprot_id="P04637",
            variant_position=175,
        ),
    ),
    "rs113488022": OfflineKnowledgeRecord(
        gene="BRAF",
        variant="V600E",
        description=(
            "Activates MAPK signaling pathway. Common in melanoma and papillary "
            "thyroid carcinoma."
        ),
        clinical_significance="Pathogenic",
        risk_level=VariantRiskLevel.HIGH,
        condition="Melanoma / Colorectal Cancer",
        category=KnowledgeCategory.ONCOLOGY,
        cadd_score=34.0,
        payload=OncologyPayload(
            pathogenicity_score=0.97,
            structural_mechanism=(
                "Mimics phosphorylation of the activation segment, locking the "
                "kinase in a constitutively active conformation."
            ),
            molecular_function="Kinase Signaling",
            uniprot_id="P15056",
            variant_position=600,
        ),
    ),
    # Pharmacogenomics
    "rs104894357": OfflineKnowledgeRecord(
        gene="CYP2D6",
        variant="*4 (Splicing Defect)",
        description="Non-functional allele. Homozygotes are Poor Metabolizers.",
        clinical_significance="Drug Response",
        risk_level=VariantRiskLevel.MODERATE,
        condition="Adverse Drug Reaction Risk",
        category=KnowledgeCategory.PHARMA,
        payload=PharmaPayload(phenotype=MetabolizerStatus.POOR),
    ),
    "rs4244285": OfflineKnowledgeRecord(
        gene="CYP2C19",
        variant="*2",
        description="Loss of function allele. Affects Clopidogrel and SSRI metabolism.",
        clinical_significance="Drug Response",
        risk_level=VariantRiskLevel.MODERATE,
        condition="Adverse Drug Reaction Risk",
        category=KnowledgeCategory.PHARMA,
        payload=PharmaPayload(phenotype=MetabolizerStatus.POOR),
    ),
    # Traits
    "rs762551": OfflineKnowledgeRecord(
        gene="CYP1A2",
        variant="*1F",
        description="Inducibility variant. Fast metabolizers of caffeine.",
        clinical_significance="Benign",
        risk_level=VariantRiskLevel.LOW,
        condition="Caffeine Metabolism",
        category=KnowledgeCategory.TRAIT,
        payload=TraitPayload(
            trait="Caffeine Metabolism",
            category="NUTRITION",
            prediction="Rapid Metabolizer",
            confidence="HIGH",
            description="Likely to process caffeine quickly. Lower risk of jitters.",
        ),
    ),
})

# (gene, metabolizer phenotype) -> (drug, implication, severity)
PHARMA_INTERACTIONS: Mapping[tuple[str, MetabolizerStatus], tuple[tuple[str, str, str], ...]] = MappingProxyType({
    ("CYP2D6", MetabolizerStatus.POOR): (
        ("Codeine", "Lack of efficacy (prodrug failure).", "WARNING"),
        ("Tramadol", "Reduced pain relief.", "WARNING"),
    ),
    ("CYP2C19", MetabolizerStatus.POOR): (
        ("Clopidogrel", "Increased risk of cardiovascular events.", "DANGER"),
    ),
})

ONCOLOGY_THERAPIES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "BRCA2": ("PARP Inhibitors (Olaparib)", "Platinum Chemotherapy"),
    "TP53": ("Clinical Trials (APR-246)",),
    "BRAF": ("Vemurafenib", "Dabrafenib"),
})
DEFAULT_THERAPIES = ("Standard of Care",)
