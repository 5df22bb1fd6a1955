"""Result models shared by the online and offline analysis paths.

Field names are snake_case in Python and camelCase on the wire, so JSON
produced by the summarization model validates directly into these models
and serialized results keep the shape downstream renderers expect.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from pydantic.json_schema import SkipJsonSchema


class VariantRiskLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    PATHOGENIC = "PATHOGENIC"
    BENIGN = "BENIGN"
    UNCERTAIN = "UNCERTAIN"


class MetabolizerStatus(str, Enum):
    POOR = "POOR"
    INTERMEDIATE = "INTERMEDIATE"
    NORMAL = "NORMAL"
    RAPID = "RAPID"
    ULTRA_RAPID = "ULTRA_RAPID"
    UNKNOWN = "UNKNOWN"


class OverallRiskLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AnalysisMode(str, Enum):
    """Which path produced an AnalysisResult."""

    ENRICHED = "ENRICHED"
    OFFLINE_FALLBACK = "OFFLINE_FALLBACK"


class ResultModel(BaseModel):
    """Base model: camelCase aliases, population by field name, extras ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("*", mode="before")
    @classmethod
    def null_means_default(cls, value, info: ValidationInfo):
        """Treat an explicit null from the model as an omitted field."""
        if value is None:
            field_info = cls.model_fields[info.field_name]
            if not field_info.is_required():
                return field_info.get_default(call_default_factory=True)
        return value


class XAIAnalysis(ResultModel):
    pathogenicity_score: float | None = None
    structural_mechanism: str | None = None
    molecular_function: str | None = None
    uniprot_id: str | None = None
    variant_position: int | None = None


class VariantAnalysis(ResultModel):
    """One interpreted variant as shown to the user."""

    gene: str = ""
    variant: str = ""
    rs_id: str | None = None
    description: str = ""
    clin_var_significance: str = "Not Reported"
    risk_level: str = VariantRiskLevel.UNCERTAIN.value
    condition: str | None = None
    category: str = "GENERAL"
    population_frequency: str | None = None
    cadd_score: float | None = None
    revel_score: float | None = None
    zygosity: str | None = None
    inheritance_mode: str | None = None
    penetrance: str | None = None
    penetrance_description: str | None = None
    xai: XAIAnalysis | None = None


class DrugInteraction(ResultModel):
    drug_name: str
    implication: str
    severity: str = "INFO"


class PharmaProfile(ResultModel):
    gene: str
    phenotype: str = MetabolizerStatus.UNKNOWN.value
    description: str = ""
    interactions: list[DrugInteraction] = Field(default_factory=list)


class OncologyProfile(ResultModel):
    gene: str
    variant: str = ""
    evidence_tier: str = "TIER_2_POTENTIAL"
    mechanism_of_action: str = ""
    cancer_hallmark: str = ""
    therapeutic_implications: list[str] = Field(default_factory=list)
    risk_score: float = 50.0
    citation: str = ""
    functional_category: str = ""


class PhenotypeTrait(ResultModel):
    trait: str
    prediction: str = ""
    gene: str = ""
    confidence: str = "LOW"
    category: str = ""
    description: str = ""


class ActionItem(ResultModel):
    title: str
    priority: str = "ROUTINE"
    description: str = ""
    specialist_referral: str | None = None


class LifestyleModification(ResultModel):
    category: str = ""
    recommendation: str = ""
    impact_level: str = ""


class SurveillanceItem(ResultModel):
    procedure: str = ""
    frequency: str = ""
    start_age: str = ""


class ClinicalSynthesis(ResultModel):
    """Cross-variant clinical synthesis and action plan."""

    clinical_summary: str = ""
    overall_risk_level: str = OverallRiskLevel.LOW.value
    action_plan: list[ActionItem] = Field(default_factory=list)
    lifestyle_modifications: list[LifestyleModification] = Field(default_factory=list)
    surveillance_plan: list[SurveillanceItem] = Field(default_factory=list)


class EquityAnalysis(ResultModel):
    detected_ancestry: str = "UNKNOWN"
    bias_correction_applied: bool = False
    adjustment_factor: float = 1.0
    explanation: str = ""


class AnalysisResult(ResultModel):
    """Complete analysis handed to presentation and report layers."""

    patient_summary: str = ""
    overall_risk_score: float = 0.0
    variants: list[VariantAnalysis] = Field(default_factory=list)
    pharma_profiles: list[PharmaProfile] = Field(default_factory=list)
    oncology_profiles: list[OncologyProfile] = Field(default_factory=list)
    phenotype_traits: list[PhenotypeTrait] = Field(default_factory=list)
    # Wire name kept from the dashboard schema
    clinical_synthesis: ClinicalSynthesis | None = Field(
        default=None,
        alias="nDimensionalAnalysis",
    )
    equity_analysis: EquityAnalysis | None = None
    # Set by the pipeline, never requested from the model
    mode: SkipJsonSchema[AnalysisMode] = AnalysisMode.ENRICHED
