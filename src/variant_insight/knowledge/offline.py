"""Offline analysis against the compiled-in knowledge base.

This is the recovery path when annotation or summarization services are
unreachable. Lookups are deterministic and return a well-formed
AnalysisResult for any input string.

The risk score is a deliberately crude heuristic, not a clinical scoring
system: each oncology match adds 30, every match adds 5, and the total is
clamped to [10, 99].
"""

import structlog

from variant_insight.analysis.models import (
    ActionItem,
    AnalysisMode,
    AnalysisResult,
    ClinicalSynthesis,
    DrugInteraction,
    EquityAnalysis,
    OncologyProfile,
    OverallRiskLevel,
    PharmaProfile,
    PhenotypeTrait,
    VariantAnalysis,
    VariantRiskLevel,
    XAIAnalysis,
)
from variant_insight.knowledge.records import (
    DEFAULT_THERAPIES,
    KNOWN_VARIANTS,
    ONCOLOGY_THERAPIES,
    PHARMA_INTERACTIONS,
    KnowledgeCategory,
    OfflineKnowledgeRecord,
    OncologyPayload,
    PharmaPayload,
    TraitPayload,
)
from variant_insight.parsing.identifiers import extract_rsids

logger = structlog.get_logger()

ONCOLOGY_RISK_INCREMENT = 30
PER_VARIANT_RISK_INCREMENT = 5
MIN_RISK_SCORE = 10
MAX_RISK_SCORE = 99
CRITICAL_THRESHOLD = 80
HIGH_THRESHOLD = 50

OFFLINE_CITATION = "Internal Knowledge Base (Offline)"

NO_MATCH_SUMMARY = (
    "[OFFLINE MODE] No critical variants from the internal database were found "
    "in your provided file. This does not rule out all risks, but your specific "
    "input did not trigger any flags in our offline library."
)


def compute_risk_score(oncology_matches: int, total_matches: int) -> int:
    """Clamp the additive offline risk heuristic to [10, 99]."""
    accumulator = oncology_matches * ONCOLOGY_RISK_INCREMENT
    return min(
        MAX_RISK_SCORE,
        max(MIN_RISK_SCORE, accumulator + PER_VARIANT_RISK_INCREMENT * total_matches),
    )


def risk_level_for(score: float) -> OverallRiskLevel:
    if score > CRITICAL_THRESHOLD:
        return OverallRiskLevel.CRITICAL
    if score > HIGH_THRESHOLD:
        return OverallRiskLevel.HIGH
    return OverallRiskLevel.LOW


def build_summary(genes: list[str], has_pharma_alerts: bool) -> str:
    """Templated patient summary for offline results."""
    if not genes:
        return NO_MATCH_SUMMARY

    summary = (
        f"[OFFLINE MODE] Analysis detected {len(genes)} significant matches in the "
        f"local database. Primary drivers identified: {', '.join(genes)}."
    )
    if has_pharma_alerts:
        summary += " Pharmacogenomic alerts are present."
    return summary + " Please consult a specialist to validate these offline projections."


def _variant_entry(identifier: str, record: OfflineKnowledgeRecord) -> VariantAnalysis:
    xai = None
    if isinstance(record.payload, OncologyPayload):
        xai = XAIAnalysis(
            pathogenicity_score=record.payload.pathogenicity_score,
            structural_mechanism=record.payload.structural_mechanism,
            molecular_function=record.payload.molecular_function,
            uniprot_id=record.payload.uniprot_id,
            variant_position=record.payload.variant_position,
        )
    return VariantAnalysis(
        gene=record.gene,
        variant=record.variant,
        rs_id=identifier,
        description=record.description,
        clin_var_significance=record.clinical_significance,
        risk_level=record.risk_level.value,
        condition=record.condition,
        category=record.category.value,
        cadd_score=record.cadd_score,
        revel_score=record.revel_score,
        xai=xai,
    )


def _pharma_profile(record: OfflineKnowledgeRecord, payload: PharmaPayload) -> PharmaProfile:
    interactions = [
        DrugInteraction(drug_name=drug, implication=implication, severity=severity)
        for drug, implication, severity in PHARMA_INTERACTIONS.get(
            (record.gene, payload.phenotype), ()
        )
    ]
    return PharmaProfile(
        gene=record.gene,
        phenotype=payload.phenotype.value,
        description=record.description,
        interactions=interactions,
    )


def _oncology_profile(record: OfflineKnowledgeRecord, payload: OncologyPayload) -> OncologyProfile:
    tier = (
        "TIER_1_STRONG"
        if record.risk_level is VariantRiskLevel.PATHOGENIC
        else "TIER_2_POTENTIAL"
    )
    return OncologyProfile(
        gene=record.gene,
        variant=record.variant,
        evidence_tier=tier,
        mechanism_of_action=payload.structural_mechanism or "Unknown mechanism",
        cancer_hallmark="Genomic Instability",
        therapeutic_implications=list(ONCOLOGY_THERAPIES.get(record.gene, DEFAULT_THERAPIES)),
        risk_score=payload.pathogenicity_score * 100 if payload.pathogenicity_score else 50.0,
        citation=OFFLINE_CITATION,
        functional_category="CELL_CYCLE",
    )


def _trait(record: OfflineKnowledgeRecord, payload: TraitPayload) -> PhenotypeTrait:
    return PhenotypeTrait(
        trait=payload.trait,
        prediction=payload.prediction,
        gene=record.gene,
        confidence=payload.confidence,
        category=payload.category,
        description=payload.description,
    )


class OfflineKnowledgeBase:
    """Deterministic lookup of rsIDs against compiled-in reference records."""

    def __init__(self, records=KNOWN_VARIANTS):
        self.records = records

    def match(self, raw_input: str) -> list[tuple[str, OfflineKnowledgeRecord]]:
        """Return (rsID, record) pairs for known rsIDs, in order of first occurrence."""
        return [
            (identifier, self.records[identifier])
            for identifier in extract_rsids(raw_input)
            if identifier in self.records
        ]

    def lookup(self, raw_input: str) -> AnalysisResult:
        """
        Synthesize a full offline analysis for raw input text.

        Every known rsID yields one variant entry and is routed into exactly
        one of the pharmacogenomic, oncology or trait lists by its category.

        Args:
            raw_input: Any text (VCF, 23andMe export, pasted list)

        Returns:
            AnalysisResult in OFFLINE_FALLBACK mode; empty lists when nothing matches
        """
        variants: list[VariantAnalysis] = []
        pharma_profiles: list[PharmaProfile] = []
        oncology_profiles: list[OncologyProfile] = []
        phenotype_traits: list[PhenotypeTrait] = []

        for identifier, record in self.match(raw_input):
            variants.append(_variant_entry(identifier, record))

            payload = record.payload
            if record.category is KnowledgeCategory.PHARMA:
                pharma_profiles.append(_pharma_profile(record, payload))
            elif record.category is KnowledgeCategory.ONCOLOGY:
                oncology_profiles.append(_oncology_profile(record, payload))
            elif record.category is KnowledgeCategory.TRAIT:
                phenotype_traits.append(_trait(record, payload))

        overall_score = compute_risk_score(len(oncology_profiles), len(variants))
        genes = [variant.gene for variant in variants]

        if variants:
            action_plan = [ActionItem(
                title="Verify with Clinical Lab",
                priority="HIGH",
                description="Offline findings are preliminary projections based on local library.",
            )]
        else:
            action_plan = [ActionItem(
                title="No Action Required",
                priority="ROUTINE",
                description="No variants from the local critical list were found in the input.",
            )]

        logger.info(
            "offline_lookup_complete",
            matches=len(variants),
            oncology=len(oncology_profiles),
            pharma=len(pharma_profiles),
            traits=len(phenotype_traits),
            risk_score=overall_score,
        )

        return AnalysisResult(
            patient_summary=build_summary(genes, bool(pharma_profiles)),
            overall_risk_score=overall_score,
            variants=variants,
            pharma_profiles=pharma_profiles,
            oncology_profiles=oncology_profiles,
            phenotype_traits=phenotype_traits,
            clinical_synthesis=ClinicalSynthesis(
                clinical_summary=(
                    f"Offline analysis detected {len(variants)} known significant "
                    "variants in the local database."
                ),
                overall_risk_level=risk_level_for(overall_score).value,
                action_plan=action_plan,
            ),
            equity_analysis=EquityAnalysis(
                detected_ancestry="UNKNOWN (OFFLINE)",
                bias_correction_applied=False,
                adjustment_factor=1.0,
                explanation="Ancestry inference requires online cloud computing.",
            ),
            mode=AnalysisMode.OFFLINE_FALLBACK,
        )


def perform_offline_analysis(raw_input: str) -> AnalysisResult:
    """Run offline analysis with the default knowledge base."""
    return OfflineKnowledgeBase().lookup(raw_input)
