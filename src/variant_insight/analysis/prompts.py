"""Prompt construction and response merging for the summarization step."""

import json
from typing import Sequence

from variant_insight.analysis.models import AnalysisResult, VariantAnalysis
from variant_insight.analysis.prioritize import PrioritizedVariant
from variant_insight.annotation.models import EnrichedVariant
from variant_insight.parsing.identifiers import extract_rsids
from variant_insight.parsing.models import ParsedVariant, Zygosity

SYSTEM_INSTRUCTION = """
ROLE: You are an expert Clinical Genomicist.
TASK: Analyze the 'CRITICAL VARIANTS' list.

FILTERING NOTICE:
The input has been strictly filtered.
- It ONLY contains variants in ACMG-73 (Actionable), CPIC (Pharma), or Pathogenic variants.
- Treat every variant in this list as potentially significant.

CRITICAL RULE: PENETRANCE LOGIC
1. FREQUENCY CHECK: If gnomAD Frequency > 1% (0.01) AND condition is severe -> Assume LOW PENETRANCE.
2. KNOWLEDGE CHECK: Apply known penetrance data for genes like HFE, LRRK2, GBA.
3. RISK ADJUSTMENT: If Penetrance is LOW, downgrade 'riskLevel' (e.g. from HIGH to MODERATE) for healthy carriers.

OUTPUT: Valid JSON with keys patientSummary, overallRiskScore, nDimensionalAnalysis,
equityAnalysis, variants, pharmaProfiles, oncologyProfiles, phenotypeTraits.
"""


def build_db_context(prioritized: Sequence[PrioritizedVariant]) -> str:
    """Serialize the remote annotations of kept variants as prompt context."""
    records = [
        {
            "id": item.enriched.identifier,
            "gene": item.enriched.gene_symbol,
            "clinvar": item.enriched.clinical_significance,
            "freq": item.enriched.population_frequency,
            "cadd": item.enriched.pathogenicity_score,
        }
        for item in prioritized
        if item.enriched is not None
    ]
    return json.dumps(records, indent=2)


def build_analysis_prompt(
    prioritized: Sequence[PrioritizedVariant],
    focus: Sequence[str] = ("COMPREHENSIVE",),
    ancestry: str = "GLOBAL",
    gene_symbols: Sequence[str] = (),
    max_chars: int = 30000,
) -> str:
    """
    Build the user prompt for the summarization model.

    Args:
        prioritized: Kept variants (see prioritize_variants)
        focus: Analysis focus areas (COMPREHENSIVE, PHARMA, ONCOLOGY, RARE_DISEASE)
        ancestry: Declared ancestry group
        gene_symbols: Gene symbols mentioned in free-text input
        max_chars: Truncation limit for the variant list

    Returns:
        Prompt text
    """
    variant_list = "\n".join(item.context_line() for item in prioritized)[:max_chars]
    genes_line = ", ".join(gene_symbols) if gene_symbols else "None"

    return f"""
CRITICAL VARIANTS (ACMG/CPIC/PATHOGENIC):
{variant_list}

REAL DB CONTEXT: {build_db_context(prioritized)}

GENES MENTIONED: {genes_line}
FOCUS: {', '.join(focus)}
ANCESTRY: {ancestry}

INSTRUCTIONS:
- Analyze ONLY the variants listed above.
- Determine PENETRANCE.
- Return JSON.
"""


def _refers_to(variant: VariantAnalysis, identifier: str) -> bool:
    return variant.rs_id == identifier or identifier in extract_rsids(variant.variant)


def inject_real_data(
    result: AnalysisResult,
    enriched: Sequence[EnrichedVariant],
    parsed: Sequence[ParsedVariant],
) -> AnalysisResult:
    """
    Overwrite model-reported facts with measured data.

    Clinical significance, CADD score and population frequency come from the
    annotation service when available; zygosity comes from the local parser when it
    could be determined there.

    Args:
        result: Validated model output
        enriched: Remote annotations used as context
        parsed: Locally parsed variants

    Returns:
        New AnalysisResult with corrected variant entries
    """
    variants = []
    for variant in result.variants:
        real = next((r for r in enriched if _refers_to(variant, r.identifier)), None)
        local = next((p for p in parsed if _refers_to(variant, p.identifier)), None)

        if real is None and local is None:
            variants.append(variant)
            continue

        updates = {}
        if real is not None:
            updates["rs_id"] = real.identifier
            updates["clin_var_significance"] = real.clinical_significance
            if real.pathogenicity_score is not None:
                updates["cadd_score"] = real.pathogenicity_score
            if real.population_frequency is not None:
                updates["population_frequency"] = f"{real.population_frequency * 100:.4f}%"
        if local is not None:
            updates.setdefault("rs_id", local.identifier)
            if local.zygosity is not Zygosity.UNKNOWN:
                updates["zygosity"] = local.zygosity.value

        variants.append(variant.model_copy(update=updates))

    return result.model_copy(update={"variants": variants})
