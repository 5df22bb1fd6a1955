"""JSON + TSV/Parquet writers with provenance sidecar."""

import json
from datetime import datetime, timezone
from pathlib import Path

import polars as pl
import yaml

from variant_insight.analysis.models import AnalysisResult
from variant_insight.orchestrator import AnalysisRun

VARIANT_TABLE_SCHEMA = {
    "rs_id": pl.Utf8,
    "gene": pl.Utf8,
    "variant": pl.Utf8,
    "clin_var_significance": pl.Utf8,
    "risk_level": pl.Utf8,
    "zygosity": pl.Utf8,
    "condition": pl.Utf8,
    "category": pl.Utf8,
    "population_frequency": pl.Utf8,
    "cadd_score": pl.Float64,
    "revel_score": pl.Float64,
}


def variants_frame(result: AnalysisResult) -> pl.DataFrame:
    """Flatten the interpreted variants of a result into a DataFrame."""
    rows = [
        {column: getattr(variant, column) for column in VARIANT_TABLE_SCHEMA}
        for variant in result.variants
    ]
    return pl.DataFrame(rows, schema=VARIANT_TABLE_SCHEMA)


def write_analysis_output(
    run: AnalysisRun,
    output_dir: Path,
    filename_base: str = "analysis",
) -> dict:
    """
    Write an analysis run to JSON, TSV and Parquet with a provenance sidecar.

    Args:
        run: Completed AnalysisRun
        output_dir: Directory to write output files (created if doesn't exist)
        filename_base: Base filename without extension (default: "analysis")

    Returns:
        Dictionary with output file paths:
        {
            "json": Full AnalysisResult (camelCase keys),
            "tsv": Variant table,
            "parquet": Variant table,
            "provenance": YAML provenance sidecar
        }

    Notes:
        - Variant table rows keep result order; missing scores stay null
        - Provenance YAML includes the run mode, fallback reason, identifier
          and chunk statistics and every recorded phase transition
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    json_path = output_dir / f"{filename_base}.json"
    tsv_path = output_dir / f"{filename_base}.variants.tsv"
    parquet_path = output_dir / f"{filename_base}.variants.parquet"
    provenance_path = output_dir / f"{filename_base}.provenance.yaml"

    with open(json_path, "w") as f:
        json.dump(run.result.model_dump(mode="json", by_alias=True), f, indent=2)

    df = variants_frame(run.result)
    df.write_csv(tsv_path, separator="\t", include_header=True)
    df.write_parquet(parquet_path, compression="snappy")

    provenance = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "output_files": [json_path.name, tsv_path.name, parquet_path.name],
        "mode": run.mode.value,
        "fallback_reason": run.fallback_reason,
        "user_message": run.user_message,
        "statistics": {
            "parsed_variants": len(run.parsed_variants),
            "identifiers": len(run.identifiers),
            "enriched_variants": len(run.enriched_variants),
            "prioritized_variants": len(run.prioritized),
            "failed_chunks": run.failed_chunks,
            "reported_variants": df.height,
        },
    }
    if run.provenance is not None:
        provenance.update(run.provenance.create_metadata())

    with open(provenance_path, "w") as f:
        yaml.dump(provenance, f, default_flow_style=False, sort_keys=False)

    return {
        "json": json_path,
        "tsv": tsv_path,
        "parquet": parquet_path,
        "provenance": provenance_path,
    }
