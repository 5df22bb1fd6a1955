"""variant-insight: variant ingestion, enrichment and offline fallback analysis."""

__version__ = "0.1.0"
