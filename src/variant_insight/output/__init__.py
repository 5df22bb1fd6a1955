"""Output writers for analysis runs."""

from variant_insight.output.writers import variants_frame, write_analysis_output

__all__ = ["variants_frame", "write_analysis_output"]
