"""Provenance tracking for analysis runs."""

import time
from datetime import datetime, timezone
from typing import Optional

from variant_insight.config.schema import InsightConfig


class ProvenanceTracker:
    """
    Record of how one analysis run produced its result.

    Holds the package version and config hash, plus one entry per phase
    transition with a UTC timestamp and the milliseconds elapsed since the
    run started. The entry list shows whether the result came from online
    enrichment or offline fallback and where time was spent.
    """

    def __init__(self, pipeline_version: str, config_hash: str | None = None):
        self.pipeline_version = pipeline_version
        self.config_hash = config_hash
        self.processing_steps: list[dict] = []
        self.created_at = datetime.now(timezone.utc)
        self._started = time.monotonic()

    def record_step(self, step_name: str, details: Optional[dict] = None) -> None:
        """
        Append a phase transition.

        Args:
            step_name: Phase name (e.g. "QUERYING_REMOTE")
            details: Optional counts or reasons attached to the transition
        """
        step = {
            "step_name": step_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "elapsed_ms": round((time.monotonic() - self._started) * 1000, 1),
        }
        if details:
            step["details"] = details
        self.processing_steps.append(step)

    def get_steps(self) -> list[dict]:
        return self.processing_steps

    def step_names(self) -> list[str]:
        return [step["step_name"] for step in self.processing_steps]

    def create_metadata(self) -> dict:
        """Version, config hash, start time and steps as a plain dict."""
        return {
            "pipeline_version": self.pipeline_version,
            "config_hash": self.config_hash,
            "created_at": self.created_at.isoformat(),
            "processing_steps": self.processing_steps,
        }

    @classmethod
    def from_config(
        cls,
        config: InsightConfig | None,
        version: Optional[str] = None,
    ) -> "ProvenanceTracker":
        """Create a tracker stamped with the package version and config hash."""
        if version is None:
            from variant_insight import __version__
            version = __version__
        return cls(
            pipeline_version=version,
            config_hash=config.config_hash() if config is not None else None,
        )
