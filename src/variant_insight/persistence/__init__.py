"""Provenance tracking for analysis runs."""

from variant_insight.persistence.provenance import ProvenanceTracker

__all__ = ["ProvenanceTracker"]
