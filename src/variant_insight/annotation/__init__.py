"""Remote variant annotation via MyVariant.info."""

from variant_insight.annotation.models import (
    MYVARIANT_BASE_URL,
    MYVARIANT_FIELDS,
    EnrichedVariant,
)
from variant_insight.annotation.normalize import first_wins, normalize_hit
from variant_insight.annotation.service import VariantEnrichmentService

__all__ = [
    "MYVARIANT_BASE_URL",
    "MYVARIANT_FIELDS",
    "EnrichedVariant",
    "first_wins",
    "normalize_hit",
    "VariantEnrichmentService",
]
