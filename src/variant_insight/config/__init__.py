from .loader import load_config, load_config_with_overrides, parse_config
from .schema import (
    AIConfig,
    AnalysisConfig,
    AnnotationConfig,
    FetchConfig,
    InsightConfig,
)

__all__ = [
    "load_config",
    "load_config_with_overrides",
    "parse_config",
    "InsightConfig",
    "FetchConfig",
    "AnnotationConfig",
    "AIConfig",
    "AnalysisConfig",
]
