"""Pydantic models for pipeline configuration."""

import hashlib
import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class FetchConfig(BaseModel):
    """Network resilience settings shared by all remote calls."""

    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Hard timeout for a single request attempt in seconds",
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts (first try included) for transient failures",
    )
    backoff_base_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Base delay; attempt n waits base * 2^(n-1) seconds",
    )
    jitter_max_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Upper bound of random jitter added to each backoff delay",
    )
    chunk_size: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Maximum identifiers per batch request",
    )


class AnnotationConfig(BaseModel):
    """Settings for the variant annotation aggregator (MyVariant.info)."""

    base_url: str = Field(
        default="https://myvariant.info/v1",
        description="Base URL of the annotation service",
    )
    fields: str = Field(
        default="clinvar,dbnsfp,gnomad_genome,snpeff",
        description="Comma-separated field selection sent with every query",
    )
    max_identifiers: int = Field(
        default=100,
        ge=1,
        description="Maximum identifiers enriched remotely per analysis run",
    )


class AIConfig(BaseModel):
    """Settings for the generative summarization service."""

    provider: Literal["gemini", "none"] = Field(
        default="gemini",
        description="Summarization provider ('none' forces offline mode)",
    )
    model: str = Field(
        default="gemini-3-flash-preview",
        description="Model identifier passed to the provider",
    )
    api_key_env: str = Field(
        default="GEMINI_API_KEY",
        description="Environment variable holding the provider API key",
    )
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Provider REST endpoint",
    )
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=8192, ge=256)
    max_retries: int = Field(
        default=2,
        ge=1,
        le=10,
        description="Attempts at the summarization step before falling back",
    )


class AnalysisConfig(BaseModel):
    """Variant prioritisation settings."""

    small_batch_threshold: int = Field(
        default=20,
        ge=0,
        description="Below this many candidates every variant is analysed",
    )
    max_prompt_chars: int = Field(
        default=30000,
        ge=1000,
        description="Truncation limit for the critical variant list in prompts",
    )


class InsightConfig(BaseModel):
    """Main pipeline configuration."""

    output_dir: Path = Field(
        default=Path("results"),
        description="Directory for analysis outputs",
    )
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    annotation: AnnotationConfig = Field(default_factory=AnnotationConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tying outputs back to the settings that produced them.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
