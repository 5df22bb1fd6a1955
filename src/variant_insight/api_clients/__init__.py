"""HTTP clients for remote annotation and AI services."""

from variant_insight.api_clients.base import (
    BatchResult,
    ChunkResult,
    ResilientFetchClient,
    chunked,
    is_transient_error,
)

__all__ = [
    "ResilientFetchClient",
    "BatchResult",
    "ChunkResult",
    "chunked",
    "is_transient_error",
]
