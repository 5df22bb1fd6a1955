"""Exceptions raised by the analysis pipeline."""


class VariantInsightError(Exception):
    """Base class for pipeline errors."""


class AIConfigurationError(VariantInsightError):
    """Raised when no usable AI provider or API key is configured."""


class AIResponseError(VariantInsightError):
    """Raised when an AI payload cannot be parsed, even after repair."""

    DEFAULT_MESSAGE = (
        "The AI response could not be parsed. The analysis may be too large "
        "or the response was interrupted. Try again with fewer variants."
    )

    def __init__(self, message: str | None = None, raw_text: str | None = None):
        super().__init__(message or self.DEFAULT_MESSAGE)
        self.raw_text = raw_text


class RemoteServiceError(VariantInsightError):
    """Raised when a remote service stays unreachable after retries."""
