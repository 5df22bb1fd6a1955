"""Generative summarization providers.

The summarization model is an external collaborator: the pipeline sends it
a prompt and expects schema-shaped JSON text back. Providers are built once
from configuration and passed into the orchestrator explicitly.
"""

import os
from abc import ABC, abstractmethod

import structlog
from pydantic import BaseModel

from variant_insight.api_clients.base import ResilientFetchClient
from variant_insight.config.schema import AIConfig
from variant_insight.errors import AIConfigurationError, RemoteServiceError

logger = structlog.get_logger()

# Values left in .env templates that must not be sent as real keys
PLACEHOLDER_KEYS = ("PLACEHOLDER_API_KEY", "YOUR_KEY")

# JSON Schema type names to the OpenAPI subset generateContent accepts
SCHEMA_TYPES = {
    "string": "STRING",
    "number": "NUMBER",
    "integer": "INTEGER",
    "boolean": "BOOLEAN",
    "array": "ARRAY",
    "object": "OBJECT",
}


class SummarizationProvider(ABC):
    """Base class for summarization model providers."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
        json_output: bool = True,
        response_model: type[BaseModel] | None = None,
    ) -> str:
        """Return the model's raw text response for a prompt."""


class GeminiProvider(SummarizationProvider):
    """Google Gemini provider over the generateContent REST endpoint."""

    def __init__(
        self,
        api_key: str,
        fetch_client: ResilientFetchClient,
        model: str = "gemini-3-flash-preview",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        temperature: float = 0.1,
        max_output_tokens: int = 8192,
    ):
        self._api_key = api_key
        self._fetch = fetch_client
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
        json_output: bool = True,
        response_model: type[BaseModel] | None = None,
    ) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        generation_config = {
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
        }
        if json_output:
            generation_config["responseMimeType"] = "application/json"
            if response_model is not None:
                generation_config["responseSchema"] = response_schema(response_model)

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        response = await self._fetch.post(
            url,
            json=payload,
            headers={"x-goog-api-key": self._api_key},
        )
        if response.is_error:
            raise RemoteServiceError(
                f"Summarization request failed with HTTP {response.status_code}"
            )

        data = response.json()
        candidates = data.get("candidates") or []
        if not candidates:
            raise RemoteServiceError("Summarization response contained no candidates")

        parts = candidates[0].get("content", {}).get("parts", [])
        text = "".join(part.get("text", "") for part in parts)

        logger.debug(
            "ai_generate_complete",
            model=self.model,
            response_chars=len(text),
        )
        return text


def _convert_schema(node: dict, defs: dict) -> dict:
    if "$ref" in node:
        return _convert_schema(defs[node["$ref"].rsplit("/", 1)[-1]], defs)

    if "anyOf" in node:
        options = [option for option in node["anyOf"] if option.get("type") != "null"]
        converted = _convert_schema(options[0], defs)
        if len(options) < len(node["anyOf"]):
            converted["nullable"] = True
        return converted

    if "enum" in node:
        return {"type": "STRING", "enum": [str(value) for value in node["enum"]]}

    json_type = node.get("type", "string")
    converted = {"type": SCHEMA_TYPES[json_type]}
    if json_type == "object":
        converted["properties"] = {
            name: _convert_schema(prop, defs)
            for name, prop in node.get("properties", {}).items()
        }
        if node.get("required"):
            converted["required"] = list(node["required"])
    elif json_type == "array":
        converted["items"] = _convert_schema(node.get("items", {}), defs)
    return converted


def response_schema(model: type[BaseModel]) -> dict:
    """
    Build a generateContent responseSchema from a pydantic model.

    References are inlined and optional fields become ``nullable``, since
    the endpoint accepts neither ``$ref`` nor ``anyOf``.

    Args:
        model: Model whose JSON (by alias) the response must match

    Returns:
        Schema dict for ``generationConfig.responseSchema``
    """
    json_schema = model.model_json_schema(by_alias=True)
    return _convert_schema(json_schema, json_schema.get("$defs", {}))


def resolve_api_key(env_var: str) -> str:
    """Read and sanity-check an API key from the environment.

    Raises:
        AIConfigurationError: If the variable is unset or holds a placeholder
    """
    api_key = os.environ.get(env_var, "")
    if not api_key or any(marker in api_key for marker in PLACEHOLDER_KEYS):
        raise AIConfigurationError(
            f"No usable API key in ${env_var}; online analysis unavailable"
        )
    return api_key


def provider_from_config(
    config: AIConfig,
    fetch_client: ResilientFetchClient,
) -> SummarizationProvider:
    """
    Build the configured summarization provider.

    Args:
        config: AIConfig instance
        fetch_client: Shared resilient HTTP client

    Returns:
        Configured provider

    Raises:
        AIConfigurationError: If the provider is disabled or has no key
    """
    if config.provider == "none":
        raise AIConfigurationError("AI provider disabled in configuration")

    return GeminiProvider(
        api_key=resolve_api_key(config.api_key_env),
        fetch_client=fetch_client,
        model=config.model,
        base_url=config.base_url,
        temperature=config.temperature,
        max_output_tokens=config.max_output_tokens,
    )
