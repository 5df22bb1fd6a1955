"""Tests for the summarization provider."""

import asyncio
import json

import httpx
import pytest

from variant_insight.ai.provider import (
    GeminiProvider,
    provider_from_config,
    resolve_api_key,
    response_schema,
)
from variant_insight.analysis.models import AnalysisResult, VariantAnalysis
from variant_insight.api_clients import ResilientFetchClient
from variant_insight.config import AIConfig
from variant_insight.errors import AIConfigurationError, RemoteServiceError

from fakes import RecordingSleep


def gemini_client(handler) -> ResilientFetchClient:
    return ResilientFetchClient(transport=httpx.MockTransport(handler), sleep=RecordingSleep())


def test_generate_request_and_response():
    """Test the generateContent request body and text extraction."""
    captured = []

    def handler(request):
        captured.append(request)
        return httpx.Response(200, json={
            "candidates": [{"content": {"parts": [{"text": '{"a": '}, {"text": "1}"}]}}]
        })

    provider = GeminiProvider(
        api_key="secret",
        fetch_client=gemini_client(handler),
        model="test-model",
        base_url="https://ai.test/v1beta/",
    )

    text = asyncio.run(provider.generate("prompt text", system_instruction="be terse"))

    assert text == '{"a": 1}'
    request = captured[0]
    body = json.loads(request.content)
    assert str(request.url) == "https://ai.test/v1beta/models/test-model:generateContent"
    assert request.headers["x-goog-api-key"] == "secret"
    assert body["contents"][0]["parts"][0]["text"] == "prompt text"
    assert body["systemInstruction"]["parts"][0]["text"] == "be terse"
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["generationConfig"]["temperature"] == 0.1
    assert "responseSchema" not in body["generationConfig"]


def test_generate_http_error():
    provider = GeminiProvider(
        api_key="secret",
        fetch_client=gemini_client(lambda request: httpx.Response(403)),
    )

    with pytest.raises(RemoteServiceError):
        asyncio.run(provider.generate("prompt"))


def test_generate_no_candidates():
    provider = GeminiProvider(
        api_key="secret",
        fetch_client=gemini_client(lambda request: httpx.Response(200, json={"candidates": []})),
    )

    with pytest.raises(RemoteServiceError):
        asyncio.run(provider.generate("prompt"))


def test_resolve_api_key(monkeypatch):
    monkeypatch.setenv("TEST_AI_KEY", "real-key")
    assert resolve_api_key("TEST_AI_KEY") == "real-key"

    monkeypatch.setenv("TEST_AI_KEY", "PLACEHOLDER_API_KEY")
    with pytest.raises(AIConfigurationError):
        resolve_api_key("TEST_AI_KEY")

    monkeypatch.delenv("TEST_AI_KEY")
    with pytest.raises(AIConfigurationError):
        resolve_api_key("TEST_AI_KEY")


def test_provider_from_config(monkeypatch):
    monkeypatch.setenv("TEST_AI_KEY", "real-key")
    config = AIConfig(api_key_env="TEST_AI_KEY", model="m1")

    provider = provider_from_config(config, ResilientFetchClient())

    assert isinstance(provider, GeminiProvider)
    assert provider.model == "m1"


def test_provider_disabled():
    with pytest.raises(AIConfigurationError):
        provider_from_config(AIConfig(provider="none"), ResilientFetchClient())


def test_generate_sends_response_schema():
    captured = []

    def handler(request):
        captured.append(json.loads(request.content))
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "{}"}]}}]})

    provider = GeminiProvider(api_key="secret", fetch_client=gemini_client(handler))

    asyncio.run(provider.generate("prompt", response_model=AnalysisResult))

    assert captured[0]["generationConfig"]["responseSchema"] == response_schema(AnalysisResult)


def test_response_schema_shape():
    """Test that references are inlined and optional fields are nullable."""
    schema = response_schema(AnalysisResult)

    assert schema["type"] == "OBJECT"
    properties = schema["properties"]
    assert "mode" not in properties
    assert properties["patientSummary"] == {"type": "STRING"}
    assert properties["overallRiskScore"] == {"type": "NUMBER"}

    variant = properties["variants"]["items"]
    assert variant["type"] == "OBJECT"
    assert variant["properties"]["gene"] == {"type": "STRING"}
    assert variant["properties"]["rsId"] == {"type": "STRING", "nullable": True}
    assert variant["properties"]["xai"]["nullable"] is True
    assert variant["properties"]["xai"]["properties"]["variantPosition"] == {
        "type": "INTEGER",
        "nullable": True,
    }

    synthesis = properties["nDimensionalAnalysis"]
    assert synthesis["nullable"] is True
    assert synthesis["properties"]["actionPlan"]["items"]["required"] == ["title"]
    assert "$ref" not in json.dumps(schema)
    assert "anyOf" not in json.dumps(schema)


def test_result_models_treat_null_as_default():
    variant = VariantAnalysis.model_validate({
        "gene": None,
        "description": None,
        "riskLevel": None,
        "rsId": None,
        "caddScore": None,
    })

    assert variant.gene == ""
    assert variant.description == ""
    assert variant.risk_level == "UNCERTAIN"
    assert variant.rs_id is None
    assert variant.cadd_score is None

    result = AnalysisResult.model_validate({"variants": None, "pharmaProfiles": None})
    assert result.variants == []
    assert result.pharma_profiles == []
