"""Tests for MyVariant.info normalization and the enrichment service."""

import asyncio
from unittest.mock import AsyncMock, Mock
from urllib.parse import parse_qs

import httpx
import pytest

from variant_insight.annotation import (
    EnrichedVariant,
    VariantEnrichmentService,
    first_wins,
    normalize_hit,
)
from variant_insight.api_clients import BatchResult, ResilientFetchClient

from fakes import myvariant_hit


BASE_URL = "https://myvariant.test/v1"


def make_service(handler, recording_sleep, chunk_size=50) -> VariantEnrichmentService:
    client = ResilientFetchClient(
        transport=httpx.MockTransport(handler),
        sleep=recording_sleep,
        chunk_size=chunk_size,
    )
    return VariantEnrichmentService(client=client, base_url=BASE_URL)


def query_ids(request: httpx.Request) -> list[str]:
    form = parse_qs(request.content.decode())
    return form["q"][0].split(",")


def test_first_wins():
    assert first_wins([1, 2]) == 1
    assert first_wins([]) is None
    assert first_wins({"a": 1}) == {"a": 1}
    assert first_wins(None) is None


def test_normalize_full_hit():
    """Test that list-valued sub-documents collapse to their first element."""
    record = normalize_hit(myvariant_hit("rs28929474"))

    assert record == EnrichedVariant(
        identifier="rs28929474",
        clinical_significance="Pathogenic",
        condition="Li-Fraumeni syndrome",
        population_frequency=0.0001,
        pathogenicity_score=29.5,
        secondary_pathogenicity_score=0.93,
        gene_symbol="TP53",
        protein_change="p.Arg175His",
    )
    assert record.is_pathogenic


def test_normalize_sparse_hit_keeps_nulls():
    """Test that missing fields stay None instead of defaulting to zero."""
    record = normalize_hit({"query": "rs1", "_id": "x"})

    assert record.clinical_significance == "Not Reported"
    assert record.population_frequency is None
    assert record.pathogenicity_score is None
    assert record.secondary_pathogenicity_score is None
    assert record.gene_symbol is None
    assert not record.is_pathogenic


def test_normalize_clinvar_without_significance():
    record = normalize_hit({"query": "rs1", "clinvar": {"rcv": {"conditions": []}}})

    assert record.clinical_significance == "Uncertain"
    assert record.condition is None


def test_normalize_flat_revel_score():
    hit = {"query": "rs1", "dbnsfp": [{"revel_score": "0.71", "cadd": {"phred": "12.3"}}]}

    record = normalize_hit(hit)

    assert record.secondary_pathogenicity_score == pytest.approx(0.71)
    assert record.pathogenicity_score == pytest.approx(12.3)


def test_normalize_notfound_and_missing_identifier():
    assert normalize_hit({"query": "rs404", "notfound": True}) is None
    assert normalize_hit({"_id": "no-query"}) is None
    assert normalize_hit({"_id": "no-query"}, fallback_identifier="rs9").identifier == "rs9"


def test_enrich_batch_partial_chunk_failure(recording_sleep):
    """Test 120 identifiers in 3 chunks where the middle chunk fails permanently."""
    identifiers = [f"rs{i}" for i in range(1, 121)]
    requested = []

    def handler(request):
        ids = query_ids(request)
        requested.append(ids)
        if "rs51" in ids:
            return httpx.Response(400, json={"error": "bad request"})
        return httpx.Response(200, json=[myvariant_hit(rsid) for rsid in ids])

    service = make_service(handler, recording_sleep)
    records, batch = asyncio.run(service.enrich_batch_detailed(identifiers))

    found = {record.identifier for record in records}
    assert len(requested) == 3
    assert len(records) == 70
    assert "rs1" in found and "rs50" in found
    assert "rs101" in found and "rs120" in found
    assert not found & {f"rs{i}" for i in range(51, 101)}
    assert len(batch.failed_chunks) == 1
    assert not batch.all_failed
    # 400 is permanent: no retry waits
    assert recording_sleep.delays == []


def test_enrich_batch_excludes_notfound(recording_sleep):
    def handler(request):
        return httpx.Response(200, json=[
            myvariant_hit("rs28929474"),
            {"query": "rs999999999", "notfound": True},
        ])

    service = make_service(handler, recording_sleep)
    records = asyncio.run(service.enrich_batch(["rs28929474", "rs999999999"]))

    assert [record.identifier for record in records] == ["rs28929474"]


def test_enrich_batch_first_hit_wins_per_identifier(recording_sleep):
    """Test that duplicate hits for one rsID keep the first."""
    def handler(request):
        return httpx.Response(200, json=[
            myvariant_hit("rs1", gene="BRCA2"),
            myvariant_hit("rs1", gene="OTHER"),
        ])

    service = make_service(handler, recording_sleep)
    records = asyncio.run(service.enrich_batch(["rs1"]))

    assert len(records) == 1
    assert records[0].gene_symbol == "BRCA2"


def test_enrich_batch_sends_batch_query(recording_sleep):
    captured = []

    def handler(request):
        captured.append(request)
        return httpx.Response(200, json=[])

    service = make_service(handler, recording_sleep)
    asyncio.run(service.enrich_batch(["rs1", "rs2"]))

    request = captured[0]
    form = parse_qs(request.content.decode())
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/query"
    assert form["scopes"] == ["dbsnp.rsid"]
    assert form["q"] == ["rs1,rs2"]


def test_non_rsid_never_reaches_network():
    """Test that identifiers without the rs prefix are filtered before batching."""
    client = Mock(spec=ResilientFetchClient)
    client.request_batch = AsyncMock(return_value=BatchResult())
    service = VariantEnrichmentService(client=client)

    asyncio.run(service.enrich_batch(["rs12345", "notarsid", "rs12345"]))

    client.request_batch.assert_awaited_once()
    submitted = client.request_batch.call_args.args[0]
    assert submitted == ["rs12345"]


def test_enrich_batch_all_invalid_skips_network():
    client = Mock(spec=ResilientFetchClient)
    client.request_batch = AsyncMock()
    service = VariantEnrichmentService(client=client)

    records, batch = asyncio.run(service.enrich_batch_detailed(["notarsid", ""]))

    assert records == []
    client.request_batch.assert_not_awaited()
    assert batch.chunks == []
    assert not hasattr(service, "last_batch")


def test_enrich_one(recording_sleep):
    """Test single lookups: first hit wins and the queried ID is kept."""
    def handler(request):
        assert request.url.path.endswith("/variant/rs28929474")
        hit = myvariant_hit("rs28929474")
        hit.pop("query")
        return httpx.Response(200, json=[hit, myvariant_hit("rs0", gene="OTHER")])

    service = make_service(handler, recording_sleep)
    record = asyncio.run(service.enrich_one("rs28929474"))

    assert record.identifier == "rs28929474"
    assert record.gene_symbol == "TP53"


def test_enrich_one_not_found(recording_sleep):
    def handler(request):
        return httpx.Response(404, json={"success": False})

    service = make_service(handler, recording_sleep)

    assert asyncio.run(service.enrich_one("rs1")) is None
    assert asyncio.run(service.enrich_one("notarsid")) is None
