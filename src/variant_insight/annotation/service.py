"""Remote variant enrichment against MyVariant.info."""

import structlog

from variant_insight.annotation.models import (
    MYVARIANT_BASE_URL,
    MYVARIANT_FIELDS,
    MYVARIANT_RSID_SCOPE,
    EnrichedVariant,
)
from variant_insight.annotation.normalize import first_wins, normalize_hit
from variant_insight.api_clients.base import BatchResult, ResilientFetchClient
from variant_insight.config.schema import AnnotationConfig
from variant_insight.parsing.identifiers import is_valid_identifier, unique_in_order

logger = structlog.get_logger()


class VariantEnrichmentService:
    """Query ClinVar, dbNSFP, gnomAD and SnpEff data for rsIDs.

    Identifiers without the rsID prefix are dropped before any request is
    made. Hits flagged "not found" are excluded from results, so output is
    keyed by EnrichedVariant.identifier and never aligned by position.
    """

    def __init__(
        self,
        client: ResilientFetchClient,
        base_url: str = MYVARIANT_BASE_URL,
        fields: str = MYVARIANT_FIELDS,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.fields = fields

    async def enrich_one(self, identifier: str) -> EnrichedVariant | None:
        """
        Annotate a single rsID.

        Args:
            identifier: rsID to look up

        Returns:
            EnrichedVariant, or None for invalid identifiers, 4xx responses
            and not-found hits

        Raises:
            httpx.HTTPError: On transient failures after retries exhausted
        """
        if not is_valid_identifier(identifier):
            return None

        response = await self.client.get(
            f"{self.base_url}/variant/{identifier}",
            params={"fields": self.fields},
        )
        if response.is_error:
            logger.debug(
                "annotation_lookup_no_data",
                identifier=identifier,
                status=response.status_code,
            )
            return None

        # An rsID can map to several genomic variants; first hit wins
        hit = first_wins(response.json())
        if not isinstance(hit, dict):
            return None
        # Single lookups echo no "query" field; the queried ID is authoritative
        hit = {key: value for key, value in hit.items() if key != "query"}
        return normalize_hit(hit, fallback_identifier=identifier)

    async def _query_chunk(self, chunk: list[str]) -> list[EnrichedVariant]:
        response = await self.client.post(
            f"{self.base_url}/query",
            data={
                "q": ",".join(chunk),
                "scopes": MYVARIANT_RSID_SCOPE,
                "fields": self.fields,
            },
        )
        # Permanent 4xx: the whole chunk has no data
        response.raise_for_status()

        payload = response.json()
        hits = payload if isinstance(payload, list) else [payload]
        fallback = chunk[0] if len(chunk) == 1 else None

        results = []
        for hit in hits:
            record = normalize_hit(hit, fallback_identifier=fallback)
            if record is not None:
                results.append(record)
        return results

    async def enrich_batch_detailed(
        self,
        identifiers: list[str],
    ) -> tuple[list[EnrichedVariant], BatchResult]:
        """
        Annotate many rsIDs with chunked, concurrent batch queries.

        Failed chunks contribute nothing; their identifiers are simply
        absent from the records. The BatchResult belongs to this call only.

        Args:
            identifiers: rsIDs to look up (invalid and duplicate entries are dropped)

        Returns:
            Tuple of (one EnrichedVariant per found identifier, per-chunk
            outcomes). First hit wins when the service returns several hits
            for one rsID.
        """
        valid = unique_in_order(i for i in identifiers if is_valid_identifier(i))
        dropped = len(identifiers) - len(valid)
        if dropped:
            logger.debug("annotation_identifiers_dropped", count=dropped)

        if not valid:
            return [], BatchResult()

        batch = await self.client.request_batch(valid, self._query_chunk)

        seen: dict[str, EnrichedVariant] = {}
        for record in batch.results:
            seen.setdefault(record.identifier, record)

        logger.info(
            "annotation_batch_complete",
            requested=len(valid),
            found=len(seen),
            failed_chunks=len(batch.failed_chunks),
        )
        return list(seen.values()), batch

    async def enrich_batch(self, identifiers: list[str]) -> list[EnrichedVariant]:
        """Annotate many rsIDs, discarding per-chunk outcomes."""
        records, _ = await self.enrich_batch_detailed(identifiers)
        return records

    @classmethod
    def from_config(
        cls,
        config: AnnotationConfig,
        client: ResilientFetchClient,
    ) -> "VariantEnrichmentService":
        return cls(client=client, base_url=config.base_url, fields=config.fields)
