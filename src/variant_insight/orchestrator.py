"""Analysis orchestrator: parse -> extract -> enrich -> summarize, or fall back offline.

Phases run in order INIT -> PARSING -> EXTRACTING_IDENTIFIERS ->
QUERYING_REMOTE -> ENRICHED | OFFLINE_FALLBACK -> DONE. Any remote failure
after retries (annotation service entirely unreachable, summarization
service unreachable, or an unusable summarization payload) moves the run
to OFFLINE_FALLBACK, which always succeeds. A run never re-enters the
online path; callers start a fresh run to retry online.
"""

import asyncio
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Awaitable, Callable, Sequence

import httpx
import structlog

from variant_insight.analysis.models import AnalysisMode, AnalysisResult
from variant_insight.analysis.prioritize import PrioritizedVariant, prioritize_variants
from variant_insight.analysis.prompts import (
    SYSTEM_INSTRUCTION,
    build_analysis_prompt,
    inject_real_data,
)
from variant_insight.ai.json_repair import parse_model_json
from variant_insight.ai.provider import SummarizationProvider
from variant_insight.annotation.models import EnrichedVariant
from variant_insight.annotation.service import VariantEnrichmentService
from variant_insight.config.schema import InsightConfig
from variant_insight.errors import AIResponseError, RemoteServiceError, VariantInsightError
from variant_insight.knowledge.offline import OfflineKnowledgeBase
from variant_insight.parsing.formats import parse_genomic_input, parse_zygosity_override
from variant_insight.parsing.identifiers import (
    IdentifierExtractor,
    RegexIdentifierExtractor,
    unique_in_order,
)
from variant_insight.parsing.models import ParsedVariant
from variant_insight.persistence.provenance import ProvenanceTracker

logger = structlog.get_logger()

# Failures that send a run to offline fallback; ValueError covers JSON
# decoding and pydantic validation of the summarization payload
REMOTE_FAILURES = (httpx.HTTPError, VariantInsightError, ValueError)

AI_RETRY_PAUSE_SECONDS = 1.0


class AnalysisPhase(str, Enum):
    INIT = "INIT"
    PARSING = "PARSING"
    EXTRACTING_IDENTIFIERS = "EXTRACTING_IDENTIFIERS"
    QUERYING_REMOTE = "QUERYING_REMOTE"
    ENRICHED = "ENRICHED"
    OFFLINE_FALLBACK = "OFFLINE_FALLBACK"
    DONE = "DONE"


StatusCallback = Callable[[AnalysisPhase, str], None]


@dataclass
class AnalysisRun:
    """Everything one analysis run produced.

    Attributes:
        result: Final AnalysisResult (online or offline)
        mode: Which path produced the result
        parsed_variants: Variants from the local format parser
        identifiers: rsIDs sent (or eligible to be sent) for enrichment
        enriched_variants: Remote annotations, keyed by their own identifier
        prioritized: Variants kept for summarization
        failed_chunks: Number of annotation batch chunks that failed
        fallback_reason: Why the run fell back offline, if it did
        user_message: Message to show the user alongside the result
        provenance: Phase transition record
    """

    result: AnalysisResult
    mode: AnalysisMode
    parsed_variants: list[ParsedVariant] = field(default_factory=list)
    identifiers: list[str] = field(default_factory=list)
    enriched_variants: list[EnrichedVariant] = field(default_factory=list)
    prioritized: list[PrioritizedVariant] = field(default_factory=list)
    failed_chunks: int = 0
    fallback_reason: str | None = None
    user_message: str | None = None
    provenance: ProvenanceTracker | None = None


class EnrichmentOrchestrator:
    """Compose parsing, enrichment, summarization and offline fallback.

    Collaborators are passed in explicitly. ``provider`` may be None when
    no summarization service is configured; runs then end in offline
    fallback after local parsing.
    """

    def __init__(
        self,
        enrichment: VariantEnrichmentService,
        provider: SummarizationProvider | None = None,
        extractor: IdentifierExtractor | None = None,
        knowledge_base: OfflineKnowledgeBase | None = None,
        config: InsightConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.enrichment = enrichment
        self.provider = provider
        self.extractor = extractor or RegexIdentifierExtractor()
        self.knowledge_base = knowledge_base or OfflineKnowledgeBase()
        self.config = config or InsightConfig()
        self._sleep = sleep

    async def analyze(
        self,
        raw_input: str,
        focus: Sequence[str] = ("COMPREHENSIVE",),
        ancestry: str = "GLOBAL",
        on_status: StatusCallback | None = None,
        offline: bool = False,
    ) -> AnalysisRun:
        """
        Run one analysis.

        Args:
            raw_input: VCF text, 23andMe export or pasted identifiers
            focus: Analysis focus areas passed to the summarization model
            ancestry: Declared ancestry group
            on_status: Callback receiving (phase, message) at each transition
            offline: Skip remote services and use the offline knowledge base

        Returns:
            AnalysisRun with the result and its provenance
        """
        provenance = ProvenanceTracker.from_config(self.config)

        def notify(phase: AnalysisPhase, message: str, **details) -> None:
            provenance.record_step(phase.value, details or None)
            logger.info("orchestrator_phase", phase=phase.value, message=message, **details)
            if on_status is not None:
                on_status(phase, message)

        notify(AnalysisPhase.INIT, "Starting analysis...")

        # Phase: parsing
        notify(AnalysisPhase.PARSING, "Parsing VCF & Filtering Wildtypes...")
        await asyncio.sleep(0)
        parsed = parse_genomic_input(raw_input)
        override = parse_zygosity_override(raw_input)
        if override is not None:
            parsed = [replace(variant, zygosity=override) for variant in parsed]

        # Phase: identifier extraction
        gene_symbols: list[str] = []
        if parsed:
            notify(
                AnalysisPhase.EXTRACTING_IDENTIFIERS,
                f"Detected {len(parsed)} active variants (Removed 0/0).",
                parsed_count=len(parsed),
            )
            identifiers = unique_in_order(variant.identifier for variant in parsed)
            candidates = parsed
        else:
            notify(
                AnalysisPhase.EXTRACTING_IDENTIFIERS,
                "No structured format detected. Extracting identifiers...",
            )
            # Offline runs must not reach the summarization service
            extractor = self.extractor
            if offline or self.provider is None:
                extractor = RegexIdentifierExtractor()
            extracted = await extractor.extract(raw_input)
            identifiers = extracted.rsids
            gene_symbols = extracted.gene_symbols
            candidates = [
                ParsedVariant(identifier=identifier, zygosity=override)
                if override is not None
                else ParsedVariant(identifier=identifier)
                for identifier in identifiers
            ]

        run = AnalysisRun(
            result=AnalysisResult(),
            mode=AnalysisMode.ENRICHED,
            parsed_variants=parsed,
            identifiers=identifiers,
            provenance=provenance,
        )

        if offline:
            return self._fall_back(run, raw_input, notify, "offline mode requested")
        if self.provider is None:
            return self._fall_back(run, raw_input, notify, "no summarization provider configured")

        # Phase: remote enrichment and summarization
        max_identifiers = self.config.annotation.max_identifiers
        query_ids = identifiers[:max_identifiers]
        notify(
            AnalysisPhase.QUERYING_REMOTE,
            f"Querying Bio-Data for {len(query_ids)} variants...",
            identifier_count=len(query_ids),
        )
        await asyncio.sleep(0)

        try:
            result = await self._query_remote(run, query_ids, candidates, gene_symbols, focus, ancestry, notify)
        except REMOTE_FAILURES as e:
            if isinstance(e, AIResponseError):
                run.user_message = str(e)
            return self._fall_back(run, raw_input, notify, repr(e))

        run.result = result
        run.mode = AnalysisMode.ENRICHED
        notify(AnalysisPhase.ENRICHED, "Analysis complete.", variant_count=len(result.variants))
        notify(AnalysisPhase.DONE, "Done.")
        return run

    async def _query_remote(
        self,
        run: AnalysisRun,
        query_ids: list[str],
        candidates: list[ParsedVariant],
        gene_symbols: list[str],
        focus: Sequence[str],
        ancestry: str,
        notify,
    ) -> AnalysisResult:
        enriched, batch = await self.enrichment.enrich_batch_detailed(query_ids)
        run.enriched_variants = enriched
        run.failed_chunks = len(batch.failed_chunks)

        if batch.all_failed:
            raise RemoteServiceError(
                f"Annotation service unreachable ({run.failed_chunks} chunks failed)"
            )

        notify(AnalysisPhase.QUERYING_REMOTE, "Applying ACMG-73 & CPIC Filters...")
        await asyncio.sleep(0)
        prioritized = prioritize_variants(
            candidates,
            enriched,
            small_batch_threshold=self.config.analysis.small_batch_threshold,
        )
        run.prioritized = prioritized
        notify(
            AnalysisPhase.QUERYING_REMOTE,
            f"Filtered down to {len(prioritized)} CRITICAL variants.",
            prioritized_count=len(prioritized),
        )

        prompt = build_analysis_prompt(
            prioritized,
            focus=focus,
            ancestry=ancestry,
            gene_symbols=gene_symbols,
            max_chars=self.config.analysis.max_prompt_chars,
        )
        notify(AnalysisPhase.QUERYING_REMOTE, "Generating Clinical Report...")
        result = await self._summarize(prompt)
        kept_records = [item.enriched for item in prioritized if item.enriched is not None]
        return inject_real_data(result, kept_records, candidates)

    async def _summarize(self, prompt: str) -> AnalysisResult:
        """Call the summarization provider, retrying the whole step on failure."""
        max_retries = self.config.ai.max_retries
        for attempt in range(1, max_retries + 1):
            try:
                text = await self.provider.generate(
                    prompt,
                    system_instruction=SYSTEM_INSTRUCTION,
                    response_model=AnalysisResult,
                )
                payload = parse_model_json(text)
                if not isinstance(payload, dict):
                    raise AIResponseError("AI response was not a JSON object", raw_text=text)
                result = AnalysisResult.model_validate(payload)
                return result.model_copy(update={"mode": AnalysisMode.ENRICHED})
            except REMOTE_FAILURES as e:
                logger.warning(
                    "ai_summarization_failed",
                    attempt=attempt,
                    max_retries=max_retries,
                    error=repr(e),
                )
                if attempt == max_retries:
                    raise
                await self._sleep(AI_RETRY_PAUSE_SECONDS)
        raise RemoteServiceError("Summarization step did not run")

    def _fall_back(self, run: AnalysisRun, raw_input: str, notify, reason: str) -> AnalysisRun:
        notify(
            AnalysisPhase.OFFLINE_FALLBACK,
            "Remote analysis unavailable. Using offline knowledge base...",
            reason=reason,
        )
        run.result = self.knowledge_base.lookup(raw_input)
        run.mode = AnalysisMode.OFFLINE_FALLBACK
        run.fallback_reason = reason
        notify(AnalysisPhase.DONE, "Done.")
        return run
