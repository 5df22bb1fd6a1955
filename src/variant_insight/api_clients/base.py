"""Async HTTP client with timeout, retry/backoff and chunked batch requests."""

import asyncio
import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from variant_insight.config.schema import FetchConfig

logger = structlog.get_logger()


def is_transient_error(exc: BaseException) -> bool:
    """Return True for failures worth retrying.

    Transient: HTTP 429, HTTP 5xx, and transport failures (connection
    errors, per-attempt timeouts). Other 4xx responses are permanent.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return isinstance(exc, httpx.TransportError)


def chunked(items: Sequence[Any], chunk_size: int) -> list[list[Any]]:
    """Partition items into ceil(len/chunk_size) ordered chunks."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    num_chunks = math.ceil(len(items) / chunk_size)
    return [
        list(items[i * chunk_size:(i + 1) * chunk_size])
        for i in range(num_chunks)
    ]


@dataclass
class ChunkResult:
    """Outcome of one chunk of a batch request.

    Attributes:
        index: Zero-based chunk position within the batch
        items: Items submitted in this chunk
        results: Values returned by the request function (empty on failure)
        error: Failure description, None when the chunk succeeded
    """

    index: int
    items: list[Any]
    results: list[Any] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Per-chunk outcomes of a batch request, in chunk order."""

    chunks: list[ChunkResult] = field(default_factory=list)

    @property
    def results(self) -> list[Any]:
        """Concatenation of successful chunk results in chunk order."""
        return [value for chunk in self.chunks for value in chunk.results]

    @property
    def failed_chunks(self) -> list[ChunkResult]:
        return [chunk for chunk in self.chunks if not chunk.ok]

    @property
    def all_failed(self) -> bool:
        return bool(self.chunks) and all(not chunk.ok for chunk in self.chunks)


class ResilientFetchClient:
    """
    Async HTTP client with per-attempt timeout and exponential backoff.

    Features:
    - Every attempt is bounded by a hard timeout; on expiry the in-flight
      request is cancelled and counted as a failed attempt
    - Automatic retry on 429/5xx/network errors, waiting
      base * 2^(attempt-1) seconds plus random jitter between attempts
    - Other 4xx responses are returned immediately without retry
    - Chunked batch submission with concurrent, failure-isolated chunks
    """

    def __init__(
        self,
        timeout: float = 15.0,
        max_attempts: int = 3,
        backoff_base: float = 1.0,
        jitter_max: float = 0.5,
        chunk_size: int = 50,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize client.

        Args:
            timeout: Hard timeout for a single attempt in seconds
            max_attempts: Total attempts for transient failures
            backoff_base: Base backoff delay in seconds
            jitter_max: Maximum random jitter added to each delay in seconds
            chunk_size: Default maximum items per batch chunk
            transport: Optional httpx transport (used by tests)
            sleep: Awaitable sleep used between attempts
        """
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.jitter_max = jitter_max
        self.chunk_size = chunk_size
        self._transport = transport
        self._sleep = sleep
        self._http_client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying HTTP client (lazy initialization)."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._http_client

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "ResilientFetchClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code == 429:
            logger.warning(
                "fetch_rate_limited",
                url=str(exc.request.url),
                attempt=retry_state.attempt_number,
            )
        logger.warning(
            "fetch_retry_scheduled",
            attempt=retry_state.attempt_number,
            wait_seconds=round(retry_state.next_action.sleep, 3) if retry_state.next_action else None,
            error=repr(exc),
        )

    def _create_retrying(self, max_attempts: int) -> AsyncRetrying:
        """Create async retry controller with exponential backoff and jitter."""
        return AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=self.backoff_base, exp_base=2)
            + wait_random(0, self.jitter_max),
            retry=retry_if_exception(is_transient_error),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

    async def _attempt(self, method: str, url: str, **kwargs) -> httpx.Response:
        client = self._get_client()
        try:
            response = await asyncio.wait_for(
                client.request(method, url, **kwargs),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise httpx.TimeoutException(
                f"{method} {url} exceeded {self.timeout}s timeout"
            ) from e

        if response.status_code == 429 or response.status_code >= 500:
            response.raise_for_status()
        return response

    async def request_with_retry(
        self,
        method: str,
        url: str,
        max_attempts: int | None = None,
        **kwargs,
    ) -> httpx.Response:
        """
        Make an HTTP request with timeout and retry logic.

        Args:
            method: HTTP method ("GET", "POST", ...)
            url: Request URL
            max_attempts: Override of the client's attempt limit
            **kwargs: Additional arguments passed to httpx (params, data, json, headers)

        Returns:
            Response object. Non-429 4xx responses are returned as-is on the
            first attempt; callers decide what "no data" means for them.

        Raises:
            httpx.HTTPStatusError: On 429/5xx after retries exhausted
            httpx.TimeoutException: On timeout after retries exhausted
            httpx.TransportError: On connection error after retries exhausted
        """
        retrying = self._create_retrying(max_attempts or self.max_attempts)
        async for attempt in retrying:
            with attempt:
                response = await self._attempt(method, url, **kwargs)
        return response

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request_with_retry("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request_with_retry("POST", url, **kwargs)

    async def _run_chunk(
        self,
        index: int,
        chunk: list[Any],
        request_fn: Callable[[list[Any]], Awaitable[list[Any]]],
    ) -> ChunkResult:
        try:
            results = await request_fn(chunk)
        except Exception as e:
            logger.warning(
                "batch_chunk_failed",
                chunk_index=index,
                chunk_size=len(chunk),
                error=repr(e),
            )
            return ChunkResult(index=index, items=chunk, error=repr(e))
        return ChunkResult(index=index, items=chunk, results=list(results))

    async def request_batch(
        self,
        items: Sequence[Any],
        request_fn: Callable[[list[Any]], Awaitable[list[Any]]],
        chunk_size: int | None = None,
    ) -> BatchResult:
        """
        Submit items in chunks, one concurrent request per chunk.

        A failing chunk is recorded as a failed ChunkResult and does not
        abort its siblings. Result order within a chunk is whatever
        request_fn returns, so callers correlate by identifier, not position.

        Args:
            items: Items to submit
            request_fn: Coroutine function taking one chunk and returning its results
            chunk_size: Override of the client's default chunk size

        Returns:
            BatchResult with one ChunkResult per chunk, in chunk order
        """
        chunks = chunked(items, chunk_size or self.chunk_size)
        if not chunks:
            return BatchResult()

        logger.info(
            "batch_request_start",
            item_count=len(items),
            chunk_count=len(chunks),
        )

        outcomes = await asyncio.gather(
            *(self._run_chunk(i, chunk, request_fn) for i, chunk in enumerate(chunks))
        )
        batch = BatchResult(chunks=list(outcomes))

        logger.info(
            "batch_request_complete",
            result_count=len(batch.results),
            failed_chunks=len(batch.failed_chunks),
        )
        return batch

    @classmethod
    def from_config(
        cls,
        config: FetchConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ResilientFetchClient":
        """
        Create client from fetch configuration.

        Args:
            config: FetchConfig instance
            transport: Optional httpx transport

        Returns:
            Configured ResilientFetchClient instance
        """
        return cls(
            timeout=config.timeout_seconds,
            max_attempts=config.max_attempts,
            backoff_base=config.backoff_base_seconds,
            jitter_max=config.jitter_max_seconds,
            chunk_size=config.chunk_size,
            transport=transport,
        )
