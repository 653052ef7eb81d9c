"""arXiv API client for searching papers and looking them up by ID."""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception_type,
    before_sleep_log,
)

from .config import ArxivAPIConfig, get_settings
from .exceptions import (
    ArxivAPIError,
    ArxivSearchError,
    NetworkError,
    SearchError,
    ValidationError,
)
from .feed_parser import normalize_feed
from .logging_config import get_logger, log_api_request, log_api_response, log_error
from .models import ArxivPaper, SearchParams, SearchResult, SortBy, SortOrder
from .query_parser import build_arxiv_query, parse_query

logger = get_logger(__name__)

T = TypeVar('T')


async def fetch_with_retry(
    fetch: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    retry_delay: float = 1.0
) -> T:
    """
    Await `fetch`, retrying transient network failures.

    Only NetworkError is retried, with a fixed delay between attempts. Any
    other exception propagates from the attempt that raised it.

    Args:
        fetch: Zero-argument coroutine function performing one attempt
        max_retries: Retries after the first attempt (total attempts = max_retries + 1)
        retry_delay: Seconds to wait between attempts

    Returns:
        Result of the first successful attempt

    Raises:
        NetworkError: The last failure once all attempts are used up
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_fixed(retry_delay),
        retry=retry_if_exception_type(NetworkError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

    async for attempt in retrying:
        with attempt:
            result = await fetch()
    return result


class ArxivClient:
    """Client for interacting with the arXiv API."""

    def __init__(
        self,
        config: Optional[ArxivAPIConfig] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the arXiv client.

        Args:
            config: API settings (defaults to the global settings)
            timeout: Per-attempt timeout in seconds (overrides config)
            max_retries: Retries after the first attempt (overrides config)
            retry_delay: Seconds between attempts (overrides config)
            transport: Optional httpx transport, used to stub the network
        """
        self.config = config or get_settings().arxiv_api

        self.timeout = timeout if timeout is not None else self.config.timeout
        self.max_retries = max_retries if max_retries is not None else self.config.max_retries
        self.retry_delay = retry_delay if retry_delay is not None else self.config.retry_delay

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
            transport=transport,
        )

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _make_request(self, query_params: Dict[str, Any]) -> httpx.Response:
        """
        GET the search endpoint, retrying transient failures.

        Args:
            query_params: Query string parameters

        Returns:
            Successful HTTP response

        Raises:
            NetworkError: For timeouts, transport errors, 429 and 5xx after all retries
            ArxivAPIError: For other 4xx responses (not retried)
        """
        url = self.config.base_url
        log_api_request(url, params=query_params)

        async def _request() -> httpx.Response:
            start_time = time.monotonic()
            try:
                response = await self._client.get(url, params=query_params)
            except httpx.TransportError as e:
                raise NetworkError(f"Request failed ({type(e).__name__}): {e}", original_error=e)

            log_api_response(str(response.url), response.status_code, time.monotonic() - start_time)

            if response.status_code == 429 or response.status_code >= 500:
                raise NetworkError(f"Server error: {response.status_code}")
            if response.status_code >= 400:
                raise ArxivAPIError(
                    f"Client error: {response.status_code}",
                    status_code=response.status_code,
                    response_text=response.text[:500]
                )
            return response

        return await fetch_with_retry(_request, self.max_retries, self.retry_delay)

    async def search_papers(self, params: SearchParams) -> SearchResult:
        """
        Search for papers on arXiv.

        Args:
            params: Search parameters with an arXiv query expression

        Returns:
            SearchResult containing papers and metadata

        Raises:
            ValidationError: If max_results exceeds the configured limit
            SearchError: If the request or the response parsing fails
        """
        if params.max_results > self.config.max_results_limit:
            raise ValidationError(
                f"max_results cannot exceed {self.config.max_results_limit}",
                field="max_results",
                value=params.max_results
            )

        query = params.query.replace('\n', ' ').replace('\r', ' ')

        query_params: Dict[str, Any] = {
            'search_query': query,
            'start': params.start,
            'max_results': params.max_results,
        }
        if params.sort_by:
            query_params['sortBy'] = params.sort_by
        if params.sort_order:
            query_params['sortOrder'] = params.sort_order

        try:
            response = await self._make_request(query_params)
            return normalize_feed(
                response.text,
                query=query,
                pdf_base_url=self.config.pdf_base_url,
                abs_base_url=self.config.abs_base_url,
            )
        except (ArxivSearchError, httpx.HTTPError) as e:
            log_error(e, context={'query': query})
            cause = e.message if isinstance(e, ArxivSearchError) else str(e)
            raise SearchError(f"Failed to search arXiv: {cause}", query=query, cause=e) from e

    async def get_paper_by_id(self, arxiv_id: str) -> Optional[ArxivPaper]:
        """
        Get a specific paper by its arXiv ID.

        Args:
            arxiv_id: The arXiv identifier

        Returns:
            ArxivPaper if found, None otherwise

        Raises:
            SearchError: If the lookup itself fails
        """
        params = SearchParams(query=f"id:{arxiv_id}", max_results=1)
        try:
            result = await self.search_papers(params)
        except SearchError as e:
            raise SearchError(
                f"Failed to fetch paper {arxiv_id}: {e.message}",
                query=params.query,
                cause=e.cause
            ) from e

        if not result.papers:
            logger.info(f"No paper found with arXiv ID {arxiv_id}")
            return None
        return result.papers[0]

    async def search_natural_language(
        self,
        text: str,
        max_results: Optional[int] = None,
        sort_by: Optional[SortBy] = None,
        sort_order: Optional[SortOrder] = None,
        start: int = 0,
    ) -> SearchResult:
        """
        Interpret a natural-language request and run it against arXiv.

        A result count named in the text ("top 5") takes precedence over
        `max_results`; sort options always come from the caller.

        Args:
            text: Natural-language request
            max_results: Caller's result count (defaults to config)
            sort_by: Sort field
            sort_order: Sort direction
            start: Pagination offset

        Returns:
            SearchResult for the built arXiv query

        Raises:
            SearchError: If the search fails
        """
        intent = parse_query(text)
        arxiv_query = build_arxiv_query(intent)

        limit = self.config.max_results_limit
        requested = intent.max_results or max_results or self.config.default_max_results
        if requested > limit:
            logger.warning(f"Limiting max_results from {requested} to {limit}")
            requested = limit

        if intent.date_range:
            logger.info(f"Date constraint recognized but not sent to arXiv: {intent.date_range.model_dump(exclude_none=True)}")

        logger.info(f"Built arXiv query '{arxiv_query}' from '{text}'")
        params = SearchParams(
            query=arxiv_query,
            max_results=requested,
            start=start,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return await self.search_papers(params)
