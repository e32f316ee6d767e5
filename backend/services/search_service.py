"""Web search with model-assisted intent classification and summarization."""
import logging
from typing import Dict, Optional

import httpx

from models.search import SearchResponse
from services.llm_client import LLMClient
from services.prompt_formatter import build_intent_prompt, build_summary_prompt
from services.result_extractor import ResultExtractor
from config import SEARCH_URL, SEARCH_HEADERS, SEARCH_TIMEOUT

logger = logging.getLogger(__name__)


class SearchError(Exception):
    """Search failure carrying a fixed, user-safe message."""

    NO_RESULTS = "NO_RESULTS"
    FETCH_FAILED = "FETCH_FAILED"
    TIMEOUT = "TIMEOUT"

    def __init__(self, message: str, code: str):
        self.code = code
        self.message = message
        super().__init__(message)


NO_RESULTS_MESSAGE = "No search results found"
FETCH_FAILED_MESSAGE = "Failed to fetch search results. Please try again later."
TIMEOUT_MESSAGE = "Search timed out. Please try again later."


class WebSearchService:
    """Queries the search engine and asks the model to interpret the results."""

    def __init__(
        self,
        llm_client: LLMClient,
        extractor: Optional[ResultExtractor] = None,
        search_url: str = SEARCH_URL,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = SEARCH_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the search service.

        Args:
            llm_client: Completion client for intent and summary prompts
            extractor: Result extractor (defaults to the DuckDuckGo extractor)
            search_url: Results page endpoint, queried with ``?q=``
            headers: Request headers; the engine strips results for unknown clients
            timeout: Fetch timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.llm_client = llm_client
        self.extractor = extractor or ResultExtractor()
        self.search_url = search_url
        self.headers = dict(headers or SEARCH_HEADERS)
        self.timeout = timeout
        self._transport = transport
        logger.info(f"WebSearchService initialized with {search_url}")

    async def search(self, query: str) -> SearchResponse:
        """
        Run a search.

        1. Classify intent with the model (a failed completion is kept as-is)
        2. Fetch and parse the results page
        3. Fail if nothing was extracted
        4. Summarize the results with the model

        Args:
            query: Free-text search query

        Returns:
            SearchResponse with intent, up to five results and analysis

        Raises:
            SearchError: No results, fetch/parse failure or timeout
        """
        if not query or not query.strip():
            logger.warning("Empty search query provided")
            raise SearchError(NO_RESULTS_MESSAGE, SearchError.NO_RESULTS)

        query = query.strip()
        logger.info(f"Searching: {query[:100]}")

        intent = await self.llm_client.complete(build_intent_prompt(query))

        try:
            document = await self._fetch(query)
            results = self.extractor.extract(document)
        except httpx.TimeoutException as e:
            logger.error(f"Search fetch timed out for {query!r}: {e}", exc_info=True)
            raise SearchError(TIMEOUT_MESSAGE, SearchError.TIMEOUT) from e
        except Exception as e:
            logger.error(f"Search error for {query!r}: {e}", exc_info=True)
            raise SearchError(FETCH_FAILED_MESSAGE, SearchError.FETCH_FAILED) from e

        if not results:
            logger.warning(f"No search results found for {query!r}")
            raise SearchError(NO_RESULTS_MESSAGE, SearchError.NO_RESULTS)

        analysis = await self.llm_client.complete(build_summary_prompt(results))

        logger.info(f"Search returned {len(results)} results for {query[:100]!r}")
        return SearchResponse(intent=intent, results=results, analysis=analysis)

    async def _fetch(self, query: str) -> str:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=self.headers,
            follow_redirects=True,
            transport=self._transport
        ) as client:
            response = await client.get(self.search_url, params={"q": query})
            response.raise_for_status()
            return response.text
