"""Extraction of ranked results from DuckDuckGo's HTML results page."""
import logging
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup

from models.search import SearchResult, NO_DESCRIPTION
from config import MAX_SEARCH_RESULTS

logger = logging.getLogger(__name__)


class ResultExtractor:
    """
    Turns a results document into SearchResult objects.

    All knowledge of the page's markup lives here, so a change upstream only
    touches the selectors below.
    """

    CONTAINER_SELECTOR = ".result"
    TITLE_SELECTOR = ".result__title"
    URL_SELECTOR = ".result__url"
    SNIPPET_SELECTOR = ".result__snippet"

    def __init__(self, max_results: int = MAX_SEARCH_RESULTS):
        self.max_results = max_results

    def extract(self, document: str) -> List[SearchResult]:
        """
        Extract results from the first `max_results` containers, in page order.

        Containers lacking a title or a link are skipped; they still count
        towards the container limit.

        Args:
            document: Raw HTML of the results page

        Returns:
            Up to `max_results` results, possibly empty
        """
        soup = BeautifulSoup(document, "html.parser")
        containers = soup.select(self.CONTAINER_SELECTOR)[:self.max_results]

        results = []
        for container in containers:
            title = self._text(container, self.TITLE_SELECTOR)
            url = self._href(container)
            if not title or not url:
                logger.debug("Skipping result container without title or url")
                continue

            results.append(SearchResult(
                title=title,
                url=url,
                snippet=self._text(container, self.SNIPPET_SELECTOR) or NO_DESCRIPTION
            ))

        logger.debug(f"Extracted {len(results)} results from {len(containers)} containers")
        return results

    @staticmethod
    def _text(container, selector: str) -> str:
        node = container.select_one(selector)
        return node.get_text(" ", strip=True) if node else ""

    def _href(self, container) -> Optional[str]:
        node = container.select_one(self.URL_SELECTOR)
        if node is None:
            return None
        href = (node.get("href") or "").strip()
        return resolve_url(href) if href else None


def resolve_url(href: str) -> str:
    """
    Normalize a result link.

    DuckDuckGo wraps targets as ``//duckduckgo.com/l/?uddg=<encoded url>``;
    the wrapped target is returned when present.
    """
    if href.startswith("//"):
        href = f"https:{href}"

    parsed = urlparse(href)
    if parsed.netloc.endswith("duckduckgo.com") and parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg")
        if target and target[0]:
            return target[0]
    return href
