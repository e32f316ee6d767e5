"""Web search data models."""
from dataclasses import dataclass, field, asdict
from typing import Dict, List

NO_DESCRIPTION = "No description available"


@dataclass(frozen=True)
class SearchResult:
    """One ranked result extracted from the search engine page."""
    title: str
    url: str
    snippet: str = NO_DESCRIPTION

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class SearchResponse:
    """
    Aggregate returned by a web search.

    Attributes:
        intent: One-sentence classification of what the user is looking for
        results: Up to five results, in the engine's rank order
        analysis: Model-written summary of the results
    """
    intent: str
    results: List[SearchResult] = field(default_factory=list)
    analysis: str = ""
