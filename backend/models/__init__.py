"""Data models for Yapper Bot."""
from .conversation import Turn, DurableLogEntry, PersistResult
from .search import SearchResult, SearchResponse, NO_DESCRIPTION

__all__ = [
    "Turn",
    "DurableLogEntry",
    "PersistResult",
    "SearchResult",
    "SearchResponse",
    "NO_DESCRIPTION",
]
