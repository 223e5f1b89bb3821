"""
Query-time search over the combined snapshot.

Components:
- tokenizer: query normalization into (raw, stem) tokens
- stemmer: Porter stemming (matches Sphinx's English index)
- fuzzy: Jaro-Winkler typo tolerance for unmatched stems
- store: immutable SearchIndex loaded once from the snapshot
- engine: IDF-weighted scoring, section and all-tokens bonuses, ranking
"""

from .tokenizer import Token, tokenize, tokenize_with_raw
from .stemmer import stem
from .fuzzy import FuzzyMatch, fuzzy_match
from .store import SearchIndex, SnapshotError, load_search_index
from .engine import (
    DEFAULT_LIMIT,
    ProjectNotFoundError,
    SearchResponse,
    SearchResult,
    SectionMatch,
    run_query,
    search,
)

__all__ = [
    "Token",
    "tokenize",
    "tokenize_with_raw",
    "stem",
    "FuzzyMatch",
    "fuzzy_match",
    "SearchIndex",
    "SnapshotError",
    "load_search_index",
    "DEFAULT_LIMIT",
    "ProjectNotFoundError",
    "SearchResponse",
    "SearchResult",
    "SectionMatch",
    "run_query",
    "search",
]
