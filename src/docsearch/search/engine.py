"""
Query scoring and ranking over the combined inverted index.

Scoring heuristics:
1. Tokenization - lowercase, split on non-word runs, drop stopwords,
   Porter-stem (see tokenizer.py)
2. Exact lookup - each distinct stem is looked up in titleterms
   (weight 3.0) and terms (weight 1.0)
3. IDF weighting - smoothed, always positive:
       idf(n) = ln((totalDocs + 1) / (n + 1)) + 1
4. Fuzzy fallback - if a stem has no exact hit in either index, the closest
   key by Jaro-Winkler (>= 0.88) is used, weight scaled by similarity
5. Section bonus - every section heading containing a stem adds
   2.0 x (distinct stems matched) to each document carrying that heading
6. All-tokens bonus - x1.25 for documents matching every distinct stem,
   only for queries with more than one distinct stem
7. Project scoping - documents outside "<project>:" are never scored

Scoring is a pure function of (index, query, project, limit): all
accumulators are local to the call.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from .fuzzy import fuzzy_match
from .store import SearchIndex
from .tokenizer import tokenize_with_raw

logger = logging.getLogger(__name__)

BODY_WEIGHT = 1.0
TITLE_WEIGHT = 3.0
SECTION_WEIGHT = 2.0
ALL_TOKENS_BONUS = 1.25

DEFAULT_LIMIT = 20

# Sections shown per result by API/CLI callers
MAX_SECTIONS_DISPLAYED = 2


class ProjectNotFoundError(LookupError):
    """Query scoped to a project that is not in the index"""

    def __init__(self, project: str):
        self.project = project
        super().__init__(f'Unknown project "{project}"')


@dataclass
class SectionMatch:
    """Matched section heading within a document (anchor None = page root)"""
    title: str
    anchor: Optional[str]
    contribution: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "anchor": self.anchor}


@dataclass
class SearchResult:
    doc_id: str
    project: str
    title: str
    url: str
    score: float
    matched_terms: List[str]
    sections: List[SectionMatch] = field(default_factory=list)

    def to_dict(self, max_sections: Optional[int] = None) -> Dict[str, Any]:
        sections = self.sections if max_sections is None else self.sections[:max_sections]
        return {
            "docId": self.doc_id,
            "project": self.project,
            "title": self.title,
            "url": self.url,
            "score": self.score,
            "matchedTerms": list(self.matched_terms),
            "sections": [s.to_dict() for s in sections],
        }


@dataclass
class QueryMeta:
    query: str
    project: Optional[str]
    count: int
    total: int
    duration_ms: float


@dataclass
class SearchResponse:
    results: List[SearchResult]
    meta: QueryMeta


def idf(doc_count: int, total_docs: int) -> float:
    """
    Smoothed inverse document frequency.

    Always >= 1 for doc_count <= total_docs, so every match adds weight.

    Examples:
        >>> idf(0, 0)
        1.0
        >>> round(idf(1, 9), 4)
        2.6094
    """
    return math.log((total_docs + 1) / (doc_count + 1)) + 1


def search(
    index: SearchIndex,
    query: str,
    project: Optional[str] = None,
    limit: Optional[int] = DEFAULT_LIMIT,
) -> List[SearchResult]:
    """
    Rank documents against a free-text query.

    Args:
        index: Loaded search index
        query: Raw user query (e.g. "quantun circuits")
        project: Restrict scoring to documents of this project
        limit: Maximum results to return (None = all matches)

    Returns:
        Results sorted by score descending, then title ascending.
        Empty list when the query has no tokens after stopword removal.

    Raises:
        ValueError: limit is given and < 1

    Example:
        >>> search(index, "hamiltonian simulation", project="tket", limit=10)
    """
    if limit is not None and limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    tokens = tokenize_with_raw(query)
    if not tokens:
        return []

    # Distinct stems in query order
    stems = list(dict.fromkeys(token.stem for token in tokens))
    scope_prefix = f"{project}:" if project else None

    scores: Dict[str, float] = {}
    matched: Dict[str, Set[str]] = {}
    sections: Dict[str, List[SectionMatch]] = {}

    def add_score(doc_id: str, weight: float, matched_stems: Iterable[str]) -> bool:
        if scope_prefix and not doc_id.startswith(scope_prefix):
            return False
        scores[doc_id] = scores.get(doc_id, 0.0) + weight
        matched.setdefault(doc_id, set()).update(matched_stems)
        return True

    lookups = (
        (TITLE_WEIGHT, index.get_title_term_docs, index.title_term_keys),
        (BODY_WEIGHT, index.get_term_docs, index.term_keys),
    )

    for stem in stems:
        exact_hits = 0
        for factor, get_docs, _ in lookups:
            doc_ids = get_docs(stem)
            if doc_ids:
                exact_hits += len(doc_ids)
                weight = factor * idf(len(doc_ids), index.total_docs)
                for doc_id in doc_ids:
                    add_score(doc_id, weight, (stem,))

        if exact_hits:
            continue

        for factor, get_docs, keys in lookups:
            match = fuzzy_match(stem, keys)
            if match is None:
                continue
            doc_ids = get_docs(match.key)
            logger.debug(f"Fuzzy match '{stem}' -> '{match.key}' ({match.similarity:.3f})")
            weight = factor * idf(len(doc_ids), index.total_docs) * match.similarity
            for doc_id in doc_ids:
                add_score(doc_id, weight, (stem,))

    for heading, entries in index.alltitles.items():
        heading_lower = heading.lower()
        heading_stems = [stem for stem in stems if stem in heading_lower]
        if not heading_stems:
            continue

        bonus = SECTION_WEIGHT * len(heading_stems)
        for entry in entries:
            if add_score(entry.doc_id, bonus, heading_stems):
                sections.setdefault(entry.doc_id, []).append(
                    SectionMatch(heading, entry.anchor, bonus)
                )

    if len(stems) > 1:
        for doc_id, doc_stems in matched.items():
            if len(doc_stems) == len(stems):
                scores[doc_id] *= ALL_TOKENS_BONUS

    results = []
    for doc_id, score in scores.items():
        doc = index.get_document(doc_id)
        if doc is None:
            logger.debug(f"Skipping posting for unknown document {doc_id}")
            continue

        doc_sections = sections.get(doc_id, [])
        doc_sections.sort(key=lambda s: s.contribution, reverse=True)
        results.append(SearchResult(
            doc_id=doc_id,
            project=doc.project,
            title=doc.title,
            url=doc.url,
            score=score,
            matched_terms=[stem for stem in stems if stem in matched[doc_id]],
            sections=doc_sections,
        ))

    results.sort(key=lambda r: (-r.score, r.title))
    return results if limit is None else results[:limit]


def run_query(
    index: SearchIndex,
    query: str,
    project: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
) -> SearchResponse:
    """
    Execute a search and collect response metadata.

    Args:
        index: Loaded search index
        query: Raw user query
        project: Optional project scope (must exist in the index)
        limit: Maximum results returned (>= 1)

    Returns:
        SearchResponse with truncated results and meta
        (echoed query/project, count, total before truncation, duration)

    Raises:
        ProjectNotFoundError: project is given but not indexed
        ValueError: limit < 1
    """
    start = time.perf_counter()

    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    if project is not None and index.get_project(project) is None:
        raise ProjectNotFoundError(project)

    all_results = search(index, query, project=project, limit=None)
    limited = all_results[:limit]
    duration_ms = (time.perf_counter() - start) * 1000

    logger.debug(
        f"Query '{query}' (project={project}): {len(limited)}/{len(all_results)} results "
        f"in {duration_ms:.1f}ms"
    )
    return SearchResponse(
        results=limited,
        meta=QueryMeta(
            query=query,
            project=project,
            count=len(limited),
            total=len(all_results),
            duration_ms=duration_ms,
        ),
    )
