"""
In-memory search telemetry.

Two bounded ring buffers (one per event type) keep the most recent events;
the oldest entry is dropped when a buffer is full. History is lost on
restart. Telemetry is reported, never fed back into ranking.
"""

import threading
from collections import Counter, deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Union

DEFAULT_CAPACITY = 1000
SUMMARY_RECENT = 10
SUMMARY_TOP_QUERIES = 10


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class SearchPerformedEvent:
    timestamp: str
    query: str
    project: Optional[str]
    result_count: int
    event: str = "search_performed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event,
            "timestamp": self.timestamp,
            "query": self.query,
            "project": self.project,
            "resultCount": self.result_count,
        }


@dataclass(frozen=True)
class ResultSelectedEvent:
    timestamp: str
    query: str
    doc_id: str
    rank: int  # 0-based position in the result list
    event: str = "result_selected"

    def to_dict(self, one_based: bool = False) -> Dict[str, Any]:
        return {
            "event": self.event,
            "timestamp": self.timestamp,
            "query": self.query,
            "docId": self.doc_id,
            "rank": self.rank + 1 if one_based else self.rank,
        }


TelemetryEvent = Union[SearchPerformedEvent, ResultSelectedEvent]


class Telemetry:
    """Bounded store for search_performed and result_selected events"""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._searches: Deque[SearchPerformedEvent] = deque(maxlen=capacity)
        self._selections: Deque[ResultSelectedEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record_search_performed(self, query: str, project: Optional[str], result_count: int) -> None:
        with self._lock:
            self._searches.append(SearchPerformedEvent(_now(), query, project, result_count))

    def record_result_selected(self, query: str, doc_id: str, rank: int) -> None:
        with self._lock:
            self._selections.append(ResultSelectedEvent(_now(), query, doc_id, rank))

    def events(self) -> List[TelemetryEvent]:
        """All retained events, oldest first"""
        with self._lock:
            combined: List[TelemetryEvent] = [*self._searches, *self._selections]
        return sorted(combined, key=lambda e: e.timestamp)

    def summary(self) -> Dict[str, Any]:
        """
        Counts and recent activity for dashboards.

        Returns:
            Dict with totalSearches, totalSelections, recentSearches (last 10),
            selectEvents (ranks converted to 1-based) and topQueries (top 10)
        """
        with self._lock:
            searches = list(self._searches)
            selections = list(self._selections)

        query_counts = Counter(e.query for e in searches)
        return {
            "totalSearches": len(searches),
            "totalSelections": len(selections),
            "recentSearches": [e.to_dict() for e in searches[-SUMMARY_RECENT:]],
            "selectEvents": [e.to_dict(one_based=True) for e in selections],
            "topQueries": [
                {"query": query, "count": count}
                for query, count in query_counts.most_common(SUMMARY_TOP_QUERIES)
            ],
        }
