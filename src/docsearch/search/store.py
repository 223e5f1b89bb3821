"""
Read-only inverted-index store loaded from the combined snapshot.

The snapshot is loaded once at process start (see main.lifespan) and the
resulting SearchIndex is passed explicitly to the engine. Every view it
exposes is immutable (tuples, frozen dataclasses, MappingProxyType), so a
single instance can be shared by concurrent queries without locking.

A missing snapshot or one with the wrong schema version is fatal:
serving without it would silently return empty results.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

SUPPORTED_VERSION = "1"


class SnapshotError(RuntimeError):
    """Snapshot missing, unreadable or incompatible"""


@dataclass(frozen=True)
class QuickLink:
    """A project quick-link as loaded from the snapshot"""

    title: str
    url: str
    subtitle: str = ""


@dataclass(frozen=True)
class ProjectMeta:
    """One indexed project as recorded in the snapshot"""
    id: str
    base_path: str
    is_external: bool
    doc_count: int
    indexed_at: str
    suggested_links: Tuple[QuickLink, ...] = ()


@dataclass(frozen=True)
class DocumentRecord:
    id: str
    project: str
    filename: str
    title: str
    url: str


@dataclass(frozen=True)
class TitleEntry:
    """Section heading occurrence: document plus optional in-page anchor"""
    doc_id: str
    anchor: Optional[str] = None


_EMPTY: Tuple[str, ...] = ()


class SearchIndex:
    """
    Immutable search index.

    Attributes:
        version: Snapshot schema version
        generated_at: Snapshot generation timestamp
        projects: Projects in snapshot order
        documents: Document lookup by namespaced ID
        terms: Body-term inverted index (term → sorted doc IDs)
        titleterms: Title-term inverted index (term → sorted doc IDs)
        alltitles: Section heading → occurrences
        total_docs: Number of documents (used for IDF)
        term_keys / title_term_keys: Key lists scanned by the fuzzy matcher
    """

    def __init__(
        self,
        version: str,
        generated_at: str,
        projects: Tuple[ProjectMeta, ...],
        documents: Mapping[str, DocumentRecord],
        terms: Mapping[str, Tuple[str, ...]],
        titleterms: Mapping[str, Tuple[str, ...]],
        alltitles: Mapping[str, Tuple[TitleEntry, ...]],
    ):
        self.version = version
        self.generated_at = generated_at
        self.projects = tuple(projects)
        self.documents = MappingProxyType(dict(documents))
        self.terms = MappingProxyType(dict(terms))
        self.titleterms = MappingProxyType(dict(titleterms))
        self.alltitles = MappingProxyType(dict(alltitles))
        self.total_docs = len(self.documents)
        self.term_keys = tuple(self.terms)
        self.title_term_keys = tuple(self.titleterms)
        self._projects_by_id = MappingProxyType({p.id: p for p in self.projects})

    def __repr__(self) -> str:
        return (
            f"SearchIndex(version={self.version!r}, projects={len(self.projects)}, "
            f"documents={self.total_docs}, terms={len(self.terms)})"
        )

    @classmethod
    def from_snapshot(cls, snapshot: Dict[str, Any]) -> "SearchIndex":
        """
        Build an index from a parsed snapshot dict.

        Raises:
            SnapshotError: Unsupported version or malformed structure
        """
        version = snapshot.get("version") if isinstance(snapshot, dict) else None
        if version != SUPPORTED_VERSION:
            raise SnapshotError(
                f"Unsupported schema version {version!r}. Expected {SUPPORTED_VERSION!r}."
            )

        try:
            projects = tuple(
                ProjectMeta(
                    id=p["id"],
                    base_path=p["basePath"],
                    is_external=bool(p.get("isExternal", False)),
                    doc_count=int(p["docCount"]),
                    indexed_at=p.get("indexedAt", ""),
                    suggested_links=tuple(
                        QuickLink(l["title"], l["url"], l.get("subtitle", ""))
                        for l in p.get("suggestedLinks", [])
                    ),
                )
                for p in snapshot["projects"]
            )
            documents = {
                d["id"]: DocumentRecord(d["id"], d["project"], d["filename"], d["title"], d["url"])
                for d in snapshot["documents"]
            }
            terms = {term: tuple(ids) for term, ids in snapshot["terms"].items()}
            titleterms = {term: tuple(ids) for term, ids in snapshot["titleterms"].items()}
            alltitles = {
                title: tuple(TitleEntry(e["docId"], e.get("anchor")) for e in entries)
                for title, entries in snapshot["alltitles"].items()
            }
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise SnapshotError(f"Malformed snapshot: {e!r}") from e

        return cls(
            version=version,
            generated_at=snapshot.get("generatedAt", ""),
            projects=projects,
            documents=documents,
            terms=terms,
            titleterms=titleterms,
            alltitles=alltitles,
        )

    def get_project(self, project_id: str) -> Optional[ProjectMeta]:
        return self._projects_by_id.get(project_id)

    def get_document(self, doc_id: str) -> Optional[DocumentRecord]:
        return self.documents.get(doc_id)

    def get_term_docs(self, term: str) -> Tuple[str, ...]:
        """Body-text postings for a term (empty tuple when absent)"""
        return self.terms.get(term, _EMPTY)

    def get_title_term_docs(self, term: str) -> Tuple[str, ...]:
        """Heading postings for a term (empty tuple when absent)"""
        return self.titleterms.get(term, _EMPTY)


def load_search_index(path: Union[str, Path]) -> SearchIndex:
    """
    Load the combined snapshot from disk.

    Args:
        path: Path to combined-searchindex.json

    Raises:
        SnapshotError: File missing, not valid JSON, or incompatible schema
    """
    path = Path(path)
    if not path.exists():
        raise SnapshotError(
            f"Combined search index not found at {path}. "
            f"Run 'docsearch build-index' to generate it."
        )

    try:
        snapshot = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SnapshotError(f"Could not read combined search index at {path}: {e}") from e

    index = SearchIndex.from_snapshot(snapshot)
    logger.info(
        f"Loaded search index from {path}: {len(index.projects)} projects, "
        f"{index.total_docs} documents, {len(index.terms)} terms, "
        f"{len(index.titleterms)} title terms, {len(index.alltitles)} section titles"
    )
    return index
