"""
Parser for per-project Sphinx search indexes (searchindex.js).

A Sphinx build writes exactly one call of the form:

    Search.setIndex({"docnames": [...], "filenames": [...], ...})

We strip the wrapper with a regex (never evaluate the file) and parse the
inner object as JSON.

Postings are normalized here, at the parsing boundary:
- terms / titleterms: bare index or list of indices → List[int]
- alltitles: [[index, anchor], ...] → List[(index, anchor or None)]
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

RAW_INDEX_FILENAME = "searchindex.js"

# Dotted identifier, "(", a JSON object, ")", optional ";"
_WRAPPER_PATTERN = re.compile(
    r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*\(\s*(\{.*\})\s*\)\s*;?$",
    re.DOTALL,
)

Postings = Dict[str, List[int]]
SectionPostings = Dict[str, List[Tuple[int, Optional[str]]]]


class FormatError(ValueError):
    """Raised when a raw index file does not match the expected wrapper/payload"""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Unexpected {RAW_INDEX_FILENAME} format in {path}: {reason}")


@dataclass
class RawIndex:
    """One project's search index after parsing and posting normalization"""
    filenames: List[str]
    titles: List[str]
    terms: Postings = field(default_factory=dict)
    titleterms: Postings = field(default_factory=dict)
    alltitles: SectionPostings = field(default_factory=dict)

    @property
    def doc_count(self) -> int:
        return len(self.filenames)

    def title_for(self, index: int) -> str:
        """Raw title for a local document index ("" when titles is short)"""
        return self.titles[index] if index < len(self.titles) else ""


def to_index_list(value: Union[int, List[int]]) -> List[int]:
    """
    Normalize a Sphinx posting to a list of local document indices.

    Sphinx stores single-document terms as a bare number and
    multi-document terms as an array.

    Examples:
        >>> to_index_list(3)
        [3]
        >>> to_index_list([0, 4])
        [0, 4]
    """
    if isinstance(value, list):
        return [int(v) for v in value]
    return [int(value)]


def _normalize_postings(path: Path, name: str, raw: Any) -> Postings:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise FormatError(path, f"'{name}' must be an object")

    postings: Postings = {}
    for term, value in raw.items():
        try:
            postings[term] = to_index_list(value)
        except (TypeError, ValueError):
            raise FormatError(path, f"'{name}' entry {term!r} is not an index or index list")
    return postings


def _normalize_sections(path: Path, raw: Any) -> SectionPostings:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise FormatError(path, "'alltitles' must be an object")

    sections: SectionPostings = {}
    for title, entries in raw.items():
        if not isinstance(entries, list):
            raise FormatError(path, f"'alltitles' entry {title!r} must be a list of [index, anchor] pairs")
        normalized = []
        for entry in entries:
            try:
                doc_index, anchor = entry
                normalized.append((int(doc_index), anchor or None))
            except (TypeError, ValueError):
                raise FormatError(path, f"'alltitles' entry {title!r} is not [index, anchor]")
        sections[title] = normalized
    return sections


def _check_index_range(path: Path, raw: RawIndex) -> None:
    """Every posting must reference one of the listed filenames"""
    referenced = [
        (name, key, indices)
        for name, postings in (("terms", raw.terms), ("titleterms", raw.titleterms))
        for key, indices in postings.items()
    ]
    referenced.extend(
        ("alltitles", title, [i for i, _ in entries])
        for title, entries in raw.alltitles.items()
    )
    for name, key, indices in referenced:
        for i in indices:
            if not 0 <= i < raw.doc_count:
                raise FormatError(
                    path,
                    f"'{name}' entry {key!r} references document {i}, "
                    f"but only {raw.doc_count} filenames are listed",
                )


def parse_raw_index_text(text: str, path: Union[str, Path] = "<string>") -> RawIndex:
    """
    Parse the contents of a searchindex.js file.

    Args:
        text: Raw file contents
        path: Source path, used in error messages only

    Returns:
        RawIndex with normalized postings

    Raises:
        FormatError: Wrapper does not match, payload is not valid JSON,
            required fields are missing/mistyped, or a posting references
            a document index outside filenames
    """
    path = Path(path)
    match = _WRAPPER_PATTERN.match(text.strip())
    if not match:
        raise FormatError(path, "expected a single call like Search.setIndex({...})")

    try:
        payload = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise FormatError(path, f"payload is not valid JSON ({e})")

    if not isinstance(payload, dict):
        raise FormatError(path, "payload must be a JSON object")

    filenames = payload.get("filenames")
    if not isinstance(filenames, list):
        raise FormatError(path, "'filenames' must be a list")

    titles = payload.get("titles") or []
    if not isinstance(titles, list):
        raise FormatError(path, "'titles' must be a list")

    raw = RawIndex(
        filenames=[str(f) for f in filenames],
        titles=[str(t) for t in titles],
        terms=_normalize_postings(path, "terms", payload.get("terms")),
        titleterms=_normalize_postings(path, "titleterms", payload.get("titleterms")),
        alltitles=_normalize_sections(path, payload.get("alltitles")),
    )
    _check_index_range(path, raw)
    return raw


def parse_raw_index(path: Union[str, Path]) -> RawIndex:
    """Read and parse a searchindex.js file from disk"""
    path = Path(path)
    raw = parse_raw_index_text(path.read_text(encoding="utf-8"), path)
    logger.debug(
        f"Parsed {path}: {raw.doc_count} documents, {len(raw.terms)} terms, "
        f"{len(raw.titleterms)} title terms, {len(raw.alltitles)} section titles"
    )
    return raw
