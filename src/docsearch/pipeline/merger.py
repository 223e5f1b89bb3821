"""
Combine per-project Sphinx indexes into one search snapshot.

Discovers every sub-directory of the data directory, parses its
searchindex.js, remaps local document indices to namespaced IDs
("<projectId>:<localIndex>") and merges terms, titleterms and alltitles
across projects.

Snapshot schema (version "1"):
    {
        "version": "1",
        "generatedAt": "2025-01-01T00:00:00.000Z",
        "projects": [{"id", "basePath", "isExternal", "docCount",
                      "indexedAt", "suggestedLinks"}],
        "documents": [{"id", "project", "filename", "title", "url"}],
        "terms": {"term": ["proj:0", "proj:3"]},
        "titleterms": {"term": ["proj:0"]},
        "alltitles": {"Section Title": [{"docId": "proj:0", "anchor": "intro"}]}
    }

Everything except generatedAt is deterministic for identical inputs:
projects are processed in sorted order and posting lists are sorted.
"""

import json
import logging
import os
import re
import tempfile
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .projects import resolve_project
from .raw_index import RAW_INDEX_FILENAME, Postings, parse_raw_index

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = "1"

_TAG_PATTERN = re.compile(r"<[^>]+>")
_SOURCE_EXTENSION_PATTERN = re.compile(r"\.(rst|txt|md)$")

# Applied in order; &amp; after &lt;/&gt; so "&amp;lt;" decodes to "&lt;"
HTML_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&nbsp;", " "),
)


def strip_html(raw: str) -> str:
    """
    Strip HTML tags and decode a small fixed set of entities.

    Examples:
        >>> strip_html("<code>qiskit_nature</code> &amp; friends")
        'qiskit_nature & friends'
    """
    text = _TAG_PATTERN.sub("", raw)
    for entity, char in HTML_ENTITIES:
        text = text.replace(entity, char)
    return text.strip()


def filename_to_url(docs_path: str, filename: str) -> str:
    """
    Convert a Sphinx source filename to the rendered page URL.

    Examples:
        >>> filename_to_url("/qiskit-nature", "apidocs/qiskit_nature.rst")
        '/qiskit-nature/apidocs/qiskit_nature.html'
    """
    html_path = _SOURCE_EXTENSION_PATTERN.sub(".html", filename)
    return f"{docs_path}/{html_path}"


def _utc_timestamp(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _merge_postings(acc: Dict[str, List[str]], fragment: Postings, project_id: str) -> None:
    for term, indices in fragment.items():
        acc[term].extend(f"{project_id}:{i}" for i in indices)


def discover_projects(data_dir: Path) -> List[str]:
    """Sorted names of all sub-directories of data_dir"""
    if not data_dir.is_dir():
        return []
    return sorted(entry.name for entry in data_dir.iterdir() if entry.is_dir())


def build_snapshot(data_dir: Union[str, Path], public_dir: Union[str, Path]) -> Optional[Dict[str, Any]]:
    """
    Build the combined snapshot from every project under data_dir.

    Args:
        data_dir: Parent directory with one sub-directory per project
        public_dir: Directory with locally rendered sites

    Returns:
        Snapshot dict, or None when no project has a searchindex.js

    Raises:
        FormatError: A project's searchindex.js is malformed (nothing is built)
    """
    data_dir = Path(data_dir)
    public_dir = Path(public_dir)

    project_ids = discover_projects(data_dir)
    if not project_ids:
        logger.warning(f"No project directories found under {data_dir}/")
        return None

    projects = []
    documents = []
    terms: Dict[str, List[str]] = defaultdict(list)
    titleterms: Dict[str, List[str]] = defaultdict(list)
    alltitles: Dict[str, List[Dict[str, Optional[str]]]] = defaultdict(list)

    for project_id in project_ids:
        project_dir = data_dir / project_id
        index_path = project_dir / RAW_INDEX_FILENAME

        if not index_path.exists():
            logger.warning(f"Skipping '{project_id}': no {RAW_INDEX_FILENAME} found")
            continue

        logger.info(f"Processing '{project_id}'...")
        raw = parse_raw_index(index_path)
        resolved = resolve_project(project_id, project_dir, public_dir)
        indexed_at = datetime.fromtimestamp(index_path.stat().st_mtime, tz=timezone.utc)

        projects.append({
            "id": project_id,
            "basePath": resolved.base_path,
            "isExternal": resolved.is_external,
            "docCount": raw.doc_count,
            "indexedAt": _utc_timestamp(indexed_at),
            "suggestedLinks": [link.to_dict() for link in resolved.suggested_links],
        })

        for i, filename in enumerate(raw.filenames):
            documents.append({
                "id": f"{project_id}:{i}",
                "project": project_id,
                "filename": filename,
                "title": strip_html(raw.title_for(i)),
                "url": filename_to_url(resolved.docs_path, filename),
            })

        _merge_postings(terms, raw.terms, project_id)
        _merge_postings(titleterms, raw.titleterms, project_id)

        for title, entries in raw.alltitles.items():
            alltitles[title].extend(
                {"docId": f"{project_id}:{doc_index}", "anchor": anchor}
                for doc_index, anchor in entries
            )

        logger.info(
            f"  {raw.doc_count} documents, {len(raw.terms)} term entries, "
            f"{len(raw.titleterms)} title-term entries"
        )

    if not projects:
        logger.warning(f"No project under {data_dir}/ has a {RAW_INDEX_FILENAME}; nothing to build")
        return None

    # Sorted for reproducible, diff-friendly output; ranking ignores this order
    for postings in (terms, titleterms):
        for doc_ids in postings.values():
            doc_ids.sort()

    return {
        "version": SNAPSHOT_VERSION,
        "generatedAt": _utc_timestamp(datetime.now(timezone.utc)),
        "projects": projects,
        "documents": documents,
        "terms": dict(terms),
        "titleterms": dict(titleterms),
        "alltitles": dict(alltitles),
    }


def write_snapshot(snapshot: Dict[str, Any], output_path: Union[str, Path]) -> Path:
    """
    Write the snapshot as pretty-printed JSON.

    The file is written to a temporary sibling and renamed into place, so
    readers never see a partially written snapshot.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=output_path.parent, prefix=".snapshot-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, output_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return output_path


def merge_indexes(
    data_dir: Union[str, Path],
    public_dir: Union[str, Path],
    output_path: Union[str, Path],
) -> Optional[Dict[str, Any]]:
    """
    Build the snapshot and write it to output_path.

    Returns:
        The written snapshot, or None if there was nothing to build
        (no file is written in that case)
    """
    snapshot = build_snapshot(data_dir, public_dir)
    if snapshot is None:
        return None

    path = write_snapshot(snapshot, output_path)
    logger.info(
        f"Combined search index written to {path}: "
        f"projects={len(snapshot['projects'])}, documents={len(snapshot['documents'])}, "
        f"terms={len(snapshot['terms'])}, titleterms={len(snapshot['titleterms'])}, "
        f"alltitles={len(snapshot['alltitles'])}"
    )
    return snapshot
