"""Unit test fixtures: on-disk project layouts and in-memory snapshots"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from docsearch.search.store import SearchIndex


def write_raw_index(
    project_dir: Path,
    filenames: List[str],
    titles: Optional[List[str]] = None,
    terms: Optional[Dict[str, Any]] = None,
    titleterms: Optional[Dict[str, Any]] = None,
    alltitles: Optional[Dict[str, Any]] = None,
    wrapper: str = "Search.setIndex",
) -> Path:
    """Write a Sphinx-style searchindex.js into project_dir"""
    project_dir.mkdir(parents=True, exist_ok=True)
    payload = {
        "docnames": [f.rsplit(".", 1)[0] for f in filenames],
        "filenames": filenames,
        "titles": titles if titles is not None else [f.rsplit(".", 1)[0] for f in filenames],
        "terms": terms or {},
        "titleterms": titleterms or {},
        "alltitles": alltitles or {},
        "envversion": {"sphinx": 61},
    }
    path = project_dir / "searchindex.js"
    path.write_text(f"{wrapper}({json.dumps(payload)})", encoding="utf-8")
    return path


def make_snapshot(
    documents: Dict[str, str],
    terms: Optional[Dict[str, List[str]]] = None,
    titleterms: Optional[Dict[str, List[str]]] = None,
    alltitles: Optional[Dict[str, List[Dict[str, Any]]]] = None,
) -> Dict[str, Any]:
    """
    Build a version "1" snapshot dict.

    Args:
        documents: doc id ("proj:0") → title; projects are derived from ids
    """
    project_counts: Dict[str, int] = {}
    docs = []
    for doc_id, title in documents.items():
        project, local = doc_id.split(":")
        project_counts[project] = project_counts.get(project, 0) + 1
        docs.append({
            "id": doc_id,
            "project": project,
            "filename": f"page{local}.rst",
            "title": title,
            "url": f"/{project}/page{local}.html",
        })

    return {
        "version": "1",
        "generatedAt": "2025-01-01T00:00:00.000Z",
        "projects": [
            {
                "id": project,
                "basePath": f"/{project}",
                "isExternal": False,
                "docCount": count,
                "indexedAt": "2025-01-01T00:00:00.000Z",
                "suggestedLinks": [],
            }
            for project, count in project_counts.items()
        ],
        "documents": docs,
        "terms": terms or {},
        "titleterms": titleterms or {},
        "alltitles": alltitles or {},
    }


@pytest.fixture
def raw_index_writer():
    """write_raw_index as a fixture (conftest modules are not importable)"""
    return write_raw_index


@pytest.fixture
def snapshot_factory():
    """Factory returning a SearchIndex built from make_snapshot arguments"""
    def factory(*args, **kwargs) -> SearchIndex:
        return SearchIndex.from_snapshot(make_snapshot(*args, **kwargs))
    return factory


@pytest.fixture
def docs_index() -> SearchIndex:
    """Two projects, five documents, overlapping vocabulary"""
    return SearchIndex.from_snapshot(make_snapshot(
        documents={
            "proj:0": "Neural Network Classification",
            "proj:1": "Quantum Circuits",
            "proj:2": "Getting Started",
            "other:0": "Quantum Kernels",
            "other:1": "Circuit Library",
        },
        terms={
            "quantum": ["other:0", "other:1", "proj:1"],
            "circuit": ["other:1", "proj:1"],
            "neural": ["proj:0"],
            "kernel": ["other:0"],
            "instal": ["proj:2"],
            "document": ["other:0", "other:1", "proj:0", "proj:1", "proj:2"],
        },
        titleterms={
            "neural": ["proj:0"],
            "network": ["proj:0"],
            "classif": ["proj:0"],
            "quantum": ["other:0", "proj:1"],
            "circuit": ["other:1", "proj:1"],
            "kernel": ["other:0"],
            "start": ["proj:2"],
            "librari": ["other:1"],
        },
        alltitles={
            "Quantum Circuits": [{"docId": "proj:1", "anchor": None}],
            "Building a circuit": [
                {"docId": "proj:1", "anchor": "building-a-circuit"},
                {"docId": "other:1", "anchor": "building"},
            ],
            "Installation": [{"docId": "proj:2", "anchor": "installation"}],
        },
    ))


@pytest.fixture
def docs_tree(tmp_path):
    """
    data/ and public/ directories with:
    - alpha: local site (public/alpha/index.html), two documents
    - beta: external site via projectInfo.json, one document
    - gamma: directory without searchindex.js (skipped)
    """
    data_dir = tmp_path / "data"
    public_dir = tmp_path / "public"

    write_raw_index(
        data_dir / "alpha",
        filenames=["index.rst", "guide/circuits.rst"],
        titles=["Alpha <em>Docs</em>", "Circuits &amp; Gates"],
        terms={"circuit": [0, 1], "gate": 1, "constructor": 0},
        titleterms={"circuit": 1, "alpha": 0},
        alltitles={
            "Circuits & Gates": [[1, ""]],
            "Getting started": [[0, "getting-started"]],
        },
    )
    (public_dir / "alpha").mkdir(parents=True)
    (public_dir / "alpha" / "index.html").write_text("<html></html>", encoding="utf-8")

    write_raw_index(
        data_dir / "beta",
        filenames=["tutorials/intro.md"],
        titles=["Intro"],
        terms={"circuit": 0, "__proto__": 0},
        titleterms={"intro": 0},
        alltitles={"Getting started": [[0, "start"]]},
    )
    (data_dir / "beta" / "projectInfo.json").write_text(json.dumps({
        "externalBaseUrl": "https://docs.example.org/beta/",
        "externalDocsPath": "/stable/",
        "suggestedLinks": [
            {"title": "Tutorials", "path": "tutorials/index.html", "subtitle": "Learn by doing"},
        ],
    }), encoding="utf-8")

    (data_dir / "gamma").mkdir(parents=True)

    return data_dir, public_dir
