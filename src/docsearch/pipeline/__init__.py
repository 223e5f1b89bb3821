"""
Offline index-merge pipeline.

Components:
- raw_index: parse a project's searchindex.js (Search.setIndex({...}))
- projects: resolve local vs external base paths and quick-links
- merger: combine all projects into one versioned snapshot
"""

from .raw_index import FormatError, RawIndex, parse_raw_index, parse_raw_index_text
from .projects import ResolvedProject, SuggestedLink, resolve_project
from .merger import SNAPSHOT_VERSION, build_snapshot, merge_indexes, write_snapshot

__all__ = [
    "FormatError",
    "RawIndex",
    "parse_raw_index",
    "parse_raw_index_text",
    "ResolvedProject",
    "SuggestedLink",
    "resolve_project",
    "SNAPSHOT_VERSION",
    "build_snapshot",
    "merge_indexes",
    "write_snapshot",
]
