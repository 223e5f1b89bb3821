#!/usr/bin/env python3
"""
Command-line entry points.

    docsearch build-index [--data-dir data] [--public-dir public] [--output ...]
    docsearch search "quantun circuits" [--project qiskit-nature] [--limit 5]

build-index exits 0 when the snapshot was written or there was nothing to
build, and 1 when a project's searchindex.js is malformed (no snapshot is
written). search exits 2 for an unknown project.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import get_settings
from .highlight import highlight
from .logging_config import setup_logging
from .pipeline.merger import merge_indexes
from .pipeline.raw_index import FormatError
from .search.engine import MAX_SECTIONS_DISPLAYED, ProjectNotFoundError, run_query
from .search.store import SnapshotError, load_search_index
from .search.tokenizer import tokenize_with_raw

logger = logging.getLogger(__name__)


def render_title(title: str, query_words: List[str]) -> str:
    """Title with highlighted query words wrapped in [brackets]"""
    return "".join(
        f"[{segment.text}]" if segment.highlighted else segment.text
        for segment in highlight(title, query_words)
    )


def positive_int(value: str) -> int:
    """argparse type for --limit"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def cmd_build_index(args: argparse.Namespace) -> int:
    try:
        snapshot = merge_indexes(args.data_dir, args.public_dir, args.output)
    except FormatError as e:
        logger.error(f"Aborting merge, no snapshot written: {e}")
        return 1

    if snapshot is None:
        logger.info("Nothing to build")
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    try:
        index = load_search_index(args.index)
    except SnapshotError as e:
        logger.error(str(e))
        return 1

    tokens = tokenize_with_raw(args.query)
    print(f"Query: \"{args.query}\"" + (f"  [project: {args.project}]" if args.project else ""))
    print(f"Tokens: {[t.stem for t in tokens]}")
    print("=" * 60)

    try:
        outcome = run_query(index, args.query, project=args.project, limit=args.limit)
    except ProjectNotFoundError as e:
        logger.error(str(e))
        return 2

    if not outcome.results:
        print("  (no results)")
        return 0

    raw_words = [t.raw for t in tokens]
    for rank, result in enumerate(outcome.results, start=1):
        print(f"  #{rank} [{result.score:.2f}] {render_title(result.title, raw_words)}")
        print(f"       url: {result.url}")
        print(f"       terms: {', '.join(result.matched_terms)}")
        if result.sections:
            titles = [s.title for s in result.sections[:MAX_SECTIONS_DISPLAYED]]
            print(f"       sections: {' | '.join(titles)}")
    print(f"\n{outcome.meta.count} of {outcome.meta.total} results ({outcome.meta.duration_ms:.1f}ms)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(prog="docsearch", description="Federated docs search")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug output on console")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build-index", help="Merge per-project indexes into one snapshot")
    build.add_argument("--data-dir", default=settings.data_dir, help="Directory with one sub-directory per project")
    build.add_argument("--public-dir", default=settings.public_dir, help="Directory with locally rendered sites")
    build.add_argument("--output", default=settings.index_path, help="Snapshot output path")
    build.set_defaults(func=cmd_build_index)

    query = subparsers.add_parser("search", help="Run a query against the snapshot")
    query.add_argument("query", help="Free-text query")
    query.add_argument("--project", default=None, help="Scope results to one project")
    query.add_argument("--limit", type=positive_int, default=5, help="Maximum results (default: 5)")
    query.add_argument("--index", default=settings.index_path, help="Snapshot path")
    query.set_defaults(func=cmd_search)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(
        log_file=settings.log_file,
        console_level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO),
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
