#!/usr/bin/env python
"""Interactive nearest-neighbour lookup over word2vec files.

Usage:
    python -m scripts.query_neighbors data/en.vec -k 10
    python -m scripts.query_neighbors data/en.vec --target data/ja.vec

Each line read from stdin is split on spaces. The vectors of all known
words are summed into one query vector, and the k most cosine-similar
vectors of the target space (the source space when no target is given)
are printed. With aligned multilingual vectors this performs
cross-lingual lookup.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import TextIO

from vecspace.codec.parser import Word2VecParser
from vecspace.config import Settings, get_settings
from vecspace.exceptions import DimensionMismatchError, VecSpaceError
from vecspace.logging_config import get_logger, setup_logging
from vecspace.search.topk import cosine_scorer
from vecspace.space.store import VecSpace
from vecspace.vectors.models import OwnedVector

logger = get_logger(__name__)


def load_space(
    path: Path,
    binary: bool,
    header: bool,
    index_terms: bool,
) -> VecSpace:
    """Load a word2vec file with command line overrides applied."""
    parser = Word2VecParser.from_settings().index_terms(index_terms)
    if binary:
        parser = parser.binary()
    if not header:
        parser = parser.no_header()

    start = time.perf_counter()
    space = parser.parse_file(path)
    logger.info(
        f"Loaded {len(space)} vectors from {path} in {time.perf_counter() - start:.2f}s"
    )
    return space


def compose_query(space: VecSpace, text: str) -> OwnedVector | None:
    """Sum the vectors of all words of ``text`` found in ``space``.

    Unknown words are ignored. Returns None when no word is known.
    """
    found = [space.find_term(word) for word in text.split(" ") if word]
    known = [vec for vec in found if vec is not None]
    if not known:
        return None

    query = known[0].to_owned()
    for vec in known[1:]:
        query = query + vec
    return query


def run_loop(
    source: VecSpace,
    target: VecSpace,
    k: int,
    stdin: TextIO,
    stdout: TextIO,
) -> None:
    """Answer one query per input line until stdin is exhausted."""
    for line in stdin:
        text = line.strip()
        if not text:
            continue

        query = compose_query(source, text)
        if query is None:
            print(f"Term {text!r} not found", file=stdout)
            continue

        start = time.perf_counter()
        try:
            hits = target.top_k(k, cosine_scorer(query))
        except DimensionMismatchError as e:
            print(f"Cannot search for {text!r}: {e.message}", file=stdout)
            continue
        duration = time.perf_counter() - start

        print(f"Top k={k} for {text!r} (in: {duration * 1000:.2f}ms):", file=stdout)
        for hit in hits:
            print(f"- {hit.term} ({hit.score:.6f})", file=stdout)
        print(file=stdout)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    """Command line options, with defaults taken from ``settings``."""
    parser = argparse.ArgumentParser(
        description="Interactive nearest-neighbour lookup",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "source",
        type=Path,
        help="word2vec file used to look up query words",
    )
    parser.add_argument(
        "--target",
        type=Path,
        default=None,
        help="word2vec file searched for neighbours (defaults to source)",
    )
    parser.add_argument(
        "-k",
        type=int,
        default=settings.search.default_k,
        help="Number of neighbours to print",
    )
    parser.add_argument(
        "--binary",
        action=argparse.BooleanOptionalAction,
        default=settings.codec.binary,
        help="Files use the binary format",
    )
    parser.add_argument(
        "--header",
        action=argparse.BooleanOptionalAction,
        default=settings.codec.header,
        help="Files start with a 'count dimension' header line",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override",
    )
    return parser


def main() -> None:
    """Main entry point."""
    args = build_parser(get_settings()).parse_args()
    setup_logging(level=args.log_level)

    try:
        source = load_space(args.source, args.binary, args.header, index_terms=True)
        target = source
        if args.target is not None:
            target = load_space(args.target, args.binary, args.header, index_terms=False)
    except VecSpaceError as e:
        logger.error(f"Failed to load vectors: {e.message}", extra={"details": e.details})
        sys.exit(1)

    if target.dim() != source.dim():
        logger.error(
            f"Target has {target.dim()} dimensions but source has {source.dim()}"
        )
        sys.exit(1)

    run_loop(source, target, args.k, sys.stdin, sys.stdout)


if __name__ == "__main__":
    main()
