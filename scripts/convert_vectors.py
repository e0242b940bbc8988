#!/usr/bin/env python
"""Convert word2vec files between the text and binary formats.

Usage:
    python -m scripts.convert_vectors vectors.bin vectors.vec --from-binary
    python -m scripts.convert_vectors vectors.vec vectors.bin --to-binary
"""

import argparse
import sys
from pathlib import Path

from vecspace.codec.exporter import export_file
from vecspace.codec.models import CodecOptions
from vecspace.codec.parser import Word2VecParser
from vecspace.exceptions import VecSpaceError
from vecspace.logging_config import get_logger, setup_logging
from vecspace.observability.metrics import get_metrics

logger = get_logger(__name__)


def convert(
    source: Path,
    destination: Path,
    from_binary: bool,
    to_binary: bool,
    header: bool = True,
) -> int:
    """Re-encode ``source`` into ``destination``.

    Returns:
        Number of bytes written.
    """
    read_options = CodecOptions(binary=from_binary, header=header)
    space = Word2VecParser(read_options).parse_file(source)

    write_options = CodecOptions(binary=to_binary, header=header)
    written = export_file(space, destination, write_options)
    logger.info(
        f"Converted {len(space)} vectors into {destination}",
        extra={"bytes": written},
    )
    return written


def write_metrics(path: Path) -> None:
    """Dump the metrics in the Prometheus text format, e.g. for a textfile collector."""
    path.write_bytes(get_metrics())
    logger.info(f"Wrote metrics to {path}")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Convert word2vec files between text and binary",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("source", type=Path, help="Input file")
    parser.add_argument("destination", type=Path, help="Output file")
    parser.add_argument(
        "--from-binary",
        action="store_true",
        help="Input uses the binary format",
    )
    parser.add_argument(
        "--to-binary",
        action="store_true",
        help="Write the binary format",
    )
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="Input has no header line and none is written",
    )
    parser.add_argument(
        "--metrics-out",
        type=Path,
        default=None,
        help="Write Prometheus metrics to this file when done",
    )

    args = parser.parse_args()
    setup_logging()

    try:
        convert(
            args.source,
            args.destination,
            from_binary=args.from_binary,
            to_binary=args.to_binary,
            header=not args.no_header,
        )
    except VecSpaceError as e:
        logger.error(f"Conversion failed: {e.message}", extra={"details": e.details})
        sys.exit(1)

    if args.metrics_out is not None:
        write_metrics(args.metrics_out)


if __name__ == "__main__":
    main()
