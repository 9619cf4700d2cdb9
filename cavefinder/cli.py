"""Command-line front-end: ``cavefinder <PE_file> <min_cave_size>``."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from .errors import CaveFinderError, InvalidArgument
from .mapping import map_caves
from .scanner import find_caves
from .utils import load_image, parse_min_cave

logger = logging.getLogger("cavefinder")


class _Parser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on bad input."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = _Parser(
        prog=prog,
        description="Find code caves (runs of zero bytes) in the sections of a PE file.",
        usage="%(prog)s <PE_file> <min_cave_size> [options]",
    )
    parser.add_argument("pe_file", help="PE file to scan")
    parser.add_argument("min_cave_size", help="minimum cave length in bytes (decimal or 0x hex)")
    parser.add_argument(
        "-d", "--details", action="store_true",
        help="also print each cave's RVA, VA and section permissions",
    )
    parser.add_argument(
        "-j", "--json", action="store_true",
        help="print the full result as JSON instead of one line per cave",
    )
    parser.add_argument(
        "-l", "--lenient", action="store_true",
        help="skip out-of-bounds sections instead of failing",
    )
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    return parser


def main(argv: list[str] | None = None, prog: str | None = None) -> int:
    args = _build_parser(prog).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        min_cave = parse_min_cave(args.min_cave_size)
    except InvalidArgument as exc:
        print(exc, file=sys.stderr)
        return 1

    try:
        image = load_image(args.pe_file)
    except CaveFinderError as exc:
        print(f"Can't open file: {exc}", file=sys.stderr)
        return 1

    # plain output streams as the scanner finds caves
    stream = not (args.json or args.details)
    sink = (lambda cave: print(cave.format())) if stream else None

    try:
        result = find_caves(image, min_cave, sink=sink, strict=not args.lenient)
    except CaveFinderError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.details:
        result.mappings = map_caves(image.data, result.caves, result.sections)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif args.details:
        for mapping in result.mappings:
            print(mapping.format())

    # skipped sections and truncated tables were already logged by the core
    logger.info(result.summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
