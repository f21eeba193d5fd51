"""Command-line entry point: `cim-rdfs`."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .catalog import DEFAULT_MAX_ENUM_VALUES
from .common import DEFAULT_COMMON_THRESHOLD
from .errors import SelectionError
from .pipeline import ALL_SOURCES, PipelineConfig, run_pipeline, select_sources
from .store import CIM


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cim-rdfs",
        description="Infer an RDFS schema from CIM RDF/XML instance data and "
                    "merge it with authored descriptions.",
    )
    parser.add_argument("sources", nargs="+", type=Path, help="RDF/XML instance documents.")
    parser.add_argument(
        "-d", "--descriptions", required=True, type=Path,
        help="Authored RDFS description document (first line holds the namespaces).",
    )
    parser.add_argument("-o", "--output", required=True, type=Path, help="Output RDFS path.")
    parser.add_argument(
        "-s", "--select", default=ALL_SOURCES,
        help=f"Source to ingest: 1-based index or '{ALL_SOURCES}' (default).",
    )
    parser.add_argument(
        "--missing-report", type=Path, default=None,
        help="Also write the missing documentation listing to this file.",
    )
    parser.add_argument(
        "--max-enum-values", type=int, default=DEFAULT_MAX_ENUM_VALUES,
        help="Largest code set still classified as an enumeration (default: %(default)s).",
    )
    parser.add_argument(
        "--common-threshold", type=int, default=DEFAULT_COMMON_THRESHOLD,
        help="Class types an attribute must appear under to be common (default: %(default)s).",
    )
    parser.add_argument(
        "--cim-namespace", default=str(CIM),
        help="IRI bound to the 'cim' query prefix (default: %(default)s).",
    )
    parser.add_argument(
        "--include-unmatched", action="store_true",
        help="Append authored descriptions that match no discovered element.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v info, -vv debug.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        sources = select_sources(args.sources, args.select)
    except SelectionError as exc:
        parser.exit(2, f"{parser.prog}: {exc}\n")

    config = PipelineConfig(
        sources=sources,
        descriptions=args.descriptions,
        output=args.output,
        missing_report=args.missing_report,
        max_enum_values=args.max_enum_values,
        common_threshold=args.common_threshold,
        include_unmatched=args.include_unmatched,
        cim_namespace=args.cim_namespace,
    )
    result = run_pipeline(config)

    print(f"RDFS file is generated: {result.output}")
    if result.document.missing:
        print(result.document.missing.format(), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
