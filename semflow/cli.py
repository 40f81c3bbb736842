"""CLI entry point for semantic enrichment.

Usage::

    semflow-enrich raw.graphml --ontology ontology.yaml -o semantic.graphml

Reads a raw flow graph, enriches it against the ontology, and writes the
semantic flow graph (to stdout when ``-o`` is omitted).
"""

from __future__ import annotations

import argparse
import logging
import sys

from semflow.core.config import get_settings
from semflow.core.errors import SemflowError
from semflow.flowgraph.enrichment import to_semantic_graph
from semflow.graphml.reader import read_raw_graph_file
from semflow.graphml.writer import write_semantic_graph, write_semantic_graph_file
from semflow.ontology.loader import load_annotations

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="semflow-enrich",
        description="Enrich a raw flow graph into a semantic flow graph.",
    )
    parser.add_argument("raw", help="Path to the raw flow graph (GraphML).")
    parser.add_argument(
        "--ontology",
        default=settings.ontology_path,
        required=settings.ontology_path is None,
        help="Path to the ontology annotations (YAML). Defaults to SEMFLOW_ONTOLOGY_PATH.",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Where to write the semantic flow graph (default: stdout).",
    )
    parser.add_argument(
        "--no-elements",
        dest="elements",
        action="store_false",
        default=settings.elements,
        help="Type ports with bare objects instead of elements.",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    return parser.parse_args(argv)


def _run(args: argparse.Namespace) -> int:
    resolver = load_annotations(args.ontology)
    raw = read_raw_graph_file(args.raw)
    sem = to_semantic_graph(resolver, raw, elements=args.elements)
    if args.output:
        write_semantic_graph_file(sem, args.output)
    else:
        sys.stdout.write(write_semantic_graph(sem))
        sys.stdout.write("\n")
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        exit_code = _run(args)
    except (SemflowError, OSError) as e:
        logger.error("Enrichment failed: %s", e)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
