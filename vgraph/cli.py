"""Command-line interface for vgraph."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import yaml

from vgraph.algorithms.runtime import run_to_completion, start
from vgraph.config import LAYOUT_CONFIG
from vgraph.errors import VGraphError
from vgraph.graph.io import (
    graph_to_document,
    graph_to_mermaid,
    load_graph,
    parse_edge_list,
    save_graph,
)
from vgraph.graph.store import StrictGraph
from vgraph.layout.force import ForceLayout
from vgraph.logging import get_logger, set_global_log_level
from vgraph.types.base import AlgorithmKind

logger = get_logger(__name__)


def _format_table(headers: List[str], rows: List[List[Any]], min_width: int = 6) -> str:
    """Format data as a simple ASCII table."""
    if not rows:
        return ""

    all_data = [headers] + [[str(item) for item in row] for row in rows]
    col_widths = [
        max(max(len(str(row[i])) for row in all_data), min_width)
        for i in range(len(headers))
    ]

    def format_row(row_data: List[Any]) -> str:
        return "   " + " | ".join(
            f"{str(item):<{col_widths[i]}}" for i, item in enumerate(row_data)
        )

    lines = [format_row(headers)]
    lines.append("   " + "-+-".join("-" * width for width in col_widths))
    lines.extend(format_row(row) for row in all_data[1:])
    return "\n".join(lines)


def _plural(n: int, singular: str, plural: Optional[str] = None) -> str:
    if n == 1:
        return singular
    return plural or (singular + "s")


def _inspect(graph: StrictGraph, path: Path) -> None:
    n_nodes = graph.number_of_nodes()
    n_edges = len(graph.get_edges())
    mode = "directed" if graph.directed else "undirected"
    multi = ", multi-edges allowed" if graph.multigraph else ""
    print(f"Graph: {path}")
    print(
        f"   {n_nodes} {_plural(n_nodes, 'node')}, {n_edges} {_plural(n_edges, 'edge')} "
        f"({mode}{multi})"
    )

    node_rows = []
    for node_id in graph.node_ids():
        attrs = graph.node_data(node_id)
        flags = [f for f in ("disabled", "pinned") if attrs.get(f)]
        node_rows.append(
            [node_id, attrs["label"], len(graph.incident_edges(node_id)), ",".join(flags) or "-"]
        )
    if node_rows:
        print("\nNodes:")
        print(_format_table(["id", "label", "degree", "flags"], node_rows))

    edge_rows = []
    for edge_id in graph.edge_ids():
        src, dst, _, attrs = graph.edge_data(edge_id)
        arrow = "->" if graph.is_edge_directed(edge_id) else "--"
        edge_rows.append([edge_id, f"{src} {arrow} {dst}", f"{attrs['weight']:g}"])
    if edge_rows:
        print("\nEdges:")
        print(_format_table(["id", "endpoints", "weight"], edge_rows))


def _layout(path: Path, ticks: int, seed: Optional[int], output: Optional[Path]) -> None:
    graph = load_graph(path, keep_positions=False)
    engine = ForceLayout(graph, LAYOUT_CONFIG, seed=seed)
    snapshot = engine.settle(max_ticks=ticks)
    state = "stable" if snapshot.stable else "not yet stable"
    logger.info("Layout %s after %d tick(s)", state, snapshot.settle_counter)
    target = output or path
    save_graph(graph, target)
    print(f"Wrote layout to {target} ({state} after {snapshot.settle_counter} ticks)")


def _run(
    path: Path,
    algorithm: str,
    start_node: Optional[int],
    target: Optional[int],
    as_json: bool,
) -> None:
    graph = load_graph(path)
    kind = AlgorithmKind.from_string(algorithm)
    handle = start(kind, graph, start_node, target)
    events = run_to_completion(handle)

    if as_json:
        print(json.dumps({"algorithm": kind.name.lower(), "events": [e.to_dict() for e in events]}, indent=2))
        return

    rows = []
    for event in events:
        value = "" if event.value is None else f"{event.value:g}"
        detail = " ".join(str(n) for n in event.path) if event.path else ""
        rows.append(
            [
                event.index,
                event.kind.name.lower(),
                "" if event.node is None else event.node,
                "" if event.edge is None else event.edge,
                value,
                detail,
            ]
        )
    print(f"{kind.name} on {path}:")
    print(_format_table(["#", "event", "node", "edge", "value", "path"], rows))


def _export(path: Path, fmt: str) -> None:
    graph = load_graph(path)
    if fmt == "mermaid":
        print(graph_to_mermaid(graph))
    elif fmt == "yaml":
        print(yaml.safe_dump(graph_to_document(graph), sort_keys=False), end="")
    else:
        print(json.dumps(graph_to_document(graph), indent=2))


def _import_edges(path: Path, output: Path, undirected: bool) -> None:
    graph = parse_edge_list(path.read_text(encoding="utf-8"), directed=not undirected)
    save_graph(graph, output)
    print(
        f"Imported {graph.number_of_nodes()} node(s) and "
        f"{len(graph.get_edges())} edge(s) into {output}"
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``vgraph`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="vgraph",
        description="Inspect, lay out and run algorithms on graph documents.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{inspect,layout,run,export,import-edges}",
        help="Available commands",
    )

    inspect_parser = subparsers.add_parser("inspect", help="Summarize a graph document")
    inspect_parser.add_argument("graph", type=Path, help="Path to a .json/.yaml graph")

    layout_parser = subparsers.add_parser("layout", help="Compute node positions")
    layout_parser.add_argument("graph", type=Path, help="Path to a .json/.yaml graph")
    layout_parser.add_argument(
        "--ticks", type=int, default=2000, help="Maximum simulation ticks (default: 2000)"
    )
    layout_parser.add_argument("--seed", type=int, default=0, help="Placement seed")
    layout_parser.add_argument(
        "--output", "-o", type=Path, default=None, help="Output file (default: overwrite input)"
    )

    run_parser = subparsers.add_parser("run", help="Run an algorithm and list its events")
    run_parser.add_argument("graph", type=Path, help="Path to a .json/.yaml graph")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="bfs, dfs, dijkstra, prim, kruskal or topological-sort",
    )
    run_parser.add_argument("--start", type=int, default=None, help="Start node id")
    run_parser.add_argument("--target", type=int, default=None, help="Target node id")
    run_parser.add_argument("--json", action="store_true", help="Print events as JSON")

    export_parser = subparsers.add_parser("export", help="Print a graph in another format")
    export_parser.add_argument("graph", type=Path, help="Path to a .json/.yaml graph")
    export_parser.add_argument(
        "--format", "-f", choices=["json", "yaml", "mermaid"], default="mermaid"
    )

    import_parser = subparsers.add_parser(
        "import-edges", help="Build a graph document from 'A -> B' lines"
    )
    import_parser.add_argument("edges", type=Path, help="Text file with one edge per line")
    import_parser.add_argument("--output", "-o", type=Path, required=True)
    import_parser.add_argument(
        "--undirected", action="store_true", help="Create an undirected graph"
    )

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    try:
        if args.command == "inspect":
            _inspect(load_graph(args.graph), args.graph)
        elif args.command == "layout":
            _layout(args.graph, args.ticks, args.seed, args.output)
        elif args.command == "run":
            _run(args.graph, args.algorithm, args.start, args.target, args.json)
        elif args.command == "export":
            _export(args.graph, args.format)
        elif args.command == "import-edges":
            _import_edges(args.edges, args.output, args.undirected)
    except FileNotFoundError as exc:
        logger.error("File not found: %s", exc.filename)
        sys.exit(1)
    except (VGraphError, ValueError) as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
