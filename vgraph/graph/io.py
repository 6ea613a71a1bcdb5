"""Persistence contract and text formats for `StrictGraph`.

The persisted document is a plain dict (JSON/YAML friendly)::

    {
        "version": 1,
        "graph": {"directed": bool, "multigraph": bool},
        "nodes": [
            {"id": 0, "label": "A", "position": [x, y] | None,
             "style": {...}, "disabled": False, "pinned": False},
            ...
        ],
        "edges": [
            {"id": 0, "source": 0, "target": 1, "weight": 1.0,
             "directed": None},
            ...
        ],
    }

Documents are checked against the packaged JSON schema before any graph is
built, then semantically (duplicate ids, dangling endpoints) while building.
Node and edge ids survive a save/load round trip.
"""

from __future__ import annotations

import json
import re
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import jsonschema
import yaml

from vgraph.errors import DuplicateEdgeError, InvalidInputError, InvalidReferenceError
from vgraph.graph.store import StrictGraph
from vgraph.logging import get_logger
from vgraph.types.base import NodeID

LOGGER = get_logger(__name__)

DOCUMENT_VERSION = 1

_SCHEMA: Optional[Dict[str, Any]] = None


def _load_schema() -> Dict[str, Any]:
    global _SCHEMA
    if _SCHEMA is None:
        with (
            resources.files("vgraph.schemas")
            .joinpath("graph.json")
            .open("r", encoding="utf-8")
        ) as f:  # type: ignore[attr-defined]
            _SCHEMA = json.load(f)
    return _SCHEMA


def validate_document(data: Any) -> None:
    """Validate a document against the packaged schema.

    Raises:
        InvalidInputError: If the document does not match the schema.
    """
    try:
        jsonschema.validate(data, _load_schema())
    except jsonschema.ValidationError as exc:
        path = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise InvalidInputError(f"Invalid graph document at {path}: {exc.message}") from exc


def graph_to_document(graph: StrictGraph, include_positions: bool = True) -> Dict[str, Any]:
    """Convert a graph into its persisted document form.

    Args:
        graph: The graph to convert.
        include_positions: Write node positions; when False every position is
            stored as None so the loader re-lays the graph out.

    Returns:
        A JSON-serializable dict.
    """
    nodes = []
    for node_id in graph.node_ids():
        attrs = graph.node_data(node_id)
        position = attrs.get("position")
        nodes.append(
            {
                "id": node_id,
                "label": attrs.get("label", ""),
                "position": list(position) if include_positions and position is not None else None,
                "style": dict(attrs.get("style", {})),
                "disabled": bool(attrs.get("disabled", False)),
                "pinned": bool(attrs.get("pinned", False)),
            }
        )

    edges = []
    for edge_id in graph.edge_ids():
        src, dst, _, attrs = graph.edge_data(edge_id)
        edges.append(
            {
                "id": edge_id,
                "source": src,
                "target": dst,
                "weight": attrs["weight"],
                "directed": attrs.get("directed"),
            }
        )

    return {
        "version": DOCUMENT_VERSION,
        "graph": {"directed": graph.directed, "multigraph": graph.multigraph},
        "nodes": nodes,
        "edges": edges,
    }


def document_to_graph(data: Dict[str, Any], keep_positions: bool = True) -> StrictGraph:
    """Rebuild a graph from its document form.

    Args:
        data: Document produced by ``graph_to_document`` (or hand-written).
        keep_positions: Restore stored positions. When False, positions are
            dropped and pinned flags cleared so the layout engine places every
            node afresh.

    Returns:
        The reconstructed graph, with the original ids.

    Raises:
        InvalidInputError: If the document is malformed, repeats an id or
            references a missing node.
    """
    validate_document(data)

    mode = data["graph"]
    graph = StrictGraph(directed=mode["directed"], multigraph=mode.get("multigraph", False))

    for node_obj in data["nodes"]:
        position = node_obj.get("position") if keep_positions else None
        graph.add_node(
            label=node_obj.get("label", ""),
            position=tuple(position) if position is not None else None,
            style={str(k): v for k, v in node_obj.get("style", {}).items()},
            node_id=node_obj["id"],
            disabled=node_obj.get("disabled", False),
            pinned=node_obj.get("pinned", False) and keep_positions,
        )

    for edge_obj in data["edges"]:
        try:
            graph.add_edge(
                edge_obj["source"],
                edge_obj["target"],
                weight=edge_obj.get("weight", 1.0),
                directed=edge_obj.get("directed"),
                key=edge_obj["id"],
            )
        except (InvalidReferenceError, DuplicateEdgeError) as exc:
            raise InvalidInputError(f"Invalid edge {edge_obj['id']}: {exc}") from exc

    LOGGER.debug(
        "Loaded graph document with %d node(s) and %d edge(s)",
        len(data["nodes"]),
        len(data["edges"]),
    )
    return graph


def _format_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    raise InvalidInputError(
        f"Unsupported graph file extension '{path.suffix}'; use .json, .yaml or .yml"
    )


def save_graph(graph: StrictGraph, path: Union[str, Path], include_positions: bool = True) -> Path:
    """Write a graph document to ``path`` (JSON or YAML by suffix)."""
    path = Path(path)
    fmt = _format_for(path)
    document = graph_to_document(graph, include_positions=include_positions)
    if fmt == "json":
        text = json.dumps(document, indent=2)
    else:
        text = yaml.safe_dump(document, sort_keys=False)
    path.write_text(text, encoding="utf-8")
    LOGGER.info("Saved graph to %s", path)
    return path


def load_graph(path: Union[str, Path], keep_positions: bool = True) -> StrictGraph:
    """Read a graph document from ``path`` (JSON or YAML by suffix)."""
    path = Path(path)
    fmt = _format_for(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidInputError(f"{path} is not UTF-8 text: {exc}") from exc
    try:
        data = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InvalidInputError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidInputError("The graph document must map to a dictionary at top-level.")
    return document_to_graph(data, keep_positions=keep_positions)


# "A -> B" or "A -> B : 2.5"
_EDGE_LINE = re.compile(r"^(?P<src>.+?)\s*->\s*(?P<dst>.+?)(?:\s*:\s*(?P<weight>\S+))?$")


def parse_edge_list(
    lines: Union[str, Iterable[str]],
    directed: bool = True,
    multigraph: bool = False,
    graph: Optional[StrictGraph] = None,
) -> StrictGraph:
    """Build or extend a graph from ``A -> B`` edge lines.

    Each non-empty line names a source and target label, optionally followed
    by ``: weight``. Labels identify nodes: the first mention of a label
    creates the node. Malformed lines are skipped. A repeated pair in a graph
    without multi-edges is ignored.

    Args:
        lines: Text or an iterable of lines.
        directed: Mode of a newly created graph.
        multigraph: Multi-edge flag of a newly created graph.
        graph: Existing graph to extend instead of creating one.

    Returns:
        The updated (or newly created) graph.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()
    if graph is None:
        graph = StrictGraph(directed=directed, multigraph=multigraph)

    by_label: Dict[str, NodeID] = {}
    for node_id in graph.node_ids():
        by_label.setdefault(graph.node_data(node_id)["label"], node_id)

    def node_for(label: str) -> NodeID:
        if label not in by_label:
            by_label[label] = graph.add_node(label)
        return by_label[label]

    for raw in lines:
        line = raw.strip()
        if not line:
            continue
        match = _EDGE_LINE.match(line) if line.count("->") == 1 else None
        if match is None:
            LOGGER.debug("Skipping malformed edge line %r", line)
            continue
        weight = 1.0
        if match.group("weight") is not None:
            try:
                weight = float(match.group("weight"))
            except ValueError:
                LOGGER.debug("Skipping edge line with bad weight %r", line)
                continue
        src = node_for(match.group("src"))
        dst = node_for(match.group("dst"))
        try:
            graph.add_edge(src, dst, weight=weight)
        except DuplicateEdgeError:
            LOGGER.debug("Ignoring repeated edge line %r", line)

    return graph


def _mermaid_label(label: str) -> str:
    return label.replace('"', "#quot;")


def graph_to_mermaid(graph: StrictGraph) -> str:
    """Render the enabled part of a graph as a Mermaid ``graph TD`` diagram.

    Directed edges use ``-->``, undirected edges ``---``; weights other than
    1 are shown as edge labels.
    """
    lines: List[str] = ["graph TD"]
    enabled = [n for n in graph.node_ids() if not graph.node_data(n).get("disabled")]
    enabled_set = set(enabled)
    for node_id in enabled:
        label = graph.node_data(node_id)["label"] or str(node_id)
        lines.append(f'  n{node_id}["{_mermaid_label(label)}"]')
    for edge_id in graph.edge_ids():
        src, dst, _, attrs = graph.edge_data(edge_id)
        if src not in enabled_set or dst not in enabled_set:
            continue
        arrow = "-->" if graph.is_edge_directed(edge_id) else "---"
        weight = attrs["weight"]
        if weight != 1:
            lines.append(f"  n{src} {arrow}|{weight:g}| n{dst}")
        else:
            lines.append(f"  n{src} {arrow} n{dst}")
    return "\n".join(lines)
