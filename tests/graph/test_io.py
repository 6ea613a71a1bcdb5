import json

import pytest
import yaml

from vgraph.errors import InvalidInputError
from vgraph.graph.io import (
    document_to_graph,
    graph_to_document,
    graph_to_mermaid,
    load_graph,
    parse_edge_list,
    save_graph,
    validate_document,
)
from vgraph.graph.store import StrictGraph


def _edge_set(g: StrictGraph):
    return {
        (e_id, src, dst, attrs["weight"], attrs["directed"])
        for e_id, (src, dst, _, attrs) in g.get_edges().items()
    }


def test_document_shape(square):
    square.set_node_position(0, (10.0, -5.0))
    doc = graph_to_document(square)
    assert doc["version"] == 1
    assert doc["graph"] == {"directed": False, "multigraph": False}
    assert doc["nodes"][0] == {
        "id": 0,
        "label": "A",
        "position": [10.0, -5.0],
        "style": {},
        "disabled": False,
        "pinned": False,
    }
    assert doc["nodes"][1]["position"] is None
    assert doc["edges"][2] == {"id": 2, "source": 1, "target": 3, "weight": 1.0, "directed": None}
    validate_document(doc)


def test_document_without_positions(square):
    square.set_node_position(0, (1.0, 1.0))
    doc = graph_to_document(square, include_positions=False)
    assert all(n["position"] is None for n in doc["nodes"])


@pytest.mark.parametrize("suffix", [".json", ".yaml", ".yml"])
def test_save_load_round_trip(tmp_path, weighted, suffix):
    weighted.remove_node(2)
    weighted.set_edge_weight(4, 2.25)
    weighted.set_node_position(0, (3.5, -1.25))
    weighted.set_node_style(1, {"color": "#ff0000"})
    weighted.set_node_disabled(3, True)

    path = save_graph(weighted, tmp_path / f"graph{suffix}")
    loaded = load_graph(path)

    assert loaded.directed is True
    assert loaded.node_ids() == weighted.node_ids()
    assert _edge_set(loaded) == _edge_set(weighted)
    assert loaded.node_data(0)["position"] == (3.5, -1.25)
    assert loaded.node_data(1)["style"] == {"color": "#ff0000"}
    assert loaded.node_data(3)["disabled"] is True
    # Counters resume after the largest loaded id
    assert loaded.add_node("E") == 4


def test_load_without_positions_clears_pins(square):
    square.set_node_position(0, (5.0, 5.0))
    square.set_node_pinned(0, True)
    loaded = document_to_graph(graph_to_document(square), keep_positions=False)
    assert loaded.node_data(0)["position"] is None
    assert loaded.node_data(0)["pinned"] is False


def test_counters_resume_after_load(square):
    square.remove_edge_by_id(3)
    loaded = document_to_graph(graph_to_document(square))
    assert loaded.add_node("E") == 4
    # Edge 3 was removed before saving; the next id follows the largest saved one
    assert loaded.add_edge(2, 3) == 3


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.pop("nodes"),
        lambda d: d["graph"].pop("directed"),
        lambda d: d["nodes"][0].update(position=[1.0]),
        lambda d: d["edges"][0].update(weight="heavy"),
        lambda d: d["nodes"][0].update(colour="red"),
        lambda d: d.update(version=2),
    ],
)
def test_schema_errors(square, mutate):
    doc = graph_to_document(square)
    mutate(doc)
    with pytest.raises(InvalidInputError, match="Invalid graph document"):
        document_to_graph(doc)


def test_semantic_errors(square):
    doc = graph_to_document(square)
    doc["edges"][0]["target"] = 99
    with pytest.raises(InvalidInputError, match="Invalid edge 0"):
        document_to_graph(doc)

    doc = graph_to_document(square)
    doc["nodes"][1]["id"] = 0
    with pytest.raises(InvalidInputError):
        document_to_graph(doc)

    doc = graph_to_document(square)
    doc["edges"].append({"id": 9, "source": 1, "target": 0, "weight": 1.0, "directed": None})
    with pytest.raises(InvalidInputError, match="multi-edges"):
        document_to_graph(doc)


def test_load_graph_errors(tmp_path):
    bad_suffix = tmp_path / "graph.txt"
    bad_suffix.write_text("{}")
    with pytest.raises(InvalidInputError, match="Unsupported"):
        load_graph(bad_suffix)

    broken = tmp_path / "graph.json"
    broken.write_text("{not json")
    with pytest.raises(InvalidInputError, match="Could not parse"):
        load_graph(broken)

    listing = tmp_path / "graph.yaml"
    listing.write_text(yaml.safe_dump([1, 2, 3]))
    with pytest.raises(InvalidInputError, match="dictionary"):
        load_graph(listing)

    binary = tmp_path / "binary.json"
    binary.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(InvalidInputError, match="not UTF-8"):
        load_graph(binary)


def test_saved_json_is_plain_document(tmp_path, square):
    path = save_graph(square, tmp_path / "g.json")
    data = json.loads(path.read_text())
    assert [n["label"] for n in data["nodes"]] == ["A", "B", "C", "D"]


def test_parse_edge_list_creates_one_node_per_label():
    text = """
    A -> B
    B -> C : 2.5
    A -> C

    this line is not an edge
    C -> A : heavy
    A -> B -> D
    A -> B
    """
    g = parse_edge_list(text)
    assert g.directed
    assert [g.node_data(n)["label"] for n in g.node_ids()] == ["A", "B", "C"]
    assert [(src, dst, attrs["weight"]) for src, dst, _, attrs in g.get_edges().values()] == [
        (0, 1, 1.0),
        (1, 2, 2.5),
        (0, 2, 1.0),
    ]


def test_parse_edge_list_extends_existing_graph(square):
    parse_edge_list(["A -> D", "D -> E"], graph=square)
    assert square.node_data(4)["label"] == "E"
    assert square.edge_data(4)[:2] == (0, 3)
    assert square.edge_data(5)[:2] == (3, 4)


def test_parse_edge_list_undirected_skips_reversed_duplicates():
    g = parse_edge_list("x -> y\ny -> x", directed=False)
    assert len(g.get_edges()) == 1


def test_mermaid_export():
    g = StrictGraph(directed=True)
    a, b, c = g.add_node("A"), g.add_node('say "hi"'), g.add_node("")
    g.add_edge(a, b)
    g.add_edge(b, c, weight=2.5, directed=False)
    assert graph_to_mermaid(g).splitlines() == [
        "graph TD",
        '  n0["A"]',
        '  n1["say #quot;hi#quot;"]',
        '  n2["2"]',
        "  n0 --> n1",
        "  n1 ---|2.5| n2",
    ]


def test_mermaid_omits_disabled_nodes(square):
    square.set_node_disabled(3, True)
    text = graph_to_mermaid(square)
    assert "n3" not in text
    assert "n0 --- n1" in text
