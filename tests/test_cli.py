import json
from pathlib import Path

import pytest
import yaml

from vgraph import cli
from vgraph.graph.io import load_graph, save_graph


@pytest.fixture
def square_file(tmp_path: Path, square) -> Path:
    return save_graph(square, tmp_path / "square.json")


def extract_json_from_stdout(output: str) -> dict:
    """Parse the JSON document printed to stdout, ignoring any log lines before it."""
    return json.loads(output[output.index("{") :])


def test_no_arguments_prints_help(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    assert exc_info.value.code == 0
    assert "usage: vgraph" in capsys.readouterr().out


def test_inspect(square_file: Path, capsys) -> None:
    cli.main(["inspect", str(square_file)])
    out = capsys.readouterr().out
    assert "4 nodes, 4 edges (undirected)" in out
    assert "0 -- 1" in out
    assert "label" in out


def test_inspect_degree_counts_incoming_edges(tmp_path: Path, weighted, capsys) -> None:
    path = save_graph(weighted, tmp_path / "weighted.yaml")
    cli.main(["inspect", str(path)])
    rows = [
        [cell.strip() for cell in line.split("|")]
        for line in capsys.readouterr().out.splitlines()
        if line.count("|") == 3
    ]
    degrees = {row[1]: row[2] for row in rows if row[1] != "label"}
    assert degrees == {"A": "3", "B": "2", "C": "2", "D": "3"}


def test_layout_writes_positions(square_file: Path, tmp_path: Path, capsys) -> None:
    out_file = tmp_path / "laid_out.yaml"
    cli.main(["--quiet", "layout", str(square_file), "--seed", "3", "-o", str(out_file)])
    assert "Wrote layout" in capsys.readouterr().out
    graph = load_graph(out_file)
    assert all(graph.node_data(n)["position"] is not None for n in graph.node_ids())
    # Input untouched when -o is given
    assert all(
        load_graph(square_file).node_data(n)["position"] is None for n in range(4)
    )


def test_layout_is_reproducible(square_file: Path, tmp_path: Path) -> None:
    first, second = tmp_path / "a.json", tmp_path / "b.json"
    cli.main(["--quiet", "layout", str(square_file), "--seed", "5", "-o", str(first)])
    cli.main(["--quiet", "layout", str(square_file), "--seed", "5", "-o", str(second)])
    assert json.loads(first.read_text()) == json.loads(second.read_text())


def test_run_table(square_file: Path, capsys) -> None:
    cli.main(["run", str(square_file), "--algorithm", "bfs", "--start", "0"])
    out = capsys.readouterr().out
    assert "BFS on" in out
    assert "node_visited" in out
    assert "algorithm_complete" in out


def test_run_json(square_file: Path, capsys) -> None:
    cli.main(
        ["--quiet", "run", str(square_file), "-a", "dijkstra", "--start", "0", "--target", "3", "--json"]
    )
    data = extract_json_from_stdout(capsys.readouterr().out)
    assert data["algorithm"] == "dijkstra"
    kinds = [e["kind"] for e in data["events"]]
    assert kinds[-2:] == ["path_found", "algorithm_complete"]
    assert data["events"][-2]["path"] == [0, 1, 3]
    assert [e["index"] for e in data["events"]] == list(range(len(kinds)))


@pytest.mark.parametrize(
    "args",
    [
        ["-a", "dijkstra"],
        ["-a", "a-star"],
        ["-a", "bfs", "--start", "99"],
        ["-a", "topo"],
    ],
)
def test_run_errors_exit_nonzero(square_file: Path, args) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--quiet", "run", str(square_file), *args])
    assert exc_info.value.code == 1


def test_missing_file_exits_nonzero(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--quiet", "inspect", str(tmp_path / "nope.json")])
    assert exc_info.value.code == 1


def test_export_formats(square_file: Path, capsys) -> None:
    cli.main(["export", str(square_file), "--format", "mermaid"])
    out = capsys.readouterr().out
    assert out.startswith("graph TD")
    assert "n2 --- n3" in out

    cli.main(["export", str(square_file), "--format", "yaml"])
    data = yaml.safe_load(capsys.readouterr().out)
    assert data["graph"] == {"directed": False, "multigraph": False}

    cli.main(["--quiet", "export", str(square_file), "--format", "json"])
    data = extract_json_from_stdout(capsys.readouterr().out)
    assert len(data["edges"]) == 4


def test_import_edges(tmp_path: Path, capsys) -> None:
    text = tmp_path / "edges.txt"
    text.write_text("A -> B\nB -> C : 3\nC -> A\n", encoding="utf-8")
    out_file = tmp_path / "graph.json"
    cli.main(["--quiet", "import-edges", str(text), "-o", str(out_file), "--undirected"])
    assert "Imported 3 node(s) and 3 edge(s)" in capsys.readouterr().out
    graph = load_graph(out_file)
    assert not graph.directed
    assert graph.edge_data(1)[3]["weight"] == 3.0
