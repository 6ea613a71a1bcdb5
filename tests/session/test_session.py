import copy
import math

import pytest

from vgraph.config import SessionConfig
from vgraph.graph.store import StrictGraph
from vgraph.session import (
    AddEdge,
    AddNode,
    CommandResult,
    MoveNodeManually,
    ReleaseNode,
    RemoveEdge,
    RemoveNode,
    SetEdgeWeight,
    SetNodeEnabled,
    SetNodeStyle,
    VisualizationSession,
)
from vgraph.session.view_model import replay
from vgraph.types.base import AlgorithmKind, EdgeHighlight, EventKind, NodeHighlight


@pytest.fixture
def session(square):
    return VisualizationSession(square)


def _live_events(session):
    while session.step_algorithm():
        pass
    return session.events


def test_add_node_and_edge():
    session = VisualizationSession(directed=True)
    a = session.apply_edit(AddNode("A"))
    b = session.apply_edit(AddNode("B", position=(10.0, 0.0), style={"color": "red"}))
    assert a and b
    assert (a.value, b.value) == (0, 1)
    e = session.apply_edit(AddEdge(a.value, b.value, weight=2.5))
    assert e.ok and e.value == 0
    assert session.graph.neighbors(0) == [(1, 0)]
    # New nodes are placed by the layout engine immediately
    assert session.graph.node_data(0)["position"] is not None
    assert session.graph.node_data(1)["style"] == {"color": "red"}


def test_failed_edit_leaves_graph_unchanged(session):
    before = session.to_document()
    for intent in (
        AddEdge(0, 99),
        AddEdge(0, 1),
        AddEdge(0, 3, weight=float("nan")),
        RemoveNode(17),
        RemoveEdge(17),
        MoveNodeManually(42, (0.0, 0.0)),
        MoveNodeManually(0, (float("inf"), 0.0)),
        ReleaseNode(42),
        SetNodeEnabled(42, False),
        SetNodeStyle(42, {"color": "red"}),
        SetNodeStyle(0, {1: "red"}),
        AddNode("E", style={2: "blue"}),
        SetEdgeWeight(0, float("inf")),
        SetEdgeWeight(42, 1.0),
    ):
        result = session.apply_edit(intent)
        assert not result.ok, intent
        assert result.message
    assert session.to_document() == before


def test_unsupported_edit():
    result = VisualizationSession().apply_edit("rename everything")  # type: ignore[arg-type]
    assert not result
    assert "Unsupported" in result.message


def test_remove_node_and_edge(session):
    assert session.apply_edit(RemoveEdge(0))
    assert session.apply_edit(RemoveNode(3))
    assert session.graph.edge_ids() == [1]
    assert sorted(session.layout.snapshot().positions) == [0, 1, 2]


def test_manual_move_pins_until_released(session):
    assert session.apply_edit(MoveNodeManually(0, (250.0, -40.0)))
    assert session.graph.node_data(0)["pinned"]
    for _ in range(20):
        session.advance_frame()
    assert session.graph.node_data(0)["position"] == (250.0, -40.0)
    assert session.view_model().node(0).pinned

    assert session.apply_edit(ReleaseNode(0))
    assert not session.graph.node_data(0)["pinned"]
    assert not session.layout.is_stable()
    session.advance_frame()
    assert session.graph.node_data(0)["position"] != (250.0, -40.0)


def test_disabled_node_hidden_from_view_and_algorithms(session):
    assert session.apply_edit(SetNodeEnabled(1, False))
    vm = session.view_model()
    assert [n.id for n in vm.nodes] == [0, 2, 3]
    assert [e.id for e in vm.edges] == [1, 3]
    assert not session.run_algorithm("bfs", start=1)

    assert session.apply_edit(SetNodeEnabled(1, True))
    assert [n.id for n in session.view_model().nodes] == [0, 1, 2, 3]


def test_style_and_weight_edits_show_in_view_model(session):
    assert session.apply_edit(SetNodeStyle(2, {"color": "#00ff00", "shape": "square"}))
    assert session.apply_edit(SetEdgeWeight(3, 0.5))
    vm = session.view_model()
    assert vm.node(2).style == {"color": "#00ff00", "shape": "square"}
    assert vm.edge(3).weight_label == "0.5"
    assert vm.edge(0).weight_label == "1"
    with pytest.raises(KeyError):
        vm.node(99)


def test_run_algorithm_failure_keeps_previous_run(session):
    assert session.run_algorithm(AlgorithmKind.BFS, start=0)
    session.step_algorithm()
    session.apply_edit(SetEdgeWeight(0, -1.0))
    failed = session.run_algorithm("dijkstra", start=0)
    assert not failed
    assert "non-negative" in failed.message
    assert session.runtime.kind == AlgorithmKind.BFS
    assert len(session.events) == 1
    assert not session.run_algorithm("prim", start=0, target=3)
    assert not session.run_algorithm("astar", start=0)


def test_new_run_replaces_previous(session):
    session.run_algorithm("bfs", start=0)
    old = session.runtime
    session.step_algorithm()
    assert session.run_algorithm("dfs", start=0)
    assert old.is_cancelled
    assert session.events == ()
    assert session.cursor == -1
    assert session.view_model().algorithm == "DFS"


def test_advance_frame_plays_one_event_per_frame(session):
    session.run_algorithm("bfs", start=0)
    vm = session.advance_frame()
    assert vm.frame == 1
    assert vm.event_index == 0
    assert vm.node(0).highlight == NodeHighlight.VISITED
    vm = session.advance_frame()
    assert vm.event_index == 1
    assert vm.node(1).highlight == NodeHighlight.FRONTIER
    assert vm.edge(0).highlight == EdgeHighlight.RELAXED


def test_steps_per_frame():
    graph = StrictGraph(directed=False)
    for label in "AB":
        graph.add_node(label)
    graph.add_edge(0, 1)
    session = VisualizationSession(graph, config=SessionConfig(steps_per_frame=3))
    session.run_algorithm("bfs", start=0)
    assert session.advance_frame().event_index == 2


def test_commands_without_a_run_fail(session):
    for command in (session.pause, session.resume, session.cancel, session.step_algorithm):
        result = command()
        assert not result.ok
        assert result.message == "No algorithm has been run."
    assert not session.scrub_to(-1)
    assert not session.paused


def test_pause_and_resume(session):
    assert not session.pause()
    assert not session.resume()
    session.run_algorithm("bfs", start=0)
    session.advance_frame()
    assert session.pause()
    for _ in range(3):
        vm = session.advance_frame()
    assert vm.paused
    assert vm.event_index == 0
    assert session.resume()
    assert session.advance_frame().event_index == 1


def test_step_algorithm_ignores_pause(session):
    session.run_algorithm("bfs", start=0)
    session.pause()
    result = session.step_algorithm()
    assert result.ok
    assert result.value.kind == EventKind.NODE_VISITED
    assert session.cursor == 0


def test_scrub_matches_live_playback(session):
    session.run_algorithm("bfs", start=0, target=3)
    live = []
    while session.step_algorithm():
        live.append(copy.deepcopy(session.highlights))
    events = session.events
    assert events[-1].kind == EventKind.ALGORITHM_COMPLETE

    for index in (0, 5, len(events) // 2, len(events) - 1):
        assert session.scrub_to(index)
        assert session.paused
        assert session.cursor == index
        assert session.highlights == live[index]
        assert session.highlights == replay(events[: index + 1])


def test_scrub_then_play_replays_recorded_events(session):
    session.run_algorithm("bfs", start=0)
    for _ in range(6):
        session.step_algorithm()
    recorded = session.events
    assert session.scrub_to(2)
    stepped = session.step_algorithm()
    assert stepped.value == recorded[3]
    assert session.events == recorded
    session.resume()
    session.advance_frame()
    session.advance_frame()
    session.advance_frame()
    assert session.cursor == 6
    assert len(session.events) == 7


def test_scrub_to_start_and_out_of_range(session):
    assert not session.scrub_to(0)
    session.run_algorithm("bfs", start=0)
    session.step_algorithm()
    assert session.scrub_to(-1)
    assert session.highlights.nodes == {}
    assert not session.scrub_to(1)
    assert not session.scrub_to(-2)


def test_cancel_keeps_recorded_events(session):
    session.run_algorithm("bfs", start=0)
    session.step_algorithm()
    session.step_algorithm()
    assert session.cancel()
    assert session.runtime.is_cancelled
    assert len(session.events) == 2
    assert not session.step_algorithm()
    assert session.scrub_to(0)
    assert session.step_algorithm()


def test_edits_during_run_do_not_affect_it(session):
    session.run_algorithm("bfs", start=0)
    session.step_algorithm()
    session.apply_edit(RemoveNode(3))
    events = _live_events(session)
    assert 3 in [e.node for e in events if e.kind == EventKind.NODE_VISITED]
    # The view only draws what still exists
    with pytest.raises(KeyError):
        session.view_model().node(3)


def test_path_highlights_in_view_model(session):
    session.run_algorithm("bfs", start=0, target=3)
    _live_events(session)
    vm = session.view_model()
    assert [vm.node(n).highlight for n in range(4)] == [
        NodeHighlight.PATH,
        NodeHighlight.PATH,
        NodeHighlight.FINISHED,
        NodeHighlight.PATH,
    ]
    assert [vm.edge(e).highlight for e in range(4)] == [
        EdgeHighlight.PATH,
        EdgeHighlight.RELAXED,
        EdgeHighlight.PATH,
        EdgeHighlight.DISCARDED,
    ]
    assert vm.node(3).annotation == 2


def test_clear_algorithm(session):
    session.run_algorithm("bfs", start=0)
    session.step_algorithm()
    assert session.clear_algorithm()
    vm = session.view_model()
    assert vm.algorithm is None
    assert all(n.highlight == NodeHighlight.NONE for n in vm.nodes)


def test_layout_settles_through_frames(session):
    for _ in range(400):
        vm = session.advance_frame()
        if vm.layout_stable:
            break
    assert vm.layout_stable
    assert all(math.isfinite(c) for n in vm.nodes for c in n.position)


def test_save_and_load(tmp_path, session):
    session.apply_edit(MoveNodeManually(0, (1.0, 2.0)))
    saved = session.save(tmp_path / "graph.yaml")
    assert saved.ok

    other = VisualizationSession()
    assert other.load(tmp_path / "graph.yaml")
    assert other.graph.node_ids() == [0, 1, 2, 3]
    assert other.graph.node_data(0)["position"] == (1.0, 2.0)
    assert other.graph.node_data(0)["pinned"]

    relaid = VisualizationSession()
    assert relaid.load(tmp_path / "graph.yaml", keep_positions=False)
    assert not relaid.graph.node_data(0)["pinned"]


def test_load_failures_keep_current_graph(tmp_path, session):
    before = session.to_document()
    assert not session.load(tmp_path / "missing.json")
    binary = tmp_path / "binary.json"
    binary.write_bytes(b"\xff\xfe\x00garbage")
    assert not session.load(binary)
    assert not session.load_document({"graph": {}})
    assert not session.save(tmp_path / "graph.txt")
    assert session.to_document() == before


def test_load_document_replaces_graph_and_run(session):
    session.run_algorithm("bfs", start=0)
    session.step_algorithm()
    doc = session.to_document()
    doc["nodes"] = doc["nodes"][:2]
    doc["edges"] = doc["edges"][:1]
    assert session.load_document(doc)
    assert session.graph.node_ids() == [0, 1]
    assert session.runtime is None
    assert session.events == ()


def test_command_result_truthiness():
    assert CommandResult.success("done", 3)
    assert not CommandResult.failure("nope")
    assert CommandResult.success().value is None
