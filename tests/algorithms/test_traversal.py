from vgraph.algorithms.runtime import run_to_completion, start
from vgraph.graph.store import StrictGraph
from vgraph.types.base import AlgorithmKind, EventKind


def _kinds(events):
    return [(e.kind, e.node, e.edge) for e in events]


def _visited(events):
    return [e.node for e in events if e.kind == EventKind.NODE_VISITED]


def test_bfs_square_visit_order(square):
    events = run_to_completion(start(AlgorithmKind.BFS, square, 0))
    assert _visited(events) == [0, 1, 2, 3]


def test_bfs_square_event_sequence(square):
    handle = start(AlgorithmKind.BFS, square, 0)
    events = run_to_completion(handle)
    V, F = EventKind.NODE_VISITED, EventKind.NODE_FINISHED
    R, D = EventKind.EDGE_RELAXED, EventKind.EDGE_DISCARDED
    assert _kinds(events) == [
        (V, 0, None),
        (R, 1, 0),
        (R, 2, 1),
        (F, 0, None),
        (V, 1, None),
        (D, 0, 0),
        (R, 3, 2),
        (F, 1, None),
        (V, 2, None),
        (D, 0, 1),
        (D, 3, 3),
        (F, 2, None),
        (V, 3, None),
        (D, 1, 2),
        (D, 2, 3),
        (F, 3, None),
        (EventKind.ALGORITHM_COMPLETE, None, None),
    ]
    assert [e.index for e in events] == list(range(len(events)))
    assert events[-1].value == 4
    assert handle.result.distances == {0: 0, 1: 1, 2: 1, 3: 2}


def test_bfs_with_target_stops_at_target(square):
    handle = start(AlgorithmKind.BFS, square, 0, target=3)
    events = run_to_completion(handle)
    path_event = events[-2]
    assert path_event.kind == EventKind.PATH_FOUND
    assert path_event.path == (0, 1, 3)
    assert path_event.path_edges == (0, 2)
    assert path_event.value == 2
    # Target is not expanded
    assert events[-3].kind == EventKind.NODE_VISITED and events[-3].node == 3
    assert handle.result.path == (0, 1, 3)


def test_bfs_directed_respects_orientation(weighted):
    events = run_to_completion(start(AlgorithmKind.BFS, weighted, 3))
    assert _visited(events) == [3]


def test_bfs_without_start_covers_every_component():
    g = StrictGraph(directed=False)
    for label in "ABCDE":
        g.add_node(label)
    g.add_edge(3, 4)
    g.add_edge(0, 1)
    events = run_to_completion(start("bfs", g))
    assert _visited(events) == [0, 1, 2, 3, 4]
    assert events[-1].value == 5


def test_dfs_square_visit_order(square):
    handle = start(AlgorithmKind.DFS, square, 0)
    events = run_to_completion(handle)
    assert _visited(events) == [0, 1, 3, 2]
    finished = [e.node for e in events if e.kind == EventKind.NODE_FINISHED]
    assert finished == [2, 3, 1, 0]
    assert handle.result.predecessors == {1: (0, 0), 3: (1, 2), 2: (3, 3)}


def test_dfs_discovery_and_finish_times(square):
    events = run_to_completion(start(AlgorithmKind.DFS, square, 0))
    discovery = {e.node: e.value for e in events if e.kind == EventKind.NODE_VISITED}
    finish = {e.node: e.value for e in events if e.kind == EventKind.NODE_FINISHED}
    assert discovery == {0: 0, 1: 1, 3: 2, 2: 3}
    assert finish == {2: 4, 3: 5, 1: 6, 0: 7}


def test_dfs_with_target(square):
    handle = start(AlgorithmKind.DFS, square, 0, target=2)
    events = run_to_completion(handle)
    assert events[-2].kind == EventKind.PATH_FOUND
    assert events[-2].path == (0, 1, 3, 2)
    assert events[-2].path_edges == (0, 2, 3)
    assert not any(e.kind == EventKind.NODE_FINISHED for e in events)


def test_dfs_self_loop_is_discarded():
    g = StrictGraph(directed=True)
    a = g.add_node("A")
    loop = g.add_edge(a, a)
    events = run_to_completion(start(AlgorithmKind.DFS, g, a))
    assert [(e.kind, e.edge) for e in events[:2]] == [
        (EventKind.NODE_VISITED, None),
        (EventKind.EDGE_DISCARDED, loop),
    ]
