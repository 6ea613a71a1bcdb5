"""Shared sample graphs."""

from __future__ import annotations

import pytest

from vgraph.graph.store import StrictGraph


@pytest.fixture
def square():
    #   A ─── B
    #   │     │
    #   C ─── D
    #
    # Edges added A-B, A-C, B-D, C-D, so the adjacency order is
    # A:[B,C]  B:[A,D]  C:[A,D]  D:[B,C]
    g = StrictGraph(directed=False)
    a, b, c, d = (g.add_node(label) for label in "ABCD")
    g.add_edge(a, b)
    g.add_edge(a, c)
    g.add_edge(b, d)
    g.add_edge(c, d)
    return g


@pytest.fixture
def weighted():
    #        [1]       [1]
    #   A ───────► B ───────► D
    #   │                     ▲
    #   │ [4]       [1]       │
    #   └────────► C ─────────┘
    #
    # Plus A -> D with weight 5. Shortest A..D: A, B, D (2).
    g = StrictGraph(directed=True)
    a, b, c, d = (g.add_node(label) for label in "ABCD")
    g.add_edge(a, b, weight=1)
    g.add_edge(a, c, weight=4)
    g.add_edge(b, d, weight=1)
    g.add_edge(c, d, weight=1)
    g.add_edge(a, d, weight=5)
    return g


@pytest.fixture
def triangle_mst():
    #        [1]
    #   A ─────── B
    #    \       /
    #  [3]\     /[2]
    #      \   /
    #        C ───[4]─── D
    g = StrictGraph(directed=False)
    a, b, c, d = (g.add_node(label) for label in "ABCD")
    g.add_edge(a, b, weight=1)
    g.add_edge(b, c, weight=2)
    g.add_edge(a, c, weight=3)
    g.add_edge(c, d, weight=4)
    return g


@pytest.fixture
def dag():
    #   0 ──► 2 ──► 3
    #   1 ──► 2
    #   1 ──► 4
    g = StrictGraph(directed=True)
    for label in "ABCDE":
        g.add_node(label)
    g.add_edge(0, 2)
    g.add_edge(1, 2)
    g.add_edge(2, 3)
    g.add_edge(1, 4)
    return g
