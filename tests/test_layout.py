"""Tests for the force-directed layout engine."""
from __future__ import annotations

import itertools
import math

import pytest

from truthlens.graph.layout import (
    Bounds,
    Layout,
    LayoutConfig,
    NodeState,
    initialize,
    is_settled,
    kinetic_energy,
    run_until_settled,
    tick,
)
from truthlens.graph.models import Graph, Link, Node

BOUNDS = Bounds(800.0, 600.0)
NO_GRAVITY = LayoutConfig(center_gravity=0.0)


def make_graph(ids, links=()) -> Graph:
    return Graph(
        nodes=[Node(id=i, label=i.upper()) for i in ids],
        links=[Link(source=s, target=t, relation="rel") for s, t in links],
    )


def run(layout: Layout, graph: Graph, n: int, config: LayoutConfig = LayoutConfig()) -> Layout:
    for _ in range(n):
        layout = tick(layout, graph, BOUNDS, config)
    return layout


def min_pairwise_distance(layout: Layout) -> float:
    return min(
        layout.distance(a, b)
        for a, b in itertools.combinations(layout.states, 2)
    )


class TestInitialize:

    @pytest.mark.parametrize("count", [0, 1, 5, 30])
    def test_one_position_per_node_within_bounds(self, count):
        graph = make_graph([f"n{i}" for i in range(count)])

        layout = initialize(graph, BOUNDS, seed=count)

        assert len(layout) == count
        assert set(layout.states) == graph.node_ids()
        for state in layout.states.values():
            assert 0.0 <= state.x <= BOUNDS.width
            assert 0.0 <= state.y <= BOUNDS.height
            assert state.vx == 0.0 and state.vy == 0.0

    def test_empty_graph_gives_empty_layout(self):
        layout = initialize(Graph(), BOUNDS, seed=1)

        assert len(layout) == 0
        assert kinetic_energy(layout) == 0.0

    def test_same_seed_same_positions(self):
        graph = make_graph(["a", "b", "c"])

        first = initialize(graph, BOUNDS, seed=42)
        second = initialize(graph, BOUNDS, seed=42)

        assert first.states == second.states

    def test_different_seeds_differ(self):
        graph = make_graph(["a", "b", "c"])

        assert initialize(graph, BOUNDS, seed=1).states != initialize(graph, BOUNDS, seed=2).states


class TestTick:

    def test_tick_is_deterministic(self):
        graph = make_graph(["a", "b", "c", "d"], [("a", "b"), ("c", "d")])
        start = initialize(graph, BOUNDS, seed=9)

        assert run(start, graph, 50).states == run(start, graph, 50).states

    def test_tick_does_not_mutate_input(self):
        graph = make_graph(["a", "b"], [("a", "b")])
        start = initialize(graph, BOUNDS, seed=3)
        snapshot = start.copy()

        tick(start, graph, BOUNDS)

        assert start.states == snapshot.states
        assert start.ticks == 0

    def test_tick_counter_advances(self):
        graph = make_graph(["a"])

        layout = run(initialize(graph, BOUNDS, seed=1), graph, 7)

        assert layout.ticks == 7

    def test_identities_are_invariant(self):
        graph = make_graph(["a", "b", "c"], [("a", "b"), ("b", "c")])
        links_before = [link.model_dump() for link in graph.links]

        layout = run(initialize(graph, BOUNDS, seed=5), graph, 120)

        assert set(layout.states) == {"a", "b", "c"}
        assert [link.model_dump() for link in graph.links] == links_before

    def test_empty_layout_tick_is_noop(self):
        layout = tick(Layout(), Graph(), BOUNDS)

        assert len(layout) == 0
        assert is_settled(layout)

    def test_coincident_nodes_do_not_divide_by_zero(self):
        graph = make_graph(["a", "b"], [("a", "b")])
        layout = Layout(states={"a": NodeState(100.0, 100.0), "b": NodeState(100.0, 100.0)})

        layout = tick(layout, graph, BOUNDS)

        for state in layout.states.values():
            assert math.isfinite(state.x) and math.isfinite(state.y)

    def test_repulsion_pushes_pair_apart(self):
        graph = make_graph(["a", "b"])
        layout = Layout(states={"a": NodeState(390.0, 300.0), "b": NodeState(410.0, 300.0)})

        layout = tick(layout, graph, BOUNDS, NO_GRAVITY)

        assert layout.distance("a", "b") > 20.0

    def test_stretched_spring_pulls_pair_together(self):
        graph = make_graph(["a", "b"], [("a", "b")])
        layout = Layout(states={"a": NodeState(0.0, 300.0), "b": NodeState(800.0, 300.0)})

        layout = tick(layout, graph, BOUNDS, NO_GRAVITY)

        assert layout.distance("a", "b") < 800.0


class TestConvergence:

    def test_single_node_moves_to_center(self):
        graph = make_graph(["solo"])

        layout = run(initialize(graph, BOUNDS, seed=4), graph, 250)

        x, y = layout.position("solo")
        assert x == pytest.approx(400.0, abs=0.01)
        assert y == pytest.approx(300.0, abs=0.01)

    def test_no_links_spreads_around_center_without_collapsing(self):
        ids = [f"n{i}" for i in range(6)]
        graph = make_graph(ids)
        start = initialize(graph, BOUNDS, seed=3)

        layout = run(start, graph, 300)

        cx = sum(s.x for s in layout.states.values()) / len(ids)
        cy = sum(s.y for s in layout.states.values()) / len(ids)
        assert cx == pytest.approx(400.0, abs=1.0)
        assert cy == pytest.approx(300.0, abs=1.0)
        assert min_pairwise_distance(layout) > 20.0

        def mean_offset(lay):
            return sum(math.hypot(s.x - 400.0, s.y - 300.0) for s in lay.states.values()) / len(ids)

        assert mean_offset(layout) < mean_offset(start)

    def test_linked_pair_converges_to_spring_length(self):
        graph = make_graph(["a", "b"], [("a", "b")])

        layout = run(initialize(graph, BOUNDS, seed=11), graph, 400, NO_GRAVITY)

        assert layout.distance("a", "b") == pytest.approx(150.0, abs=5.0)

    def test_centering_shortens_linked_pair(self):
        graph = make_graph(["a", "b"], [("a", "b")])

        layout = run(initialize(graph, BOUNDS, seed=11), graph, 400)

        assert 100.0 < layout.distance("a", "b") < 150.0

    def test_three_node_scenario(self):
        graph = make_graph(["a", "b", "c"], [("a", "b")])

        layout = run(initialize(graph, BOUNDS, seed=21), graph, 200, NO_GRAVITY)

        assert layout.distance("a", "b") == pytest.approx(150.0, abs=10.0)
        assert layout.distance("a", "c") > 40.0
        assert layout.distance("b", "c") > 40.0

    @pytest.mark.parametrize(
        "ids,links",
        [
            (["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "a"), ("c", "d")]),
            (["a", "b", "c", "d", "e"], [("a", "b")]),
            (["x", "y", "z"], []),
        ],
        ids=["connected", "partly-linked", "disconnected"],
    )
    def test_settles_within_500_ticks(self, ids, links):
        graph = make_graph(ids, links)

        layout = run_until_settled(graph, BOUNDS, seed=7, max_ticks=500)

        assert is_settled(layout)
        assert layout.ticks < 500


class TestDanglingLinks:

    def test_missing_endpoint_is_skipped(self):
        with_dangling = make_graph(["a", "b"], [("a", "ghost"), ("ghost", "b")])
        without = make_graph(["a", "b"])

        layout_a = run(initialize(with_dangling, BOUNDS, seed=8), with_dangling, 60)
        layout_b = run(initialize(without, BOUNDS, seed=8), without, 60)

        assert layout_a.states == layout_b.states

    def test_graph_resolved_links(self):
        graph = make_graph(["a", "b"], [("a", "b"), ("a", "ghost")])

        assert [(l.source, l.target) for l in graph.resolved_links()] == [("a", "b")]


def test_is_settled_threshold():
    layout = Layout(states={"a": NodeState(0, 0, vx=0.2, vy=-0.2)})

    assert kinetic_energy(layout) == pytest.approx(0.4)
    assert is_settled(layout)
    assert not is_settled(layout, LayoutConfig(settle_threshold=0.3))
