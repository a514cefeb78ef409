"""Tests for the knowledge-graph render view."""
from __future__ import annotations

import pytest

from truthlens.graph.layout import Bounds, Layout, NodeState, run_until_settled
from truthlens.graph.models import EMPTY_GRAPH_MESSAGE, Graph, Link, Node
from truthlens.graph.render import build_view, link_color, node_color, node_radius


@pytest.mark.parametrize(
    "node_type,risk,expected",
    [
        ("Person", 10, "#3b82f6"),
        ("Organization", 0, "#a855f7"),
        ("Location", 50, "#22c55e"),
        ("Event", 20, "#f97316"),
        ("Claim", 30, "#ec4899"),
        ("Concept", 30, "#64748b"),
        ("Person", 51, "#eab308"),
        ("Claim", 80, "#eab308"),
        ("Location", 81, "#ef4444"),
    ],
)
def test_node_color(node_type, risk, expected):
    assert node_color(node_type, risk) == expected


def test_link_color_and_radius():
    assert link_color("contradicts") == "#ef4444"
    assert link_color("supports") == "#22c55e"
    assert link_color("mentions") == "#475569"
    assert node_radius("Claim") == 15.0
    assert node_radius("Person") == 20.0


def test_empty_graph_view():
    view = build_view(Graph(), Layout())

    assert view.nodes == []
    assert view.edges == []
    assert view.empty_message == EMPTY_GRAPH_MESSAGE


def test_view_skips_dangling_links():
    graph = Graph(
        nodes=[
            Node(id="a", label="alpha", type="Claim", risk_score=90),
            Node(id="b", label="beta", type="Person", risk_score=10),
        ],
        links=[
            Link(source="a", target="b", relation="cites", type="supports"),
            Link(source="a", target="zzz", relation="orphan"),
        ],
    )
    layout = Layout(states={"a": NodeState(10.0, 20.0), "b": NodeState(30.0, 60.0)})

    view = build_view(graph, layout)

    assert view.empty_message is None
    assert [n.id for n in view.nodes] == ["a", "b"]
    assert view.nodes[0].initials == "AL"
    assert view.nodes[0].glow is True
    assert view.nodes[1].glow is False
    assert len(view.edges) == 1
    edge = view.edges[0]
    assert (edge.source, edge.target, edge.color) == ("a", "b", "#22c55e")
    assert edge.midpoint == (20.0, 40.0)


def test_view_from_settled_layout():
    graph = Graph(
        nodes=[Node(id=i, label=i) for i in "abc"],
        links=[Link(source="a", target="b")],
    )
    layout = run_until_settled(graph, Bounds(), seed=3)

    view = build_view(graph, layout, settled=True)

    assert len(view.nodes) == 3
    assert view.ticks == layout.ticks
    assert view.settled


def test_edge_midpoint_is_serialized():
    graph = Graph(
        nodes=[Node(id="a", label="A"), Node(id="b", label="B")],
        links=[Link(source="a", target="b")],
    )
    layout = Layout(states={"a": NodeState(0.0, 0.0), "b": NodeState(10.0, 30.0)})

    dumped = build_view(graph, layout).model_dump()

    assert dumped["edges"][0]["midpoint"] == (5.0, 15.0)


def test_repeated_node_id_is_drawn_once():
    graph = Graph(nodes=[Node(id="a", label="first"), Node(id="a", label="second")])
    layout = Layout(states={"a": NodeState(1.0, 2.0)})

    view = build_view(graph, layout)

    assert [n.label for n in view.nodes] == ["first"]
