"""truthlens.graph – entity graph model, force layout and render view."""
from .layout import (
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
from .models import EMPTY_GRAPH_MESSAGE, Graph, Link, Node
from .render import GraphView, build_view

__all__ = [
    "Bounds",
    "Layout",
    "LayoutConfig",
    "NodeState",
    "initialize",
    "is_settled",
    "kinetic_energy",
    "run_until_settled",
    "tick",
    "EMPTY_GRAPH_MESSAGE",
    "Graph",
    "Link",
    "Node",
    "GraphView",
    "build_view",
]
