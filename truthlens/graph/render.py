"""
truthlens.graph.render – map a laid-out graph onto renderable primitives.

The dashboard draws whatever this module returns: positioned, coloured
nodes and edges.  Edges are emitted only for links whose endpoints exist.
"""
from __future__ import annotations

from pydantic import BaseModel, Field, computed_field

from truthlens.graph.layout import Layout
from truthlens.graph.models import EMPTY_GRAPH_MESSAGE, Graph

HIGH_RISK_THRESHOLD = 80.0
ELEVATED_RISK_THRESHOLD = 50.0

_TYPE_COLORS: dict[str, str] = {
    "Person":       "#3b82f6",
    "Organization": "#a855f7",
    "Location":     "#22c55e",
    "Event":        "#f97316",
    "Claim":        "#ec4899",
}
_DEFAULT_NODE_COLOR = "#64748b"

_LINK_COLORS: dict[str, str] = {
    "contradicts": "#ef4444",
    "supports":    "#22c55e",
}
_DEFAULT_LINK_COLOR = "#475569"


class GraphNodeView(BaseModel):
    id:         str
    label:      str
    type:       str
    risk_score: float
    x:          float
    y:          float
    color:      str
    radius:     float
    initials:   str
    glow:       bool


class GraphEdgeView(BaseModel):
    source:   str
    target:   str
    relation: str
    type:     str
    color:    str
    x1: float
    y1: float
    x2: float
    y2: float

    @computed_field
    @property
    def midpoint(self) -> tuple[float, float]:
        return (self.x1 + self.x2) / 2.0, (self.y1 + self.y2) / 2.0


class GraphView(BaseModel):
    """Pre-laid-out knowledge graph ready for drawing."""
    nodes:         list[GraphNodeView] = Field(default_factory=list)
    edges:         list[GraphEdgeView] = Field(default_factory=list)
    width:         float = 800.0
    height:        float = 600.0
    ticks:         int   = 0
    settled:       bool  = True
    empty_message: str | None = None


def node_color(node_type: str, risk_score: float) -> str:
    """Risk overrides type: above 80 is red, above 50 is yellow."""
    if risk_score > HIGH_RISK_THRESHOLD:
        return "#ef4444"
    if risk_score > ELEVATED_RISK_THRESHOLD:
        return "#eab308"
    return _TYPE_COLORS.get(node_type, _DEFAULT_NODE_COLOR)


def link_color(kind: str) -> str:
    return _LINK_COLORS.get(kind, _DEFAULT_LINK_COLOR)


def node_radius(node_type: str) -> float:
    return 15.0 if node_type == "Claim" else 20.0


def build_view(
    graph: Graph,
    layout: Layout,
    *,
    width: float = 800.0,
    height: float = 600.0,
    settled: bool = True,
) -> GraphView:
    """Combine graph attributes with layout positions."""
    if graph.is_empty:
        return GraphView(
            width=width, height=height, empty_message=EMPTY_GRAPH_MESSAGE
        )

    nodes: list[GraphNodeView] = []
    emitted: set[str] = set()
    for node in graph.nodes:
        state = layout.states.get(node.id)
        if state is None or node.id in emitted:
            continue
        emitted.add(node.id)
        nodes.append(GraphNodeView(
            id=node.id,
            label=node.label,
            type=node.type,
            risk_score=node.risk_score,
            x=round(state.x, 2),
            y=round(state.y, 2),
            color=node_color(node.type, node.risk_score),
            radius=node_radius(node.type),
            initials=node.label[:2].upper(),
            glow=node.risk_score > ELEVATED_RISK_THRESHOLD,
        ))

    edges: list[GraphEdgeView] = []
    for link in graph.resolved_links():
        source = layout.states.get(link.source)
        target = layout.states.get(link.target)
        if source is None or target is None:
            continue
        edges.append(GraphEdgeView(
            source=link.source,
            target=link.target,
            relation=link.relation,
            type=link.type,
            color=link_color(link.type),
            x1=round(source.x, 2),
            y1=round(source.y, 2),
            x2=round(target.x, 2),
            y2=round(target.y, 2),
        ))

    return GraphView(
        nodes=nodes,
        edges=edges,
        width=width,
        height=height,
        ticks=layout.ticks,
        settled=settled,
    )
