"""
truthlens.graph.models – entity graph data model.

A Graph is built fresh from one analysis response and discarded when a new
analysis replaces it.  Links whose endpoints are missing from the node set
are tolerated here and skipped by every consumer (layout and rendering).
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

NodeType = Literal["Person", "Organization", "Location", "Event", "Concept", "Claim"]
RelationKind = Literal[
    "supports", "contradicts", "originates_from", "mentions", "affiliated_with",
]

NODE_TYPES: tuple[str, ...] = (
    "Person", "Organization", "Location", "Event", "Concept", "Claim",
)
RELATION_KINDS: tuple[str, ...] = (
    "supports", "contradicts", "originates_from", "mentions", "affiliated_with",
)

EMPTY_GRAPH_MESSAGE = "No entity relationships extracted."


class Node(BaseModel):
    """An entity extracted from analysed content."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id:         str      = Field(min_length=1)
    label:      str      = ""
    type:       NodeType = "Concept"
    risk_score: float    = Field(default=0.0, ge=0.0, le=100.0, alias="riskScore")


class Link(BaseModel):
    """A directed, typed relation between two node ids."""
    model_config = ConfigDict(frozen=True)

    source:   str
    target:   str
    relation: str          = ""
    type:     RelationKind = "mentions"


class Graph(BaseModel):
    """All nodes and links for one analysis result."""
    nodes: list[Node] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def resolved_links(self) -> list[Link]:
        """Links whose source and target both exist, in input order."""
        ids = self.node_ids()
        return [
            link for link in self.links
            if link.source in ids and link.target in ids
        ]

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None
