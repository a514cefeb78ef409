"""
truthlens.ai.graph_model – entity/relationship extraction for the knowledge graph.

The model is asked for nodes and links as JSON.  Each item is validated on
its own and invalid items are dropped, so a partially malformed answer still
yields a usable graph.  Any hard failure yields an empty Graph.
"""
from __future__ import annotations

import logging

from pydantic import ValidationError

from truthlens.ai.gemini_client import GeminiClient
from truthlens.config import get_settings
from truthlens.errors import GeminiError
from truthlens.graph.models import NODE_TYPES, RELATION_KINDS, Graph, Link, Node

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 8000

EXTRACTION_PROMPT = """Extract the key entities and relationships from the content below
for a misinformation knowledge graph.

Entity types: {node_types}.
Relation types: {relation_kinds}.

For each entity provide:
- id: short unique identifier (lowercase, no spaces)
- label: display name
- type: one of the entity types
- riskScore: 0-100, how strongly the entity is associated with misinformation

For each relationship provide:
- source: id of the source entity
- target: id of the target entity
- relation: a short free-text description
- type: one of the relation types

Content:
---
{text}
---

Return ONLY valid JSON:
{{"nodes": [{{"id": "who", "label": "World Health Organization", "type": "Organization", "riskScore": 5}}],
  "links": [{{"source": "claim1", "target": "who", "relation": "cites", "type": "mentions"}}]}}"""


class EntityGraphExtractor:
    """Build a Graph from free text via the hosted model."""

    def __init__(self, client: GeminiClient | None = None) -> None:
        self.client = client or GeminiClient()
        self.model = get_settings().gemini_text_model

    async def extract(self, text: str) -> Graph:
        if not text or not text.strip():
            return Graph()
        if len(text) > MAX_INPUT_CHARS:
            text = text[:MAX_INPUT_CHARS] + "\n...[truncated]..."

        prompt = EXTRACTION_PROMPT.format(
            node_types=", ".join(NODE_TYPES),
            relation_kinds=", ".join(RELATION_KINDS),
            text=text,
        )
        try:
            data = await self.client.generate_json(self.model, prompt)
        except GeminiError as exc:
            logger.error("Entity extraction failed: %s", exc)
            return Graph()

        return parse_graph(data)


def parse_graph(data) -> Graph:
    """Validate a raw {"nodes": [...], "links": [...]} payload item by item."""
    if not isinstance(data, dict):
        logger.warning("Entity extraction response is not a JSON object")
        return Graph()

    raw_nodes = data.get("nodes")
    raw_links = data.get("links")
    if not isinstance(raw_nodes, list):
        raw_nodes = []
    if not isinstance(raw_links, list):
        raw_links = []

    nodes: list[Node] = []
    seen: set[str] = set()
    for item in raw_nodes:
        if not isinstance(item, dict):
            continue
        item = dict(item)
        score = item.get("riskScore", item.get("risk_score"))
        if isinstance(score, (int, float)):
            item["riskScore"] = max(0.0, min(100.0, float(score)))
            item.pop("risk_score", None)
        try:
            node = Node.model_validate(item)
        except ValidationError:
            continue
        if node.id in seen:
            continue
        seen.add(node.id)
        nodes.append(node)

    links: list[Link] = []
    for item in raw_links:
        if not isinstance(item, dict):
            continue
        try:
            links.append(Link.model_validate(item))
        except ValidationError:
            continue

    dropped = len(raw_links) - len(links)
    if dropped:
        logger.debug("Dropped %d invalid links from extraction", dropped)
    return Graph(nodes=nodes, links=links)
