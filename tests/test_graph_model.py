"""Tests for entity-graph extraction."""
from __future__ import annotations

from truthlens.ai.graph_model import EntityGraphExtractor, parse_graph


async def test_extract_builds_graph(fake_gemini):
    fake_gemini.reply_json({
        "nodes": [
            {"id": "claim1", "label": "5G spreads viruses", "type": "Claim", "riskScore": 95},
            {"id": "who", "label": "WHO", "type": "Organization", "riskScore": 5},
        ],
        "links": [
            {"source": "who", "target": "claim1", "relation": "debunks", "type": "contradicts"},
        ],
    })
    extractor = EntityGraphExtractor(fake_gemini.client())

    graph = await extractor.extract("5G towers spread viruses, says a viral post.")

    assert [n.id for n in graph.nodes] == ["claim1", "who"]
    assert graph.nodes[0].risk_score == 95
    assert graph.links[0].type == "contradicts"
    prompt = fake_gemini.body()["contents"][0]["parts"][0]["text"]
    assert "5G towers spread viruses" in prompt
    assert "affiliated_with" in prompt


async def test_extract_failure_gives_empty_graph(fake_gemini):
    extractor = EntityGraphExtractor(fake_gemini.reply_status(500).client())

    graph = await extractor.extract("anything")

    assert graph.is_empty


async def test_blank_text_skips_model(fake_gemini):
    extractor = EntityGraphExtractor(fake_gemini.client())

    assert (await extractor.extract("   ")).is_empty
    assert fake_gemini.requests == []


def test_parse_graph_drops_invalid_items():
    graph = parse_graph({
        "nodes": [
            {"id": "a", "label": "A", "type": "Person", "riskScore": 140},
            {"id": "a", "label": "dup", "type": "Person"},
            {"id": "b", "label": "B", "type": "Spaceship"},
            {"label": "no id"},
            "junk",
            {"id": "c", "label": "C", "type": "Event", "risk_score": -3},
        ],
        "links": [
            {"source": "a", "target": "c", "relation": "attended", "type": "mentions"},
            {"source": "a", "target": "c", "type": "teleports"},
            {"source": "a"},
        ],
    })

    assert [n.id for n in graph.nodes] == ["a", "c"]
    assert graph.nodes[0].risk_score == 100.0
    assert graph.nodes[0].label == "A"
    assert graph.nodes[1].risk_score == 0.0
    assert len(graph.links) == 1


def test_parse_graph_non_object():
    assert parse_graph(["nodes"]).is_empty
    assert parse_graph({"nodes": "nope", "links": 3}).is_empty
