"""
truthlens.main – FastAPI application entry point.

Initialises singleton service instances and registers all API routes.

Start the server:
    uvicorn truthlens.main:app --reload --port 8000
"""
from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from contextlib import asynccontextmanager
from typing import Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from truthlens.ai.chat_model import AssistantService
from truthlens.ai.content_model import AnalysisResult, ContentAnalyzer, risk_level
from truthlens.ai.gemini_client import GeminiClient
from truthlens.ai.graph_model import EntityGraphExtractor
from truthlens.config import get_settings
from truthlens.db import database
from truthlens.errors import ContentFetchError
from truthlens.feeds.news_feed import NewsFeed, NewsFeedGenerator, NewsItem
from truthlens.feeds.trends import SocialPost, TrendService
from truthlens.graph.layout import Bounds, is_settled, run_until_settled
from truthlens.graph.models import Graph
from truthlens.graph.render import GraphView, build_view
from truthlens.logging import setup_logging
from truthlens.monitor.content_discovery import classify_input
from truthlens.monitor.image_scanner import SafeImageFetcher, sniff_image_type

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    database.configure(get_settings().max_history)
    if not live_feed.items:
        live_feed.seed()
    yield


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="TruthLens – Misinformation Detection API",
    version="1.0.0",
    description=(
        "Backend API for TruthLens: model-backed misinformation analysis, "
        "entity knowledge graphs and synthetic intelligence feeds."
    ),
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Singleton service instances
# ---------------------------------------------------------------------------

gemini          = GeminiClient()
fetcher         = SafeImageFetcher()
analyzer        = ContentAnalyzer(gemini)
graph_extractor = EntityGraphExtractor(gemini)
trend_service   = TrendService(gemini)
assistant       = AssistantService(gemini)
live_feed       = NewsFeed(NewsFeedGenerator())

# ---------------------------------------------------------------------------
# Pydantic request / response models
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    content:      str = Field(default="", description="Text, URL, or image context")
    kind:         Literal["auto", "text", "url", "image"] = "auto"
    image_base64: str | None = Field(
        default=None, description="Uploaded image as base64 or a data: URL"
    )
    mime_type:    str | None = Field(default=None, description="MIME type of the upload")


class AnalyzeResponse(BaseModel):
    kind:       Literal["text", "url", "image"]
    result:     AnalysisResult
    risk_level: Literal["LOW", "MEDIUM", "HIGH"]
    history_id: str


class GraphExtractRequest(BaseModel):
    text: str = Field(description="Content to extract entities from")
    seed: int | None = Field(default=None, description="Layout seed for reproducibility")


class GraphLayoutRequest(BaseModel):
    graph:     Graph
    seed:      int | None = None
    max_ticks: int | None = Field(default=None, ge=1, le=5000)


class TrendsResponse(BaseModel):
    topics: list[str]


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)


class ChatResponse(BaseModel):
    reply: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _decode_upload(payload: AnalyzeRequest) -> tuple[bytes, str]:
    raw = payload.image_base64 or ""
    mime_type = payload.mime_type
    if raw.startswith("data:") and "," in raw:
        header, raw = raw.split(",", 1)
        mime_type = mime_type or header[5:].split(";")[0] or None
    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=422, detail="image_base64 is not valid base64") from exc
    if not data:
        raise HTTPException(status_code=422, detail="image_base64 is empty")
    return data, mime_type or sniff_image_type(data) or "image/jpeg"


async def _fetch_image(url: str) -> tuple[bytes, str]:
    try:
        return await fetcher.fetch(url)
    except ContentFetchError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


async def _layout_view(
    graph: Graph, seed: int | None, max_ticks: int | None = None
) -> GraphView:
    settings = get_settings()
    bounds = Bounds(settings.layout_width, settings.layout_height)
    # O(n²) per tick; keep it off the event loop
    layout = await asyncio.to_thread(
        run_until_settled,
        graph,
        bounds,
        seed=seed,
        max_ticks=max_ticks or settings.layout_max_ticks,
    )
    return build_view(
        graph,
        layout,
        width=bounds.width,
        height=bounds.height,
        settled=graph.is_empty or is_settled(layout),
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/api/health")
async def health() -> dict[str, str]:
    """Liveness probe; returns {"status": "ok"} when the server is up."""
    return {"status": "ok"}


@app.post("/api/analyze", response_model=AnalyzeResponse)
async def analyze(payload: AnalyzeRequest) -> AnalyzeResponse:
    """Analyse text, a URL, or an image for misinformation."""
    content = payload.content.strip()
    image_bytes: bytes | None = None
    mime_type = "image/jpeg"

    if payload.image_base64:
        kind = "image"
        image_bytes, mime_type = _decode_upload(payload)
    else:
        if not content:
            raise HTTPException(status_code=422, detail="content is required")
        kind = payload.kind
        if kind == "auto":
            kind = {"IMAGE": "image", "URL": "url", "TEXT": "text"}[classify_input(content)]
        if kind == "image":
            image_bytes, mime_type = await _fetch_image(content)

    result = await analyzer.analyze(
        content, kind, image_bytes=image_bytes, mime_type=mime_type
    )
    level = risk_level(result, get_settings().analysis_sensitivity)

    record = database.build_record(result, content, kind, level)
    await database.record_history(record)
    logger.info(
        "Analysis complete",
        extra={
            "kind": kind,
            "classification": result.classification,
            "confidence": result.confidence,
            "risk_level": level,
        },
    )

    return AnalyzeResponse(
        kind=kind, result=result, risk_level=level, history_id=record.id
    )


@app.post("/api/graph/extract", response_model=GraphView)
async def extract_graph(payload: GraphExtractRequest) -> GraphView:
    """Extract an entity graph from text and return it laid out."""
    graph = await graph_extractor.extract(payload.text)
    max_nodes = get_settings().layout_max_nodes
    if len(graph.nodes) > max_nodes:
        logger.warning(
            "Extracted graph truncated", extra={"nodes": len(graph.nodes), "cap": max_nodes}
        )
        graph = Graph(nodes=graph.nodes[:max_nodes], links=graph.links)
    return await _layout_view(graph, payload.seed)


@app.post("/api/graph/layout", response_model=GraphView)
async def layout_graph(payload: GraphLayoutRequest) -> GraphView:
    """Lay out a client-supplied graph (at most layout_max_nodes nodes)."""
    max_nodes = get_settings().layout_max_nodes
    if len(payload.graph.nodes) > max_nodes:
        raise HTTPException(
            status_code=422, detail=f"graph has more than {max_nodes} nodes"
        )
    return await _layout_view(payload.graph, payload.seed, payload.max_ticks)


@app.get("/api/history")
async def get_history(
    type: str | None = None,
    classification: str | None = None,
    q: str | None = None,
    limit: int = 500,
) -> dict:
    """
    Return scan history with optional filters, newest-first.

    Query params:
        type            text, image or url (case-insensitive)
        classification  Real, Fake, Misleading, Satire, Unverified
        q               Substring search over preview and summary
        limit           Max records (default 500, max 2 000)
    """
    return await database.query_history(
        type_filter=type,
        classification_filter=classification,
        search=q,
        limit=limit,
    )


@app.delete("/api/history")
async def delete_history() -> dict[str, int]:
    return {"removed": await database.clear_history()}


@app.get("/api/feed/news", response_model=list[NewsItem])
async def news_feed(
    seed: int | None = None,
    count: int = 8,
    category: str = "All",
    q: str = "",
) -> list[NewsItem]:
    """Synthetic news feed; the same seed always yields the same items."""
    feed = NewsFeed(NewsFeedGenerator(seed))
    feed.seed(max(0, min(count, feed.max_items)))
    return feed.filter(category=category, query=q)


@app.get("/api/trends", response_model=TrendsResponse)
async def trends() -> TrendsResponse:
    return TrendsResponse(topics=await trend_service.trending_topics())


@app.get("/api/trends/posts", response_model=list[SocialPost])
async def trend_posts(topic: str) -> list[SocialPost]:
    return await trend_service.related_posts(topic)


@app.get("/api/feed/live", response_model=list[NewsItem])
async def live_news(category: str = "All", q: str = "") -> list[NewsItem]:
    """The shared live feed, newest first."""
    return live_feed.filter(category=category, query=q)


@app.post("/api/feed/live/advance", response_model=NewsItem)
async def advance_live_news() -> NewsItem:
    """Publish one new item to the live feed; polled by the dashboard ticker."""
    return live_feed.advance()


@app.post("/api/chat", response_model=ChatResponse)
async def chat(payload: ChatRequest) -> ChatResponse:
    return ChatResponse(reply=await assistant.reply(payload.message))
