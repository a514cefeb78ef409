"""
truthlens.db – in-memory analysis history store.

Provides the shared history buffer, its lock, and the record / query /
clear helpers used by the route handlers.  Nothing is persisted across
process restarts.
"""
from __future__ import annotations

import asyncio
import random
import string
import time
from typing import Literal

from pydantic import BaseModel, Field

from truthlens.ai.content_model import AnalysisResult

MAX_HISTORY = 10_000  # cap to prevent unbounded growth
PREVIEW_CHARS = 60

HistoryType = Literal["text", "image", "url"]


class HistoryRecord(BaseModel):
    """One archived scan, as listed in the history view."""
    id:             str
    preview:        str
    type:           HistoryType
    classification: str
    confidence:     int
    summary:        str
    virality_score: int
    is_ai_generated: bool
    risk_level:     str
    timestamp:      int = Field(default_factory=lambda: int(time.time() * 1000))


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------

_history: list[HistoryRecord] = []
_history_lock: asyncio.Lock = asyncio.Lock()
_max_history = MAX_HISTORY
_rng = random.Random()


def configure(max_history: int) -> None:
    """Set the buffer cap (called once at startup)."""
    global _max_history
    _max_history = max(1, max_history)


def make_preview(content: str, kind: HistoryType) -> str:
    if kind == "image":
        return "Image Analysis"
    if len(content) > PREVIEW_CHARS:
        return content[:PREVIEW_CHARS] + "..."
    return content


def build_record(
    result: AnalysisResult,
    content: str,
    kind: HistoryType,
    risk_level: str,
) -> HistoryRecord:
    return HistoryRecord(
        id="".join(_rng.choices(string.ascii_lowercase + string.digits, k=9)),
        preview=make_preview(content, kind),
        type=kind,
        classification=result.classification,
        confidence=result.confidence,
        summary=result.summary,
        virality_score=result.virality_score,
        is_ai_generated=result.is_ai_generated,
        risk_level=risk_level,
        timestamp=result.timestamp or int(time.time() * 1000),
    )


async def record_history(record: HistoryRecord) -> None:
    """
    Append a record to the in-memory history store.

    The oldest records are dropped whenever the buffer exceeds the cap.
    """
    async with _history_lock:
        _history.append(record)
        if len(_history) > _max_history:
            del _history[:-_max_history]


async def query_history(
    type_filter: str | None = None,
    classification_filter: str | None = None,
    search: str | None = None,
    limit: int = 500,
) -> dict:
    """
    Return history records with optional filters, newest-first.

    Args:
        type_filter            "text", "image" or "url" (case-insensitive).
        classification_filter  e.g. "Fake" (case-insensitive).
        search                 Substring matched against preview and summary.
        limit                  Maximum number of records (clamped 1–2000).

    Returns:
        {"records": [...], "total": int}
    """
    async with _history_lock:
        records = list(reversed(_history))  # newest first

    if type_filter:
        t = type_filter.lower()
        records = [r for r in records if r.type == t]

    if classification_filter:
        c = classification_filter.lower()
        records = [r for r in records if r.classification.lower() == c]

    if search:
        needle = search.lower()
        records = [
            r for r in records
            if needle in r.preview.lower() or needle in r.summary.lower()
        ]

    limit = max(1, min(limit, 2000))
    return {"records": records[:limit], "total": len(records)}


async def clear_history() -> int:
    """Drop every record; returns how many were removed."""
    async with _history_lock:
        removed = len(_history)
        _history.clear()
    return removed
