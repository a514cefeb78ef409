"""
truthlens.feeds.trends – model-generated trending topics and social posts.

Both calls degrade quietly: trending topics fall back to a fixed list and
related posts fall back to an empty list.
"""
from __future__ import annotations

import logging
import random
import string
from typing import Literal

from pydantic import BaseModel, ValidationError

from truthlens.ai.gemini_client import GeminiClient
from truthlens.config import get_settings
from truthlens.errors import GeminiError

logger = logging.getLogger(__name__)

FALLBACK_TOPICS: list[str] = [
    "Quantum encryption leak at NSA",
    "Mars colony critical failure",
    "Central bank digital currency mandated",
    "AI rights bill passes senate",
    "Oceanic anomaly detected in Pacific",
    "Global internet outage imminent",
    "New virus strain defies containment",
]

AVATAR_COLORS = ("bg-red-500", "bg-blue-500", "bg-green-500", "bg-purple-500", "bg-orange-500")

TOPICS_PROMPT = (
    "Generate 5 short, catchy, controversial, fictional trending news topics "
    "(max 6 words each) that sound like viral misinformation or breaking news. "
    "Return ONLY a JSON array of strings."
)

POSTS_PROMPT = """
Generate 5 realistic social media posts (tweets) about the topic: "{topic}".

Roles to simulate:
1. A panicked local citizen.
2. A conspiracy theory bot (using hashtags).
3. An official-sounding but fake news outlet.
4. A skeptic asking for sources.
5. A viral aggregator account.

Return a JSON array with this structure:
[
  {{
    "author": "Display Name",
    "handle": "@handle",
    "content": "Tweet text with hashtags",
    "platform": "Twitter",
    "likes": 120,
    "retweets": 45,
    "timeAgo": "2m",
    "isBot": true,
    "sentiment": "fear"
  }}
]
""".strip()


class SocialPost(BaseModel):
    id:           str = ""
    author:       str
    handle:       str
    avatar_color: str | None = None
    content:      str
    platform:     Literal["Twitter", "X", "Reddit", "Telegram"] = "Twitter"
    likes:        int = 0
    retweets:     int = 0
    time_ago:     str = ""
    is_bot:       bool = False
    sentiment:    Literal["fear", "anger", "neutral", "skepticism"] = "neutral"


_POST_KEYS = {"avatarColor": "avatar_color", "timeAgo": "time_ago", "isBot": "is_bot"}


class TrendService:
    """Trending-topic and related-post generation."""

    def __init__(self, client: GeminiClient | None = None, seed: int | None = None) -> None:
        self.client = client or GeminiClient()
        self.model = get_settings().gemini_text_model
        self._rng = random.Random(seed)

    async def trending_topics(self) -> list[str]:
        if not self.client.configured:
            return list(FALLBACK_TOPICS)
        try:
            data = await self.client.generate_json(self.model, TOPICS_PROMPT)
        except GeminiError as exc:
            logger.error("Failed to fetch trends: %s", exc)
            return list(FALLBACK_TOPICS)

        if not isinstance(data, list):
            return list(FALLBACK_TOPICS)
        topics = [t.strip() for t in data if isinstance(t, str) and t.strip()]
        return topics or list(FALLBACK_TOPICS)

    async def related_posts(self, topic: str) -> list[SocialPost]:
        if not self.client.configured or not topic.strip():
            return []
        try:
            data = await self.client.generate_json(
                self.model, POSTS_PROMPT.format(topic=topic)
            )
        except GeminiError as exc:
            logger.error("Failed to fetch posts: %s", exc)
            return []
        if not isinstance(data, list):
            return []

        posts: list[SocialPost] = []
        for raw in data:
            if not isinstance(raw, dict):
                continue
            item = {_POST_KEYS.get(k, k): v for k, v in raw.items()}
            item["id"] = "".join(
                self._rng.choices(string.ascii_lowercase + string.digits, k=9)
            )
            item["avatar_color"] = self._rng.choice(AVATAR_COLORS)
            try:
                posts.append(SocialPost.model_validate(item))
            except ValidationError:
                logger.debug("Skipping malformed post for topic %r", topic)
        return posts
