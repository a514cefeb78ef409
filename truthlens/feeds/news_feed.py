"""
truthlens.feeds.news_feed – procedural "global intel" news feed.

Headlines are assembled from fixed entity / action / topic tables.  All
randomness comes from a private random.Random, so a given seed always
produces the same feed; the dashboard polls for new items instead of
relying on timers.
"""
from __future__ import annotations

import random
import string
import time
from typing import Literal

from pydantic import BaseModel

from truthlens.ai.content_model import Classification

NewsCategory = Literal["Politics", "Health", "Finance", "Tech", "Global", "Cyber"]

MAX_FEED_ITEMS = 50

ENTITIES: tuple[str, ...] = (
    "Tech Giant 'CyberCore'", "Senator Williams", "Global Health Org",
    "Crypto Exchange 'BitVault'", "AI Startup 'Nexus'", "The Central Bank",
    "Oil Conglomerate", "Secret Service", "Whistleblower",
    "Hacktivist Group 'Anonymous'", "Foreign Diplomat", "SpaceX Competitor",
)

ACTIONS: tuple[str, ...] = (
    "leaks classified data regarding", "denies involvement in",
    "announces breakthrough in", "accused of manipulating",
    "suffers massive breach involving", "investigated for",
    "launches controversial", "bans usage of", "predicts collapse of",
    "acquires rights to",
)

TOPICS: tuple[str, ...] = (
    "quantum encryption keys", "Project Blue Skies", "synthetic voting algorithms",
    "underwater data centers", "new viral strain", "digital currency mandate",
    "Mars colony failure", "AI sentience patch", "global supply chain halt",
    "mind-interface patent",
)

# (name, type, reliability)
SOURCES: tuple[tuple[str, str, str], ...] = (
    ("Reuters",              "Mainstream",  "High"),
    ("The Daily Truth",      "Alternative", "Low"),
    ("TechCrunch",           "Tech",        "High"),
    ("DeepNet Forum",        "Darkweb",     "Unverified"),
    ("User @FreedomEagle",   "Social",      "Low"),
    ("Global Finance",       "Finance",     "High"),
    ("Health Watch",         "Health",      "Medium"),
    ("Cyber Sentinel",       "Cyber",       "High"),
)

CATEGORIES: tuple[str, ...] = ("Politics", "Health", "Finance", "Tech", "Global", "Cyber")


class NewsItem(BaseModel):
    id:        str
    title:     str
    source:    str
    category:  NewsCategory
    timestamp: int
    virality:  int
    status:    Classification
    snippet:   str
    author:    str


class NewsFeedGenerator:
    """
    Seeded generator of synthetic news items.

    Usage::

        gen = NewsFeedGenerator(seed=42)
        items = gen.batch(8)
    """

    def __init__(self, seed: int | None = None, clock=None) -> None:
        self._rng = random.Random(seed)
        self._clock = clock or (lambda: int(time.time() * 1000))

    def next_item(self) -> NewsItem:
        rng = self._rng
        entity = rng.choice(ENTITIES)
        action = rng.choice(ACTIONS)
        topic = rng.choice(TOPICS)
        source, source_type, reliability = rng.choice(SOURCES)
        category = rng.choice(CATEGORIES)

        return NewsItem(
            id="".join(rng.choices(string.ascii_lowercase + string.digits, k=9)),
            title=f"{entity} {action} {topic}",
            source=source,
            category=category,
            timestamp=self._clock(),
            virality=rng.randrange(100),
            status=self._status_for(reliability),
            snippet=(
                f"Latest intelligence indicates significant activity surrounding {topic}. "
                f"Analysts are monitoring {entity} closely as reports flood in from "
                f"{source}. Impact assessment underway."
            ),
            author="Citizen Journalist" if source_type == "Social" else "Staff Reporter",
        )

    def batch(self, count: int) -> list[NewsItem]:
        """Generate *count* items, newest first."""
        items = [self.next_item() for _ in range(max(0, count))]
        items.sort(key=lambda item: item.timestamp, reverse=True)
        return items

    def _status_for(self, reliability: str) -> Classification:
        # even reputable sources slip
        if reliability == "High":
            return "Misleading" if self._rng.random() > 0.9 else "Real"
        if reliability == "Low":
            return "Fake" if self._rng.random() > 0.4 else "Misleading"
        return "Real" if self._rng.random() > 0.5 else "Unverified"


class NewsFeed:
    """Bounded newest-first feed with category and text filters."""

    def __init__(
        self,
        generator: NewsFeedGenerator,
        max_items: int = MAX_FEED_ITEMS,
    ) -> None:
        self.generator = generator
        self.max_items = max_items
        self.items: list[NewsItem] = []

    def seed(self, count: int = 8) -> list[NewsItem]:
        self.items = self.generator.batch(count)[: self.max_items]
        return self.items

    def advance(self) -> NewsItem:
        """Push one new item to the front, dropping the oldest past the cap."""
        item = self.generator.next_item()
        self.items = [item, *self.items][: self.max_items]
        return item

    def filter(self, category: str = "All", query: str = "") -> list[NewsItem]:
        needle = query.lower()
        return [
            item for item in self.items
            if (category == "All" or item.category == category)
            and (needle in item.title.lower() or needle in item.source.lower())
        ]
