"""truthlens.feeds – synthetic news feed and trending-topic services."""
from .news_feed import NewsFeed, NewsFeedGenerator, NewsItem
from .trends import FALLBACK_TOPICS, SocialPost, TrendService

__all__ = [
    "NewsFeed",
    "NewsFeedGenerator",
    "NewsItem",
    "FALLBACK_TOPICS",
    "SocialPost",
    "TrendService",
]
