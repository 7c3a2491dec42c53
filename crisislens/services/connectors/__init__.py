"""
Source connectors for CrisisLens.

Each connector pulls short situational reports from one external source:
- Reddit (public JSON search, unverified community reports)
- NewsAPI (wire and broadcast news, requires NEWS_API_KEY)
- ReliefWeb (UN OCHA humanitarian reports, no key required)
- Static (replayed demo data for offline runs and tests)

Usage:
    from crisislens.services.connectors import get_all_connectors

    connectors = get_all_connectors()
    events = await connectors[0].fetch()

Environment Variables (optional):
    NEWS_API_KEY: Key from https://newsapi.org/ (NewsAPI is skipped without it)
    RELIEFWEB_APPNAME: Application name sent to the ReliefWeb API
"""
from typing import List, Optional

from .base import BaseConnector, RawEvent
from .config import NEWS_API_KEY
from .reddit_connector import RedditConnector
from .newsapi_connector import NewsApiConnector
from .reliefweb_connector import ReliefWebConnector
from .static_connector import StaticConnector

__all__ = [
    # Base classes
    "BaseConnector",
    "RawEvent",
    # Live connectors
    "RedditConnector",
    "NewsApiConnector",
    "ReliefWebConnector",
    # Offline
    "StaticConnector",
    # Factory functions
    "get_all_connectors",
    "get_offline_connectors",
]


def get_offline_connectors() -> List[BaseConnector]:
    """Connectors replaying the bundled demo feeds."""
    from crisislens.data.seed_events import mock_news_feed, mock_social_feed

    return [
        StaticConnector("Community Reports", mock_social_feed),
        StaticConnector("Wire Services", mock_news_feed),
    ]


def get_all_connectors(
    news_api_key: Optional[str] = None,
    offline: bool = False,
) -> List[BaseConnector]:
    """
    Get instances of all available connectors.

    Args:
        news_api_key: NewsAPI key; falls back to NEWS_API_KEY from the environment
        offline: Return only the static demo connectors

    Returns:
        List of connector instances in registration order.
    """
    if offline:
        return get_offline_connectors()

    connectors: List[BaseConnector] = [
        RedditConnector(),
        ReliefWebConnector(),
    ]

    api_key = news_api_key or NEWS_API_KEY
    if api_key:
        connectors.insert(1, NewsApiConnector(api_key=api_key))

    return connectors
