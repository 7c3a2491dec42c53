"""
NewsAPI connector for CrisisLens.

Queries the NewsAPI `everything` endpoint for recent articles matching
crisis keywords. Requires NEWS_API_KEY; articles from established outlets
are treated as verified.

API Documentation: https://newsapi.org/docs/endpoints/everything
"""
import aiohttp
from typing import Any, Dict, List, Optional
import logging

from crisislens.core.exceptions import SourceUnavailable
from crisislens.models.crisis_event import parse_timestamp
from .base import BaseConnector, RawEvent
from .config import (
    NEWS_API_KEY,
    NEWSAPI_BASE_URL,
    NEWSAPI_KEYWORDS,
    NEWSAPI_PAGE_SIZE,
    NEWSAPI_TIMEOUT_SECONDS,
    USER_AGENT,
)

logger = logging.getLogger(__name__)


class NewsApiConnector(BaseConnector):
    """Collects crisis news articles from NewsAPI."""

    timeout_seconds = NEWSAPI_TIMEOUT_SECONDS

    def __init__(
        self,
        api_key: Optional[str] = None,
        keywords: Optional[List[str]] = None,
        page_size: int = NEWSAPI_PAGE_SIZE,
        timeout_seconds: Optional[float] = None,
    ):
        super().__init__(timeout_seconds)
        self.api_key = api_key if api_key is not None else NEWS_API_KEY
        self.keywords = keywords or NEWSAPI_KEYWORDS
        self.page_size = page_size

    @property
    def name(self) -> str:
        return "NewsAPI"

    @property
    def source_type(self) -> str:
        return "newsapi"

    async def fetch(self) -> List[RawEvent]:
        if not self.api_key:
            raise SourceUnavailable(self.name, "NEWS_API_KEY not configured")

        params = {
            "q": " OR ".join(self.keywords),
            "sortBy": "publishedAt",
            "pageSize": str(self.page_size),
            "language": "en",
        }
        headers = {"X-Api-Key": self.api_key, "User-Agent": USER_AGENT}

        async with aiohttp.ClientSession(headers=headers) as session:
            async with session.get(
                f"{NEWSAPI_BASE_URL}/everything",
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as resp:
                if resp.status == 401:
                    raise SourceUnavailable(self.name, "invalid API key")
                if resp.status == 429:
                    raise SourceUnavailable(self.name, "rate limit exceeded")
                if resp.status != 200:
                    raise SourceUnavailable(self.name, f"HTTP {resp.status}")
                data = await resp.json()

        if data.get("status") != "ok":
            raise SourceUnavailable(self.name, data.get("message") or "unexpected response")

        articles = data.get("articles") or []
        events = []
        for article in articles:
            event = self._article_to_event(article)
            if event and self.is_relevant(event.text):
                events.append(event)

        self._logger.info(
            f"[CONNECT] [{self.name}] {len(events)} of {len(articles)} articles crisis-related"
        )
        return events

    def _article_to_event(self, article: Dict[str, Any]) -> Optional[RawEvent]:
        """Convert a NewsAPI article to RawEvent."""
        title = article.get("title")
        description = article.get("description")
        if not title or not description:
            return None

        text = self.truncate_text(self.clean_text(f"{title}. {description}"))
        source_name = (article.get("source") or {}).get("name") or "Unknown Source"
        published = parse_timestamp(article.get("publishedAt"))

        return RawEvent(
            text=text,
            source=source_name,
            timestamp=published,
            verified=True,
            url=article.get("url"),
        )
