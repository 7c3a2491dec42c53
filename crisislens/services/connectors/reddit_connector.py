"""
Reddit connector for CrisisLens.

Searches configured subreddits for crisis discussions through the public
JSON API (no auth required). Reddit posts are treated as unverified, with
post score and comment count carried as social engagement signals.
"""
import asyncio
import aiohttp
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from crisislens.core.exceptions import SourceUnavailable
from crisislens.models.crisis_event import SocialMetrics
from .base import BaseConnector, RawEvent
from .config import (
    REDDIT_BASE_URL,
    REDDIT_POSTS_PER_SUB,
    REDDIT_SEARCH_TERMS,
    REDDIT_SELFTEXT_CHARS,
    REDDIT_SUBREDDITS,
    REDDIT_TIMEOUT_SECONDS,
    USER_AGENT,
)

logger = logging.getLogger(__name__)

# Fraction of the connector deadline granted to each subreddit request
REQUEST_DEADLINE_SHARE = 0.9


class RedditConnector(BaseConnector):
    """Collects crisis-related posts from configured subreddits."""

    timeout_seconds = REDDIT_TIMEOUT_SECONDS

    def __init__(
        self,
        subreddits: Optional[List[str]] = None,
        posts_per_sub: int = REDDIT_POSTS_PER_SUB,
        search_terms: Optional[List[str]] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """
        Initialize Reddit connector.

        Args:
            subreddits: List of subreddit names to search
            posts_per_sub: Number of posts to request per subreddit
            search_terms: Terms OR-ed together in the search query
            timeout_seconds: Override for the per-source deadline
        """
        super().__init__(timeout_seconds)
        self.subreddits = subreddits or REDDIT_SUBREDDITS
        self.posts_per_sub = posts_per_sub
        self.search_terms = search_terms or REDDIT_SEARCH_TERMS

    @property
    def request_timeout_seconds(self) -> float:
        return self.timeout_seconds * REQUEST_DEADLINE_SHARE

    @property
    def name(self) -> str:
        return "Reddit"

    @property
    def source_type(self) -> str:
        return "reddit"

    async def fetch(self) -> List[RawEvent]:
        """
        Search all subreddits concurrently; a subreddit failure skips only that subreddit.

        Each request gets slightly less than the connector deadline so a slow
        subreddit fails on its own instead of discarding the posts already
        collected from the others.
        """
        events: List[RawEvent] = []
        failures = 0
        headers = {"User-Agent": USER_AGENT}

        async with aiohttp.ClientSession(headers=headers) as session:
            results = await asyncio.gather(
                *(self._search_subreddit(session, sub_name) for sub_name in self.subreddits),
                return_exceptions=True,
            )

        for sub_name, result in zip(self.subreddits, results):
            if isinstance(result, asyncio.TimeoutError):
                failures += 1
                self._logger.warning(f"[CONNECT] [{self.name}] r/{sub_name} timed out")
                continue
            if isinstance(result, (aiohttp.ClientError, ValueError)):
                failures += 1
                self._logger.warning(
                    f"[CONNECT] [{self.name}] r/{sub_name} error: {type(result).__name__}: {result}"
                )
                continue
            if isinstance(result, BaseException):
                raise result

            for index, post in enumerate(result):
                event = self._post_to_event(post, sub_name, index)
                if event and self.is_relevant(event.text):
                    events.append(event)

        if failures and failures == len(self.subreddits):
            raise SourceUnavailable(self.name, f"all {failures} subreddits failed")

        self._logger.info(f"[CONNECT] [{self.name}] Collected {len(events)} posts")
        return events

    async def _search_subreddit(
        self,
        session: aiohttp.ClientSession,
        sub_name: str,
    ) -> List[Dict[str, Any]]:
        url = f"{REDDIT_BASE_URL}/{sub_name}/search.json"
        params = {
            "q": " OR ".join(self.search_terms),
            "sort": "new",
            "limit": str(self.posts_per_sub),
            "t": "week",
            "restrict_sr": "1",
        }
        async with session.get(
            url, params=params, timeout=aiohttp.ClientTimeout(total=self.request_timeout_seconds)
        ) as resp:
            if resp.status != 200:
                raise aiohttp.ClientResponseError(
                    resp.request_info, resp.history,
                    status=resp.status, message=f"r/{sub_name} returned status {resp.status}",
                )
            data = await resp.json()

        children = (data.get("data") or {}).get("children") or []
        return [child.get("data") or {} for child in children]

    def _combine_post_text(self, post: Dict[str, Any]) -> str:
        text = post.get("title") or ""
        selftext = post.get("selftext") or ""
        if selftext and selftext != "[removed]":
            text += ". " + selftext[:REDDIT_SELFTEXT_CHARS]
        return self.truncate_text(self.clean_text(text))

    def _post_to_event(
        self,
        post: Dict[str, Any],
        sub_name: str,
        index: int,
    ) -> Optional[RawEvent]:
        """Convert a Reddit post to RawEvent."""
        if not post.get("title"):
            return None

        created_utc = post.get("created_utc")
        if created_utc:
            published = datetime.fromtimestamp(created_utc, tz=timezone.utc)
        else:
            published = datetime.now(timezone.utc)

        permalink = post.get("permalink")
        return RawEvent(
            id=f"reddit_{sub_name}_{post.get('id') or index}",
            text=self._combine_post_text(post),
            source=f"r/{sub_name}",
            timestamp=published,
            verified=False,
            url=f"https://reddit.com{permalink}" if permalink else None,
            social=SocialMetrics(
                shares=0,
                likes=int(post.get("score") or 0),
                comments=int(post.get("num_comments") or 0),
            ),
        )
