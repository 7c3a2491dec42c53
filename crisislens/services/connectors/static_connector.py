"""
Static connector for offline runs and tests.

Replays a fixed list of RawEvents (or a factory producing them), optionally
after an artificial delay or with a forced failure.
"""
import asyncio
from typing import Callable, List, Optional, Sequence, Union

from crisislens.core.exceptions import SourceUnavailable
from .base import BaseConnector, RawEvent
from .config import STATIC_TIMEOUT_SECONDS

EventSource = Union[Sequence[RawEvent], Callable[[], Sequence[RawEvent]]]


class StaticConnector(BaseConnector):
    """Returns pre-built events instead of calling a remote source."""

    timeout_seconds = STATIC_TIMEOUT_SECONDS

    def __init__(
        self,
        name: str,
        events: EventSource = (),
        delay_seconds: float = 0.0,
        fail_with: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """
        Args:
            name: Connector name reported in source statuses
            events: Events to return, or a callable building them per fetch
            delay_seconds: Sleep before returning (simulates a slow source)
            fail_with: If set, fetch raises SourceUnavailable with this message
            timeout_seconds: Override for the per-source deadline
        """
        super().__init__(timeout_seconds)
        self._name = name
        self._events = events
        self.delay_seconds = delay_seconds
        self.fail_with = fail_with
        self.fetch_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def source_type(self) -> str:
        return "static"

    async def fetch(self) -> List[RawEvent]:
        self.fetch_count += 1
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.fail_with:
            raise SourceUnavailable(self.name, self.fail_with)

        events = self._events() if callable(self._events) else self._events
        self._logger.debug(f"[CONNECT] [{self.name}] Replaying {len(events)} events")
        return list(events)
