"""
Content fingerprint deduplication.

Reports are considered near-duplicates when the lower-cased leading slice of
their text hashes to the same value. Within a single source a shorter slice
is compared; across sources a longer one.
"""
import hashlib
import logging
from typing import Iterable, List, Set

from crisislens.models.crisis_event import CrisisEvent

logger = logging.getLogger(__name__)

SOURCE_FINGERPRINT_CHARS = 100
CROSS_SOURCE_FINGERPRINT_CHARS = 150


def fingerprint(text: str, length: int = CROSS_SOURCE_FINGERPRINT_CHARS) -> str:
    """SHA-1 of the normalized leading substring of the text."""
    normalized = (text or "").lower()[:length]
    return hashlib.sha1(normalized.encode("utf-8")).hexdigest()


def deduplicate(
    events: Iterable[CrisisEvent],
    length: int = SOURCE_FINGERPRINT_CHARS,
) -> List[CrisisEvent]:
    """Keep the first event for each fingerprint, preserving order."""
    seen: Set[str] = set()
    unique = []
    for event in events:
        key = fingerprint(event.text, length)
        if key in seen:
            continue
        seen.add(key)
        unique.append(event)
    return unique


def remove_cross_source_duplicates(events: Iterable[CrisisEvent]) -> List[CrisisEvent]:
    """
    Collapse near-duplicates across the merged set.

    Also drops later events whose id was already kept, so ids are unique in
    the output. Idempotent: running it on its own output changes nothing.
    """
    seen_hashes: Set[str] = set()
    seen_ids: Set[str] = set()
    unique = []
    dropped = 0

    for event in events:
        key = fingerprint(event.text, CROSS_SOURCE_FINGERPRINT_CHARS)
        if key in seen_hashes or event.id in seen_ids:
            dropped += 1
            continue
        seen_hashes.add(key)
        seen_ids.add(event.id)
        unique.append(event)

    if dropped:
        logger.debug(f"[DEDUP] Dropped {dropped} cross-source duplicates")
    return unique
