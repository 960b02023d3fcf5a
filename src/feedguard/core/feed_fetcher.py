#!/usr/bin/env python3
"""
RSS Feed Fetcher

Reference orchestrator for the reliability engine: fetches feeds in
performance order, honors circuit breakers and adaptive timeouts, caches
parsed results and reports every attempt back to the engine.
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import feedparser
import pytz
import requests
from dateutil import parser as date_parser

from .cache import create_content_hash
from .config import FetchSettings
from .engine import ReliabilityEngine
from .exceptions import CacheCorruptionError, SourceError, SourceFetchError, SourceTimeoutError
from .models import FeedItem, FeedSource, RankedSource

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of fetching one source."""
    source: FeedSource
    success: bool
    items: List[FeedItem] = field(default_factory=list)
    error: Optional[str] = None
    latency_ms: float = 0.0
    from_cache: bool = False
    timeout_ms: Optional[int] = None


class FeedFetcher:
    """Fetches feeds through a ReliabilityEngine."""

    def __init__(self,
                 engine: ReliabilityEngine,
                 settings: Optional[FetchSettings] = None,
                 session: Optional[requests.Session] = None):
        self.engine = engine
        self.settings = settings or FetchSettings()
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': self.settings.user_agent})

    @staticmethod
    def cache_key(source: FeedSource) -> str:
        return create_content_hash(f"{source.url}:{source.display_name}")

    def fetch_feed(self, source: FeedSource, timeout_ms: int) -> FetchResult:
        """
        Fetch and parse one feed, serving from the rss: cache when possible.

        Raises:
            SourceTimeoutError: The request exceeded timeout_ms
            SourceFetchError: HTTP or parse failure
        """
        cache_key = self.cache_key(source)

        try:
            cached = self.engine.cache.get_feed_content(cache_key)
        except CacheCorruptionError as e:
            logger.warning(f"Discarding corrupted cache entry for {source.id}: {e}")
            self.engine.cache.delete(f"rss:{cache_key}")
            cached = None

        if cached is not None:
            logger.debug(f"Using cached RSS feed for {source.id}")
            items = [FeedItem.from_dict(item) for item in json.loads(cached)]
            return FetchResult(source=source, success=True, items=items, from_cache=True, timeout_ms=timeout_ms)

        try:
            logger.info(f"Fetching feed {source.id} from {source.url} (timeout {timeout_ms}ms)")
            response = self.session.get(source.url, timeout=timeout_ms / 1000)
            response.raise_for_status()
        except requests.Timeout:
            raise SourceTimeoutError(source.id, timeout_ms)
        except requests.RequestException as e:
            raise SourceFetchError(source.id, source.url, e) from e

        feed = feedparser.parse(response.content)
        if feed.bozo and not feed.entries:
            raise SourceFetchError(source.id, source.url, feed.bozo_exception)
        if feed.bozo:
            logger.warning(f"Feed parsing warning for {source.id}: {feed.bozo_exception}")

        items = self.parse_feed_entries(feed, source)
        self.engine.cache.cache_feed_content(cache_key, json.dumps([i.to_dict() for i in items], ensure_ascii=False))

        return FetchResult(source=source, success=True, items=items, timeout_ms=timeout_ms)

    def parse_feed_entries(self, feed: feedparser.FeedParserDict, source: FeedSource) -> List[FeedItem]:
        """Parse entries into FeedItems, capped at max_articles_per_feed."""
        entries = list(getattr(feed, 'entries', []))
        limit = self.settings.max_articles_per_feed
        if len(entries) > limit:
            logger.info(f"Limited {source.id} from {len(entries)} to {limit} articles")

        return [
            FeedItem(
                title=entry.get('title', ''),
                link=entry.get('link', ''),
                source_id=source.id,
                published=parse_published_date(entry),
                summary=entry.get('summary', '')
            )
            for entry in entries[:limit]
        ]

    def _fetch_and_record(self, ranked: RankedSource) -> FetchResult:
        source = ranked.source
        timeout_ms = ranked.adaptive_timeout
        start_time = time.time()

        try:
            result = self.fetch_feed(source, timeout_ms)
        except SourceError as e:
            latency_ms = (time.time() - start_time) * 1000
            logger.error(f"Error fetching RSS feed {source.id}: {e.message}")
            self.engine.record(source.id, latency_ms, False, error=e.message)
            return FetchResult(source=source, success=False, error=e.message,
                               latency_ms=latency_ms, timeout_ms=timeout_ms)

        result.latency_ms = (time.time() - start_time) * 1000
        # Cache hits never touched the source, so they say nothing about it
        if not result.from_cache:
            self.engine.record(source.id, result.latency_ms, True)
        return result

    def fetch_all(self, sources: List[FeedSource]) -> List[FetchResult]:
        """Fetch every admitted source concurrently, in performance order."""
        ordered = self.engine.ordered_sources(sources)
        logger.info(
            "Performance-prioritized feeds: "
            + ", ".join(f"{r.id}(rel:{r.reliability})" for r in ordered)
        )

        if not ordered:
            return []

        with ThreadPoolExecutor(max_workers=self.settings.max_concurrent_feeds) as executor:
            results = list(executor.map(self._fetch_and_record, ordered))

        successful = [r for r in results if r.success]
        failed = [r for r in results if not r.success]
        logger.info(f"RSS Fetch Summary: {len(successful)}/{len(results)} feeds successful")
        if failed:
            logger.info(f"Failed feeds: {', '.join(r.source.id for r in failed)}")

        return results


def parse_published_date(entry: Dict) -> Optional[datetime]:
    """Parse an entry's date into an aware UTC datetime."""
    for field_name in ('published', 'updated', 'created'):
        date_str = entry.get(field_name)
        if not date_str:
            continue
        try:
            dt = date_parser.parse(date_str)
        except (ValueError, OverflowError) as e:
            logger.debug(f"Failed to parse date '{date_str}': {e}")
            continue
        if dt.tzinfo is None:
            dt = pytz.utc.localize(dt)
        return dt.astimezone(pytz.utc)

    parsed = entry.get('published_parsed')
    if parsed:
        return pytz.utc.localize(datetime(*parsed[:6]))

    return None
