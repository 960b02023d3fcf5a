from dataclasses import replace

import requests

from feedguard.core.cache import CachedContent
from feedguard.core.config import FetchSettings
from feedguard.core.feed_fetcher import FeedFetcher, parse_published_date
from feedguard.core.models import CircuitState, FeedSource

FEED_URL = "https://feeds.example.com/ai.xml"
OTHER_URL = "https://other.example.com/rss"


def _source(source_id="example", url=FEED_URL, priority=1):
    return FeedSource(id=source_id, url=url, name=source_id.title(), priority=priority)


def test_successful_fetch_is_recorded_and_cached(engine, fake_session_factory, rss_factory):
    session = fake_session_factory({FEED_URL: rss_factory(items=3)})
    fetcher = FeedFetcher(engine, session=session)

    results = fetcher.fetch_all([_source()])

    assert len(results) == 1
    result = results[0]
    assert result.success
    assert [item.title for item in result.items] == ["Story 0", "Story 1", "Story 2"]
    assert result.items[0].source_id == "example"
    assert result.timeout_ms == 6000
    assert session.calls == [{"url": FEED_URL, "timeout": 6.0}]
    assert session.headers["User-Agent"] == FetchSettings().user_agent

    history = engine.metrics.history("example")
    assert len(history) == 1 and history[0].success
    assert f"rss:{FeedFetcher.cache_key(_source())}" in engine.cache.keys()


def test_second_round_is_served_from_cache(engine, fake_session_factory, rss_factory):
    session = fake_session_factory({FEED_URL: rss_factory(items=2)})
    fetcher = FeedFetcher(engine, session=session)

    fetcher.fetch_all([_source()])
    second = fetcher.fetch_all([_source()])[0]

    assert second.success and second.from_cache
    assert len(second.items) == 2
    assert len(session.calls) == 1
    assert len(engine.metrics.history("example")) == 1


def test_connection_error_is_recorded_as_failure(engine, fake_session_factory):
    session = fake_session_factory({FEED_URL: requests.ConnectionError("connection refused")})
    fetcher = FeedFetcher(engine, session=session)

    result = fetcher.fetch_all([_source()])[0]

    assert not result.success
    assert "connection refused" in result.error
    history = engine.metrics.history("example")
    assert len(history) == 1
    assert not history[0].success
    assert history[0].error == result.error


def test_timeout_reports_adaptive_timeout(engine, fake_session_factory):
    session = fake_session_factory({FEED_URL: requests.Timeout("read timed out")})
    fetcher = FeedFetcher(engine, session=session)

    result = fetcher.fetch_all([_source()])[0]

    assert not result.success
    assert result.error == "Feed example timed out after 6000ms"


def test_http_error_status(engine, fake_session_factory):
    session = fake_session_factory({FEED_URL: (b"", 500)})
    fetcher = FeedFetcher(engine, session=session)

    result = fetcher.fetch_all([_source()])[0]

    assert not result.success
    assert "500" in result.error


def test_unparseable_content_fails(engine, fake_session_factory):
    session = fake_session_factory({FEED_URL: b"Service unavailable <<< {not xml"})
    fetcher = FeedFetcher(engine, session=session)

    result = fetcher.fetch_all([_source()])[0]

    assert not result.success
    assert engine.metrics.history("example")[0].success is False


def test_open_breaker_source_is_skipped(engine, fake_session_factory, rss_factory):
    session = fake_session_factory({
        FEED_URL: rss_factory(),
        OTHER_URL: rss_factory(title="Other"),
    })
    fetcher = FeedFetcher(engine, session=session)
    for _ in range(5):
        engine.record("broken", 100, False)
    assert engine.breaker_state("broken") == CircuitState.OPEN

    results = fetcher.fetch_all([_source("broken", OTHER_URL), _source()])

    assert [r.source.id for r in results] == ["example"]
    assert [call["url"] for call in session.calls] == [FEED_URL]


def test_repeated_failures_open_the_breaker(engine, fake_session_factory):
    session = fake_session_factory({FEED_URL: requests.ConnectionError("down")})
    fetcher = FeedFetcher(engine, session=session)

    for _ in range(5):
        fetcher.fetch_all([_source()])

    assert engine.breaker_state("example") == CircuitState.OPEN
    assert fetcher.fetch_all([_source()]) == []
    assert len(session.calls) == 5


def test_articles_are_capped_per_feed(engine, fake_session_factory, rss_factory):
    session = fake_session_factory({FEED_URL: rss_factory(items=30)})
    fetcher = FeedFetcher(engine, session=session)

    result = fetcher.fetch_all([_source()])[0]

    assert len(result.items) == 25


def test_custom_article_limit(engine, fake_session_factory, rss_factory):
    session = fake_session_factory({FEED_URL: rss_factory(items=10)})
    fetcher = FeedFetcher(engine, settings=FetchSettings(max_articles_per_feed=4), session=session)

    result = fetcher.fetch_all([_source()])[0]

    assert len(result.items) == 4


def test_corrupted_cache_entry_is_refetched(engine, fake_session_factory, rss_factory):
    session = fake_session_factory({FEED_URL: rss_factory(items=1)})
    fetcher = FeedFetcher(engine, session=session)
    cache_key = f"rss:{FeedFetcher.cache_key(_source())}"
    engine.cache.set(cache_key, "abc")
    entry = engine.cache._cache[cache_key]
    engine.cache._cache[cache_key] = replace(
        entry, content=CachedContent(data=b"\xff\xfe\xfd", encoding="utf-8", compressed=False, size=3)
    )

    result = fetcher.fetch_all([_source()])[0]

    assert result.success and not result.from_cache
    assert len(session.calls) == 1


def test_published_dates_are_utc():
    published = parse_published_date({"published": "Thu, 01 Jan 2026 10:00:00 +0200"})

    assert published.utcoffset().total_seconds() == 0
    assert published.hour == 8
    assert parse_published_date({}) is None
    assert parse_published_date({"published": "someday", "published_parsed": None}) is None
