import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from feedguard.core.cache import ByteCache  # noqa: E402
from feedguard.core.engine import ReliabilityEngine  # noqa: E402
from feedguard.core.models import CircuitBreakerConfig  # noqa: E402


class FakeClock:
    """Controllable datetime clock for breaker and engine tests."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeTime:
    """Controllable epoch-seconds clock for cache tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> float:
        self.value += seconds
        return self.value


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        import requests

        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Stands in for requests.Session; maps URL to a response or exception."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        self.headers: Dict[str, str] = {}
        self.responses = responses or {}
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, timeout: Optional[float] = None) -> FakeResponse:
        self.calls.append({"url": url, "timeout": timeout})
        outcome = self.responses[url]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, tuple):
            return FakeResponse(*outcome)
        return FakeResponse(outcome)


def make_rss(title: str = "Example Feed", items: int = 3) -> bytes:
    entries = "".join(
        f"""
        <item>
          <title>Story {i}</title>
          <link>https://example.com/{i}</link>
          <description>Summary {i}</description>
          <pubDate>Thu, 01 Jan 2026 1{i % 10}:00:00 GMT</pubDate>
        </item>"""
        for i in range(items)
    )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>{title}</title>
    <link>https://example.com</link>
    <description>Test feed</description>{entries}
  </channel>
</rss>""".encode("utf-8")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def engine_factory(clock):
    def _factory(breaker_config: Optional[CircuitBreakerConfig] = None,
                 cache: Optional[ByteCache] = None) -> ReliabilityEngine:
        return ReliabilityEngine(breaker_config=breaker_config, cache=cache, clock=clock)

    return _factory


@pytest.fixture
def engine(engine_factory) -> ReliabilityEngine:
    return engine_factory()


@pytest.fixture
def fake_session_factory():
    def _factory(responses: Optional[Dict[str, Any]] = None) -> FakeSession:
        return FakeSession(responses)

    return _factory


@pytest.fixture
def rss_factory():
    return make_rss
