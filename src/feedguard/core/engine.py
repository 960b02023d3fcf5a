#!/usr/bin/env python3
"""
Feed Reliability Engine

Owns one metric store, one circuit breaker registry and one byte cache.
Construct as many engines as needed; nothing is shared between instances.

The orchestrator asks is_allowed() before fetching, applies the suggested
adaptive_timeout() itself, and reports every attempt through record().
"""

import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from .admission import (
    DEFAULT_MAX_SOURCES, DEFAULT_MIN_RELIABILITY,
    admit, order_by_priority, rank_sources, select_recommended
)
from .cache import ByteCache
from .circuit_breaker import CircuitBreakerRegistry
from .config import Config
from .metrics_store import MetricStore, serialize_history
from .models import (
    CircuitBreakerConfig, CircuitBreakerRecord, CircuitState,
    FeedSource, OutcomeRecord, PerformanceSummary, RankedSource, utc_now
)
from .scorer import SCORING_WINDOW, adaptive_timeout, calculate_performance

logger = logging.getLogger(__name__)

PERF_SNAPSHOT_TTL_MINUTES = 60


class ReliabilityEngine:
    """Facade over the reliability components for a single process."""

    def __init__(self,
                 breaker_config: Optional[CircuitBreakerConfig] = None,
                 cache: Optional[ByteCache] = None,
                 clock: Callable[[], datetime] = utc_now):
        """
        Args:
            breaker_config: Thresholds for every source breaker
            cache: Byte cache to use (a default 50MB cache if None)
            clock: Returns the current timezone-aware datetime
        """
        self._clock = clock
        self.metrics = MetricStore()
        self.breakers = CircuitBreakerRegistry(breaker_config, clock=clock)
        self.cache = cache if cache is not None else ByteCache()
        self._record_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._record_locks_guard = threading.Lock()

    @classmethod
    def from_config(cls, config: Config, clock: Callable[[], datetime] = utc_now) -> 'ReliabilityEngine':
        cache = ByteCache(
            max_size_mb=config.cache.max_size_mb,
            strict_capacity=config.cache.strict_capacity
        )
        return cls(breaker_config=config.breaker.to_breaker_config(), cache=cache, clock=clock)

    # Metric ingestion

    def record(self,
               source_id: str,
               latency_ms: float,
               success: bool,
               quality: Optional[float] = None,
               error: Optional[str] = None,
               timestamp: Optional[datetime] = None) -> OutcomeRecord:
        """
        Record one fetch attempt. Always accepted, even while the breaker is OPEN.

        Updates the source's breaker and refreshes the perf:<source_id>
        snapshot in the cache.
        """
        outcome = OutcomeRecord(
            source_id=source_id,
            latency_ms=latency_ms,
            success=success,
            timestamp=timestamp or self._clock(),
            quality=quality,
            error=error
        )

        # History, breaker and snapshot move together per source
        with self._record_lock(source_id):
            history = self.metrics.append(outcome)
            state = self.breakers.update(source_id, success, now=outcome.timestamp, error=error)
            self.cache.set(f"perf:{source_id}", serialize_history(history), PERF_SNAPSHOT_TTL_MINUTES)

        state_info = f" [{state.value}]" if state != CircuitState.CLOSED else ""
        logger.debug(
            f"Feed performance tracked: {source_id} - {'Success' if success else 'Failed'} "
            f"in {latency_ms:.0f}ms{state_info}"
        )
        return outcome

    def _record_lock(self, source_id: str) -> threading.Lock:
        with self._record_locks_guard:
            return self._record_locks[source_id]

    # Admission

    def is_allowed(self, source_id: str) -> bool:
        """May the source be attempted now? May move OPEN to HALF_OPEN."""
        return self.breakers.is_allowed(source_id)

    def breaker_state(self, source_id: str) -> CircuitState:
        return self.breakers.state(source_id)

    def breaker_info(self, source_id: str) -> CircuitBreakerRecord:
        return self.breakers.info(source_id)

    def reset_breaker(self, source_id: str) -> None:
        self.breakers.reset(source_id)

    # Scoring

    def reliability_summary(self, source_id: str) -> PerformanceSummary:
        history = self.metrics.recent(source_id, SCORING_WINDOW)
        return calculate_performance(source_id, history, now=self._clock())

    def adaptive_timeout(self, source_id: str) -> int:
        return adaptive_timeout(self.reliability_summary(source_id))

    # Prioritization

    def rank_sources(self, sources: Iterable[FeedSource]) -> List[RankedSource]:
        return rank_sources(sources, self.reliability_summary)

    def ordered_sources(self, sources: Iterable[FeedSource]) -> List[RankedSource]:
        """Enabled, admitted sources in diversity-aware fetch order."""
        admitted = admit(sources, self.is_allowed)
        return order_by_priority(self.rank_sources(admitted))

    def recommended_sources(self,
                            sources: Iterable[FeedSource],
                            max_sources: int = DEFAULT_MAX_SOURCES,
                            min_reliability: int = DEFAULT_MIN_RELIABILITY) -> List[RankedSource]:
        """Top sources by reliability weighted with the quality multiplier."""
        admitted = admit(sources, self.is_allowed)
        return select_recommended(self.rank_sources(admitted), max_sources, min_reliability)

    # Reporting

    def performance_report(self) -> Dict[str, Any]:
        """Fleet-wide summary of every tracked source, for debugging and dashboards."""
        performances = [self.reliability_summary(source_id) for source_id in self.metrics.tracked_sources()]

        average_reliability = (
            sum(p.reliability for p in performances) / len(performances) if performances else 0
        )

        top = sorted((p for p in performances if p.reliability >= 80),
                     key=lambda p: p.reliability, reverse=True)[:5]
        poor = sorted((p for p in performances if p.reliability < 60),
                      key=lambda p: p.reliability)[:5]

        return {
            'tracked_feeds': len(performances),
            'average_reliability': round(average_reliability),
            'top_performers': [
                {
                    'feed_id': p.source_id,
                    'reliability': p.reliability,
                    'response_time': p.average_response_time,
                    'success_rate': p.success_rate
                }
                for p in top
            ],
            'poor_performers': [
                {
                    'feed_id': p.source_id,
                    'reliability': p.reliability,
                    'issues': performance_issues(p)
                }
                for p in poor
            ],
            'open_circuits': [
                source_id for source_id in self.breakers.tracked_sources()
                if self.breakers.state(source_id) == CircuitState.OPEN
            ]
        }


def performance_issues(performance: PerformanceSummary) -> List[str]:
    issues = []
    if performance.success_rate < 0.7:
        issues.append('Low success rate')
    if performance.average_response_time > 8000:
        issues.append('Slow response')
    if performance.content_quality < 60:
        issues.append('Poor content quality')
    return issues
