#!/usr/bin/env python3
"""
Admission control and fetch prioritization.

Ordering is diversity-aware: a very reliable source should not take every
slot, so reliability only dominates when the gap is large and otherwise the
static priority decides.
"""

import functools
import logging
from typing import Callable, Iterable, List

from .models import FeedSource, PerformanceSummary, RankedSource
from .scorer import adaptive_timeout, quality_multiplier

logger = logging.getLogger(__name__)

RELIABILITY_CAP = 85
RELIABILITY_GAP = 15

DEFAULT_MAX_SOURCES = 10
DEFAULT_MIN_RELIABILITY = 60


def rank_sources(sources: Iterable[FeedSource],
                 summarize: Callable[[str], PerformanceSummary]) -> List[RankedSource]:
    """Annotate sources with performance, adaptive timeout and quality multiplier."""
    ranked = []
    for source in sources:
        performance = summarize(source.id)
        ranked.append(RankedSource(
            source=source,
            performance=performance,
            adaptive_timeout=adaptive_timeout(performance),
            quality_multiplier=quality_multiplier(performance)
        ))
    return ranked


def compare_priority(a: RankedSource, b: RankedSource) -> int:
    """
    Three-tier comparator.

    1. Capped reliability, descending, only when the capped gap exceeds 15
    2. Static priority, ascending
    3. Uncapped reliability, ascending (gives less proven sources a turn)
    """
    capped_diff = min(b.reliability, RELIABILITY_CAP) - min(a.reliability, RELIABILITY_CAP)
    if abs(capped_diff) > RELIABILITY_GAP:
        return capped_diff

    priority_diff = a.priority - b.priority
    if priority_diff != 0:
        return priority_diff

    return a.reliability - b.reliability


def order_by_priority(ranked: Iterable[RankedSource]) -> List[RankedSource]:
    return sorted(ranked, key=functools.cmp_to_key(compare_priority))


def select_recommended(ranked: Iterable[RankedSource],
                       max_sources: int = DEFAULT_MAX_SOURCES,
                       min_reliability: int = DEFAULT_MIN_RELIABILITY) -> List[RankedSource]:
    """Sources at or above min_reliability, best weighted score first, top N."""
    reliable = [r for r in ranked if r.reliability >= min_reliability]
    reliable.sort(key=lambda r: r.weighted_score, reverse=True)
    return reliable[:max(0, max_sources)]


def admit(sources: Iterable[FeedSource], is_allowed: Callable[[str], bool]) -> List[FeedSource]:
    """
    Drop disabled sources and those whose breaker blocks them.

    Note that is_allowed may advance a breaker from OPEN to HALF_OPEN.
    """
    admitted = []
    for source in sources:
        if not source.enabled:
            continue
        if not is_allowed(source.id):
            logger.debug(f"Skipping {source.id}: circuit breaker open")
            continue
        admitted.append(source)
    return admitted
