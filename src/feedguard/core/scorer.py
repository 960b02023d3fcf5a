#!/usr/bin/env python3
"""
Reliability scoring.

Pure functions over a source's recent outcome history. Nothing here raises:
an empty history yields optimistic defaults so a brand-new source can still
be scheduled.
"""

import math
from datetime import datetime
from typing import Optional, Sequence

from .models import OutcomeRecord, PerformanceSummary, utc_now

SCORING_WINDOW = 20

DEFAULT_RESPONSE_TIME_MS = 5000
DEFAULT_SUCCESS_RATE = 0.8
DEFAULT_CONTENT_QUALITY = 70
DEFAULT_RELIABILITY = 70
FAILED_RESPONSE_TIME_MS = 10000

BASE_TIMEOUT_MS = 6000
SLOW_TIMEOUT_MS = 10000
FAST_TIMEOUT_MS = 4000
MAX_TIMEOUT_MS = 12000
UNRELIABLE_TIMEOUT_BONUS_MS = 2000

MAX_LATENCY_MS = 3_600_000


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def calculate_performance(source_id: str,
                          history: Sequence[OutcomeRecord],
                          now: Optional[datetime] = None) -> PerformanceSummary:
    """
    Summarize the most recent SCORING_WINDOW outcomes of a source.

    reliability blends timeliness (30%), success rate (50%) and content
    quality (20%) and is clamped to [0, 100].
    """
    now = now or utc_now()

    if not history:
        return PerformanceSummary(
            source_id=source_id,
            average_response_time=DEFAULT_RESPONSE_TIME_MS,
            success_rate=DEFAULT_SUCCESS_RATE,
            content_quality=DEFAULT_CONTENT_QUALITY,
            reliability=DEFAULT_RELIABILITY,
            last_checked=now
        )

    recent = list(history)[-SCORING_WINDOW:]
    successful = [r for r in recent if r.success]

    # NaN and infinite readings are ignored, the outcome still counts toward success rate
    latencies = [_clamp(r.latency_ms, 0, MAX_LATENCY_MS) for r in successful if math.isfinite(r.latency_ms)]
    if latencies:
        average_response_time = sum(latencies) / len(latencies)
    else:
        average_response_time = FAILED_RESPONSE_TIME_MS

    success_rate = len(successful) / len(recent)

    qualities = [
        _clamp(r.quality, 0, 100) for r in successful
        if r.quality is not None and math.isfinite(r.quality)
    ]
    content_quality = sum(qualities) / len(qualities) if qualities else DEFAULT_CONTENT_QUALITY

    timeliness_score = max(0.0, 100 - average_response_time / 100)
    consistency_score = success_rate * 100
    quality_score = min(100.0, content_quality)

    reliability = int(_round_half_up(timeliness_score * 0.3 + consistency_score * 0.5 + quality_score * 0.2))

    return PerformanceSummary(
        source_id=source_id,
        average_response_time=int(_round_half_up(average_response_time)),
        success_rate=_round_half_up(success_rate, 2),
        content_quality=int(_round_half_up(content_quality)),
        reliability=max(0, min(100, reliability)),
        last_checked=now,
        sample_size=len(recent)
    )


def adaptive_timeout(performance: PerformanceSummary) -> int:
    """Suggested fetch timeout in ms, always within [4000, 12000]."""
    timeout = BASE_TIMEOUT_MS

    if performance.average_response_time > 8000:
        timeout = SLOW_TIMEOUT_MS
    elif performance.average_response_time < 3000:
        timeout = FAST_TIMEOUT_MS

    # Unreliable feeds get slightly more time
    if performance.reliability < 50:
        timeout = min(timeout + UNRELIABLE_TIMEOUT_BONUS_MS, MAX_TIMEOUT_MS)

    return timeout


def quality_multiplier(performance: PerformanceSummary) -> float:
    """Weight applied to a source's reliability when ranking recommendations."""
    if performance.reliability > 80:
        return 1.2
    if performance.reliability < 50:
        return 0.8
    return 1.0
