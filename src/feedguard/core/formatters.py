#!/usr/bin/env python3
"""
Formatting utilities for reliability reports and fetch summaries.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz

from .models import CircuitBreakerRecord, CircuitState, RankedSource

STATE_ICONS = {
    CircuitState.CLOSED: "✅",
    CircuitState.HALF_OPEN: "🔄",
    CircuitState.OPEN: "🚨",
}


def format_timestamp(value: Optional[datetime], timezone_name: str = "UTC") -> str:
    """Render an aware datetime in the display timezone."""
    if value is None:
        return "-"
    return value.astimezone(pytz.timezone(timezone_name)).strftime("%Y-%m-%d %H:%M:%S %Z")


def format_ranked_source(ranked: RankedSource) -> str:
    perf = ranked.performance
    return (
        f"[{ranked.priority:>3}] {ranked.source.display_name} "
        f"rel={perf.reliability} success={perf.success_rate:.2f} "
        f"avg={perf.average_response_time}ms timeout={ranked.adaptive_timeout}ms "
        f"x{ranked.quality_multiplier:.1f}"
    )


def format_breaker(breaker: CircuitBreakerRecord, timezone_name: str = "UTC") -> str:
    icon = STATE_ICONS.get(breaker.state, "")
    line = (
        f"{icon} {breaker.source_id}: {breaker.state.value.upper()} "
        f"(failures={breaker.failure_count}, successes={breaker.success_count})"
    )
    if breaker.state == CircuitState.OPEN:
        line += f" retry after {format_timestamp(breaker.next_retry_time, timezone_name)}"
    return line


def format_performance_report(report: Dict[str, Any]) -> str:
    """Format an engine performance report for display."""
    lines = [
        "📊 Feed Performance Report",
        "=" * 50,
        f"Tracked feeds: {report['tracked_feeds']}",
        f"Average reliability: {report['average_reliability']}",
    ]

    if report['top_performers']:
        lines.extend(["", "🏆 Top performers:"])
        for p in report['top_performers']:
            lines.append(
                f"  • {p['feed_id']}: {p['reliability']} "
                f"({p['response_time']}ms, {p['success_rate'] * 100:.0f}% success)"
            )

    if report['poor_performers']:
        lines.extend(["", "⚠️  Poor performers:"])
        for p in report['poor_performers']:
            issues = ', '.join(p['issues']) or 'Below reliability threshold'
            lines.append(f"  • {p['feed_id']}: {p['reliability']} - {issues}")

    if report['open_circuits']:
        lines.extend(["", f"🚨 Open circuits: {', '.join(report['open_circuits'])}"])

    return "\n".join(lines)


def format_ranked_list(title: str, ranked: List[RankedSource]) -> str:
    if not ranked:
        return f"{title}\n  (none)"
    return "\n".join([title] + [f"  {i}. {format_ranked_source(r)}" for i, r in enumerate(ranked, 1)])
