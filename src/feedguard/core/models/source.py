#!/usr/bin/env python3
"""
Feed source data models.

Contains the static source description supplied by callers and the
performance-annotated view produced by the ranking functions.
"""

from datetime import datetime
from typing import Dict, Any
from dataclasses import dataclass


@dataclass(frozen=True)
class FeedSource:
    """A configured content feed. Lower priority numbers are fetched first."""
    id: str
    url: str = ""
    name: str = ""
    category: str = ""
    priority: int = 10
    enabled: bool = True

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FeedSource':
        return cls(
            id=str(data["id"]),
            url=data.get("url", ""),
            name=data.get("name", ""),
            category=data.get("category", ""),
            priority=int(data.get("priority", 10)),
            enabled=bool(data.get("enabled", True))
        )


@dataclass(frozen=True)
class PerformanceSummary:
    """Derived reliability metrics for one source. Never stored."""
    source_id: str
    average_response_time: int
    success_rate: float
    content_quality: int
    reliability: int
    last_checked: datetime
    sample_size: int = 0


@dataclass(frozen=True)
class RankedSource:
    """A feed source annotated with its current performance."""
    source: FeedSource
    performance: PerformanceSummary
    adaptive_timeout: int
    quality_multiplier: float

    @property
    def id(self) -> str:
        return self.source.id

    @property
    def priority(self) -> int:
        return self.source.priority

    @property
    def reliability(self) -> int:
        return self.performance.reliability

    @property
    def weighted_score(self) -> float:
        return self.performance.reliability * self.quality_multiplier
