#!/usr/bin/env python3
"""
Circuit breaker data models.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from dataclasses import dataclass, field


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"        # Normal operation
    OPEN = "open"            # Source blocked after repeated failures
    HALF_OPEN = "half_open"  # Probing whether the source recovered


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Thresholds for a single source's breaker."""
    failure_threshold: int = 5
    success_threshold: int = 3
    failure_window_minutes: float = 30
    recovery_timeout_minutes: float = 15
    enforce_failure_window: bool = False

    @property
    def recovery_timeout(self) -> timedelta:
        return timedelta(minutes=self.recovery_timeout_minutes)

    @property
    def failure_window(self) -> timedelta:
        return timedelta(minutes=self.failure_window_minutes)


@dataclass
class CircuitBreakerRecord:
    """Mutable breaker state for one source."""
    source_id: str
    config: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    success_count: int = 0
    last_failure_time: Optional[datetime] = None
    next_retry_time: Optional[datetime] = None
