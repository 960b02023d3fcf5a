#!/usr/bin/env python3
"""
Circuit Breaker Registry - stop hammering failing feeds

One breaker per source, created lazily on the first reported outcome.

States:
- CLOSED: Normal operation, count consecutive failures
- OPEN: Too many failures, attempts blocked until the retry deadline
- HALF_OPEN: Probing whether the source recovered

Transitions:
CLOSED --[failure_threshold consecutive failures]--> OPEN
OPEN --[recovery_timeout elapsed]--> HALF_OPEN
HALF_OPEN --[success_threshold successes]--> CLOSED
HALF_OPEN --[1 failure]--> OPEN

Admission checks advance the state machine: is_allowed() on an OPEN breaker
whose retry deadline has passed moves it to HALF_OPEN before answering.
There is no timer; callers must expect a read to mutate state.
"""

import logging
import threading
from collections import defaultdict
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Optional

from .models import CircuitBreakerConfig, CircuitBreakerRecord, CircuitState, utc_now

logger = logging.getLogger(__name__)


class CircuitBreakerRegistry:
    """Per-source circuit breakers with per-source locking."""

    def __init__(self,
                 config: Optional[CircuitBreakerConfig] = None,
                 clock: Callable[[], datetime] = utc_now):
        """
        Args:
            config: Thresholds applied to every breaker created by this registry
            clock: Returns the current timezone-aware datetime
        """
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._breakers: Dict[str, CircuitBreakerRecord] = {}
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)

    def _lock_for(self, source_id: str) -> threading.Lock:
        with self._registry_lock:
            return self._locks[source_id]

    def _get_or_create(self, source_id: str) -> CircuitBreakerRecord:
        with self._registry_lock:
            breaker = self._breakers.get(source_id)
            if breaker is None:
                breaker = CircuitBreakerRecord(source_id=source_id, config=self.config)
                self._breakers[source_id] = breaker
            return breaker

    def update(self, source_id: str, success: bool,
               now: Optional[datetime] = None, error: Optional[str] = None) -> CircuitState:
        """
        Apply one outcome to the source's breaker.

        Args:
            source_id: Source identifier
            success: Whether the attempt succeeded
            now: Time of the attempt (defaults to the clock)
            error: Error description, used for logging only

        Returns:
            State after the transition
        """
        now = now or self._clock()
        breaker = self._get_or_create(source_id)

        with self._lock_for(source_id):
            config = breaker.config

            if breaker.state == CircuitState.CLOSED:
                if success:
                    breaker.failure_count = 0
                else:
                    if (config.enforce_failure_window and breaker.last_failure_time is not None
                            and now - breaker.last_failure_time > config.failure_window):
                        breaker.failure_count = 0
                    breaker.failure_count += 1
                    breaker.last_failure_time = now

                    if breaker.failure_count >= config.failure_threshold:
                        breaker.state = CircuitState.OPEN
                        breaker.next_retry_time = now + config.recovery_timeout
                        logger.warning(
                            f"Circuit breaker OPENED for feed {source_id} after "
                            f"{breaker.failure_count} failures. Last error: {error}"
                        )

            elif breaker.state == CircuitState.OPEN:
                if breaker.next_retry_time is None or now >= breaker.next_retry_time:
                    self._half_open(breaker)

            elif breaker.state == CircuitState.HALF_OPEN:
                if success:
                    breaker.success_count += 1
                    if breaker.success_count >= config.success_threshold:
                        logger.info(
                            f"Circuit breaker CLOSED for feed {source_id} after "
                            f"{breaker.success_count} successful attempts"
                        )
                        breaker.state = CircuitState.CLOSED
                        breaker.failure_count = 0
                        breaker.success_count = 0
                else:
                    breaker.state = CircuitState.OPEN
                    breaker.failure_count += 1
                    breaker.success_count = 0
                    breaker.last_failure_time = now
                    breaker.next_retry_time = now + config.recovery_timeout
                    logger.warning(f"Circuit breaker returned to OPEN for feed {source_id}. Error: {error}")

            return breaker.state

    def is_allowed(self, source_id: str) -> bool:
        """
        Whether an attempt against the source is currently permitted.

        Unknown sources are allowed. An OPEN breaker past its retry deadline
        is moved to HALF_OPEN by this call.
        """
        with self._registry_lock:
            breaker = self._breakers.get(source_id)
        if breaker is None:
            return True

        with self._lock_for(source_id):
            if breaker.state != CircuitState.OPEN:
                return True

            if breaker.next_retry_time is not None and self._clock() >= breaker.next_retry_time:
                self._half_open(breaker)
                return True
            return False

    def _half_open(self, breaker: CircuitBreakerRecord) -> None:
        breaker.state = CircuitState.HALF_OPEN
        breaker.success_count = 0
        logger.info(f"Circuit breaker entering HALF_OPEN state for feed {breaker.source_id}")

    def state(self, source_id: str) -> CircuitState:
        """Current state without side effects. CLOSED for unknown sources."""
        with self._registry_lock:
            breaker = self._breakers.get(source_id)
        return breaker.state if breaker else CircuitState.CLOSED

    def info(self, source_id: str) -> CircuitBreakerRecord:
        """Snapshot copy of the source's breaker (a fresh CLOSED record if unknown)."""
        with self._registry_lock:
            breaker = self._breakers.get(source_id)
        if breaker is None:
            return CircuitBreakerRecord(source_id=source_id, config=self.config)
        with self._lock_for(source_id):
            return replace(breaker)

    def reset(self, source_id: str) -> None:
        """Force the source back to a fresh CLOSED breaker."""
        with self._lock_for(source_id):
            with self._registry_lock:
                self._breakers.pop(source_id, None)
        logger.info(f"Circuit breaker reset for feed {source_id}")

    def tracked_sources(self) -> list:
        with self._registry_lock:
            return list(self._breakers.keys())
