#!/usr/bin/env python3
"""
Per-source outcome history.

Append-only, bounded-length history of fetch outcomes, most recent last.
"""

import json
import logging
import threading
from collections import deque
from typing import Deque, Dict, List

from .models import OutcomeRecord

logger = logging.getLogger(__name__)

MAX_HISTORY_PER_SOURCE = 50


class MetricStore:
    """Thread-safe store of recent outcome records keyed by source id."""

    def __init__(self, max_history: int = MAX_HISTORY_PER_SOURCE):
        self.max_history = max_history
        self._history: Dict[str, Deque[OutcomeRecord]] = {}
        self._lock = threading.Lock()

    def append(self, record: OutcomeRecord) -> List[OutcomeRecord]:
        """
        Append a record, dropping the oldest past the bound.

        Returns:
            Snapshot of the source's history after the append
        """
        with self._lock:
            history = self._history.get(record.source_id)
            if history is None:
                history = deque(maxlen=self.max_history)
                self._history[record.source_id] = history
            history.append(record)
            return list(history)

    def history(self, source_id: str) -> List[OutcomeRecord]:
        """Full retained history, oldest first. Empty for unknown sources."""
        with self._lock:
            return list(self._history.get(source_id, ()))

    def recent(self, source_id: str, limit: int) -> List[OutcomeRecord]:
        """The most recent `limit` records, oldest first."""
        history = self.history(source_id)
        return history[-limit:] if limit > 0 else []

    def tracked_sources(self) -> List[str]:
        with self._lock:
            return list(self._history.keys())


def serialize_history(records: List[OutcomeRecord]) -> str:
    """JSON snapshot of a history, used for the perf:<id> cache entry."""
    return json.dumps([r.to_dict() for r in records], ensure_ascii=False)


def deserialize_history(payload: str) -> List[OutcomeRecord]:
    return [OutcomeRecord.from_dict(item) for item in json.loads(payload)]
