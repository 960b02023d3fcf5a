#!/usr/bin/env python3
"""
Outcome record data model.

One record per fetch attempt reported by the orchestrator.
"""

from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import dataclass

from dateutil import parser as date_parser


def utc_now() -> datetime:
    """Default engine clock."""
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif value:
        dt = date_parser.parse(value)
    else:
        return utc_now()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class OutcomeRecord:
    """A single fetch attempt result. Immutable once recorded."""
    source_id: str
    latency_ms: float
    success: bool
    timestamp: datetime
    quality: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source_id": self.source_id,
            "latency_ms": self.latency_ms,
            "success": self.success,
            "quality": self.quality,
            "timestamp": self.timestamp.isoformat(),
            "error": self.error
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OutcomeRecord':
        """Create from dictionary loaded from JSON."""
        quality = data.get("quality")
        return cls(
            source_id=str(data["source_id"]),
            latency_ms=float(data["latency_ms"]),
            success=bool(data["success"]),
            timestamp=_parse_timestamp(data.get("timestamp")),
            quality=float(quality) if quality is not None else None,
            error=data.get("error")
        )
