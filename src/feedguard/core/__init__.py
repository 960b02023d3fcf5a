#!/usr/bin/env python3
"""
Feed reliability and resource-governance engine.
"""

from .cache import ByteCache, CachedContent, create_content_hash
from .circuit_breaker import CircuitBreakerRegistry
from .engine import ReliabilityEngine
from .exceptions import FeedGuardError, CacheCorruptionError, ConfigurationError
from .metrics_store import MetricStore
from .models import (
    CircuitBreakerConfig, CircuitBreakerRecord, CircuitState,
    FeedSource, OutcomeRecord, PerformanceSummary, RankedSource
)

__all__ = [
    'ByteCache', 'CachedContent', 'create_content_hash',
    'CircuitBreakerRegistry',
    'ReliabilityEngine',
    'FeedGuardError', 'CacheCorruptionError', 'ConfigurationError',
    'MetricStore',
    'CircuitBreakerConfig', 'CircuitBreakerRecord', 'CircuitState',
    'FeedSource', 'OutcomeRecord', 'PerformanceSummary', 'RankedSource'
]
