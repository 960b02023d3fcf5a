#!/usr/bin/env python3
"""
Core data models for the feed reliability engine.

Contains all data structures used throughout the application.
"""

from .outcome import OutcomeRecord, utc_now
from .circuit import CircuitState, CircuitBreakerConfig, CircuitBreakerRecord
from .source import FeedSource, PerformanceSummary, RankedSource
from .article import FeedItem

__all__ = [
    'OutcomeRecord', 'utc_now',
    'CircuitState', 'CircuitBreakerConfig', 'CircuitBreakerRecord',
    'FeedSource', 'PerformanceSummary', 'RankedSource',
    'FeedItem'
]
