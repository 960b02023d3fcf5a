#!/usr/bin/env python3
"""
Exception hierarchy for the feed reliability engine.

The engine core only ever raises CacheCorruptionError; everything else it can
absorb is turned into defaults. The remaining types are used by configuration
loading and the feed fetcher.
"""

from typing import Optional, Dict, Any


class FeedGuardError(Exception):
    """Base exception for all feedguard errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Cache-related exceptions
class CacheError(FeedGuardError):
    """Base exception for byte cache errors."""
    pass


class CacheCorruptionError(CacheError):
    """Stored bytes could not be decompressed or decoded."""

    def __init__(self, key: str, original_error: Exception):
        message = f"Cached payload for '{key}' is corrupted"
        context = {
            'key': key,
            'original_error': str(original_error)
        }
        super().__init__(message, error_code='CacheCorruption', context=context)


# Source-related exceptions
class SourceError(FeedGuardError):
    """Base exception for feed source errors."""
    pass


class SourceFetchError(SourceError):
    """Failed to fetch or parse a feed source."""

    def __init__(self, source_id: str, url: str, original_error: Exception):
        message = f"Failed to fetch {source_id} from {url}: {original_error}"
        context = {
            'source_id': source_id,
            'url': url,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class SourceTimeoutError(SourceError):
    """Feed request exceeded its adaptive timeout."""

    def __init__(self, source_id: str, timeout_ms: int):
        message = f"Feed {source_id} timed out after {timeout_ms}ms"
        context = {
            'source_id': source_id,
            'timeout_ms': timeout_ms
        }
        super().__init__(message, context=context)


# Configuration-related exceptions
class ConfigurationError(FeedGuardError):
    """Configuration is invalid or missing."""

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)
