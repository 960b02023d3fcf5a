#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for engine configuration: breaker
thresholds, cache capacity, fetcher settings and logging, all read from
environment variables with defaults and validation.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional, List

import pytz

from .env_loader import load_env_file
from .exceptions import ConfigurationError
from .models import CircuitBreakerConfig

logger = logging.getLogger(__name__)


@dataclass
class BreakerSettings:
    """Circuit breaker thresholds applied to every source."""
    failure_threshold: int = 5
    success_threshold: int = 3
    recovery_timeout_minutes: float = 15
    failure_window_minutes: float = 30
    enforce_failure_window: bool = False

    def to_breaker_config(self) -> CircuitBreakerConfig:
        return CircuitBreakerConfig(
            failure_threshold=self.failure_threshold,
            success_threshold=self.success_threshold,
            failure_window_minutes=self.failure_window_minutes,
            recovery_timeout_minutes=self.recovery_timeout_minutes,
            enforce_failure_window=self.enforce_failure_window
        )


@dataclass
class CacheSettings:
    """Byte cache configuration."""
    max_size_mb: float = 50
    strict_capacity: bool = False


@dataclass
class FetchSettings:
    """Reference feed fetcher configuration."""
    user_agent: str = "Mozilla/5.0 (compatible; FeedGuard/1.0)"
    max_concurrent_feeds: int = 5
    max_articles_per_feed: int = 25


@dataclass
class ApplicationConfig:
    """Logging and presentation."""
    log_level: str = "INFO"
    verbose_logging: bool = False
    display_timezone: str = "UTC"


@dataclass
class Config:
    """Master configuration container."""
    breaker: BreakerSettings = field(default_factory=BreakerSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    fetch: FetchSettings = field(default_factory=FetchSettings)
    app: ApplicationConfig = field(default_factory=ApplicationConfig)


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_number(key: str, default, cast):
    value = os.getenv(key)
    if value is None or value.strip() == '':
        return default
    try:
        return cast(value)
    except ValueError:
        raise ConfigurationError(key, f"expected {cast.__name__}, got {value!r}")


class ConfigManager:
    """Manages configuration with validation and environment loading."""

    def __init__(self, env_file_path: Optional[str] = None, load_env: bool = True):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file (defaults to ./.env)
            load_env: Whether to read the .env file at all
        """
        self._config: Optional[Config] = None
        if load_env:
            load_env_file(env_file_path)

    def get_config(self, force_reload: bool = False) -> Config:
        """Get configuration, building it from the environment on first use."""
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""
        breaker = BreakerSettings(
            failure_threshold=_env_number('FEEDGUARD_FAILURE_THRESHOLD', 5, int),
            success_threshold=_env_number('FEEDGUARD_SUCCESS_THRESHOLD', 3, int),
            recovery_timeout_minutes=_env_number('FEEDGUARD_RECOVERY_TIMEOUT_MINUTES', 15.0, float),
            failure_window_minutes=_env_number('FEEDGUARD_FAILURE_WINDOW_MINUTES', 30.0, float),
            enforce_failure_window=_env_bool('FEEDGUARD_ENFORCE_FAILURE_WINDOW', False)
        )

        cache = CacheSettings(
            max_size_mb=_env_number('FEEDGUARD_CACHE_MAX_MB', 50.0, float),
            strict_capacity=_env_bool('FEEDGUARD_CACHE_STRICT_CAPACITY', False)
        )

        fetch = FetchSettings(
            user_agent=os.getenv('FEED_USER_AGENT', 'Mozilla/5.0 (compatible; FeedGuard/1.0)'),
            max_concurrent_feeds=_env_number('MAX_CONCURRENT_FEEDS', 5, int),
            max_articles_per_feed=_env_number('MAX_ARTICLES_PER_FEED', 25, int)
        )

        app = ApplicationConfig(
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=_env_bool('VERBOSE_LOGGING', False),
            display_timezone=os.getenv('DISPLAY_TIMEZONE', 'UTC')
        )

        config = Config(breaker=breaker, cache=cache, fetch=fetch, app=app)
        validate_config(config)
        return config

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S'))


def validate_config(config: Config) -> None:
    """
    Validate configuration values, reporting every problem at once.

    Raises:
        ConfigurationError: If any value is out of range
    """
    errors: List[str] = []

    if config.breaker.failure_threshold < 1:
        errors.append("FEEDGUARD_FAILURE_THRESHOLD must be at least 1")
    if config.breaker.success_threshold < 1:
        errors.append("FEEDGUARD_SUCCESS_THRESHOLD must be at least 1")
    if config.breaker.recovery_timeout_minutes <= 0:
        errors.append("FEEDGUARD_RECOVERY_TIMEOUT_MINUTES must be positive")
    if config.breaker.failure_window_minutes <= 0:
        errors.append("FEEDGUARD_FAILURE_WINDOW_MINUTES must be positive")

    if config.cache.max_size_mb <= 0:
        errors.append("FEEDGUARD_CACHE_MAX_MB must be positive")

    if config.fetch.max_concurrent_feeds < 1 or config.fetch.max_concurrent_feeds > 20:
        errors.append("MAX_CONCURRENT_FEEDS must be between 1 and 20")
    if config.fetch.max_articles_per_feed < 1:
        errors.append("MAX_ARTICLES_PER_FEED must be at least 1")

    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config.app.log_level not in valid_log_levels:
        errors.append(f"LOG_LEVEL must be one of: {', '.join(valid_log_levels)}")

    if config.app.display_timezone not in pytz.all_timezones_set:
        errors.append(f"DISPLAY_TIMEZONE '{config.app.display_timezone}' is not a known timezone")

    if errors:
        raise ConfigurationError('config', '; '.join(errors))

    logger.debug("Configuration validation passed")
