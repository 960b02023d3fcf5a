#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability.
"""

import logging
from abc import ABC, abstractmethod
from argparse import Namespace
from typing import List, Optional

from feedguard.core.container import Container, build_container
from feedguard.core.exceptions import ConfigurationError, FeedGuardError

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """Base class for all command endpoints."""

    subcommands: List[str] = []

    def __init__(self, container: Optional[Container] = None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, a fresh one is built.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or build_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    @property
    def engine(self):
        """Get reliability engine from container."""
        return self._container.get('engine')

    @property
    def feed_fetcher(self):
        """Get feed fetcher from container."""
        return self._container.get('feed_fetcher')

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Returns:
            Exit code (0 for success, non-zero for error)
        """

    def get_available_subcommands(self) -> List[str]:
        return list(self.subcommands)

    def handle_error(self, error: Exception, context: str = "") -> int:
        """
        Standard error handling for commands.

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)

        if isinstance(error, FeedGuardError):
            self.logger.error(error_msg, extra={'error': error.to_dict()})
            return 2 if isinstance(error, ConfigurationError) else 1

        self.logger.error(error_msg, exc_info=True)

        # Map common exceptions to exit codes
        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130
        elif isinstance(error, FileNotFoundError):
            return 2
        elif isinstance(error, PermissionError):
            return 13
        elif isinstance(error, ValueError):
            return 22
        else:
            return 1
