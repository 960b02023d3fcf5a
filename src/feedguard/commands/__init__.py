#!/usr/bin/env python3
"""
Command endpoints for the feedguard CLI.

Each major functionality is handled by a dedicated command class.
"""

from typing import Dict, Type

from .base import BaseCommand
from .feeds import FeedsCommand

# Command registry for easy extension
COMMANDS: Dict[str, Type[BaseCommand]] = {
    'feeds': FeedsCommand,
}


def get_command(command_name: str, container=None) -> BaseCommand:
    """Get a command instance by name."""
    if command_name not in COMMANDS:
        available = ', '.join(COMMANDS.keys())
        raise ValueError(f"Unknown command '{command_name}'. Available: {available}")

    return COMMANDS[command_name](container)
