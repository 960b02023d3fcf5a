#!/usr/bin/env python3
"""
CLI Router for feedguard.

Routes `feedguard <command> <subcommand>` to the command classes.
"""

import argparse
import logging
import sys
from typing import Optional, List

from feedguard.commands import get_command, COMMANDS
from feedguard.core.config import ConfigManager
from feedguard.core.container import build_container
from feedguard.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CLIRouter:
    """
    CLI router for feed reliability commands.

    Command structure:
    - feedguard feeds fetch --rounds 2
    - feedguard feeds replay --file outcomes.jsonl
    """

    def __init__(self, container=None):
        """Initialize CLI router."""
        self._container = container
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            prog='feedguard',
            description="Feed reliability, admission control and caching",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_feeds_parser(subparsers)
        return parser

    def _add_feeds_parser(self, subparsers):
        """Add feeds command parser."""
        feeds_parser = subparsers.add_parser(
            'feeds',
            help='Fetch feeds and inspect reliability'
        )

        feeds_subparsers = feeds_parser.add_subparsers(
            dest='subcommand',
            help='Feed operations',
            metavar='{fetch,replay}'
        )

        def add_selection_args(sub):
            sub.add_argument('--sources-file', default=None, help='JSON list of sources (default: built-in catalogue)')
            sub.add_argument('--max', type=int, default=10, help='Maximum recommended sources (default: 10)')
            sub.add_argument('--min-reliability', type=int, default=60, help='Minimum reliability for recommendations (default: 60)')

        fetch_parser = feeds_subparsers.add_parser('fetch', help='Fetch feeds through the reliability engine')
        add_selection_args(fetch_parser)
        fetch_parser.add_argument('--rounds', type=int, default=1, help='Number of fetch rounds (default: 1)')

        replay_parser = feeds_subparsers.add_parser('replay', help='Replay recorded outcomes from a JSON lines file')
        add_selection_args(replay_parser)
        replay_parser.add_argument('--file', required=True, help='JSON lines file of outcome records')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  feedguard feeds fetch
  feedguard feeds fetch --rounds 3 --sources-file feeds.json
  feedguard feeds replay --file outcomes.jsonl --min-reliability 50
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            return 1

        command = get_command(args.command, self._container)
        return command.execute(subcommand, args)


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config_manager = ConfigManager()
        config = config_manager.get_config()
        config_manager.update_logging()
    except ConfigurationError as e:
        logger.error(e.message)
        return 2

    router = CLIRouter(build_container(config))
    return router.route_command(args)


if __name__ == '__main__':
    sys.exit(main())
