#!/usr/bin/env python3
"""
Feed commands: fetch feeds through the engine, or replay recorded outcomes.
"""

import json
from argparse import Namespace
from pathlib import Path
from typing import List

from .base import BaseCommand
from feedguard.core.exceptions import ConfigurationError
from feedguard.core.formatters import (
    format_breaker, format_performance_report, format_ranked_list
)
from feedguard.core.models import FeedSource, OutcomeRecord
from feedguard.core.sources import DEFAULT_SOURCES, load_sources


class FeedsCommand(BaseCommand):
    """Fetch feeds and inspect their reliability."""

    subcommands = ['fetch', 'replay']

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute feeds subcommand."""
        try:
            if subcommand == "fetch":
                return self.fetch(args)
            elif subcommand == "replay":
                return self.replay(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"feeds {subcommand}")

    def _sources(self, args: Namespace) -> List[FeedSource]:
        sources_file = getattr(args, 'sources_file', None)
        return load_sources(sources_file) if sources_file else list(DEFAULT_SOURCES)

    def fetch(self, args: Namespace) -> int:
        """Run one or more fetch rounds and print the resulting report."""
        sources = self._sources(args)
        rounds = max(1, getattr(args, 'rounds', 1))

        for round_number in range(1, rounds + 1):
            results = self.feed_fetcher.fetch_all(sources)
            print(f"\n📡 Round {round_number}: {sum(r.success for r in results)}/{len(results)} feeds successful")
            for result in results:
                icon = "✅" if result.success else "❌"
                detail = f"{len(result.items)} items" if result.success else result.error
                cached = " (cached)" if result.from_cache else ""
                print(f"  {icon} {result.source.id}: {detail} in {result.latency_ms:.0f}ms{cached}")

        self._print_summary(sources, args)
        return 0

    def replay(self, args: Namespace) -> int:
        """Feed recorded outcomes (JSON lines) into the engine and report."""
        path = Path(args.file)
        if not path.exists():
            raise FileNotFoundError(f"Outcome file not found: {path}")

        records = []
        with open(path, 'r', encoding='utf-8') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(OutcomeRecord.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    raise ConfigurationError(str(path), f"invalid outcome at line {line_num}: {e}")

        records.sort(key=lambda r: r.timestamp)
        for record in records:
            self.engine.record(
                record.source_id, record.latency_ms, record.success,
                quality=record.quality, error=record.error, timestamp=record.timestamp
            )
        print(f"🔁 Replayed {len(records)} outcomes")

        if getattr(args, 'sources_file', None):
            sources = load_sources(args.sources_file)
        else:
            sources = [FeedSource(id=source_id) for source_id in self.engine.metrics.tracked_sources()]

        self._print_summary(sources, args)
        return 0

    def _print_summary(self, sources: List[FeedSource], args: Namespace) -> None:
        engine = self.engine
        timezone_name = self.config.app.display_timezone

        print()
        print(format_performance_report(engine.performance_report()))

        print("\n🔌 Circuit breakers:")
        for source in sources:
            print(f"  {format_breaker(engine.breaker_info(source.id), timezone_name)}")

        print()
        print(format_ranked_list("🗂️  Fetch order:", engine.ordered_sources(sources)))
        print()
        recommended = engine.recommended_sources(
            sources,
            max_sources=getattr(args, 'max', 10),
            min_reliability=getattr(args, 'min_reliability', 60)
        )
        print(format_ranked_list("⭐ Recommended:", recommended))

        stats = engine.cache.stats()
        print(f"\n💾 Cache: {stats['entries']} entries, {stats['size_mb']}MB / {stats['max_size_mb']}MB")
