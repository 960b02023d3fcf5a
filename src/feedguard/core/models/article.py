#!/usr/bin/env python3
"""
Feed item data model.

A parsed entry from a fetched feed, in the shape stored in the rss: cache.
"""

from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass

from dateutil import parser as date_parser


def _parse_datetime_safe(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        return None


@dataclass
class FeedItem:
    """A single entry parsed from a feed."""
    title: str
    link: str
    source_id: str
    published: Optional[datetime] = None
    summary: str = ""

    def __post_init__(self):
        """Clean data after initialization."""
        self.title = (self.title or "").strip()
        self.link = (self.link or "").strip()
        self.summary = (self.summary or "").strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'link': self.link,
            'source_id': self.source_id,
            'published': self.published.isoformat() if self.published else None,
            'summary': self.summary
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FeedItem':
        return cls(
            title=data.get('title', ''),
            link=data.get('link', ''),
            source_id=data.get('source_id', ''),
            published=_parse_datetime_safe(data.get('published')),
            summary=data.get('summary', '')
        )
