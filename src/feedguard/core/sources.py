#!/usr/bin/env python3
"""
Feed source catalogue.

Built-in default feeds plus loading of a custom catalogue from JSON.
Priorities are balanced across categories so no single outlet dominates.
"""

import json
import logging
from pathlib import Path
from typing import List, Union

from .exceptions import ConfigurationError
from .models import FeedSource

logger = logging.getLogger(__name__)

DEFAULT_SOURCES: List[FeedSource] = [
    FeedSource(id='ieee-spectrum-ai', name='IEEE Spectrum AI',
               url='https://spectrum.ieee.org/feeds/topic/artificial-intelligence.rss',
               category='technology', priority=1),
    FeedSource(id='venturebeat-ai', name='VentureBeat AI',
               url='https://venturebeat.com/ai/feed/', category='business', priority=2),
    FeedSource(id='techcrunch-ai', name='TechCrunch AI',
               url='https://techcrunch.com/category/artificial-intelligence/feed/',
               category='business', priority=3),
    FeedSource(id='enterprise-ai-news', name='Enterprise AI News',
               url='https://www.enterpriseai.news/feed/', category='business', priority=4),
    FeedSource(id='wired-ai', name='WIRED AI',
               url='https://www.wired.com/feed/tag/ai/latest/rss', category='technology', priority=17),
    FeedSource(id='hacker-news', name='Hacker News',
               url='https://hnrss.org/newest', category='development', priority=18),
    FeedSource(id='dev-to', name='DEV Community',
               url='https://dev.to/feed', category='development', priority=19),
]


def load_sources(path: Union[str, Path]) -> List[FeedSource]:
    """
    Load a JSON list of source objects (id, url, name, category, priority, enabled).

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(str(path), f"cannot read sources file: {e}")

    if not isinstance(data, list):
        raise ConfigurationError(str(path), "sources file must contain a JSON list")

    try:
        sources = [FeedSource.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(str(path), f"invalid source entry: {e}")

    logger.info(f"Loaded {len(sources)} sources from {path}")
    return sources
