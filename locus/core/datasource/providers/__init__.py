"""Built-in data sources."""

from __future__ import annotations

from .duckduckgo import DuckDuckGoConfig, DuckDuckGoDataSource
from .searxng import SearxNGConfig, SearxNGDataSource
from .wikipedia import WikipediaConfig, WikipediaDataSource

__all__ = [
    "DuckDuckGoConfig",
    "DuckDuckGoDataSource",
    "SearxNGConfig",
    "SearxNGDataSource",
    "WikipediaConfig",
    "WikipediaDataSource",
]
