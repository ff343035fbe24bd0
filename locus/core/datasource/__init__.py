"""Data-source adapters that normalise search backends into topics."""

from __future__ import annotations

from .contracts import DataSource, DetailRecord, Topic
from .document import SearchDocument, parse_document
from .errors import (
    ConfigurationError,
    DataSourceError,
    InputError,
    ParseError,
    TransportError,
    UpstreamError,
)
from .identifiers import url_to_id
from .providers import (
    DuckDuckGoConfig,
    DuckDuckGoDataSource,
    SearxNGConfig,
    SearxNGDataSource,
    WikipediaConfig,
    WikipediaDataSource,
)
from .registry import build_datasources, create_http_client

__all__ = [
    "ConfigurationError",
    "DataSource",
    "DataSourceError",
    "DetailRecord",
    "DuckDuckGoConfig",
    "DuckDuckGoDataSource",
    "InputError",
    "ParseError",
    "SearchDocument",
    "SearxNGConfig",
    "SearxNGDataSource",
    "Topic",
    "TransportError",
    "UpstreamError",
    "WikipediaConfig",
    "WikipediaDataSource",
    "build_datasources",
    "create_http_client",
    "parse_document",
    "url_to_id",
]
