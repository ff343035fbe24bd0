"""Build the configured data sources around one shared HTTP client."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from locus.config import Settings, get_settings

from .contracts import DataSource
from .providers import (
    DuckDuckGoConfig,
    DuckDuckGoDataSource,
    SearxNGConfig,
    SearxNGDataSource,
    WikipediaConfig,
    WikipediaDataSource,
)

logger = logging.getLogger(__name__)


def create_http_client(settings: Optional[Settings] = None) -> httpx.AsyncClient:
    """Return an ``AsyncClient`` suited to the data sources.

    The caller owns the client and must close it; adapters never create one.
    """

    settings = settings or get_settings()
    return httpx.AsyncClient(
        timeout=settings.datasource_fetch_timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": settings.datasource_user_agent},
    )


def build_datasources(
    client: httpx.AsyncClient, settings: Optional[Settings] = None
) -> Dict[str, DataSource]:
    """Instantiate and initialise every enabled data source, keyed by name."""

    settings = settings or get_settings()
    user_agent = settings.datasource_user_agent
    fetch_timeout = settings.datasource_fetch_timeout_seconds
    availability_timeout = settings.datasource_availability_timeout_seconds
    default_count = settings.datasource_default_topic_count

    sources: Dict[str, DataSource] = {}
    if settings.wikipedia_enabled:
        sources[WikipediaDataSource.name] = WikipediaDataSource(
            client,
            config=WikipediaConfig(
                base_url=str(settings.wikipedia_base_url),
                user_agent=user_agent,
                fetch_timeout=fetch_timeout,
                availability_timeout=availability_timeout,
                default_count=default_count,
            ),
        )
    if settings.searxng_enabled and settings.searxng_base_url:
        sources[SearxNGDataSource.name] = SearxNGDataSource(
            client,
            config=SearxNGConfig(
                base_url=str(settings.searxng_base_url),
                api_key=settings.searxng_api_key,
                categories=tuple(settings.searxng_categories) or None,
                engines=tuple(settings.searxng_engines) or None,
                safesearch=settings.searxng_safesearch,
                language=settings.searxng_language,
                time_range=settings.searxng_time_range,
                user_agent=user_agent,
                fetch_timeout=fetch_timeout,
                availability_timeout=availability_timeout,
                default_count=default_count,
            ),
        )
    if settings.duckduckgo_enabled:
        sources[DuckDuckGoDataSource.name] = DuckDuckGoDataSource(
            client,
            config=DuckDuckGoConfig(
                base_url=str(settings.duckduckgo_base_url),
                user_agent=user_agent,
                site_filter=settings.duckduckgo_site_filter,
                debug=settings.debug,
                fetch_timeout=fetch_timeout,
                availability_timeout=availability_timeout,
                default_count=default_count,
            ),
        )

    for source in sources.values():
        source.initialize()
    logger.debug("datasource.registry.built", extra={"sources": sorted(sources)})
    return sources


__all__ = ["build_datasources", "create_http_client"]
