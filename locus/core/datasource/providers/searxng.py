"""SearxNG JSON API data source."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, Optional
from urllib.parse import urlsplit

import httpx

from ..contracts import (
    AVAILABILITY_TIMEOUT_SECONDS,
    DEFAULT_TOPIC_COUNT,
    FETCH_TIMEOUT_SECONDS,
    DetailRecord,
    Topic,
)
from ..errors import (
    ConfigurationError,
    DataSourceError,
    InputError,
    ParseError,
    UpstreamError,
)
from ..helpers import (
    apply_site_filter,
    normalise_endpoint,
    normalize_whitespace,
    require_positive,
)
from ..identifiers import url_to_id
from ..transport import decode_json, http_get, track_operation, with_deadline

logger = logging.getLogger(__name__)

SOURCE = "searxng"
DEFAULT_USER_AGENT = "locus/searxng-datasource"


@dataclass(frozen=True, slots=True)
class SearxNGConfig:
    """Configuration options for the SearxNG data source."""

    base_url: str
    api_key: str | None = None
    categories: Sequence[str] | None = None
    engines: Sequence[str] | None = None
    safesearch: int | None = None
    language: str | None = None
    time_range: str | None = None
    site_filter: str | None = None
    user_agent: str = DEFAULT_USER_AGENT
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS
    availability_timeout: float = AVAILABILITY_TIMEOUT_SECONDS
    default_count: int = DEFAULT_TOPIC_COUNT


class SearxNGDataSource:
    """Query a SearxNG instance via its JSON API."""

    name = SOURCE

    def __init__(self, client: httpx.AsyncClient, *, config: SearxNGConfig) -> None:
        self._client = client
        self._config = config
        self._search_endpoint = ""
        self._initialized = False

    @property
    def config(self) -> SearxNGConfig:
        return self._config

    def initialize(self) -> None:
        if self._initialized:
            return
        config = self._config
        require_positive(config.fetch_timeout, "fetch_timeout", source=SOURCE)
        require_positive(
            config.availability_timeout, "availability_timeout", source=SOURCE
        )
        require_positive(config.default_count, "default_count", source=SOURCE)
        if config.safesearch is not None and config.safesearch not in (0, 1, 2):
            raise ConfigurationError(
                f"searxng safesearch must be 0, 1 or 2, got {config.safesearch!r}",
                source=SOURCE,
                operation="initialize",
            )
        base_url = normalise_endpoint(config.base_url, None, source=SOURCE)
        self._config = replace(
            config,
            base_url=base_url,
            user_agent=(config.user_agent or "").strip() or DEFAULT_USER_AGENT,
            site_filter=(config.site_filter or "").strip() or None,
        )
        self._search_endpoint = f"{base_url.rstrip('/')}/search"
        self._initialized = True

    async def check_availability(self) -> bool:
        try:
            self.initialize()
            with track_operation(SOURCE, "check_availability"):
                payload = await with_deadline(
                    self._query(
                        {"q": SOURCE, "format": "json", "pageno": 1},
                        "check_availability",
                        timeout=self._config.availability_timeout,
                    ),
                    timeout=self._config.availability_timeout,
                    source=SOURCE,
                    operation="check_availability",
                )
        except DataSourceError as exc:
            logger.debug("searxng.availability.failed", extra={"error": str(exc)})
            return False
        except Exception as exc:  # pragma: no cover - unexpected transport failure
            logger.warning(
                "searxng.availability.error",
                extra={"error": str(exc)},
                exc_info=True,
            )
            return False
        return isinstance(payload.get("results"), list)

    async def fetch_topics(self, limit: int, query: str) -> list[Topic]:
        """Return normalised results for *query* from SearxNG."""

        normalised_query = (query or "").strip()
        if not normalised_query:
            raise InputError(
                "missing search input for SearxNG data source",
                source=SOURCE,
                operation="fetch_topics",
            )
        self.initialize()
        if limit <= 0:
            limit = self._config.default_count

        with track_operation(SOURCE, "fetch_topics"):
            payload = await with_deadline(
                self._query(self._build_params(normalised_query), "fetch_topics"),
                timeout=self._config.fetch_timeout,
                source=SOURCE,
                operation="fetch_topics",
            )

        topics = self._normalise_payload(payload, limit=limit)
        if not topics and payload.get("unresponsive_engines"):
            logger.warning(
                "searxng.search.unresponsive_engines",
                extra={"engines": payload.get("unresponsive_engines")},
            )
        logger.debug(
            "searxng.search.completed",
            extra={"result_count": len(topics), "query_len": len(normalised_query)},
        )
        return topics

    async def fetch_data(self, limit: int, topic_id: int) -> list[DetailRecord]:
        return []

    def _build_params(self, query: str) -> dict[str, object]:
        params: dict[str, object] = {
            "q": apply_site_filter(query, self._config.site_filter),
            "format": "json",
            "pageno": 1,
        }
        if self._config.language:
            params["language"] = self._config.language
        if self._config.categories:
            params["categories"] = ",".join(self._config.categories)
        if self._config.engines:
            params["engines"] = ",".join(self._config.engines)
        if self._config.safesearch is not None:
            params["safesearch"] = self._config.safesearch
        if self._config.time_range:
            params["time_range"] = self._config.time_range
        return params

    def _normalise_payload(
        self, payload: Mapping[str, Any], *, limit: int
    ) -> list[Topic]:
        results = payload.get("results")
        if not isinstance(results, list):
            return []
        topics: list[Topic] = []
        seen: set[str] = set()
        for raw in results:
            if len(topics) >= limit:
                break
            topic = self._normalise_result(raw)
            if topic is None or topic.url in seen:
                continue
            seen.add(topic.url)
            topics.append(topic)
        return topics

    @staticmethod
    def _normalise_result(raw: object) -> Optional[Topic]:
        if not isinstance(raw, Mapping):
            return None
        url = raw.get("url") or raw.get("link")
        if not isinstance(url, str) or not url.strip():
            return None
        url = url.strip()
        try:
            parts = urlsplit(url)
        except ValueError:
            return None
        if parts.scheme not in ("http", "https") or not parts.netloc:
            return None
        title = raw.get("title")
        title = normalize_whitespace(title) if isinstance(title, str) else ""
        return Topic(
            title=title or url,
            url=url,
            topic_id=url_to_id(url),
            source=SOURCE,
        )

    async def _query(
        self,
        params: Mapping[str, object],
        operation: str,
        *,
        timeout: float | None = None,
    ) -> Mapping[str, Any]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self._config.user_agent,
        }
        if self._config.api_key:
            headers["Authorization"] = self._config.api_key
        response = await http_get(
            self._client,
            self._search_endpoint,
            source=SOURCE,
            operation=operation,
            headers=headers,
            params=params,
            timeout=timeout or self._config.fetch_timeout,
        )
        payload = decode_json(response, source=SOURCE, operation=operation)
        if not isinstance(payload, Mapping):
            raise ParseError(
                "searxng returned an unexpected payload",
                source=SOURCE,
                operation=operation,
            )
        error = payload.get("error")
        if isinstance(error, str) and error:
            raise UpstreamError(error, source=SOURCE, operation=operation)
        return payload


__all__ = ["SearxNGConfig", "SearxNGDataSource"]
