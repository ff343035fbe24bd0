"""Wikipedia data source backed by the MediaWiki query API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import urlsplit

import httpx

from ..contracts import (
    AVAILABILITY_TIMEOUT_SECONDS,
    DEFAULT_TOPIC_COUNT,
    FETCH_TIMEOUT_SECONDS,
    DetailRecord,
    Topic,
)
from ..errors import DataSourceError, InputError, ParseError, UpstreamError
from ..helpers import normalise_endpoint, normalize_whitespace, require_positive
from ..transport import decode_json, http_get, track_operation, with_deadline

logger = logging.getLogger(__name__)

SOURCE = "wikipedia"
DEFAULT_BASE_URL = "https://en.wikipedia.org/w/api.php"
DEFAULT_USER_AGENT = "locus/ask"


@dataclass(frozen=True, slots=True)
class WikipediaConfig:
    """Configuration options for the Wikipedia data source."""

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS
    availability_timeout: float = AVAILABILITY_TIMEOUT_SECONDS
    default_count: int = DEFAULT_TOPIC_COUNT


class WikipediaDataSource:
    """Search Wikipedia pages and expand a page into its intro extract."""

    name = SOURCE

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        config: WikipediaConfig | None = None,
    ) -> None:
        self._client = client
        self._config = config or WikipediaConfig()
        self._initialized = False

    @property
    def config(self) -> WikipediaConfig:
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
        self._config = replace(
            config,
            base_url=normalise_endpoint(
                config.base_url, DEFAULT_BASE_URL, source=SOURCE
            ).rstrip("/"),
            user_agent=(config.user_agent or "").strip() or DEFAULT_USER_AGENT,
        )
        self._initialized = True

    async def check_availability(self) -> bool:
        params = {"action": "query", "meta": "siteinfo", "format": "json"}
        try:
            self.initialize()
            with track_operation(SOURCE, "check_availability"):
                await with_deadline(
                    self._query(
                        params,
                        "check_availability",
                        timeout=self._config.availability_timeout,
                    ),
                    timeout=self._config.availability_timeout,
                    source=SOURCE,
                    operation="check_availability",
                )
        except DataSourceError as exc:
            logger.debug("wikipedia.availability.failed", extra={"error": str(exc)})
            return False
        except Exception as exc:  # pragma: no cover - unexpected transport failure
            logger.warning(
                "wikipedia.availability.error",
                extra={"error": str(exc)},
                exc_info=True,
            )
            return False
        return True

    async def fetch_topics(self, limit: int, query: str) -> list[Topic]:
        """Return Wikipedia search hits; each page becomes one topic."""

        normalised_query = (query or "").strip()
        if not normalised_query:
            raise InputError(
                "missing search input for Wikipedia data source",
                source=SOURCE,
                operation="fetch_topics",
            )
        self.initialize()
        if limit <= 0:
            limit = self._config.default_count

        params = {
            "action": "query",
            "list": "search",
            "srsearch": normalised_query,
            "srlimit": str(limit),
            "format": "json",
        }
        with track_operation(SOURCE, "fetch_topics"):
            payload = await with_deadline(
                self._query(params, "fetch_topics"),
                timeout=self._config.fetch_timeout,
                source=SOURCE,
                operation="fetch_topics",
            )

        hits = _mapping(payload.get("query")).get("search")
        topics: list[Topic] = []
        seen: set[int] = set()
        for item in hits if isinstance(hits, list) else []:
            if len(topics) >= limit:
                break
            if not isinstance(item, Mapping):
                continue
            page_id = item.get("pageid")
            title = item.get("title")
            if not isinstance(page_id, int) or page_id <= 0 or page_id in seen:
                continue
            if not isinstance(title, str) or not title.strip():
                continue
            seen.add(page_id)
            topics.append(
                Topic(
                    title=normalize_whitespace(title),
                    url=self.page_url(page_id),
                    topic_id=page_id,
                    source=SOURCE,
                )
            )

        logger.debug(
            "wikipedia.search.completed",
            extra={"result_count": len(topics), "query_len": len(normalised_query)},
        )
        return topics

    async def fetch_data(self, limit: int, topic_id: int) -> list[DetailRecord]:
        """Return the plain-text intro extract of page ``topic_id``.

        A page without an extract yields an empty list rather than an error.
        """

        if topic_id <= 0:
            raise InputError(
                "topic_id is required for Wikipedia data source",
                source=SOURCE,
                operation="fetch_data",
            )
        self.initialize()

        params = {
            "action": "query",
            "pageids": str(topic_id),
            "prop": "extracts",
            "exintro": "1",
            "explaintext": "1",
            "format": "json",
        }
        with track_operation(SOURCE, "fetch_data"):
            payload = await with_deadline(
                self._query(params, "fetch_data"),
                timeout=self._config.fetch_timeout,
                source=SOURCE,
                operation="fetch_data",
            )

        pages = _mapping(_mapping(payload.get("query")).get("pages"))
        for page in pages.values():
            if not isinstance(page, Mapping):
                continue
            extract = page.get("extract")
            text = extract.strip() if isinstance(extract, str) else ""
            if not text:
                return []
            page_id = page.get("pageid")
            if not isinstance(page_id, int):
                page_id = topic_id
            return [
                DetailRecord(
                    text=text, source_url=self.page_url(page_id), topic_id=page_id
                )
            ]
        return []

    def page_url(self, page_id: int) -> str:
        parts = urlsplit(self._config.base_url)
        return f"{parts.scheme}://{parts.netloc}/?curid={page_id}"

    async def _query(
        self,
        params: Mapping[str, str],
        operation: str,
        *,
        timeout: float | None = None,
    ) -> Mapping[str, Any]:
        response = await http_get(
            self._client,
            self._config.base_url,
            source=SOURCE,
            operation=operation,
            headers={
                "Accept": "application/json",
                "User-Agent": self._config.user_agent,
            },
            params=params,
            timeout=timeout or self._config.fetch_timeout,
        )
        payload = decode_json(response, source=SOURCE, operation=operation)
        if not isinstance(payload, Mapping):
            raise ParseError(
                "wikipedia returned an unexpected payload",
                source=SOURCE,
                operation=operation,
            )
        error = payload.get("error")
        if error is not None:
            info = _mapping(error).get("info") or str(error)
            raise UpstreamError(str(info), source=SOURCE, operation=operation)
        return payload


def _mapping(value: object) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


__all__ = ["WikipediaConfig", "WikipediaDataSource"]
