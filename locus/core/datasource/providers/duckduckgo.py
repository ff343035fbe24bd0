"""DuckDuckGo HTML data source.

DuckDuckGo exposes no search API, so results are scraped from the HTML
results page. Three concerns live here:

* :func:`normalize_result_url` turns a raw ``href`` into a canonical absolute
  URL, unwrapping the ``/l/?uddg=`` redirect and dropping advertisements.
* :func:`select_primary` reads the known result-link markup in document order.
* :func:`select_fallback` scans every anchor for links on the configured site
  when the primary markup yields nothing, which happens whenever DuckDuckGo
  reshuffles its class names.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass, replace
from urllib.parse import parse_qs, unquote_plus, urlencode, urljoin, urlsplit

import httpx

from ..contracts import (
    AVAILABILITY_TIMEOUT_SECONDS,
    DEFAULT_TOPIC_COUNT,
    FETCH_TIMEOUT_SECONDS,
    DetailRecord,
    Topic,
)
from ..document import SearchDocument, parse_document
from ..errors import DataSourceError, InputError, ParseError
from ..helpers import (
    apply_site_filter,
    normalise_endpoint,
    normalize_whitespace,
    require_positive,
    site_host,
)
from ..identifiers import url_to_id
from ..transport import http_get, track_operation, with_deadline

logger = logging.getLogger(__name__)

SOURCE = "duckduckgo"
DEFAULT_BASE_URL = "https://duckduckgo.com/html/"
DEFAULT_USER_AGENT = "locus/duckduckgo-datasource"

ENGINE_DOMAIN = "duckduckgo.com"
AD_MARKER = "ad_domain"
REDIRECT_PATH_PREFIX = "/l/"
REDIRECT_PARAM = "uddg"

# Result markup varies between layouts, so several class patterns are accepted.
PRIMARY_SELECTOR = "a.result__a, a.result__a.js-result-title-link, a.result__url"
FALLBACK_SELECTOR = "a[href]"
PROBE_SELECTOR = "form, .result"

_WEB_SCHEMES = ("http", "https")


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith(f".{domain}")


def _is_engine_host(host: str, base_host: str) -> bool:
    if not host:
        return False
    if _host_matches(host, ENGINE_DOMAIN):
        return True
    if not base_host:
        return False
    return _host_matches(host, base_host)


def _is_set(event: threading.Event | None) -> bool:
    return event is not None and event.is_set()


def _wrapped_destination(query: str) -> str | None:
    for pair in query.split("&"):
        key, _, value = pair.partition("=")
        if key != REDIRECT_PARAM or not value:
            continue
        try:
            return unquote_plus(value, errors="strict")
        except UnicodeDecodeError:
            return value
    return None


def normalize_result_url(raw: str, base_url: str) -> str | None:
    """Return the canonical absolute URL for ``raw`` or ``None`` to reject it."""

    raw = (raw or "").strip()
    if not raw:
        return None
    if AD_MARKER in raw:
        return None
    try:
        resolved = raw if urlsplit(raw).scheme else urljoin(base_url, raw)
        parts = urlsplit(resolved)
        host = (parts.hostname or "").lower()
        base_host = (urlsplit(base_url).hostname or "").lower()
        if _is_engine_host(host, base_host) and parts.path.startswith(
            REDIRECT_PATH_PREFIX
        ):
            target = _wrapped_destination(parts.query)
            if target:
                resolved = target
                parts = urlsplit(resolved)
    except ValueError:
        return None

    # Ads may only become visible once the redirect is unwrapped.
    if AD_MARKER in parse_qs(parts.query, keep_blank_values=True):
        return None
    if parts.scheme.lower() not in _WEB_SCHEMES or not parts.hostname:
        return None
    return resolved


def select_primary(
    document: SearchDocument,
    base_url: str,
    limit: int,
    seen: set[str] | None = None,
    *,
    cancelled: threading.Event | None = None,
) -> list[Topic]:
    """Extract result links from the known DuckDuckGo markup, in page order.

    Scanning stops early once ``cancelled`` is set.
    """

    if seen is None:
        seen = set()
    topics: list[Topic] = []
    if limit <= 0:
        return topics
    for node in document.select(PRIMARY_SELECTOR):
        if len(topics) >= limit or _is_set(cancelled):
            break
        title = normalize_whitespace(node.text())
        if not title:
            continue
        url = normalize_result_url(node.attr("href") or "", base_url)
        if url is None or url in seen:
            continue
        seen.add(url)
        topics.append(
            Topic(title=title, url=url, topic_id=url_to_id(url), source=SOURCE)
        )
    return topics


def select_fallback(
    document: SearchDocument,
    base_url: str,
    limit: int,
    host_suffix: str | None,
    seen: set[str],
    *,
    cancelled: threading.Event | None = None,
) -> list[Topic]:
    """Scan every anchor and keep links whose host ends with ``host_suffix``.

    Without a host filter this scan would surface navigation and other noise,
    so it returns nothing unless one is configured. ``seen`` is shared with the
    primary pass of the same call.
    """

    suffix = site_host(host_suffix)
    if not suffix or limit <= 0:
        return []
    topics: list[Topic] = []
    for node in document.select(FALLBACK_SELECTOR):
        if len(topics) >= limit or _is_set(cancelled):
            break
        url = normalize_result_url(node.attr("href") or "", base_url)
        if url is None:
            continue
        host = (urlsplit(url).hostname or "").lower()
        if not host.endswith(suffix):
            continue
        if url in seen:
            continue
        seen.add(url)
        title = normalize_whitespace(node.text()) or url
        topics.append(
            Topic(title=title, url=url, topic_id=url_to_id(url), source=SOURCE)
        )
    return topics


@dataclass(frozen=True, slots=True)
class DuckDuckGoConfig:
    """Configuration options for the DuckDuckGo data source."""

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    site_filter: str | None = None
    debug: bool = False
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS
    availability_timeout: float = AVAILABILITY_TIMEOUT_SECONDS
    default_count: int = DEFAULT_TOPIC_COUNT


class DuckDuckGoDataSource:
    """Scrape DuckDuckGo HTML results into topics."""

    name = SOURCE

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        config: DuckDuckGoConfig | None = None,
    ) -> None:
        self._client = client
        self._config = config or DuckDuckGoConfig()
        self._initialized = False

    @property
    def config(self) -> DuckDuckGoConfig:
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
            ),
            user_agent=(config.user_agent or "").strip() or DEFAULT_USER_AGENT,
            site_filter=(config.site_filter or "").strip() or None,
        )
        self._initialized = True

    async def check_availability(self) -> bool:
        """Issue one lightweight search and report whether it succeeded."""

        try:
            self.initialize()
            with track_operation(SOURCE, "check_availability"):
                await with_deadline(
                    self._probe(),
                    timeout=self._config.availability_timeout,
                    source=SOURCE,
                    operation="check_availability",
                )
        except DataSourceError as exc:
            logger.debug(
                "duckduckgo.availability.failed",
                extra={"error": str(exc)},
            )
            return False
        except Exception as exc:  # pragma: no cover - unexpected transport failure
            logger.warning(
                "duckduckgo.availability.error",
                extra={"error": str(exc)},
                exc_info=True,
            )
            return False
        return True

    async def fetch_topics(self, limit: int, query: str) -> list[Topic]:
        normalised_query = (query or "").strip()
        if not normalised_query:
            raise InputError(
                "missing search input for DuckDuckGo data source",
                source=SOURCE,
                operation="fetch_topics",
            )
        self.initialize()
        if limit <= 0:
            limit = self._config.default_count

        with track_operation(SOURCE, "fetch_topics"):
            topics = await with_deadline(
                self._search(normalised_query, limit),
                timeout=self._config.fetch_timeout,
                source=SOURCE,
                operation="fetch_topics",
            )

        logger.debug(
            "duckduckgo.search.completed",
            extra={"result_count": len(topics), "query_len": len(normalised_query)},
        )
        return topics

    async def fetch_data(self, limit: int, topic_id: int) -> list[DetailRecord]:
        # DuckDuckGo has no detail expansion; an empty list is the contract.
        return []

    def build_search_url(self, query: str) -> str:
        base = self._config.base_url.rstrip("/")
        params = urlencode({"q": apply_site_filter(query, self._config.site_filter)})
        return f"{base}/?{params}"

    async def _probe(self) -> None:
        response = await self._get(
            self.build_search_url(SOURCE),
            "check_availability",
            timeout=self._config.availability_timeout,
        )
        document = await asyncio.to_thread(parse_document, response.content)
        # A results page always carries a title, a search form or result blocks.
        if not (document.title() or document.select(PROBE_SELECTOR)):
            raise ParseError(
                "duckduckgo returned a page without search markup",
                source=SOURCE,
                operation="check_availability",
            )

    async def _search(self, query: str, limit: int) -> list[Topic]:
        search_url = self.build_search_url(query)
        self._diagnostic("duckduckgo.search.url", search_url=search_url)
        response = await self._get(search_url, "fetch_topics")
        cancelled = threading.Event()
        try:
            return await asyncio.to_thread(
                self._extract, response.content, limit, cancelled
            )
        except asyncio.CancelledError:
            # The worker thread cannot be interrupted; stop it at the next step.
            cancelled.set()
            raise

    def _extract(
        self, content: bytes, limit: int, cancelled: threading.Event
    ) -> list[Topic]:
        document = parse_document(content)
        if cancelled.is_set():
            return []
        self._diagnostic("duckduckgo.search.page", page_title=document.title())
        base_url = self._config.base_url
        seen: set[str] = set()
        topics = select_primary(document, base_url, limit, seen, cancelled=cancelled)
        if cancelled.is_set():
            return []
        self._diagnostic("duckduckgo.search.primary", result_count=len(topics))
        if not topics and self._config.site_filter:
            topics = select_fallback(
                document,
                base_url,
                limit,
                self._config.site_filter,
                seen,
                cancelled=cancelled,
            )
            if cancelled.is_set():
                return []
            self._diagnostic("duckduckgo.search.fallback", result_count=len(topics))
        return topics

    async def _get(
        self, url: str, operation: str, *, timeout: float | None = None
    ) -> httpx.Response:
        return await http_get(
            self._client,
            url,
            source=SOURCE,
            operation=operation,
            headers={"Accept": "text/html", "User-Agent": self._config.user_agent},
            timeout=timeout or self._config.fetch_timeout,
        )

    def _diagnostic(self, event: str, **fields: object) -> None:
        level = logging.INFO if self._config.debug else logging.DEBUG
        logger.log(level, event, extra=fields)


__all__ = [
    "DuckDuckGoConfig",
    "DuckDuckGoDataSource",
    "normalize_result_url",
    "select_fallback",
    "select_primary",
]
