"""Small helpers shared by the adapters: text cleanup, site filters, config checks."""

from __future__ import annotations

from urllib.parse import urlsplit

from .errors import ConfigurationError

SITE_PREFIX = "site:"


def normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


def site_host(site_filter: str | None) -> str:
    """Return the bare host suffix of a ``site:`` filter, lower-cased."""

    host = (site_filter or "").strip()
    if host.startswith(SITE_PREFIX):
        host = host[len(SITE_PREFIX) :].strip()
    return host.lower()


def apply_site_filter(query: str, site_filter: str | None) -> str:
    """Prefix ``query`` with a ``site:`` qualifier when a filter is configured.

    Callers may pass either ``example.com`` or ``site:example.com``.
    """

    qualifier = (site_filter or "").strip()
    if not qualifier:
        return query
    if qualifier.startswith(SITE_PREFIX):
        return f"{qualifier} {query}"
    return f"{SITE_PREFIX}{qualifier} {query}"


def normalise_endpoint(value: str | None, default: str | None, *, source: str) -> str:
    """Fill in ``default`` for a blank endpoint and reject non-HTTP URLs."""

    endpoint = (value or "").strip() or (default or "")
    if not endpoint:
        raise ConfigurationError(
            f"{source} base_url must be provided",
            source=source,
            operation="initialize",
        )
    parts = urlsplit(endpoint)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(
            f"{source} base_url must be an absolute http(s) URL, got {endpoint!r}",
            source=source,
            operation="initialize",
        )
    return endpoint


def require_positive(value: float, field: str, *, source: str) -> None:
    if value <= 0:
        raise ConfigurationError(
            f"{source} {field} must be positive, got {value!r}",
            source=source,
            operation="initialize",
        )


__all__ = [
    "SITE_PREFIX",
    "apply_site_filter",
    "normalise_endpoint",
    "normalize_whitespace",
    "require_positive",
    "site_host",
]
