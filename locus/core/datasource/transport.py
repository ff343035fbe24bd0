"""Bounded HTTP access shared by the data-source adapters."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, TypeVar

import httpx

from locus.telemetry import record_request

from .errors import DataSourceError, ParseError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def http_get(
    client: httpx.AsyncClient,
    url: str,
    *,
    source: str,
    operation: str,
    headers: Mapping[str, str] | None = None,
    params: Mapping[str, Any] | None = None,
    timeout: float | None = None,
) -> httpx.Response:
    """Issue a GET request and map every failure onto :class:`TransportError`."""

    try:
        response = await client.get(
            url, params=params, headers=headers, timeout=timeout
        )
    except httpx.TimeoutException as exc:
        raise TransportError(
            f"{source} request timed out",
            source=source,
            operation=operation,
            timed_out=True,
        ) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise TransportError(
            f"{source} request failed: {exc}",
            source=source,
            operation=operation,
        ) from exc

    if not response.is_success:
        detail = response.text.strip()[:200]
        message = f"{source} request failed: status {response.status_code}"
        if detail:
            message = f"{message}: {detail}"
        raise TransportError(
            message,
            source=source,
            operation=operation,
            status_code=response.status_code,
        )
    return response


def decode_json(response: httpx.Response, *, source: str, operation: str) -> Any:
    """Decode a JSON body, raising :class:`ParseError` when it is malformed."""

    try:
        return response.json()
    except ValueError as exc:
        raise ParseError(
            f"{source} returned a malformed JSON body",
            source=source,
            operation=operation,
        ) from exc


async def with_deadline(
    operation_coro: Awaitable[T],
    *,
    timeout: float,
    source: str,
    operation: str,
) -> T:
    """Await ``operation_coro`` under a deadline covering the whole operation.

    On expiry the pending work is cancelled and :class:`TransportError` is
    raised; nothing computed before the deadline is returned.
    """

    try:
        return await asyncio.wait_for(operation_coro, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning(
            "datasource.deadline_exceeded",
            extra={"source": source, "operation": operation, "timeout_s": timeout},
        )
        raise TransportError(
            f"{source} {operation} exceeded the {timeout:g}s deadline",
            source=source,
            operation=operation,
            timed_out=True,
        ) from exc


@contextmanager
def track_operation(source: str, operation: str) -> Iterator[None]:
    """Record the outcome and latency of one adapter operation."""

    started = time.perf_counter()
    outcome = "error"
    try:
        yield
        outcome = "success"
    except TransportError as exc:
        outcome = "timeout" if exc.timed_out else "transport_error"
        raise
    except ParseError:
        outcome = "parse_error"
        raise
    except DataSourceError:
        outcome = "upstream_error"
        raise
    finally:
        record_request(source, operation, outcome, time.perf_counter() - started)


__all__ = ["decode_json", "http_get", "track_operation", "with_deadline"]
