"""Exceptions raised by the data-source adapters."""

from __future__ import annotations


class DataSourceError(RuntimeError):
    """Base class for all data-source errors."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.operation = operation


class InputError(DataSourceError, ValueError):
    """Raised when the caller supplies a blank or invalid query or identifier."""


class ConfigurationError(DataSourceError, ValueError):
    """Raised by ``initialize`` when adapter configuration is invalid."""


class TransportError(DataSourceError):
    """Raised on connection failures, non-success statuses and deadlines."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        operation: str | None = None,
        status_code: int | None = None,
        timed_out: bool = False,
    ) -> None:
        super().__init__(message, source=source, operation=operation)
        self.status_code = status_code
        self.timed_out = timed_out


class ParseError(DataSourceError):
    """Raised when a response body cannot be decoded in the expected format."""


class UpstreamError(DataSourceError):
    """Raised when the upstream answers successfully with an error payload."""

    def __init__(
        self,
        upstream_message: str,
        *,
        source: str | None = None,
        operation: str | None = None,
    ) -> None:
        label = source or "upstream"
        super().__init__(
            f"{label} error: {upstream_message}", source=source, operation=operation
        )
        self.upstream_message = upstream_message


__all__ = [
    "ConfigurationError",
    "DataSourceError",
    "InputError",
    "ParseError",
    "TransportError",
    "UpstreamError",
]
