"""Contracts shared by every data-source adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

DEFAULT_TOPIC_COUNT = 5
FETCH_TIMEOUT_SECONDS = 8.0
AVAILABILITY_TIMEOUT_SECONDS = 5.0


@dataclass(frozen=True, slots=True)
class Topic:
    """A single normalised search result."""

    title: str
    url: str
    topic_id: int
    source: str


@dataclass(frozen=True, slots=True)
class DetailRecord:
    """Detailed content attached to a topic by sources that support it."""

    text: str
    source_url: str
    topic_id: int


class DataSource(Protocol):
    """Four-operation contract consumed by the host registry."""

    name: str

    def initialize(self) -> None: ...

    async def check_availability(self) -> bool: ...

    async def fetch_topics(self, limit: int, query: str) -> Sequence[Topic]: ...

    async def fetch_data(self, limit: int, topic_id: int) -> Sequence[DetailRecord]: ...


__all__ = [
    "AVAILABILITY_TIMEOUT_SECONDS",
    "DEFAULT_TOPIC_COUNT",
    "FETCH_TIMEOUT_SECONDS",
    "DataSource",
    "DetailRecord",
    "Topic",
]
