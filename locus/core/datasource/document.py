"""Read-only document query capability used by the HTML extractors.

The extractors only ever need three things from a parsed page: CSS selector
matching, attribute reads and text extraction. :class:`SearchDocument` and
:class:`DocumentNode` describe that surface so the parsing engine can be
swapped without touching the extraction logic. The default engine is
BeautifulSoup with its soupsieve-backed ``select``.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from bs4 import BeautifulSoup, ParserRejectedMarkup, Tag

from .errors import ParseError


class DocumentNode(Protocol):
    def text(self) -> str: ...

    def attr(self, name: str) -> str | None: ...


class SearchDocument(Protocol):
    def select(self, selector: str) -> Sequence[DocumentNode]: ...

    def title(self) -> str: ...


class SoupNode:
    """:class:`DocumentNode` backed by a BeautifulSoup tag."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def text(self) -> str:
        return self._tag.get_text()

    def attr(self, name: str) -> str | None:
        value = self._tag.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)


class SoupDocument:
    """:class:`SearchDocument` backed by BeautifulSoup."""

    __slots__ = ("_soup",)

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    def select(self, selector: str) -> list[SoupNode]:
        return [SoupNode(tag) for tag in self._soup.select(selector)]

    def title(self) -> str:
        node = self._soup.select_one("title")
        if node is None:
            return ""
        return node.get_text(strip=True)


def parse_document(markup: str | bytes, *, parser: str = "html.parser") -> SoupDocument:
    """Parse ``markup`` into a queryable document.

    Raises :class:`ParseError` when the parser rejects the input.
    """

    try:
        soup = BeautifulSoup(markup, parser)
    except ParserRejectedMarkup as exc:
        raise ParseError(f"could not parse HTML document: {exc}") from exc
    return SoupDocument(soup)


__all__ = [
    "DocumentNode",
    "SearchDocument",
    "SoupDocument",
    "SoupNode",
    "parse_document",
]
