from __future__ import annotations

from typing import Any

import httpx
import pytest

from locus.core.datasource.contracts import DetailRecord
from locus.core.datasource.errors import InputError, ParseError, UpstreamError
from locus.core.datasource.providers.wikipedia import (
    WikipediaConfig,
    WikipediaDataSource,
)


def _json_transport(
    payload: Any, *, captured: list[httpx.Request] | None = None, status: int = 200
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        return httpx.Response(status, json=payload)

    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_fetch_topics_maps_search_hits() -> None:
    captured: list[httpx.Request] = []
    payload = {
        "query": {
            "search": [
                {"title": "Python (programming language)", "pageid": 23862},
                {"title": "Monty  Python", "pageid": 18942},
                {"title": "", "pageid": 1},
                {"title": "Broken", "pageid": "nope"},
            ]
        }
    }
    async with httpx.AsyncClient(
        transport=_json_transport(payload, captured=captured)
    ) as client:
        source = WikipediaDataSource(client)
        topics = await source.fetch_topics(3, "python")

    params = captured[0].url.params
    assert params["action"] == "query"
    assert params["list"] == "search"
    assert params["srsearch"] == "python"
    assert params["srlimit"] == "3"
    assert params["format"] == "json"
    assert captured[0].headers["accept"] == "application/json"

    assert [(topic.title, topic.topic_id) for topic in topics] == [
        ("Python (programming language)", 23862),
        ("Monty Python", 18942),
    ]
    assert topics[0].url == "https://en.wikipedia.org/?curid=23862"
    assert topics[0].source == "wikipedia"


@pytest.mark.asyncio
async def test_fetch_topics_uses_configured_wiki_host() -> None:
    payload = {"query": {"search": [{"title": "Paris", "pageid": 681159}]}}
    async with httpx.AsyncClient(transport=_json_transport(payload)) as client:
        source = WikipediaDataSource(
            client, config=WikipediaConfig(base_url="https://fr.wikipedia.org/w/api.php")
        )
        topics = await source.fetch_topics(0, "paris")

    assert topics[0].url == "https://fr.wikipedia.org/?curid=681159"


@pytest.mark.asyncio
async def test_fetch_topics_rejects_blank_query() -> None:
    captured: list[httpx.Request] = []
    async with httpx.AsyncClient(
        transport=_json_transport({}, captured=captured)
    ) as client:
        with pytest.raises(InputError):
            await WikipediaDataSource(client).fetch_topics(5, "  ")

    assert captured == []


@pytest.mark.asyncio
async def test_fetch_topics_surfaces_upstream_error_payload() -> None:
    payload = {"error": {"code": "badvalue", "info": "Unrecognized value for srlimit"}}
    async with httpx.AsyncClient(transport=_json_transport(payload)) as client:
        with pytest.raises(UpstreamError) as excinfo:
            await WikipediaDataSource(client).fetch_topics(5, "python")

    assert excinfo.value.upstream_message == "Unrecognized value for srlimit"
    assert "Unrecognized value" in str(excinfo.value)


@pytest.mark.asyncio
async def test_fetch_topics_rejects_malformed_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ParseError):
            await WikipediaDataSource(client).fetch_topics(5, "python")


@pytest.mark.asyncio
async def test_fetch_topics_returns_empty_list_without_hits() -> None:
    async with httpx.AsyncClient(
        transport=_json_transport({"query": {"search": []}})
    ) as client:
        assert await WikipediaDataSource(client).fetch_topics(5, "zzzzqx") == []


@pytest.mark.asyncio
async def test_fetch_data_returns_intro_extract() -> None:
    captured: list[httpx.Request] = []
    payload = {
        "query": {
            "pages": {
                "23862": {
                    "pageid": 23862,
                    "title": "Python (programming language)",
                    "extract": "  Python is a high-level programming language.  ",
                }
            }
        }
    }
    async with httpx.AsyncClient(
        transport=_json_transport(payload, captured=captured)
    ) as client:
        records = await WikipediaDataSource(client).fetch_data(1, 23862)

    params = captured[0].url.params
    assert params["pageids"] == "23862"
    assert params["prop"] == "extracts"
    assert params["exintro"] == "1"
    assert params["explaintext"] == "1"
    assert records == [
        DetailRecord(
            text="Python is a high-level programming language.",
            source_url="https://en.wikipedia.org/?curid=23862",
            topic_id=23862,
        )
    ]


@pytest.mark.asyncio
async def test_fetch_data_without_extract_is_empty() -> None:
    payload = {"query": {"pages": {"42": {"pageid": 42, "missing": ""}}}}
    async with httpx.AsyncClient(transport=_json_transport(payload)) as client:
        assert await WikipediaDataSource(client).fetch_data(1, 42) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("topic_id", [0, -7])
async def test_fetch_data_requires_topic_id(topic_id: int) -> None:
    captured: list[httpx.Request] = []
    async with httpx.AsyncClient(
        transport=_json_transport({}, captured=captured)
    ) as client:
        with pytest.raises(InputError):
            await WikipediaDataSource(client).fetch_data(1, topic_id)

    assert captured == []


@pytest.mark.asyncio
async def test_check_availability() -> None:
    siteinfo = {"query": {"general": {"sitename": "Wikipedia"}}}
    async with httpx.AsyncClient(transport=_json_transport(siteinfo)) as client:
        assert await WikipediaDataSource(client).check_availability() is True
    async with httpx.AsyncClient(
        transport=_json_transport({"error": {"info": "readonly"}})
    ) as client:
        assert await WikipediaDataSource(client).check_availability() is False
    async with httpx.AsyncClient(
        transport=_json_transport({}, status=502)
    ) as client:
        assert await WikipediaDataSource(client).check_availability() is False
