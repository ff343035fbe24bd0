import httpx
import pytest

from locus.config import Settings
from locus.core.datasource import (
    DuckDuckGoDataSource,
    SearxNGDataSource,
    WikipediaDataSource,
    build_datasources,
    create_http_client,
)


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_build_datasources_defaults():
    client = httpx.AsyncClient()

    sources = build_datasources(client, _settings())

    assert list(sources) == ["wikipedia", "duckduckgo"]
    assert isinstance(sources["wikipedia"], WikipediaDataSource)
    assert isinstance(sources["duckduckgo"], DuckDuckGoDataSource)
    assert sources["duckduckgo"].config.base_url == "https://duckduckgo.com/html/"
    assert sources["wikipedia"].config.base_url == "https://en.wikipedia.org/w/api.php"


def test_build_datasources_propagates_settings():
    client = httpx.AsyncClient()
    settings = _settings(
        debug=True,
        datasource_user_agent="locus-test/1.0",
        datasource_fetch_timeout_seconds=3.0,
        datasource_default_topic_count=7,
        duckduckgo_site_filter="site:docs.python.org",
        wikipedia_enabled=False,
        searxng_enabled=True,
        searxng_base_url="https://searx.local",
        searxng_engines=["google"],
    )

    sources = build_datasources(client, settings)

    assert set(sources) == {"searxng", "duckduckgo"}
    ddg = sources["duckduckgo"].config
    assert ddg.site_filter == "site:docs.python.org"
    assert ddg.debug is True
    assert ddg.user_agent == "locus-test/1.0"
    assert ddg.fetch_timeout == 3.0
    assert ddg.default_count == 7
    searx = sources["searxng"]
    assert isinstance(searx, SearxNGDataSource)
    assert searx.config.engines == ("google",)
    assert searx.config.base_url.startswith("https://searx.local")


@pytest.mark.asyncio
async def test_create_http_client_uses_settings():
    client = create_http_client(
        _settings(datasource_user_agent="locus-test/2.0", datasource_fetch_timeout_seconds=4.0)
    )
    try:
        assert client.headers["user-agent"] == "locus-test/2.0"
        assert client.timeout.read == 4.0
        assert client.follow_redirects is True
    finally:
        await client.aclose()
