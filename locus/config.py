import json
import logging
from collections.abc import Sequence
from functools import lru_cache
from typing import Annotated, Any

from pydantic import AnyUrl, BeforeValidator, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

log = logging.getLogger(__name__)


def _parse_env_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            return True
        if normalized in {"false", "0", "no", "off", ""}:
            return False
    raise ValueError(f"Invalid boolean value: {value!r}")


EnvBool = Annotated[bool, BeforeValidator(_parse_env_bool)]


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        alias_generator=str.upper,
        populate_by_name=True,
    )

    app_name: str = "locus"
    debug: EnvBool = Field(
        default=False,
        description="Log lightweight fetch diagnostics at INFO instead of DEBUG.",
    )

    datasource_user_agent: str = Field(
        default="locus/datasource",
        description="User-Agent header sent to every upstream search service.",
    )
    datasource_fetch_timeout_seconds: float = Field(
        default=8.0,
        ge=0.5,
        le=60.0,
        description=(
            "Deadline for topic and detail fetches, covering the request, body read and parsing."
        ),
    )
    datasource_availability_timeout_seconds: float = Field(
        default=5.0,
        ge=0.5,
        le=30.0,
        description="Deadline for the lightweight availability probe.",
    )
    datasource_default_topic_count: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Topic count applied when a caller asks for a non-positive limit.",
    )

    duckduckgo_enabled: EnvBool = Field(default=True)
    duckduckgo_base_url: AnyUrl = Field(
        default="https://duckduckgo.com/html/",
        description="DuckDuckGo HTML results endpoint.",
    )
    duckduckgo_site_filter: str | None = Field(
        default=None,
        description=(
            "Restrict DuckDuckGo results to a host, e.g. 'example.com' or 'site:example.com'. "
            "Also enables the anchor-scan fallback when the result markup changes."
        ),
    )

    wikipedia_enabled: EnvBool = Field(default=True)
    wikipedia_base_url: AnyUrl = Field(
        default="https://en.wikipedia.org/w/api.php",
        description="MediaWiki API endpoint used for search and extracts.",
    )

    searxng_enabled: EnvBool = Field(
        default=False,
        description="Enable the SearxNG data source backed by a self-hosted instance.",
    )
    searxng_base_url: AnyUrl | None = Field(
        default=None,
        description="Base URL for the SearxNG deployment, e.g. https://searx.example.com.",
    )
    searxng_api_key: str | None = Field(
        default=None,
        description="Optional API key or token expected by the SearxNG instance.",
    )
    searxng_categories: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Optional SearxNG categories to query (e.g. ['general', 'news']).",
    )
    searxng_engines: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Optional SearxNG engines to target (e.g. ['google', 'bing']).",
    )
    searxng_language: str | None = Field(default="en")
    searxng_safesearch: int | None = Field(
        default=None,
        ge=0,
        le=2,
        description="Optional safesearch level (0=off, 1=moderate, 2=strict).",
    )
    searxng_time_range: str | None = Field(
        default=None,
        description="Optional time range filter ('day', 'week', 'month', 'year').",
    )

    @field_validator(
        "duckduckgo_site_filter",
        "searxng_api_key",
        "searxng_time_range",
        "searxng_safesearch",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        """Allow empty strings from env vars to fall back to the default."""

        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("searxng_categories", "searxng_engines", mode="before")
    @classmethod
    def _parse_list(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            s = value.strip()
            if not s:
                return []
            try:
                parsed = json.loads(s)
            except json.JSONDecodeError:
                return [item.strip() for item in s.split(",") if item.strip()]
            if isinstance(parsed, str):
                return [parsed.strip()] if parsed.strip() else []
            if isinstance(parsed, Sequence):
                return [str(item).strip() for item in parsed if str(item).strip()]
            return []
        if isinstance(value, Sequence):
            return [str(item).strip() for item in value if str(item).strip()]
        return []

    @model_validator(mode="after")
    def _validate_searxng_config(self) -> "Settings":
        if self.searxng_enabled and not self.searxng_base_url:
            raise ValueError("searxng_base_url must be set when searxng_enabled=True")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Load configuration from the environment and ``.env``."""

    settings = Settings()
    if not (
        settings.duckduckgo_enabled
        or settings.wikipedia_enabled
        or settings.searxng_enabled
    ):
        log.warning("All data sources are disabled; no topics will be returned.")
    return settings
