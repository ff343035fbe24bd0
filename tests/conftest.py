"""Shared pytest configuration and fixtures."""

import pytest

from locus import config


@pytest.fixture(autouse=True)
def _isolate_settings_cache():
    """Keep ``get_settings`` from leaking cached configuration across tests."""

    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()
