"""
Shared pytest fixtures for country-atlas tests.

Payload fixtures mirror the World Bank envelopes built by tests/utils.py.
"""
from __future__ import annotations

import os
import pytest
from typing import Any, Dict, List

# Set test environment before importing application modules
os.environ.setdefault("NODE_ENV", "test")
os.environ.setdefault("WORLDBANK_BASE_URL", "https://api.worldbank.test/v2")

from country_atlas.tests.utils import country_payload, country_row, indicator_payload, indicator_row  # noqa: E402


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def directory_rows() -> List[Dict[str, Any]]:
    """A small directory with countries, an aggregate and a not-applicable row."""
    return [
        country_row("FR", "France", "ECS", " Europe & Central Asia ", "Paris", row_id="FRA"),
        country_row("DE", "Germany", "ECS", "Europe & Central Asia", "Berlin", row_id="DEU"),
        country_row("JP", "Japan", "EAS", "East Asia & Pacific", "Tokyo", row_id="JPN"),
        country_row("ZH", "Africa Eastern and Southern", "NA", "Aggregates", "", row_id="AFE"),
        country_row("XT", "Upper middle income", "NA", "Aggregates", "", row_id="UMC"),
        country_row("AQ", "Nowhere Shelf", "NA", "Not applicable", "Base One", row_id="AQX"),
        country_row("KP", "Korea, Dem. People's Rep.", "EAS", "East Asia & Pacific", "", row_id="PRK"),
        country_row("BR", "Brazil", "LCN", "Latin America & Caribbean ", "Brasilia", row_id="BRA"),
    ]


@pytest.fixture
def directory_payload(directory_rows) -> List[Any]:
    return country_payload(directory_rows)


@pytest.fixture
def population_payload() -> List[Any]:
    return indicator_payload([
        indicator_row("FR", "FRA", 67971311),
        indicator_row("DE", "DEU", 83797985),
        indicator_row("JP", "JPN", None),
        indicator_row("ZH", "AFE", 720839314),
        indicator_row("BR", "BRA", 215313498),
    ])


@pytest.fixture
def gdp_payload() -> List[Any]:
    return indicator_payload([
        indicator_row("FR", "FRA", 2779092235817.1, indicator="NY.GDP.MKTP.CD"),
        indicator_row("JP", "JPN", 4256410760723.5, indicator="NY.GDP.MKTP.CD"),
        indicator_row("BR", "BRA", 1951923942083.2, indicator="NY.GDP.MKTP.CD"),
    ])


# ============================================================================
# Cleanup Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings and the shared HTTP client between tests."""
    from country_atlas.config import get_settings
    from country_atlas.services.http_pool import HTTPClientPool

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    HTTPClientPool._client = None
