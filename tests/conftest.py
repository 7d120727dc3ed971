"""Shared fixtures for the HTS service tests."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from ftzhts.hts.models import BrowseNode, Country, DutyRateRecord, HTSEntry, PopularCode
from ftzhts.hts.reference_data import ReferenceData, default_reference_data

TEST_TOKEN = "test-token"


@pytest.fixture()
def reference_data() -> ReferenceData:
    return default_reference_data()


@pytest.fixture()
def tiny_data() -> ReferenceData:
    """Hand-built tables exercising edge cases absent from the packaged seeds."""

    return ReferenceData(
        countries=(
            Country("CA", "Canada", "North America", "USMCA"),
            Country("FR", "France", "Europe", None),
        ),
        popular_codes=(
            PopularCode("2000.00.0000", "Low usage item", "Misc", "Low", "1%", "Free"),
            PopularCode("3000.00.0000", "Medium usage item", "Misc", "Medium", "1%", "Free"),
            PopularCode("1000.00.0000", "Medium usage item", "Misc", "Medium", "1%", "Free"),
            PopularCode("9000.00.0000", "Very high usage item", "Misc", "Very High", "1%", "Free"),
        ),
        hts_codes=(
            HTSEntry(
                "08999.10.0010", "Widgets, assorted", "Widgets", "08", "0899", "089991", "No.", "3%", "Free"
            ),
            HTSEntry(
                "8999.10.0010", "Widgets, plain", "Widgets", "89", "8999", "899910", "No.", "3%", "Free"
            ),
        ),
        browse_nodes=(
            BrowseNode(type="chapter", level="chapter", code="89", title="Widgets"),
            BrowseNode(
                type="tariff_line",
                level="tariff_line",
                hts_code="8999.10.0010",
                description="Widgets, plain",
                chapter="89",
                heading="8999",
                subheading="899910",
            ),
        ),
        duty_rates=MappingProxyType(
            {
                "8999.10.0010": DutyRateRecord("5%", MappingProxyType({"CA": "1%", "default": "3%"})),
                "8999.20.0000": DutyRateRecord("FREE", MappingProxyType({"FR": "free"})),
            }
        ),
        trade_agreements=MappingProxyType({"CA": "USMCA"}),
    )


@pytest.fixture()
def api_app(monkeypatch):
    monkeypatch.setenv("FTZ_HTS_API_TOKENS", TEST_TOKEN)

    from ftzhts.api.app import app

    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def client(api_app) -> Iterator[TestClient]:
    with TestClient(api_app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}
