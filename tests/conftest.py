"""
Pytest configuration and shared fixtures.

This module provides common fixtures and utilities used across all tests.
"""

from pathlib import Path
from urllib.parse import parse_qs, urlsplit

import pandas as pd
import pytest
import responses

from naiad.config import ServiceConfig

TEST_BASE_URL = "https://ngwmn.test/sos"

# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def fixtures_dir():
    """Return path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def ngwmn_fixtures_dir(fixtures_dir):
    """Return path to NGWMN XML fixtures directory."""
    return fixtures_dir / "ngwmn"


@pytest.fixture
def load_xml(ngwmn_fixtures_dir):
    """Return a function that reads an XML fixture by file name."""

    def load(name: str) -> bytes:
        return (ngwmn_fixtures_dir / name).read_bytes()

    return load


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def config():
    """Service configuration pointing at a fake endpoint."""
    return ServiceConfig(base_url=TEST_BASE_URL)


@pytest.fixture(autouse=True)
def default_endpoint(monkeypatch):
    """Make the default configuration point at the fake endpoint too."""
    monkeypatch.setenv("NAIAD_NGWMN_URL", TEST_BASE_URL)


def query_params(url: str) -> dict[str, str]:
    """Return the decoded query parameters of a request URL."""
    return {key: values[0] for key, values in parse_qs(urlsplit(url).query).items()}


@pytest.fixture
def ngwmn_server(load_xml):
    """
    Mock NGWMN endpoint.

    Returns a function that registers responses: observations keyed by
    feature identifier (without the view prefix) and one feature document
    served for every GetFeatureOfInterest request.
    """

    def serve(observations: dict[str, str] | None = None, features: str | None = None):
        observations = observations or {}

        def callback(request):
            params = query_params(request.url)
            if params["request"] == "GetObservation":
                feature_id = params["featureOfInterest"].split(".", 1)[1]
                body = load_xml(observations.get(feature_id, "observation_empty.xml"))
            else:
                body = load_xml(features or "features_single.xml")
            return (200, {"Content-Type": "text/xml"}, body)

        responses.add_callback(responses.GET, TEST_BASE_URL, callback=callback)

    return serve


# ============================================================================
# Sample DataFrames
# ============================================================================


@pytest.fixture
def sample_levels():
    """Normalised levels for one site, before the site column is added."""
    df = pd.DataFrame(
        {
            "date": ["1991-02-04", "1991-05-07"],
            "time": ["10:00:00", "09:30:00"],
            "dateTime": pd.to_datetime(
                ["1991-02-04T15:00:00Z", "1991-05-07T13:30:00Z"], utc=True
            ),
            "value": [21.14, 22.08],
            "uom": ["ft", "ft"],
            "comment": [None, "Provisional"],
        }
    )
    df.attrs.update(
        {
            "url": f"{TEST_BASE_URL}?request=GetObservation",
            "identifier": "USGS.272838082142201.GWL",
            "generationDate": "2017-03-01T12:00:00Z",
            "responsibleParty": "U.S. Geological Survey",
            "contact": "https://waterdata.usgs.gov/nwis/gw",
        }
    )
    return df


# ============================================================================
# Utility Functions
# ============================================================================


def assert_has_columns(df: pd.DataFrame, columns: list[str]):
    """
    Assert that DataFrame has all specified columns.

    Args:
        df: DataFrame to check
        columns: List of required column names
    """
    missing = set(columns) - set(df.columns)
    assert not missing, f"Missing columns: {missing}"


# Make utility functions available to tests
pytest.assert_has_columns = assert_has_columns
