"""
Tests for waterml.py - parsing NGWMN SOS XML responses.
"""

import pandas as pd
import pytest

from naiad.config import ServiceResponseError
from naiad.types import LEVEL_COLUMNS, LOCATION_COLUMNS
from naiad.waterml import (
    FEATURE_RESPONSE,
    OBSERVATION_RESPONSE,
    parse_features,
    parse_observations,
    parse_response,
    read_document,
)

# ============================================================================
# Tests for read_document()
# ============================================================================


def test_read_document_strips_namespace_prefixes(load_xml):
    root, body = read_document(load_xml("observation_usgs_272838082142201.xml"))

    assert root == OBSERVATION_RESPONSE
    assert "observationData" in body


def test_read_document_raises_on_malformed_xml():
    with pytest.raises(ServiceResponseError, match="Malformed XML"):
        read_document(b"<sos:GetObservationResponse><unclosed>")


def test_read_document_raises_on_exception_report(load_xml):
    with pytest.raises(ServiceResponseError) as exc_info:
        read_document(load_xml("exception_report.xml"))

    message = str(exc_info.value)
    assert "InvalidParameterValue" in message
    assert "featureOfInterest" in message


# ============================================================================
# Tests for parse_observations()
# ============================================================================


class TestParseObservations:
    """Tests for flattening GetObservation responses."""

    @pytest.fixture
    def levels(self, load_xml):
        _, body = read_document(load_xml("observation_usgs_272838082142201.xml"))
        return parse_observations(body)

    def test_one_row_per_measurement(self, levels):
        assert len(levels) == 3
        assert list(levels.columns) == LEVEL_COLUMNS

    def test_timestamps_are_split_but_left_as_strings(self, levels):
        assert levels["dateTime"].tolist() == [
            "1991-02-04T10:00:00-05:00",
            "1991-05-07T09:30:00-04:00",
            "1992-01-15",
        ]
        assert levels["date"].tolist() == ["1991-02-04", "1991-05-07", "1992-01-15"]
        assert levels["time"].tolist()[:2] == ["10:00:00", "09:30:00"]
        assert pd.isna(levels["time"].iloc[2])

    def test_values_are_strings(self, levels):
        assert levels["value"].tolist() == ["21.14", "22.08", "20.5"]

    def test_uom_falls_back_to_default_point_metadata(self, levels):
        assert levels["uom"].tolist() == ["ft", "ft", "ft"]

    def test_comment_from_point_metadata(self, levels):
        assert levels["comment"].iloc[1] == "Provisional"
        assert levels["comment"].iloc[[0, 2]].isna().all()

    def test_metadata_attributes(self, levels):
        assert levels.attrs == {
            "identifier": "USGS.272838082142201.GWL",
            "generationDate": "2017-03-01T12:00:00Z",
            "responsibleParty": "U.S. Geological Survey",
            "contact": "https://waterdata.usgs.gov/nwis/gw",
        }

    def test_absent_metadata_is_not_set(self, load_xml):
        _, body = read_document(load_xml("observation_mbmg_702934.xml"))

        levels = parse_observations(body)

        assert set(levels.attrs) == {"identifier", "generationDate"}
        assert levels["uom"].tolist() == ["m", "m"]

    def test_no_points_gives_empty_frame_with_columns(self, load_xml):
        _, body = read_document(load_xml("observation_empty.xml"))

        levels = parse_observations(body)

        assert levels.empty
        assert list(levels.columns) == LEVEL_COLUMNS
        assert levels.attrs == {}


# ============================================================================
# Tests for parse_features()
# ============================================================================


def test_parse_features_single_site(load_xml):
    _, body = read_document(load_xml("features_single.xml"))

    sites = parse_features(body)

    assert list(sites.columns) == LOCATION_COLUMNS
    assert sites.to_dict("records") == [
        {
            "site": "USGS.272838082142201",
            "description": "ROMP 45 SUWANNEE WELL NR FT MEADE FL",
            "dec_lat_va": 27.47641,
            "dec_lon_va": -82.23897,
        }
    ]


def test_parse_features_missing_description(load_xml):
    _, body = read_document(load_xml("features_multi.xml"))

    sites = parse_features(body)

    assert sites["site"].tolist() == ["USGS.272838082142201", "MBMG.702934"]
    assert pd.isna(sites["description"].iloc[1])


def test_parse_features_bad_position_raises():
    body = {
        "featureMember": {
            "MonitoringPoint": {"identifier": "VW_GWDP_GEOSERVER.X.1", "pos": "27.4"}
        }
    }

    with pytest.raises(ServiceResponseError, match="coordinates"):
        parse_features(body)


def test_parse_features_no_members():
    sites = parse_features({})

    assert sites.empty
    assert list(sites.columns) == LOCATION_COLUMNS


# ============================================================================
# Tests for parse_response()
# ============================================================================


def test_parse_response_dispatches_on_root(load_xml):
    levels = parse_response(load_xml("observation_usgs_272838082142201.xml"))
    sites = parse_response(load_xml("features_single.xml"))

    assert "dateTime" in levels.columns
    assert "dec_lat_va" in sites.columns


def test_parse_response_empty_body():
    assert parse_response(b"").empty
    assert parse_response(b"   \n").empty


def test_parse_response_unexpected_root():
    with pytest.raises(ServiceResponseError, match="Unexpected response"):
        parse_response(b"<Capabilities/>")


def test_feature_response_constant():
    assert FEATURE_RESPONSE == "GetFeatureOfInterestResponse"


def test_parse_response_accepts_text(load_xml):
    text = load_xml("features_single.xml").decode("utf-8")

    sites = parse_response(text)

    assert isinstance(sites, pd.DataFrame)
    assert len(sites) == 1
