# Naiad: download and standardise US groundwater monitoring data
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
National Ground Water Monitoring Network (NGWMN) Data Source.

This module fetches groundwater levels and well locations from the NGWMN
Sensor Observation Service (OGC SOS 2.0.0). Only water level observations
and site locations are available through the service.

The service answers one site per GetObservation request, so multi-site
requests are made sequentially and merged. Per-site metadata (request URL,
series identifier, generation date, responsible party, contact) is carried
in DataFrame.attrs, which pd.concat drops, so it is saved into a separate
metadata table before the merge.

Service: https://cida.usgs.gov/ngwmn/
"""

from logging import getLogger
from urllib.parse import quote, urlencode

import pandas as pd
import requests

from ..attributes import attach_attrs, save_attrs, strip_attrs
from ..config import (
    DEFAULT_SRS_NAME,
    FEATURE_VIEW,
    METADATA_ATTRIBUTES,
    OBSERVED_PROPERTY,
    ConfigurationError,
    ServiceConfig,
    get_config,
)
from ..identifiers import site_number
from ..registry import register_service
from ..transforms import (
    compose,
    parse_datetimes,
    prepend_column,
    select_columns,
    to_numeric,
)
from ..types import (
    LEVEL_COLUMNS,
    ByBoundingBox,
    ByFeatureID,
    ObservationResult,
    Selector,
)
from ..waterml import parse_response

logger = getLogger(__name__)


# ============================================================================
# URL BUILDERS
# ============================================================================


def _format_bound(bound: float) -> str:
    bound = float(bound)
    return str(int(bound)) if bound.is_integer() else repr(bound)


def _build_url(config: ServiceConfig, request: str, **params: str) -> str:
    """Join the fixed SOS parameters and the request parameters into a URL."""
    query = {
        "request": request,
        "service": config.service,
        "version": config.version,
        **params,
    }
    return f"{config.base_url}?{urlencode(query, quote_via=quote, safe='')}"


def build_observation_url(feature_id: str, config: ServiceConfig | None = None) -> str:
    """
    Build a GetObservation URL for a single site.

    Args:
        feature_id: Normalised feature identifier, e.g. "USGS.272838082142201"
        config: Service configuration (defaults to get_config())

    Returns:
        str: Request URL with every parameter value percent-encoded
    """
    config = config or get_config()
    return _build_url(
        config,
        "GetObservation",
        observedProperty=OBSERVED_PROPERTY,
        responseFormat=config.response_format,
        featureOfInterest=f"{FEATURE_VIEW}.{feature_id}",
    )


def build_feature_of_interest_url(
    selector: Selector,
    srs_name: str = DEFAULT_SRS_NAME,
    config: ServiceConfig | None = None,
) -> str:
    """
    Build a GetFeatureOfInterest URL for a list of sites or a bounding box.

    Args:
        selector: ByFeatureID or ByBoundingBox
        srs_name: Spatial reference of the bounding box
        config: Service configuration (defaults to get_config())

    Returns:
        str: Request URL with every parameter value percent-encoded

    Raises:
        ConfigurationError: If no geographical filter is given

    Example:
        >>> build_feature_of_interest_url(ByBoundingBox(30, -99, 31, -102))
        'https://cida.usgs.gov/ngwmn_cache/sos?request=GetFeatureOfInterest&...'
    """
    config = config or get_config()

    if isinstance(selector, ByFeatureID) and selector.feature_ids:
        features = ",".join(f"{FEATURE_VIEW}.{fid}" for fid in selector.feature_ids)
        filters = {"featureOfInterest": features}
    elif isinstance(selector, ByBoundingBox):
        bbox = ",".join(_format_bound(bound) for bound in selector.as_list())
        filters = {"bbox": bbox, "srsName": srs_name}
    else:
        raise ConfigurationError(
            "Geographical filter not specified. Please use feature_id or bbox"
        )

    return _build_url(
        config,
        "GetFeatureOfInterest",
        responseFormat=config.response_format,
        **filters,
    )


# ============================================================================
# LOW-LEVEL API FUNCTIONS
# ============================================================================


def _call_ngwmn_api(url: str, config: ServiceConfig) -> bytes:
    """
    Low-level NGWMN caller.

    A single GET with no retry; transport errors and HTTP error statuses
    propagate to the caller.

    Raises:
        requests.HTTPError: If the service returns an error status
    """
    logger.debug(f"GET {url}")
    response = requests.get(
        url, headers={"Accept": config.response_format}, timeout=config.timeout
    )
    response.raise_for_status()
    return response.content


def create_levels_normalizer(as_datetime: bool = True, tz: str = ""):
    """
    Create normalisation pipeline for NGWMN water level data.

    Args:
        as_datetime: Parse dateTime into timezone-aware timestamps
        tz: IANA timezone for parsed timestamps ("" keeps UTC)

    Returns:
        Transformer: Composed transformation pipeline
    """
    steps = [to_numeric("value")]
    if as_datetime:
        steps.append(parse_datetimes("dateTime", tz=tz))
    steps.append(select_columns(*LEVEL_COLUMNS))
    return compose(*steps)


def import_ngwmn(
    url: str,
    as_datetime: bool = True,
    tz: str = "",
    config: ServiceConfig | None = None,
) -> pd.DataFrame:
    """
    Download and parse a single NGWMN SOS request.

    Args:
        url: Fully built SOS request URL
        as_datetime: Parse observation timestamps (ignored for locations)
        tz: IANA timezone for parsed timestamps ("" keeps UTC)
        config: Service configuration (defaults to get_config())

    Returns:
        pd.DataFrame: Observation or location table. attrs["url"] is always
            set; observation tables also carry whichever metadata attributes
            the response provides.

    Raises:
        requests.RequestException: On transport or HTTP errors
        ServiceResponseError: On malformed or unexpected responses
        DateTimeParseError: If as_datetime is True and a timestamp is invalid
    """
    config = config or get_config()
    content = _call_ngwmn_api(url, config)

    df = parse_response(content)
    found = dict(df.attrs)

    if "dateTime" in df.columns:
        df = create_levels_normalizer(as_datetime, tz)(df)

    return attach_attrs(df, {**found, "url": url})


# ============================================================================
# OBSERVATIONS
# ============================================================================


def retrieve_observation(
    feature_id: str,
    as_datetime: bool = True,
    attrs: tuple[str, ...] = METADATA_ATTRIBUTES,
    tz: str = "",
    config: ServiceConfig | None = None,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Fetch water levels for one site.

    Args:
        feature_id: Normalised feature identifier
        as_datetime: Parse timestamps into timezone-aware values
        attrs: Attribute names to save from the response
        tz: IANA timezone for parsed timestamps ("" keeps UTC)
        config: Service configuration

    Returns:
        tuple[pd.DataFrame, pd.DataFrame]: The levels (site column first,
            attrs stripped) and a one-row table of the saved attributes.
            Sites without data give an empty levels table and a metadata row
            whose identifier and generationDate are missing.
    """
    url = build_observation_url(feature_id, config)
    levels = import_ngwmn(url, as_datetime=as_datetime, tz=tz, config=config)

    if levels.empty:
        logger.info(f"No water level data returned for {feature_id}")
        levels = attach_attrs(levels, {"identifier": pd.NA, "generationDate": pd.NA})

    saved = save_attrs(attrs, levels)

    if not levels.empty:
        levels = prepend_column("site", site_number(feature_id))(levels)

    return strip_attrs(attrs, levels), saved


def _empty_levels() -> pd.DataFrame:
    """Return empty levels DataFrame with correct schema."""
    return pd.DataFrame(columns=["site", *LEVEL_COLUMNS])


def fetch_ngwmn_levels(
    feature_ids: list[str] | tuple[str, ...],
    as_datetime: bool = True,
    tz: str = "",
    config: ServiceConfig | None = None,
) -> ObservationResult:
    """
    Fetch water levels for several sites and merge them.

    Sites are requested one at a time, in order. Any request failure stops
    the whole download.

    Args:
        feature_ids: Normalised feature identifiers
        as_datetime: Parse timestamps into timezone-aware values
        tz: IANA timezone for parsed timestamps ("" keeps UTC)
        config: Service configuration

    Returns:
        ObservationResult: Merged levels, the location table for all
            requested sites, and one metadata row per site

    Raises:
        ConfigurationError: If no feature identifiers are given
    """
    if not feature_ids:
        raise ConfigurationError("At least one feature identifier is required")

    config = config or get_config()

    all_levels = []
    all_metadata = []
    for feature_id in feature_ids:
        levels, metadata = retrieve_observation(
            feature_id, as_datetime, METADATA_ATTRIBUTES, tz=tz, config=config
        )
        if not levels.empty:
            all_levels.append(levels)
        all_metadata.append(metadata)

    combined = pd.concat(all_levels, ignore_index=True) if all_levels else _empty_levels()
    metadata = pd.concat(all_metadata, ignore_index=True)

    sites = retrieve_feature_of_interest(ByFeatureID(tuple(feature_ids)), config=config)

    return ObservationResult(levels=combined, sites=sites, metadata=metadata)


# ============================================================================
# FEATURES OF INTEREST
# ============================================================================


def retrieve_feature_of_interest(
    selector: Selector,
    srs_name: str = DEFAULT_SRS_NAME,
    config: ServiceConfig | None = None,
) -> pd.DataFrame:
    """
    Fetch site locations by identifier list or bounding box.

    Args:
        selector: ByFeatureID or ByBoundingBox
        srs_name: Spatial reference of the bounding box
        config: Service configuration

    Returns:
        pd.DataFrame: Columns site, description, dec_lat_va, dec_lon_va,
            with attrs["url"] and attrs["queryTime"] (UTC) set

    Raises:
        ConfigurationError: If no geographical filter is given
    """
    url = build_feature_of_interest_url(selector, srs_name, config)
    sites = import_ngwmn(url, as_datetime=False, config=config)
    return attach_attrs(
        sites, {"url": url, "queryTime": pd.Timestamp.now(tz="UTC")}
    )


# ============================================================================
# SERVICE REGISTRATION
# ============================================================================


def _fetch_observation_service(
    selector: Selector,
    as_datetime: bool = True,
    tz: str = "",
    srs_name: str = DEFAULT_SRS_NAME,
    config: ServiceConfig | None = None,
) -> ObservationResult:
    if not isinstance(selector, ByFeatureID):
        raise ConfigurationError("The observation service only accepts feature_id")
    return fetch_ngwmn_levels(selector.feature_ids, as_datetime, tz, config)


def _fetch_feature_service(
    selector: Selector,
    as_datetime: bool = True,
    tz: str = "",
    srs_name: str = DEFAULT_SRS_NAME,
    config: ServiceConfig | None = None,
) -> pd.DataFrame:
    return retrieve_feature_of_interest(selector, srs_name, config)


register_service(
    "observation",
    {
        "name": "observation",
        "description": "Groundwater levels (SOS GetObservation)",
        "selectors": ("feature_id",),
        "fetch": _fetch_observation_service,
    },
)

register_service(
    "featureOfInterest",
    {
        "name": "featureOfInterest",
        "description": "Well locations (SOS GetFeatureOfInterest)",
        "selectors": ("feature_id", "bbox"),
        "fetch": _fetch_feature_service,
    },
)
