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
Clean, user-friendly public API for Naiad.

This module provides simple functions for downloading groundwater levels
and well locations from the National Ground Water Monitoring Network. It
abstracts away the service registry and SOS request details.

Basic usage:
    >>> import naiad
    >>>
    >>> # Water levels for several wells
    >>> result = naiad.fetch_levels(
    ...     ["USGS:272838082142201", "USGS.404159100494601"]
    ... )
    >>> result.levels.head()
    >>> result.metadata
    >>>
    >>> # Well locations inside a bounding box (south, west, north, east)
    >>> sites = naiad.fetch("featureOfInterest", bbox=[30, -99, 31, -102])
"""

import math
import warnings
from typing import Any, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

# Import sources to trigger registration
from . import sources as _sources  # noqa: F401
from .config import (
    DEFAULT_SRS_NAME,
    DISCLAIMER,
    ConfigurationError,
    ProvisionalWarning,
    ServiceConfig,
)
from .decorators import with_logging
from .identifiers import normalize_feature_ids
from .registry import get_service
from .registry import get_service_info as _get_service_info
from .registry import list_services as _list_services
from .types import ByBoundingBox, ByFeatureID, ObservationResult, Selector

FeatureIDs = str | Sequence[str | None]


def _warn_provisional() -> None:
    # stacklevel points past the logging wrapper to the caller
    warnings.warn(DISCLAIMER, ProvisionalWarning, stacklevel=4)


def _check_timezone(tz: str) -> None:
    if not tz:
        return
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(
            f"Unknown timezone '{tz}'. Use an IANA name such as "
            "'America/Chicago', or '' for UTC."
        ) from e


def _to_bounding_box(bbox: Sequence[float]) -> ByBoundingBox:
    if isinstance(bbox, str):
        raise ConfigurationError("bbox must be four numbers: south, west, north, east")
    try:
        bounds = [float(bound) for bound in bbox]
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            "bbox must be four numbers: south, west, north, east"
        ) from e

    if len(bounds) != 4 or not all(math.isfinite(bound) for bound in bounds):
        raise ConfigurationError("bbox must be four numbers: south, west, north, east")

    south, west, north, east = bounds
    if not (-90 <= south <= 90 and -90 <= north <= 90):
        raise ConfigurationError("bbox latitudes must be between -90 and 90")
    if south > north:
        raise ConfigurationError("bbox south bound must not exceed the north bound")

    return ByBoundingBox(south, west, north, east)


def _resolve_selector(
    service: str,
    selectors: tuple[str, ...],
    feature_id: FeatureIDs | None,
    bbox: Sequence[float] | None,
) -> Selector:
    """Turn the feature_id/bbox keywords into exactly one selector."""
    if feature_id is not None and bbox is not None:
        raise ConfigurationError("Provide only one of feature_id or bbox")

    if bbox is not None:
        if "bbox" not in selectors:
            raise ConfigurationError(f"The {service} service does not accept bbox")
        return _to_bounding_box(bbox)

    if feature_id is None:
        raise ConfigurationError(
            "Geographical filter not specified. Please use feature_id or bbox"
            if "bbox" in selectors
            else f"The {service} service requires feature_id"
        )

    feature_ids = normalize_feature_ids(feature_id)
    if not feature_ids:
        raise ConfigurationError("No valid feature identifiers were given")

    return ByFeatureID(tuple(feature_ids))


def _fetch(
    service: str,
    feature_id: FeatureIDs | None = None,
    bbox: Sequence[float] | None = None,
    as_datetime: bool = True,
    tz: str = "",
    srs_name: str = DEFAULT_SRS_NAME,
    config: ServiceConfig | None = None,
) -> ObservationResult | pd.DataFrame:
    spec = get_service(service)
    if spec is None:
        available = ", ".join(_list_services())
        raise ConfigurationError(
            f"Service '{service}' not supported. Available services: {available}"
        )

    _check_timezone(tz)
    selector = _resolve_selector(service, spec["selectors"], feature_id, bbox)

    return spec["fetch"](
        selector, as_datetime=as_datetime, tz=tz, srs_name=srs_name, config=config
    )


@with_logging("naiad.api")
def fetch(
    service: str,
    feature_id: FeatureIDs | None = None,
    bbox: Sequence[float] | None = None,
    as_datetime: bool = True,
    tz: str = "",
    srs_name: str = DEFAULT_SRS_NAME,
    config: ServiceConfig | None = None,
) -> ObservationResult | pd.DataFrame:
    """
    Download data from an NGWMN service.

    Args:
        service: "observation" for water levels or "featureOfInterest" for
            well locations
        feature_id: Feature identifier(s), agency code and site number
            separated by a period or colon, e.g. "USGS.404159100494601"
        bbox: Bounding box as (south, west, north, east) in decimal degrees.
            Only for "featureOfInterest", and not together with feature_id.
        as_datetime: Convert timestamps to timezone-aware datetimes. Must be
            False if a site contains non-standard dates.
        tz: IANA timezone for converted timestamps. The default "" converts
            to UTC using the offset supplied with each reading.
        srs_name: Spatial reference of the bounding box
        config: Service configuration (defaults to get_config())

    Returns:
        ObservationResult | pd.DataFrame: An ObservationResult for
            "observation", a location table for "featureOfInterest"

    Raises:
        ConfigurationError: For an unknown service, missing or conflicting
            filters, an invalid bbox or an unknown timezone. Raised before
            any request is made.
        DateTimeParseError: If as_datetime is True and a site has an
            invalid timestamp

    Example:
        >>> # One site
        >>> result = naiad.fetch("observation", feature_id="USGS.430427089284901")
        >>>
        >>> # Non-USGS site, colon separator
        >>> sites = naiad.fetch("featureOfInterest", feature_id="MBMG:702934")
    """
    _warn_provisional()
    return _fetch(service, feature_id, bbox, as_datetime, tz, srs_name, config)


@with_logging("naiad.api")
def fetch_levels(
    feature_id: FeatureIDs,
    as_datetime: bool = True,
    tz: str = "",
    config: ServiceConfig | None = None,
) -> ObservationResult:
    """
    Download groundwater levels for one or more sites.

    Args:
        feature_id: Feature identifier(s), e.g. "USGS.404159100494601" or
            ["USGS:272838082142201", "USGS:404159100494601"]
        as_datetime: Convert timestamps to timezone-aware datetimes. Must be
            False if a site contains non-standard dates.
        tz: IANA timezone for converted timestamps ("" for UTC)
        config: Service configuration (defaults to get_config())

    Returns:
        ObservationResult: levels (site column first), sites (locations)
            and metadata (one row per site)

    Example:
        >>> # Site with no data returns an empty levels table
        >>> result = naiad.fetch_levels("UTGS.401544112060301")
        >>> result.levels.empty, len(result.metadata)
        (True, 1)
    """
    _warn_provisional()
    return _fetch("observation", feature_id, None, as_datetime, tz, config=config)


@with_logging("naiad.api")
def fetch_sites(
    feature_id: FeatureIDs,
    config: ServiceConfig | None = None,
) -> pd.DataFrame:
    """
    Download location information for one or more sites.

    Args:
        feature_id: Feature identifier(s), e.g. "MBMG.892195"
        config: Service configuration (defaults to get_config())

    Returns:
        pd.DataFrame: Columns site, description, dec_lat_va, dec_lon_va,
            with attrs["url"] and attrs["queryTime"]
    """
    _warn_provisional()
    return _fetch("featureOfInterest", feature_id, None, config=config)


def list_services() -> list[str]:
    """
    List the available NGWMN services.

    Example:
        >>> naiad.list_services()
        ['featureOfInterest', 'observation']
    """
    return _list_services()


def get_service_info(service: str) -> dict[str, Any]:
    """
    Get information about a service.

    Raises:
        ConfigurationError: If the service is not registered
    """
    info = _get_service_info(service)
    if info is None:
        available = ", ".join(_list_services())
        raise ConfigurationError(
            f"Service '{service}' not supported. Available services: {available}"
        )
    return info
