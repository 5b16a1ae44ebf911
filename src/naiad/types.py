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
Core type definitions for Naiad.

This module defines the standard schemas, selectors and result types used
throughout the package.
"""

from dataclasses import dataclass, field
from typing import Callable, TypeAlias, TypedDict

import pandas as pd


# Standardised record schemas
class LevelRecord(TypedDict, total=False):
    """
    Standard schema for a groundwater level reading.

    Fields:
        site: Site number with the agency code removed
        date: Date part of the reading timestamp, as returned
        time: Time part of the reading timestamp, missing for date-only readings
        dateTime: Parsed timestamp (or the raw string when not parsed)
        value: Water level value
        uom: Unit of measurement
        comment: Free-text comment attached to the reading
    """
    site: str
    date: str
    time: str | None
    dateTime: pd.Timestamp | str
    value: float
    uom: str | None
    comment: str | None


class LocationRecord(TypedDict):
    """
    Standard schema for a feature of interest (monitoring well).

    Fields:
        site: Feature identifier, e.g. "USGS.272838082142201"
        description: Site description, if the service provides one
        dec_lat_va: Latitude in decimal degrees
        dec_lon_va: Longitude in decimal degrees
    """
    site: str
    description: str | None
    dec_lat_va: float
    dec_lon_va: float


# Selectors for feature-of-interest lookups
@dataclass(frozen=True)
class ByFeatureID:
    """Select features by a list of normalised feature identifiers."""

    feature_ids: tuple[str, ...]


@dataclass(frozen=True)
class ByBoundingBox:
    """Select features inside a bounding box given in decimal degrees."""

    south: float
    west: float
    north: float
    east: float

    def as_list(self) -> list[float]:
        return [self.south, self.west, self.north, self.east]


Selector: TypeAlias = ByFeatureID | ByBoundingBox


@dataclass
class ObservationResult:
    """
    Combined result of a multi-site water level request.

    Attributes:
        levels: Water level readings for all sites, site column first
        sites: Location table for the requested sites
        metadata: One row per requested site with the metadata attributes
            (url, identifier, generationDate, responsibleParty, contact)
    """

    levels: pd.DataFrame
    sites: pd.DataFrame = field(default_factory=pd.DataFrame)
    metadata: pd.DataFrame = field(default_factory=pd.DataFrame)


class ServiceSpec(TypedDict):
    """
    Specification for an NGWMN service.

    Fields:
        name: Service name as passed to fetch()
        description: Short human-readable description
        selectors: Selector keywords the service accepts
        fetch: Function that performs the request
    """
    name: str
    description: str
    selectors: tuple[str, ...]
    fetch: Callable[..., ObservationResult | pd.DataFrame]


Transformer: TypeAlias = Callable[[pd.DataFrame], pd.DataFrame]
"""
A function that transforms a DataFrame (e.g., renaming columns, adding fields).

Args:
    df: Input DataFrame

Returns:
    pd.DataFrame: Transformed DataFrame
"""


# Standard column names - for reference and validation
LEVEL_COLUMNS = [
    "date",
    "time",
    "dateTime",
    "value",
    "uom",
    "comment",
]

LOCATION_COLUMNS = [
    "site",
    "description",
    "dec_lat_va",
    "dec_lon_va",
]
