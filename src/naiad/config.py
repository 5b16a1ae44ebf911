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
Service configuration and exceptions for Naiad.

The NGWMN Sensor Observation Service is reached through a single base
endpoint with a fixed protocol version. These values live in a
ServiceConfig that is passed explicitly to the URL builders, so tests and
callers pointing at a mirror can inject their own.

Environment variables (read at call time):
    NAIAD_NGWMN_URL: Override the SOS base endpoint
"""

import os
from dataclasses import dataclass

# Configuration
NGWMN_SOS_BASE = "https://cida.usgs.gov/ngwmn_cache/sos"

OBSERVED_PROPERTY = "urn:ogc:def:property:OGC:GroundWaterLevel"

# Feature identifiers are looked up through this GeoServer view
FEATURE_VIEW = "VW_GWDP_GEOSERVER"

DEFAULT_SRS_NAME = "urn:ogc:def:crs:EPSG::4269"

# Per-site attributes carried alongside each observation table
METADATA_ATTRIBUTES = (
    "url",
    "identifier",
    "generationDate",
    "responsibleParty",
    "contact",
)

DISCLAIMER = (
    "DISCLAIMER: NGWMN retrieval functions are still in flux, "
    "and no future behavior or output is guaranteed"
)


class ConfigurationError(ValueError):
    """Raised when a request is malformed before anything is sent."""


class ServiceResponseError(RuntimeError):
    """Raised when the service returns a document that cannot be used."""


class DateTimeParseError(ValueError):
    """Raised when a timestamp cannot be parsed while as_datetime=True."""


class ProvisionalWarning(UserWarning):
    """Issued by every public entry point while the NGWMN API is in flux."""


@dataclass(frozen=True)
class ServiceConfig:
    """
    Connection settings for the NGWMN SOS endpoint.

    Attributes:
        base_url: SOS endpoint that receives the GET requests
        service: OGC service type parameter
        version: SOS protocol version
        response_format: Requested response MIME type
        timeout: Seconds to wait for the server, or None to wait indefinitely
    """

    base_url: str = NGWMN_SOS_BASE
    service: str = "SOS"
    version: str = "2.0.0"
    response_format: str = "text/xml"
    timeout: float | None = None


def get_config() -> ServiceConfig:
    """
    Build the default service configuration.

    The base endpoint can be overridden with NAIAD_NGWMN_URL. The variable
    is read on every call so it can be changed at runtime (and in tests).

    Returns:
        ServiceConfig: Configuration for the NGWMN endpoint
    """
    base_url = os.getenv("NAIAD_NGWMN_URL") or NGWMN_SOS_BASE
    return ServiceConfig(base_url=base_url.rstrip("/"))
