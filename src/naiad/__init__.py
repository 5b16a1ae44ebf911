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

"""Groundwater level download module"""

from .api import fetch, fetch_levels, fetch_sites, get_service_info, list_services
from .config import (
    ConfigurationError,
    DateTimeParseError,
    ProvisionalWarning,
    ServiceConfig,
    ServiceResponseError,
    get_config,
)
from .types import ByBoundingBox, ByFeatureID, ObservationResult

__version__ = "0.1.0"

__all__ = [
    "fetch",
    "fetch_levels",
    "fetch_sites",
    "list_services",
    "get_service_info",
    "ServiceConfig",
    "get_config",
    "ObservationResult",
    "ByFeatureID",
    "ByBoundingBox",
    "ConfigurationError",
    "DateTimeParseError",
    "ServiceResponseError",
    "ProvisionalWarning",
]
