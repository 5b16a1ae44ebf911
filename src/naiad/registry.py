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
Service registry for Naiad.

Each NGWMN service ("observation", "featureOfInterest") is registered as a
ServiceSpec and retrieved by name when a request is dispatched. Service
modules register themselves when they are imported.

Names are matched exactly, as they are passed to fetch().

Example:
    >>> from naiad.registry import get_service
    >>>
    >>> spec = get_service("featureOfInterest")
    >>> spec["selectors"]
    ('feature_id', 'bbox')
"""

import warnings
from typing import Dict

from .types import ServiceSpec

# The global registry - just a dictionary mapping names to ServiceSpecs
_SERVICES: Dict[str, ServiceSpec] = {}


def register_service(name: str, spec: ServiceSpec) -> None:
    """
    Register a service in the global registry.

    If a service with the same name already exists, it will be replaced with
    a warning.

    Args:
        name: Service name as passed to fetch()
        spec: ServiceSpec describing the service
    """
    if name in _SERVICES:
        warnings.warn(
            f"Service '{name}' is already registered and will be replaced",
            UserWarning,
            stacklevel=2,
        )

    _SERVICES[name] = spec


def get_service(name: str) -> ServiceSpec | None:
    """Retrieve a registered service by name, or None if it isn't registered."""
    return _SERVICES.get(name)


def list_services() -> list[str]:
    """
    Get a list of all registered service names.

    Example:
        >>> list_services()
        ['featureOfInterest', 'observation']
    """
    return sorted(_SERVICES.keys())


def get_service_info(name: str) -> dict[str, str | tuple[str, ...]] | None:
    """
    Get basic information about a registered service.

    Returns:
        dict | None: Dictionary with 'name', 'description' and 'selectors'
            keys, or None if the service is not registered
    """
    spec = get_service(name)
    if spec is None:
        return None

    return {
        "name": spec["name"],
        "description": spec["description"],
        "selectors": spec["selectors"],
    }
