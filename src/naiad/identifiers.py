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
Feature identifier handling.

NGWMN feature identifiers combine an agency code and a site number, e.g.
"USGS.272838082142201" or "MBMG:702934". The service expects a period
between the two, but both separators are accepted on input.
"""

from typing import Iterable

import pandas as pd

from .config import ConfigurationError


def normalize_feature_ids(feature_ids: str | Iterable[str | None] | None) -> list[str]:
    """
    Canonicalise feature identifiers.

    Colons are replaced with periods, surrounding whitespace is removed and
    missing entries (None, NaN, empty strings) are dropped. Duplicates are
    removed, keeping the first occurrence.

    Args:
        feature_ids: A single identifier or an iterable of identifiers

    Returns:
        list[str]: Normalised identifiers in input order

    Raises:
        ConfigurationError: If an entry is itself a list or other container

    Example:
        >>> normalize_feature_ids(["USGS:272838082142201", None, "USGS.272838082142201"])
        ['USGS.272838082142201']
    """
    if feature_ids is None:
        return []
    if isinstance(feature_ids, str):
        feature_ids = [feature_ids]

    normalized = []
    for feature_id in feature_ids:
        if not pd.api.types.is_scalar(feature_id):
            raise ConfigurationError(
                f"Feature identifiers must be strings, got {type(feature_id).__name__}"
            )
        if pd.isna(feature_id):
            continue
        feature_id = str(feature_id).strip().replace(":", ".")
        if feature_id:
            normalized.append(feature_id)

    return list(dict.fromkeys(normalized))


def site_number(feature_id: str) -> str:
    """Return the site number, i.e. the identifier without its agency code."""
    return feature_id.rsplit(".", 1)[-1]


def agency_code(feature_id: str) -> str:
    """Return the agency code of a normalised identifier."""
    return feature_id.split(".", 1)[0]
