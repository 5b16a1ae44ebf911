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
Helpers for moving DataFrame.attrs in and out of tables.

pd.concat only keeps attrs when every input carries identical attrs, so
per-site metadata has to be pulled out into its own table before the
per-site frames are combined.
"""

from typing import Any, Iterable

import pandas as pd


def save_attrs(names: Iterable[str], df: pd.DataFrame) -> pd.DataFrame:
    """
    Read the named attrs off a DataFrame into a one-row DataFrame.

    Args:
        names: Attribute names to read, in the order of the output columns
        df: DataFrame carrying the attrs

    Returns:
        pd.DataFrame: One row, one column per name. Attributes that are not
            set on df are returned as pd.NA.

    Example:
        >>> df = pd.DataFrame()
        >>> df.attrs["url"] = "https://example.org"
        >>> saved = save_attrs(["url", "contact"], df)
        >>> saved.loc[0, "url"]
        'https://example.org'
    """
    names = list(names)
    row = {name: df.attrs.get(name, pd.NA) for name in names}
    return pd.DataFrame([row], columns=names)


def strip_attrs(names: Iterable[str], df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of df with the named attrs removed."""
    stripped = df.copy()
    for name in names:
        stripped.attrs.pop(name, None)
    return stripped


def attach_attrs(df: pd.DataFrame, values: dict[str, Any]) -> pd.DataFrame:
    """Return a copy of df with the given attrs set."""
    attached = df.copy()
    attached.attrs.update(values)
    return attached
