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
Composable DataFrame transformation functions.

This module provides small, pure functions that transform DataFrames in
predictable ways. Functions can be composed together using `pipe()` or
`compose()` to build the normalisation pipelines for service responses.

All transformer functions follow the pattern:
    - Take configuration as arguments
    - Return a function that transforms a DataFrame
    - Are pure (no side effects)
    - Are composable

Example:
    >>> normalise = compose(
    ...     to_numeric("value"),
    ...     prepend_column("site", "272838082142201"),
    ... )
    >>> df_normalised = normalise(df_raw)
"""

from functools import reduce
from typing import Any

import pandas as pd

from .config import DateTimeParseError
from .types import Transformer


def pipe(df: pd.DataFrame, *functions: Transformer) -> pd.DataFrame:
    """
    Apply a series of transformation functions to a DataFrame in sequence.

    Args:
        df: Input DataFrame
        *functions: Variable number of transformer functions to apply

    Returns:
        pd.DataFrame: Transformed DataFrame after all functions applied

    Example:
        >>> result = pipe(
        ...     df,
        ...     to_numeric("value"),
        ...     select_columns("dateTime", "value"),
        ... )
    """
    return reduce(lambda data, func: func(data), functions, df)


def compose(*functions: Transformer) -> Transformer:
    """
    Compose multiple transformer functions into a single function.

    Returns a new function that applies all the given functions in sequence.

    Args:
        *functions: Variable number of transformer functions to compose

    Returns:
        Transformer: A new function that applies all transformations
    """

    def composed(df: pd.DataFrame) -> pd.DataFrame:
        return pipe(df, *functions)

    return composed


def prepend_column(name: str, value: Any) -> Transformer:
    """
    Return a function that inserts a column as the leftmost column.

    An existing column with the same name is replaced.

    Args:
        name: Name of the new column
        value: Static value applied to all rows

    Returns:
        Transformer: Function that prepends the specified column

    Example:
        >>> transform = prepend_column("site", "272838082142201")
        >>> df_with_site = transform(df)
        >>> df_with_site.columns[0]
        'site'
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        result = df.drop(columns=[name]) if name in df.columns else df.copy()
        result.insert(0, name, value)
        return result

    return transform


def select_columns(*columns: str) -> Transformer:
    """
    Return a function that selects only specified columns from a DataFrame.

    Only selects columns that exist in the DataFrame - silently ignores
    columns that don't exist.

    Args:
        *columns: Variable number of column names to select

    Returns:
        Transformer: Function that selects the specified columns
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        cols_to_select = [col for col in columns if col in df.columns]
        return df[cols_to_select]

    return transform


def to_numeric(column: str) -> Transformer:
    """
    Return a function that converts a column to numbers.

    Values that are not numeric become NaN.
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if column not in df.columns:
            return df
        return df.assign(**{column: pd.to_numeric(df[column], errors="coerce")})

    return transform


def parse_datetimes(column: str, tz: str = "") -> Transformer:
    """
    Return a function that parses ISO 8601 timestamps in a column.

    Each value is read with its own UTC offset and converted to UTC. Values
    without an offset (including date-only values) are taken as UTC. If tz
    is given the result is converted to that timezone.

    Args:
        column: Name of the column holding timestamp strings
        tz: IANA timezone name, or "" to keep UTC

    Returns:
        Transformer: Function that replaces the column with parsed timestamps

    Raises:
        DateTimeParseError: If a non-missing value cannot be parsed. Call again
            with as_datetime=False to get the timestamps as strings.
    """

    def transform(df: pd.DataFrame) -> pd.DataFrame:
        if column not in df.columns:
            return df

        raw = df[column]
        parsed = pd.to_datetime(raw, utc=True, errors="coerce", format="ISO8601")

        invalid = parsed.isna() & raw.notna()
        if invalid.any():
            bad_value = raw[invalid].iloc[0]
            raise DateTimeParseError(
                f"Could not parse timestamp {bad_value!r} in column '{column}'. "
                "Use as_datetime=False to return timestamps as strings."
            )

        if tz:
            parsed = parsed.dt.tz_convert(tz)

        return df.assign(**{column: parsed})

    return transform
