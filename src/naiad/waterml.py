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
Parsers for NGWMN SOS responses.

GetObservation returns WaterML 2.0 time series wrapped in an SOS response;
GetFeatureOfInterest returns GML monitoring points. Both are read with
xmltodict and flattened into DataFrames. Namespace prefixes are dropped on
read, so elements are addressed by local name ("MeasurementTVP", "pos").

Observation frames come back unnormalised: timestamps and values are still
strings. Normalisation happens in the source module.
"""

import re
from typing import Any
from xml.parsers.expat import ExpatError

import pandas as pd
import xmltodict

from .config import FEATURE_VIEW, ServiceResponseError
from .types import LEVEL_COLUMNS, LOCATION_COLUMNS

OBSERVATION_RESPONSE = "GetObservationResponse"
FEATURE_RESPONSE = "GetFeatureOfInterestResponse"
EXCEPTION_REPORT = "ExceptionReport"

_TIMESTAMP_PARTS = re.compile(r"^(?P<date>[^T\s]+)(?:[T\s](?P<time>[0-9:.]+))?")


# ============================================================================
# DOCUMENT HELPERS
# ============================================================================


def _local_name(key: str) -> str:
    """Strip the namespace prefix from an element or attribute key."""
    if key.startswith("@"):
        return "@" + key[1:].rsplit(":", 1)[-1]
    return key.rsplit(":", 1)[-1]


def _strip_namespaces(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {_local_name(key): _strip_namespaces(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_strip_namespaces(value) for value in obj]
    return obj


def _find_all(obj: Any, name: str) -> list[Any]:
    """
    Collect every element with the given local name, depth first.

    Repeated elements come back from xmltodict as lists and single ones as
    scalars or dicts; both are flattened into one list. Matched elements are
    not searched further.
    """
    found = []
    if isinstance(obj, dict):
        for key, value in obj.items():
            if key == name:
                found.extend(value if isinstance(value, list) else [value])
            else:
                found.extend(_find_all(value, name))
    elif isinstance(obj, list):
        for item in obj:
            found.extend(_find_all(item, name))
    return found


def _find_first(obj: Any, name: str) -> Any:
    matches = _find_all(obj, name)
    return matches[0] if matches else None


def _text(element: Any) -> str | None:
    """Return the stripped text of an element, or None if it has none."""
    if element is None:
        return None
    if isinstance(element, dict):
        element = element.get("#text")
        if element is None:
            return None
    text = str(element).strip()
    return text or None


def _attribute(element: Any, name: str) -> str | None:
    if isinstance(element, dict):
        return _text(element.get(f"@{name}"))
    return None


def read_document(content: bytes | str) -> tuple[str, dict]:
    """
    Parse an SOS response into its root element name and body.

    Args:
        content: Raw XML response

    Returns:
        tuple[str, dict]: Local name of the root element and its contents,
            with namespace prefixes removed

    Raises:
        ServiceResponseError: If the XML is malformed or the service returned
            an OGC exception report
    """
    try:
        document = _strip_namespaces(xmltodict.parse(content))
    except ExpatError as e:
        raise ServiceResponseError(f"Malformed XML in service response: {e}") from e

    root, body = next(iter(document.items()))
    body = body if isinstance(body, dict) else {}

    if root == EXCEPTION_REPORT:
        messages = [_text(text) for text in _find_all(body, "ExceptionText")]
        codes = [_attribute(exc, "exceptionCode") for exc in _find_all(body, "Exception")]
        detail = "; ".join(m for m in messages if m) or "no exception text"
        code = next((c for c in codes if c), "unknown")
        raise ServiceResponseError(f"Service returned an exception ({code}): {detail}")

    return root, body


# ============================================================================
# OBSERVATIONS
# ============================================================================


def _split_timestamp(timestamp: str | None) -> tuple[str | None, str | None]:
    if timestamp is None:
        return None, None
    match = _TIMESTAMP_PARTS.match(timestamp)
    if match is None:
        return timestamp, None
    return match.group("date"), match.group("time")


def _responsible_party(contacts: list[Any]) -> str | None:
    names = [_text(name) for name in _find_all(contacts, "CharacterString")]
    names = [name for name in names if name]
    return "; ".join(names) if names else None


def _contact_href(contacts: list[Any]) -> str | None:
    for contact in contacts:
        href = _attribute(contact, "href")
        if href:
            return href
    return None


def parse_observations(body: dict) -> pd.DataFrame:
    """
    Flatten a GetObservation response into one row per measurement.

    Args:
        body: Response body as returned by read_document()

    Returns:
        pd.DataFrame: Columns date, time, dateTime, value, uom, comment.
            Timestamps and values are left as strings. time is missing for
            date-only readings, as are absent units and comments. The attrs
            dict holds any of identifier, generationDate, responsibleParty
            and contact that the document provides.
    """
    default_metadata = _find_first(body, "DefaultTVPMeasurementMetadata")
    default_uom = _attribute(_find_first(default_metadata, "uom"), "code")

    records = []
    for point in _find_all(body, "MeasurementTVP"):
        if not isinstance(point, dict):
            continue
        timestamp = _text(point.get("time"))
        date, time = _split_timestamp(timestamp)
        value = point.get("value")
        records.append(
            {
                "date": date,
                "time": time,
                "dateTime": timestamp,
                "value": _text(value),
                "uom": _attribute(value, "uom") or default_uom,
                "comment": _text(_find_first(point.get("metadata"), "comment")),
            }
        )

    df = pd.DataFrame(records, columns=LEVEL_COLUMNS)

    contacts = _find_all(body, "contact")
    found = {
        "identifier": _text(_find_first(body, "identifier")),
        "generationDate": _text(_find_first(body, "generationDate")),
        "responsibleParty": _responsible_party(contacts),
        "contact": _contact_href(contacts),
    }
    df.attrs.update({name: value for name, value in found.items() if value is not None})

    return df


# ============================================================================
# FEATURES OF INTEREST
# ============================================================================


def _parse_position(pos: str | None) -> tuple[float, float]:
    if pos is None:
        return float("nan"), float("nan")
    parts = pos.split()
    if len(parts) < 2:
        raise ServiceResponseError(f"Cannot read coordinates from gml:pos {pos!r}")
    return float(parts[0]), float(parts[1])


def parse_features(body: dict) -> pd.DataFrame:
    """
    Flatten a GetFeatureOfInterest response into one row per site.

    Args:
        body: Response body as returned by read_document()

    Returns:
        pd.DataFrame: Columns site, description, dec_lat_va, dec_lon_va.
            The GeoServer view prefix is removed from the site identifier and
            an absent description is missing.
    """
    rows = []
    for member in _find_all(body, "featureMember"):
        identifier = _text(_find_first(member, "identifier")) or ""
        latitude, longitude = _parse_position(_text(_find_first(member, "pos")))
        rows.append(
            {
                "site": identifier.removeprefix(f"{FEATURE_VIEW}."),
                "description": _text(_find_first(member, "description")),
                "dec_lat_va": latitude,
                "dec_lon_va": longitude,
            }
        )

    return pd.DataFrame(rows, columns=LOCATION_COLUMNS)


def parse_response(content: bytes | str) -> pd.DataFrame:
    """
    Parse any NGWMN SOS response into a DataFrame.

    Args:
        content: Raw XML response

    Returns:
        pd.DataFrame: Observation or location frame depending on the
            response type. An empty document gives an empty DataFrame.

    Raises:
        ServiceResponseError: For malformed XML, exception reports and
            unexpected response types
    """
    if not content or not content.strip():
        return pd.DataFrame()

    root, body = read_document(content)

    if root == OBSERVATION_RESPONSE:
        return parse_observations(body)
    if root == FEATURE_RESPONSE:
        return parse_features(body)

    raise ServiceResponseError(f"Unexpected response document: {root}")
