"""
Tests for attributes.py - saving, stripping and attaching DataFrame.attrs.
"""

import pandas as pd

from naiad.attributes import attach_attrs, save_attrs, strip_attrs
from naiad.config import METADATA_ATTRIBUTES


def test_save_attrs_returns_one_row_in_name_order(sample_levels):
    saved = save_attrs(METADATA_ATTRIBUTES, sample_levels)

    assert len(saved) == 1
    assert list(saved.columns) == list(METADATA_ATTRIBUTES)
    assert saved.loc[0, "identifier"] == "USGS.272838082142201.GWL"
    assert saved.loc[0, "responsibleParty"] == "U.S. Geological Survey"


def test_save_attrs_missing_attribute_is_na():
    df = pd.DataFrame({"a": [1]})
    df.attrs["url"] = "https://example.org"

    saved = save_attrs(["url", "contact"], df)

    assert saved.loc[0, "url"] == "https://example.org"
    assert pd.isna(saved.loc[0, "contact"])


def test_strip_attrs_removes_only_named_attrs(sample_levels):
    sample_levels.attrs["other"] = "keep me"

    stripped = strip_attrs(METADATA_ATTRIBUTES, sample_levels)

    assert stripped.attrs == {"other": "keep me"}
    pd.testing.assert_frame_equal(stripped, sample_levels, check_flags=False)


def test_strip_attrs_does_not_modify_input(sample_levels):
    strip_attrs(["url"], sample_levels)

    assert "url" in sample_levels.attrs


def test_strip_attrs_ignores_unset_names():
    df = pd.DataFrame({"a": [1]})

    assert strip_attrs(["url"], df).attrs == {}


def test_attach_attrs_returns_copy():
    df = pd.DataFrame({"a": [1]})

    attached = attach_attrs(df, {"url": "https://example.org"})

    assert attached.attrs["url"] == "https://example.org"
    assert df.attrs == {}


def test_saved_attrs_survive_concat(sample_levels):
    """
    Saving before a merge keeps every site's values, in order.

    pd.concat does not keep attrs that differ between inputs, which is why
    they are saved into their own table first.
    """
    other = sample_levels.copy()
    other.attrs["identifier"] = "USGS.404159100494601.GWL"

    saved = [save_attrs(METADATA_ATTRIBUTES, df) for df in (sample_levels, other)]
    merged = pd.concat(
        [strip_attrs(METADATA_ATTRIBUTES, df) for df in (sample_levels, other)],
        ignore_index=True,
    )
    metadata = pd.concat(saved, ignore_index=True)

    assert len(merged) == 4
    assert metadata["identifier"].tolist() == [
        "USGS.272838082142201.GWL",
        "USGS.404159100494601.GWL",
    ]
    for name in METADATA_ATTRIBUTES:
        if name != "identifier":
            assert metadata[name].tolist() == [sample_levels.attrs[name]] * 2
