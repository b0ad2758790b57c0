"""
Tests for parameter encoding in reporting_client.codec.
"""

import datetime
import enum
from decimal import Decimal

import pytest

from reporting_client.codec import encode_params, encode_value, to_query_string
from reporting_client.exceptions import ParameterEncodingError


class Period(enum.Enum):
    DAY = "day"
    WEEK = "week"


def test_encode_scalars():
    """Scalars are stringified without locale dependence."""
    encoded = encode_params(
        {"idSite": 3, "ratio": 0.25, "label": "Home", "flat": True, "expanded": False}
    )

    assert encoded == {
        "idSite": "3",
        "ratio": "0.25",
        "label": "Home",
        "flat": "true",
        "expanded": "false",
    }


def test_encode_preconverted_booleans_pass_through():
    assert encode_params({"flat": 1, "expanded": 0}) == {"flat": "1", "expanded": "0"}


def test_encode_array_join():
    """Arrays of scalars are joined with commas."""
    assert encode_params({"tags": [1, 2, 3]}) == {"tags": "1,2,3"}
    assert encode_params({"idSites": (4, "5")}) == {"idSites": "4,5"}


def test_encode_empty_array_is_omitted():
    assert encode_params({"tags": []}) == {}
    assert "tags" not in encode_params({"tags": [], "idSite": 1})


def test_encode_array_skips_none_items():
    assert encode_params({"tags": [None, "a", None]}) == {"tags": "a"}
    assert encode_params({"tags": [None]}) == {}


def test_encode_drops_none_values():
    assert encode_params({"segment": None, "period": "day"}) == {"period": "day"}


def test_encode_none_or_empty_params():
    assert encode_params(None) == {}
    assert encode_params({}) == {}


def test_encode_preserves_key_order():
    encoded = encode_params({"z": 1, "a": 2, "m": [3, 4]})

    assert list(encoded) == ["z", "a", "m"]


def test_encode_enum_date_and_decimal():
    encoded = encode_params(
        {
            "period": Period.WEEK,
            "date": datetime.date(2024, 3, 1),
            "since": datetime.datetime(2024, 3, 2, 13, 45),
            "price": Decimal("9.90"),
        }
    )

    assert encoded == {
        "period": "week",
        "date": "2024-03-01",
        "since": "2024-03-02",
        "price": "9.90",
    }


def test_encode_integral_float_has_no_fraction():
    assert encode_params({"limit": 10.0}) == {"limit": "10"}


@pytest.mark.parametrize(
    "value",
    [
        {"nested": "object"},
        {1, 2},
        b"raw",
        lambda: None,
        object(),
        float("nan"),
        float("inf"),
        [[1, 2], [3]],
    ],
)
def test_encode_unsupported_values_fail_fast(value):
    """Unsupported values raise an error naming the offending key."""
    with pytest.raises(ParameterEncodingError) as excinfo:
        encode_params({"ok": 1, "bad_key": value})

    assert excinfo.value.key == "bad_key"
    assert "bad_key" in str(excinfo.value)
    assert isinstance(excinfo.value, TypeError)


def test_encode_is_idempotent():
    once = encode_params({"tags": [1, 2], "flat": True, "idSite": 7, "skip": None})

    assert encode_params(once) == once


def test_encode_value_returns_none_for_omitted():
    assert encode_value(key="x", value=None) is None
    assert encode_value(key="x", value=[]) is None
    assert encode_value(key="x", value=["a", "b"]) == "a,b"


def test_to_query_string_percent_encodes():
    query = to_query_string({"segment": "pageUrl=@/blog", "idSites": [1, 2]})

    assert query == "segment=pageUrl%3D%40%2Fblog&idSites=1%2C2"
