"""
Canonical wire encoding for call parameters.

Every value reaching the remote service is a single string: scalars are
stringified without locale dependence, sequences of scalars are joined with
``,`` and absent values are dropped so the service sees "parameter absent"
rather than an empty filter.
"""

from __future__ import annotations

import datetime
import enum
import math
import typing as t
from decimal import Decimal
from urllib.parse import urlencode

from reporting_client.exceptions import ParameterEncodingError

__all__ = ["encode_params", "encode_value", "to_query_string"]

ARRAY_SEPARATOR = ","


def _encode_scalar(*, key: str, value: t.Any) -> str:
    """
    Stringify one scalar value.

    Parameters
    ----------
    key : str
        Parameter name, used for error reporting.
    value : typing.Any
        Scalar value.

    Returns
    -------
    str
        Wire representation.
    """
    if isinstance(value, enum.Enum):
        value = value.value
    # bool is a subclass of int and must be checked first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ParameterEncodingError(key=key, value=value)
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ParameterEncodingError(key=key, value=value)
        return str(value)
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    raise ParameterEncodingError(key=key, value=value)


def encode_value(*, key: str, value: t.Any) -> str | None:
    """
    Encode a single parameter value.

    Parameters
    ----------
    key : str
        Parameter name, used for error reporting.
    value : typing.Any
        Scalar, sequence of scalars or ``None``.

    Returns
    -------
    str | None
        Wire value, or ``None`` when the parameter must be omitted.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        parts: list[str] = []
        for item in value:
            if item is None:
                continue
            if isinstance(item, (list, tuple)):
                raise ParameterEncodingError(key=key, value=item)
            parts.append(_encode_scalar(key=key, value=item))
        if not parts:
            return None
        return ARRAY_SEPARATOR.join(parts)
    return _encode_scalar(key=key, value=value)


def encode_params(params: t.Mapping[str, t.Any] | None) -> dict[str, str]:
    """
    Convert a parameter mapping into its canonical flat form.

    Parameters
    ----------
    params : typing.Mapping[str, typing.Any] | None
        Argument names mapped to scalars, sequences of scalars or ``None``.
        Structured payloads must already be serialized (e.g. JSON text).

    Returns
    -------
    dict[str, str]
        Insertion-ordered mapping with exactly one string value per key.

    Raises
    ------
    ParameterEncodingError
        If a value has an unsupported type.
    """
    if not params:
        return {}

    encoded: dict[str, str] = {}
    for key, value in params.items():
        wire_value = encode_value(key=str(key), value=value)
        if wire_value is None:
            continue
        encoded[str(key)] = wire_value
    return encoded


def to_query_string(params: t.Mapping[str, t.Any] | None) -> str:
    """
    Render parameters as a percent-encoded query string.

    Parameters
    ----------
    params : typing.Mapping[str, typing.Any] | None
        Parameters to encode; passed through :func:`encode_params` first.

    Returns
    -------
    str
        ``key=value&...`` string.
    """
    return urlencode(encode_params(params))
