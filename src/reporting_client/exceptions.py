"""
Reporting client runtime exceptions.
"""

from __future__ import annotations

import typing as t

API_ERROR_PREFIX = "Reporting API error"
ERROR_RESULT_FIELD = "result"
ERROR_RESULT_VALUE = "error"


class ReportingClientError(Exception):
    """Base class for every error raised by the reporting client."""


class ParameterEncodingError(ReportingClientError, TypeError):
    """
    Raised when a parameter value cannot be represented on the wire.

    Parameters
    ----------
    key : str
        Parameter name holding the offending value.
    value : typing.Any
        The value that could not be encoded.
    """

    def __init__(self, *, key: str, value: t.Any) -> None:
        self.key = key
        self.value = value
        super().__init__(
            f"unencodable value for parameter '{key}': {type(value).__name__} is not supported"
        )


class ReportingAPIError(ReportingClientError):
    """
    Normalized error for anything the remote service or the wire rejected.

    The message always starts with ``API_ERROR_PREFIX`` so callers can match
    on it regardless of the concrete subclass.
    """

    def __init__(self, message: str) -> None:
        self.detail = message
        super().__init__(f"{API_ERROR_PREFIX}: {message}")


class RemoteAPIError(ReportingAPIError):
    """
    The decoded body carried the error discriminator.

    Parameters
    ----------
    remote_message : str
        Message supplied by the remote service.
    method : str | None
        Remote method that failed, when known.
    payload : typing.Any
        The decoded error payload.
    """

    def __init__(
        self,
        remote_message: str,
        *,
        method: str | None = None,
        payload: t.Any = None,
    ) -> None:
        self.remote_message = remote_message
        self.method = method
        self.payload = payload
        super().__init__(remote_message)


class TransportError(ReportingAPIError):
    """Network failure, timeout, non-2xx status or undecodable body."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class EnvelopeShapeError(ReportingAPIError):
    """
    A bulk response cannot be matched positionally to its request.

    Parameters
    ----------
    expected : int
        Number of sub-requests that were sent.
    actual : int | None
        Number of elements received, ``None`` when the envelope is not a list.
    """

    def __init__(self, *, expected: int, actual: int | None) -> None:
        self.expected = expected
        self.actual = actual
        if actual is None:
            message = f"bulk response is not an array (expected {expected} results)"
        else:
            message = f"bulk response has {actual} results, expected {expected}"
        super().__init__(message)


def is_remote_error_payload(payload: t.Any) -> bool:
    """
    Detect whether a decoded body is shaped as a remote error.

    Parameters
    ----------
    payload : typing.Any
        Decoded JSON value.

    Returns
    -------
    bool
        ``True`` when ``payload`` is a mapping whose ``result`` field equals
        the error sentinel.
    """
    return (
        isinstance(payload, t.Mapping)
        and payload.get(ERROR_RESULT_FIELD) == ERROR_RESULT_VALUE
    )


def remote_error_from_payload(
    payload: t.Mapping[str, t.Any], *, method: str | None = None
) -> RemoteAPIError:
    """
    Build a :class:`RemoteAPIError` from an error-shaped payload.

    Parameters
    ----------
    payload : typing.Mapping[str, typing.Any]
        Error-shaped decoded body.
    method : str | None, optional
        Remote method that produced the payload.

    Returns
    -------
    RemoteAPIError
        Normalized error carrying the remote message.
    """
    message = payload.get("message")
    if message is None:
        message = "unknown error"
    return RemoteAPIError(str(message), method=method, payload=dict(payload))
