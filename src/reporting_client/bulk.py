"""
Encoding and decoding of bulk jobs.

A bulk job is sent as a single ``API.getBulkRequest`` call whose indexed
``urls[i]`` parameters each hold one fully encoded sub-request. The service
answers with a JSON array matching the sub-requests one to one.
"""

from __future__ import annotations

import typing as t
from dataclasses import dataclass, field

import structlog

from reporting_client.codec import to_query_string
from reporting_client.exceptions import (
    EnvelopeShapeError,
    ReportingAPIError,
    is_remote_error_payload,
    remote_error_from_payload,
)

log = structlog.get_logger(__name__)

BULK_METHOD = "API.getBulkRequest"


@dataclass(frozen=True)
class Call:
    """
    One logical invocation of a remote operation.

    Parameters
    ----------
    method : str
        Dot-separated ``Module.action`` name.
    params : typing.Mapping[str, typing.Any]
        Call parameters, encoded lazily by :func:`encode_call`.
    """

    method: str
    params: t.Mapping[str, t.Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.method or not self.method.strip():
            raise ValueError("method cannot be empty")
        # detach from the caller's mapping
        object.__setattr__(self, "params", dict(self.params))

    @property
    def module(self) -> str:
        """Module prefix of ``method`` (text up to the first dot)."""
        return module_of(method=self.method)


@dataclass(frozen=True)
class CallResult:
    """
    Outcome of one call inside a bulk job, tagged by position.

    Exactly one of ``value`` or ``error`` is meaningful; ``ok`` tells which.
    """

    position: int
    method: str | None
    value: t.Any = None
    error: ReportingAPIError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> t.Any:
        """Return the value or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.value


def module_of(*, method: str) -> str:
    """
    Extract the module prefix of a ``Module.action`` method name.

    Parameters
    ----------
    method : str
        Remote method name.

    Returns
    -------
    str
        Text before the first dot, or the whole name when there is none.
    """
    return method.split(".", 1)[0]


def as_calls(
    methods: t.Mapping[str, t.Mapping[str, t.Any] | None]
    | t.Iterable[Call | tuple[str, t.Mapping[str, t.Any] | None]],
) -> list[Call]:
    """
    Normalize the accepted job shapes into an ordered list of calls.

    Parameters
    ----------
    methods : typing.Mapping | typing.Iterable
        Either ``{method: params}`` or an ordered iterable of :class:`Call`
        objects or ``(method, params)`` pairs. Iterables may repeat a method.

    Returns
    -------
    list[Call]
        Calls in input order.
    """
    if isinstance(methods, t.Mapping):
        return [Call(method=method, params=params or {}) for method, params in methods.items()]
    calls: list[Call] = []
    for item in methods:
        if isinstance(item, Call):
            calls.append(item)
        else:
            method, params = item
            calls.append(Call(method=method, params=params or {}))
    return calls


def encode_call(call: Call, *, defaults: t.Mapping[str, t.Any] | None = None) -> str:
    """
    Render one call as a percent-encoded sub-request.

    Parameters
    ----------
    call : Call
        Call to encode.
    defaults : typing.Mapping[str, typing.Any] | None, optional
        Parameters applied only when the call does not supply them; a
        ``None`` call value counts as not supplied.

    Returns
    -------
    str
        ``method=<name>&key=value...`` string.
    """
    merged: dict[str, t.Any] = {}
    if defaults:
        merged.update(defaults)
    merged.update({key: value for key, value in call.params.items() if value is not None})
    merged.pop("method", None)
    return to_query_string({"method": call.method, **merged})


def encode_job(
    calls: t.Sequence[Call], *, defaults: t.Mapping[str, t.Any] | None = None
) -> list[str]:
    """
    Encode every call of a job, preserving order.

    Parameters
    ----------
    calls : typing.Sequence[Call]
        Ordered calls.
    defaults : typing.Mapping[str, typing.Any] | None, optional
        Per-call default parameters, see :func:`encode_call`.

    Returns
    -------
    list[str]
        One encoded sub-request per call.
    """
    return [encode_call(call, defaults=defaults) for call in calls]


def job_params(encoded: t.Sequence[str]) -> dict[str, str]:
    """Map encoded sub-requests onto the indexed ``urls[i]`` parameters."""
    return {f"urls[{index}]": sub_request for index, sub_request in enumerate(encoded)}


def decode_job(
    envelope: t.Any,
    expected_count: int,
    *,
    calls: t.Sequence[Call] | None = None,
) -> list[CallResult]:
    """
    Split a bulk envelope into positional per-call results.

    Parameters
    ----------
    envelope : typing.Any
        Decoded JSON body of the bulk call.
    expected_count : int
        Number of sub-requests that were sent.
    calls : typing.Sequence[Call] | None, optional
        Calls of the job, used to label results and errors with their method.

    Returns
    -------
    list[CallResult]
        One result per call, in request order.

    Raises
    ------
    EnvelopeShapeError
        If the envelope is not a list of exactly ``expected_count`` elements.
    """
    if not isinstance(envelope, list):
        raise EnvelopeShapeError(expected=expected_count, actual=None)
    if len(envelope) != expected_count:
        raise EnvelopeShapeError(expected=expected_count, actual=len(envelope))

    results: list[CallResult] = []
    for position, item in enumerate(envelope):
        method = calls[position].method if calls is not None else None
        if is_remote_error_payload(item):
            results.append(
                CallResult(
                    position=position,
                    method=method,
                    error=remote_error_from_payload(item, method=method),
                )
            )
        else:
            results.append(CallResult(position=position, method=method, value=item))

    log.debug(
        event="Decoded bulk envelope",
        result_count=len(results),
        error_count=sum(1 for result in results if not result.ok),
    )
    return results
