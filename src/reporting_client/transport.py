"""
Single physical round trips to the reporting API.

``TransportClient`` merges the implicit parameters carried by its
configuration into each call, encodes them, sends one GET or POST depending
on the security mode and normalizes the outcome: decoded JSON on success,
:class:`RemoteAPIError` when the service reports an error and
:class:`TransportError` when the wire itself failed.
"""

from __future__ import annotations

import asyncio
import typing as t
from dataclasses import dataclass

import httpx
import structlog

from reporting_client.bulk import (
    BULK_METHOD,
    Call,
    CallResult,
    as_calls,
    decode_job,
    encode_job,
    job_params,
    module_of,
)
from reporting_client.codec import encode_params
from reporting_client.config import ClientConfig
from reporting_client.exceptions import (
    TransportError,
    is_remote_error_payload,
    remote_error_from_payload,
)

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RawResponse:
    """
    Unprocessed physical response, returned when ``format="original"``.

    Parameters
    ----------
    status_code : int
        HTTP status code.
    headers : dict[str, str]
        Response headers.
    body : bytes
        Raw response body.
    """

    status_code: int
    headers: dict[str, str]
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "RawResponse":
        return cls(
            status_code=response.status_code,
            headers=dict(response.headers.items()),
            body=response.content,
        )


class TransportClient:
    """
    Issue calls against one configured reporting API endpoint.

    Parameters
    ----------
    config : ClientConfig | None
        Endpoint configuration. When omitted, ``**options`` are used to
        build one.
    client_factory : typing.Callable[[], httpx.AsyncClient] | None
        Factory returning a fresh ``httpx.AsyncClient`` for each physical
        request. Tests inject a client bound to a mock transport here.
    **options : typing.Any
        Keyword arguments forwarded to :class:`ClientConfig`.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        client_factory: t.Callable[[], httpx.AsyncClient] | None = None,
        **options: t.Any,
    ) -> None:
        if config is None:
            config = ClientConfig(**options)
        elif options:
            raise TypeError("pass either a ClientConfig or keyword options, not both")
        self._config = config
        self._client_factory: t.Callable[[], httpx.AsyncClient] = (
            client_factory or (lambda: httpx.AsyncClient(timeout=config.timeout))
        )
        log.debug(
            event="Initialized TransportClient",
            endpoint=config.endpoint_url,
            http_method=config.http_method,
            format=config.format,
            has_token=config.token_auth is not None,
            default_site=config.id_site,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def call_defaults(self) -> dict[str, t.Any]:
        """
        Defaults a single call inherits when it does not supply them.

        Returns
        -------
        dict[str, typing.Any]
            ``idSite`` and ``language`` when configured.
        """
        defaults: dict[str, t.Any] = {}
        if self._config.id_site is not None:
            defaults["idSite"] = self._config.id_site
        if self._config.language:
            defaults["language"] = self._config.language
        return defaults

    def build_params(
        self, method: str, params: t.Mapping[str, t.Any] | None = None
    ) -> dict[str, t.Any]:
        """
        Merge implicit parameters with the caller's.

        Parameters
        ----------
        method : str
            Remote ``Module.action`` name.
        params : typing.Mapping[str, typing.Any] | None, optional
            Caller parameters; a caller value for ``token_auth``, ``idSite``
            or ``language`` replaces the configured one.

        Returns
        -------
        dict[str, typing.Any]
            Merged parameters, implicit ones first.
        """
        caller_params = dict(params or {})
        merged: dict[str, t.Any] = {
            "module": module_of(method=method),
            "method": method,
            "format": self._config.format,
        }
        if self._config.token_auth:
            merged["token_auth"] = self._config.token_auth
        for key, value in self.call_defaults.items():
            if caller_params.get(key) is None:
                merged[key] = value
        for key, value in caller_params.items():
            # None means "absent" and never erases an implicit value
            if key == "method" or value is None:
                continue
            merged[key] = value
        return merged

    async def request(self, method: str, params: t.Mapping[str, t.Any] | None = None) -> t.Any:
        """
        Perform one call in a single physical request.

        Parameters
        ----------
        method : str
            Remote ``Module.action`` name.
        params : typing.Mapping[str, typing.Any] | None, optional
            Call parameters.

        Returns
        -------
        typing.Any
            Decoded JSON for ``format="json"``, a :class:`RawResponse` for
            ``format="original"`` and the body text for other formats.

        Raises
        ------
        ParameterEncodingError
            If a parameter cannot be encoded. Raised before any I/O.
        RemoteAPIError
            If the service answered with an error payload.
        TransportError
            If the request failed on the wire or the body is undecodable.
        """
        encoded = encode_params(self.build_params(method=method, params=params))
        response_format = encoded.get("format", self._config.format)
        response = await self._send(method=method, encoded=encoded)
        self._raise_for_status(method=method, response=response)
        if response_format == "original":
            return RawResponse.from_httpx(response)
        return self._decode(method=method, response=response, as_json=response_format == "json")

    async def invoke(self, method: str, params: t.Mapping[str, t.Any] | None = None) -> t.Any:
        """Eager implementation of the ``Caller`` interface."""
        return await self.request(method, params)

    async def bulk_request_results(
        self,
        methods: t.Mapping[str, t.Mapping[str, t.Any] | None]
        | t.Iterable[Call | tuple[str, t.Mapping[str, t.Any] | None]],
    ) -> list[CallResult]:
        """
        Run several calls in one physical request without raising per call.

        Parameters
        ----------
        methods : typing.Mapping | typing.Iterable
            ``{method: params}`` or an ordered iterable of calls.

        Returns
        -------
        list[CallResult]
            Positional results; remote errors are recorded, not raised.

        Raises
        ------
        TransportError
            If the physical request failed.
        EnvelopeShapeError
            If the response does not match the job positionally.
        """
        calls = as_calls(methods)
        if not calls:
            return []
        encoded_calls = encode_job(calls, defaults=self.call_defaults)
        log.debug(event="Sending bulk request", call_count=len(calls))
        envelope = await self.request(BULK_METHOD, {"format": "json", **job_params(encoded_calls)})
        return decode_job(envelope, len(calls), calls=calls)

    async def bulk_request(
        self,
        methods: t.Mapping[str, t.Mapping[str, t.Any] | None]
        | t.Iterable[Call | tuple[str, t.Mapping[str, t.Any] | None]],
    ) -> dict[str, t.Any] | list[t.Any]:
        """
        Run several calls in one physical request.

        Parameters
        ----------
        methods : typing.Mapping | typing.Iterable
            ``{method: params}`` returns a mapping keyed by method name. An
            ordered iterable of :class:`Call` objects or ``(method, params)``
            pairs may repeat a method and returns a positional list.

        Returns
        -------
        dict[str, typing.Any] | list[typing.Any]
            Per-call values in input order.

        Raises
        ------
        RemoteAPIError
            The first per-call error, if any call failed.
        """
        results = await self.bulk_request_results(methods)
        values = [result.unwrap() for result in results]
        if isinstance(methods, t.Mapping):
            return {result.method: value for result, value in zip(results, values)}
        return values

    async def _send(self, *, method: str, encoded: dict[str, str]) -> httpx.Response:
        """
        Transmit encoded parameters using the configured transport mode.

        Parameters
        ----------
        method : str
            Remote method, for logging.
        encoded : dict[str, str]
            Canonical parameter set.

        Returns
        -------
        httpx.Response
            The physical response.
        """
        url = self._config.endpoint_url
        log.debug(
            event="Sending request",
            method=method,
            http_method=self._config.http_method,
            url=url,
            param_keys=[key for key in encoded if key != "token_auth"],
        )
        timeout = self._config.timeout
        try:
            # httpx timeouts are per phase; this bounds the whole round trip
            async with asyncio.timeout(timeout):
                async with self._client_factory() as client:
                    if self._config.security_mode:
                        response = await client.post(url=url, data=encoded, timeout=timeout)
                    else:
                        response = await client.get(url=url, params=encoded, timeout=timeout)
        except httpx.HTTPError as error:
            log.debug(event="Request failed on the wire", method=method, error=repr(error))
            raise TransportError(str(object=error) or type(error).__name__) from error
        except TimeoutError as error:
            log.debug(event="Request timed out", method=method, timeout=timeout)
            raise TransportError(f"request to '{method}' timed out after {timeout}s") from error
        log.debug(event="Received response", method=method, status_code=response.status_code)
        return response

    def _raise_for_status(self, *, method: str, response: httpx.Response) -> None:
        """
        Reject non-2xx responses, whatever the requested format.

        Raises
        ------
        RemoteAPIError
            If the error body carries the remote error discriminator.
        TransportError
            Otherwise, with the HTTP status code attached.
        """
        if response.is_success:
            return
        payload = _try_json(response=response)
        if is_remote_error_payload(payload):
            raise remote_error_from_payload(payload, method=method)
        raise TransportError(
            f"HTTP {response.status_code} {response.reason_phrase} from {self._config.endpoint_url}",
            status_code=response.status_code,
        )

    def _decode(self, *, method: str, response: httpx.Response, as_json: bool) -> t.Any:
        """
        Decode a physical response and discriminate errors.

        Parameters
        ----------
        method : str
            Remote method that produced the response.
        response : httpx.Response
            Physical response.
        as_json : bool
            Whether the body is expected to be JSON.

        Returns
        -------
        typing.Any
            Decoded body.
        """
        if not as_json:
            return response.text

        try:
            payload = response.json()
        except ValueError as error:
            raise TransportError(
                f"unable to decode JSON response for '{method}': {error}",
                status_code=response.status_code,
            ) from error

        if is_remote_error_payload(payload):
            log.debug(event="Remote API reported an error", method=method)
            raise remote_error_from_payload(payload, method=method)
        return payload


def _try_json(*, response: httpx.Response) -> t.Any:
    try:
        return response.json()
    except ValueError:
        return None
