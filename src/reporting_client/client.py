"""
User-facing entry point bundling the transport, wrapper modules and batching.
"""

from __future__ import annotations

import typing as t

import httpx

from reporting_client.batch import BatchCollector
from reporting_client.caller import Caller
from reporting_client.config import ClientConfig
from reporting_client.modules import ApiModule, SitesManagerModule, VisitsSummaryModule
from reporting_client.transport import TransportClient


class _ModuleSet:
    """Attach every wrapper module to one caller."""

    def _bind_modules(self, caller: Caller) -> None:
        self.api = ApiModule(caller)
        self.sites_manager = SitesManagerModule(caller)
        self.visits_summary = VisitsSummaryModule(caller)


class BatchRequest(BatchCollector, _ModuleSet):
    """
    Batch collector exposing the same wrapper modules as the client.

    Module methods called on it queue their call and return a future;
    ``await batch.execute()`` sends them all in one round trip.

    >>> batch = client.prepare_requests()
    >>> version = batch.api.get_matomo_version()
    >>> visits = batch.visits_summary.get_visits(period="day", date="today")
    >>> await batch.execute()
    >>> await version, await visits
    """

    def __init__(self, transport: TransportClient) -> None:
        super().__init__(transport)
        self._bind_modules(self)


class ReportingClient(_ModuleSet):
    """
    Client for the reporting API.

    Parameters
    ----------
    config : ClientConfig | None
        Endpoint configuration; built from ``**options`` when omitted.
    client_factory : typing.Callable[[], httpx.AsyncClient] | None
        Optional factory for the underlying ``httpx.AsyncClient``.
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
        self.core = TransportClient(config, client_factory=client_factory, **options)
        self._bind_modules(self.core)

    @classmethod
    def from_env(
        cls,
        *,
        client_factory: t.Callable[[], httpx.AsyncClient] | None = None,
        **overrides: t.Any,
    ) -> "ReportingClient":
        """Build a client from ``MATOMO_*`` environment variables."""
        return cls(ClientConfig.from_env(**overrides), client_factory=client_factory)

    async def request(self, method: str, params: t.Mapping[str, t.Any] | None = None) -> t.Any:
        return await self.core.request(method, params)

    async def bulk_request(self, methods: t.Any) -> dict[str, t.Any] | list[t.Any]:
        return await self.core.bulk_request(methods)

    def prepare_requests(self) -> BatchRequest:
        """Create a fresh batch bound to this client's transport."""
        return BatchRequest(self.core)
