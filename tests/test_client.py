"""
Tests for ReportingClient, BatchRequest and the wrapper modules.
"""

import datetime

import pytest

from reporting_client import BatchRequest, Caller, ReportingClient
from reporting_client.config import ClientConfig
from reporting_client.exceptions import RemoteAPIError
from reporting_client.modules import ApiModule, SitesManagerModule, VisitsSummaryModule
from tests.conftest import BASE_URL
from tests.mocks.server import FakeReportingAPI


@pytest.fixture
def client(config: ClientConfig, fake_api: FakeReportingAPI) -> ReportingClient:
    return ReportingClient(config, client_factory=fake_api.client_factory())


def test_client_binds_modules(client: ReportingClient):
    assert isinstance(client.api, ApiModule)
    assert isinstance(client.sites_manager, SitesManagerModule)
    assert isinstance(client.visits_summary, VisitsSummaryModule)
    assert client.api.caller is client.core


def test_transport_and_batch_are_callers(client: ReportingClient):
    assert isinstance(client.core, Caller)
    assert isinstance(client.prepare_requests(), Caller)


@pytest.mark.asyncio
async def test_eager_module_call(client: ReportingClient, fake_api: FakeReportingAPI):
    assert await client.api.get_matomo_version() == {"value": "5.1.0"}
    assert fake_api.received[0]["method"] == "API.getMatomoVersion"
    assert fake_api.received[0]["module"] == "API"


@pytest.mark.asyncio
async def test_module_call_drops_unset_arguments(
    client: ReportingClient, fake_api: FakeReportingAPI
):
    result = await client.visits_summary.get_visits(
        period="day", date=datetime.date(2024, 5, 1)
    )

    assert result == {"idSite": "1", "date": "2024-05-01", "nb_visits": 42}
    assert "segment" not in fake_api.received[0]
    assert fake_api.received[0]["module"] == "VisitsSummary"


@pytest.mark.asyncio
async def test_module_renames_arguments(client: ReportingClient, fake_api: FakeReportingAPI):
    fake_api.responses["SitesManager.getSitesWithAdminAccess"] = lambda params: []

    await client.sites_manager.get_sites_with_admin_access(fetch_alias_urls=True, limit=5)

    assert fake_api.received[0]["fetchAliasUrls"] == "true"
    assert fake_api.received[0]["limit"] == "5"


@pytest.mark.asyncio
async def test_module_call_surfaces_remote_error(client: ReportingClient):
    with pytest.raises(RemoteAPIError, match="API.getPhpVersion"):
        await client.api.get_php_version()


@pytest.mark.asyncio
async def test_batched_module_calls(client: ReportingClient, fake_api: FakeReportingAPI):
    """Module calls on a batch are queued and answered by one round trip."""
    batch = client.prepare_requests()
    assert isinstance(batch, BatchRequest)

    version = batch.api.get_matomo_version()
    sites = batch.sites_manager.get_all_sites_id()
    visits = batch.visits_summary.get_visits(period="day", date="today", id_site=2)

    assert batch.pending_count == 3
    assert fake_api.requests == []

    await batch.execute()

    assert len(fake_api.requests) == 1
    assert await version == {"value": "5.1.0"}
    assert await sites == [1, 2, 3]
    assert (await visits)["idSite"] == "2"


@pytest.mark.asyncio
async def test_prepare_requests_returns_fresh_batches(client: ReportingClient):
    first = client.prepare_requests()
    second = client.prepare_requests()
    first.api.get_matomo_version()

    assert first is not second
    assert second.pending_count == 0
    first.reset()


@pytest.mark.asyncio
async def test_client_bulk_request(client: ReportingClient, fake_api: FakeReportingAPI):
    results = await client.bulk_request(
        {"API.getMatomoVersion": None, "SitesManager.getAllSitesId": None}
    )

    assert results == {
        "API.getMatomoVersion": {"value": "5.1.0"},
        "SitesManager.getAllSitesId": [1, 2, 3],
    }
    assert len(fake_api.requests) == 1


@pytest.mark.asyncio
async def test_client_request(client: ReportingClient):
    assert await client.request("SitesManager.getAllSitesId") == [1, 2, 3]


@pytest.mark.asyncio
async def test_client_from_env(monkeypatch, fake_api: FakeReportingAPI):
    monkeypatch.setenv("MATOMO_URL", BASE_URL)
    monkeypatch.setenv("MATOMO_DEFAULT_SITE_ID", "4")

    client = ReportingClient.from_env(client_factory=fake_api.client_factory())
    result = await client.visits_summary.get_visits(period="day", date="today")

    assert result["idSite"] == "4"
    assert client.core.config.url == BASE_URL


def test_client_from_options():
    client = ReportingClient(url=BASE_URL, token_auth="tok", security_mode=False)

    assert client.core.config.http_method == "GET"
    assert client.core.config.token_auth == "tok"
