import pytest

from reporting_client.batch import BatchCollector
from reporting_client.config import ClientConfig
from reporting_client.transport import TransportClient
from tests.mocks.server import FakeReportingAPI

BASE_URL = "https://analytics.example.org"
ENDPOINT = f"{BASE_URL}/index.php"


@pytest.fixture(autouse=True)
def test_clear_env(monkeypatch):
    for name in (
        "MATOMO_URL",
        "MATOMO_AUTH_TOKEN",
        "MATOMO_DEFAULT_SITE_ID",
        "MATOMO_FORMAT",
        "MATOMO_LANGUAGE",
        "MATOMO_TIMEOUT",
        "MATOMO_SECURITY_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("reporting_client.config.load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture
def fake_api() -> FakeReportingAPI:
    """
    Create a fake reporting API with a few canned methods.
    """
    return FakeReportingAPI(
        responses={
            "API.getMatomoVersion": {"value": "5.1.0"},
            "SitesManager.getAllSitesId": [1, 2, 3],
            "VisitsSummary.getVisits": lambda params: {
                "idSite": params.get("idSite"),
                "date": params.get("date"),
                "nb_visits": 42,
            },
        }
    )


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(url=f"{BASE_URL}/", token_auth="secret-token", id_site=1)


@pytest.fixture
def transport(config: ClientConfig, fake_api: FakeReportingAPI) -> TransportClient:
    """
    Create a transport client bound to the fake API.

    Returns
    -------
    TransportClient
        Client in secure (POST) mode with a default site and token.
    """
    return TransportClient(config, client_factory=fake_api.client_factory())


@pytest.fixture
def collector(transport: TransportClient) -> BatchCollector:
    return BatchCollector(transport)
