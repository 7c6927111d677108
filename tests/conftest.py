import pytest

from typedhttp import ServiceConfig
from tests.utils.services import BASE_HOST, BASE_URL, FLAVORS, Flavor, Service


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clean environment variables before each test."""
    for name in ("BASE_HOST", "SCHEME", "CRITICAL", "TIMEOUT", "LOGGING"):
        monkeypatch.delenv(f"TYPEDHTTP_{name}", raising=False)


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def config() -> ServiceConfig:
    return ServiceConfig(base_host=BASE_HOST)


@pytest.fixture(params=FLAVORS, ids=lambda flavor: flavor.name)
def flavor(request: pytest.FixtureRequest) -> Flavor:
    return request.param


@pytest.fixture
def service(flavor: Flavor, config: ServiceConfig) -> Service:
    return Service(flavor.error, flavor.serializer_factory, config=config)


@pytest.fixture
def prehandling_service(flavor: Flavor, config: ServiceConfig) -> Service:
    return Service(flavor.basic_error, flavor.serializer_factory, config=config)
