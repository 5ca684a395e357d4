"""Root pytest configuration for notary-registry tests."""
import pytest

from notary_registry.repository import Repository
from notary_registry.settings import Settings

from .storage.fakes import REGISTRY_HOST, FakeRegistry

BASE_URL = f"https://{REGISTRY_HOST}/v2"
REPO_NAME = "acme/app"


# Set up test environment variables
@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Automatically set up test environment variables."""
    monkeypatch.setenv("NOTARY_REGISTRY_URL", f"https://{REGISTRY_HOST}")
    monkeypatch.setenv("NOTARY_REGISTRY_REPO", REPO_NAME)
    for key in ("NOTARY_REGISTRY_INSECURE", "NOTARY_REGISTRY_USERNAME", "NOTARY_REGISTRY_PASSWORD",
                "NOTARY_HTTP_TIMEOUT", "NOTARY_HTTP_RETRY", "NOTARY_MAX_READ_BYTES"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings():
    """Standard test settings."""
    return Settings(registry_url=f"https://{REGISTRY_HOST}", registry_repo=REPO_NAME)


@pytest.fixture
def fake_registry():
    """In-memory registry behind httpx.MockTransport."""
    return FakeRegistry()


@pytest.fixture
def client(fake_registry):
    """httpx client wired to the fake registry."""
    with fake_registry.client() as client:
        yield client


@pytest.fixture
def repository(client):
    """Repository facade talking to the fake registry."""
    return Repository(client, BASE_URL, REPO_NAME)
