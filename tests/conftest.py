"""Test configuration and shared fixtures for agentic-cas tests."""

import pytest

from agentic_cas.services.cas import ContentAddressableStore
from agentic_cas.services.storage.local import LocalFileBackend
from agentic_cas.services.storage.memory import InMemoryBlobBackend

TEST_CONTAINER = "test-cas"

_ENV_VARS = (
    "AGENTIC_CAS_CONTAINER",
    "AGENTIC_CAS_BACKEND",
    "AGENTIC_CAS_LOCAL_PATH",
    "AZURE_STORAGE_CONNECTION_STRING",
    "AZURE_STORAGE_ACCOUNT_URL",
    "GOOGLE_CLOUD_PROJECT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment variables from leaking into config resolution."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(params=["memory", "local"])
def backend(request, tmp_path):
    """Each store-level test runs against both bundled backends."""
    if request.param == "memory":
        return InMemoryBlobBackend()
    return LocalFileBackend(base_path=tmp_path / "store")


@pytest.fixture
def store(backend):
    return ContentAddressableStore(backend, default_container=TEST_CONTAINER)
