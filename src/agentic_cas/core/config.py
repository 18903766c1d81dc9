"""agentic-cas configuration management.

Configuration is read from ~/.agentic_cas/config.yaml when present, then
overridden by environment variables:

    AGENTIC_CAS_CONTAINER           default container name
    AGENTIC_CAS_BACKEND             auto | local | memory | azure
    AGENTIC_CAS_LOCAL_PATH          root directory for the local backend
    AZURE_STORAGE_CONNECTION_STRING Azure connection string
    AZURE_STORAGE_ACCOUNT_URL       Azure account URL (DefaultAzureCredential)

This is the only place a backend is built from ambient state; library code
always receives the backend explicitly.
"""

import logging
import os
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError

from ..errors import ConfigError
from ..services.cas import DEFAULT_PREFIX, ContentAddressableStore
from ..services.storage import get_backend
from ..services.storage.base import BlobBackend
from .config_base import ConfigModel
from .paths import CONFIG_FILE, LOCAL_STORE_DIR

logger = logging.getLogger(__name__)

FALLBACK_CONTAINER = "agentic-readme-cas"

# Environment variable -> config field
ENV_OVERRIDES = {
    "AGENTIC_CAS_CONTAINER": "default_container",
    "AGENTIC_CAS_BACKEND": "backend",
    "AGENTIC_CAS_LOCAL_PATH": "local_path",
    "AZURE_STORAGE_CONNECTION_STRING": "azure_connection_string",
    "AZURE_STORAGE_ACCOUNT_URL": "azure_account_url",
}


def default_container_name() -> str:
    """Derive the default container name from the environment.

    Uses "<GOOGLE_CLOUD_PROJECT>-cas" when a project is set, otherwise
    "agentic-readme-cas".
    """
    project = os.environ.get("GOOGLE_CLOUD_PROJECT")
    return f"{project}-cas" if project else FALLBACK_CONTAINER


class CASConfig(ConfigModel):
    """Settings for building a content-addressable store."""

    default_container: str = Field(default_factory=default_container_name, min_length=1)
    """Container used when callers don't pass one."""

    prefix: str = DEFAULT_PREFIX
    """Namespace prefix for object keys."""

    backend: Literal["auto", "local", "memory", "azure"] = "auto"
    """Which blob backend to use ("auto" picks Azure when credentials exist)."""

    local_path: Path = LOCAL_STORE_DIR
    """Root directory for the local filesystem backend."""

    azure_connection_string: str | None = None
    azure_account_url: str | None = None

    verify_on_read: bool = True
    """Recompute digests on read and fail on mismatch."""

    @classmethod
    def load(cls, path: Path | None = None) -> "CASConfig":
        """Load config file (if it exists) and apply environment overrides.

        Args:
            path: Config file path, defaults to ~/.agentic_cas/config.yaml
        """
        path = path or CONFIG_FILE
        base = cls.from_yaml(path) if path.exists() else cls()

        overrides = {
            field: os.environ[var] for var, field in ENV_OVERRIDES.items() if os.environ.get(var)
        }
        if not overrides:
            return base

        logger.debug(f"Applying environment overrides: {sorted(overrides)}")
        try:
            return cls(**{**base.model_dump(exclude_unset=True), **overrides})
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration from environment: {e}") from e

    def save(self, path: Path | None = None) -> Path:
        """Write configuration to disk, creating the parent directory."""
        path = path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        self.to_yaml(path)
        return path

    def create_backend(self) -> BlobBackend:
        """Build the blob backend these settings describe.

        Raises:
            ConfigError: If the Azure backend is selected without credentials
        """
        if self.backend == "azure":
            if not (self.azure_connection_string or self.azure_account_url):
                raise ConfigError(
                    "Azure backend selected but no credentials configured. Set "
                    "AZURE_STORAGE_CONNECTION_STRING or AZURE_STORAGE_ACCOUNT_URL"
                )
            return get_backend(
                "azure",
                connection_string=self.azure_connection_string,
                account_url=self.azure_account_url,
            )
        if self.backend == "auto":
            if self.azure_connection_string or self.azure_account_url:
                return get_backend(
                    "azure",
                    connection_string=self.azure_connection_string,
                    account_url=self.azure_account_url,
                )
            return get_backend("local", base_path=self.local_path)
        if self.backend == "local":
            return get_backend("local", base_path=self.local_path)
        return get_backend("memory")

    def create_store(self, backend: BlobBackend | None = None) -> ContentAddressableStore:
        """Build a store from these settings, optionally with an injected backend."""
        return ContentAddressableStore(
            backend or self.create_backend(),
            default_container=self.default_container,
            prefix=self.prefix,
            verify_on_read=self.verify_on_read,
        )
