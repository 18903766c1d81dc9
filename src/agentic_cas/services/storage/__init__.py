"""Blob backends for the content-addressable store."""

import logging
import os
from pathlib import Path

from ...core.paths import LOCAL_STORE_DIR
from .base import BlobBackend
from .local import LocalFileBackend
from .memory import InMemoryBlobBackend

logger = logging.getLogger(__name__)


def get_cloud_backend(local_path: str | Path | None = None) -> BlobBackend:
    """Auto-detect cloud provider and return appropriate backend.

    - Azure: used when AZURE_STORAGE_CONNECTION_STRING is set
    - Otherwise: local filesystem under ``local_path``

    Args:
        local_path: Fallback directory for the local backend

    Returns:
        Appropriate storage backend based on environment
    """
    if os.environ.get("AZURE_STORAGE_CONNECTION_STRING"):
        from .azure import AzureBlobBackend

        logger.info("Detected Azure environment")
        return AzureBlobBackend()

    logger.info("No cloud environment detected, using local storage")
    return LocalFileBackend(base_path=local_path or LOCAL_STORE_DIR)


def get_backend(backend_type: str = "auto", **kwargs) -> BlobBackend:
    """Factory function to get specific storage backend.

    Args:
        backend_type: One of "auto", "azure", "local", "memory"
        **kwargs: Backend-specific configuration

    Returns:
        Storage backend instance

    Raises:
        ValueError: If backend_type is unknown

    Examples:
        >>> backend = get_backend("local", base_path="/tmp/cas")
        >>> backend = get_backend("azure", connection_string=conn_str)
    """
    if backend_type == "auto":
        return get_cloud_backend(**kwargs)
    elif backend_type == "azure":
        from .azure import AzureBlobBackend

        return AzureBlobBackend(**kwargs)
    elif backend_type == "local":
        return LocalFileBackend(**kwargs)
    elif backend_type == "memory":
        return InMemoryBlobBackend()
    else:
        raise ValueError(f"Unknown backend type: {backend_type}")


__all__ = [
    "BlobBackend",
    "InMemoryBlobBackend",
    "LocalFileBackend",
    "get_backend",
    "get_cloud_backend",
]
