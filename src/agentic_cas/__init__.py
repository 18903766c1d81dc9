"""agentic-cas - content-addressable storage for generated documentation artifacts."""

from ._version import __version__
from .errors import (
    BackendUnavailable,
    CASError,
    ConfigError,
    Corrupted,
    InvalidReferenceError,
    NotFound,
    WriteFailed,
)
from .services import ContentAddressableStore, StorageReference, compute_digest
from .services.storage import BlobBackend, InMemoryBlobBackend, LocalFileBackend, get_backend

__all__ = [
    "BackendUnavailable",
    "BlobBackend",
    "CASError",
    "ConfigError",
    "ContentAddressableStore",
    "Corrupted",
    "InMemoryBlobBackend",
    "InvalidReferenceError",
    "LocalFileBackend",
    "NotFound",
    "StorageReference",
    "WriteFailed",
    "compute_digest",
    "get_backend",
    "__version__",
]
