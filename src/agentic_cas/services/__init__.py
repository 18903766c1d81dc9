"""Content-addressable storage services."""

from .cas import ContentAddressableStore, compute_digest
from .reference import StorageReference

__all__ = ["ContentAddressableStore", "StorageReference", "compute_digest"]
