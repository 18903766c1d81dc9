"""Blob backend protocol for cloud-agnostic object storage."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class BlobBackend(Protocol):
    """Protocol for blob backends.

    Defines the contract that any byte store must follow so the
    content-addressable store can sit on top of it without knowing which
    provider is underneath.

    Implementations include:
    - AzureBlobBackend: Azure Blob Storage
    - LocalFileBackend: Local filesystem (for development)
    - InMemoryBlobBackend: Process-local dict (for tests)

    A "container" is the top-level namespace (bucket, blob container or
    directory); a "key" is the object name inside it (e.g., "cas/<digest>.md").
    """

    def ensure_container(self, container: str) -> None:
        """Create the container if it does not exist.

        Must be idempotent and safe when several callers race to create
        the same container.

        Raises:
            BackendUnavailable: If the container cannot be created or verified
        """
        ...

    def exists(self, container: str, key: str) -> bool:
        """Check if an object exists.

        Args:
            container: Container name
            key: Object key

        Returns:
            True if the object exists, False otherwise
        """
        ...

    def load(self, container: str, key: str) -> bytes:
        """Load the full contents of an object.

        Raises:
            NotFound: If the object doesn't exist
            BackendUnavailable: If the backend cannot be reached
        """
        ...

    def save(
        self,
        container: str,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Write an object in a single atomic step.

        Overwriting an existing key is allowed. A failed or interrupted
        write must never leave a partial object visible under ``key``.

        Args:
            container: Container name
            key: Object key
            data: Bytes to store
            content_type: MIME type recorded with the object
            metadata: Extra string metadata for introspection

        Raises:
            WriteFailed: If the backend rejects the write
            BackendUnavailable: If the backend cannot be reached
        """
        ...

    def get_metadata(self, container: str, key: str) -> dict[str, str]:
        """Return backend-level metadata recorded for an object.

        Includes "contentType" plus whatever metadata was passed to save().

        Raises:
            NotFound: If the object doesn't exist
        """
        ...
