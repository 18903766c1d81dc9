"""Azure Blob Storage backend implementation."""

import logging
import os

from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
    ServiceRequestError,
)
from azure.storage.blob import BlobServiceClient, ContentSettings

from ...errors import BackendUnavailable, NotFound, WriteFailed

logger = logging.getLogger(__name__)

# Failures that mean the service itself cannot be used right now
_UNAVAILABLE_ERRORS = (ServiceRequestError, ClientAuthenticationError)


class AzureBlobBackend:
    """Azure blob storage backend.

    The client is resolved in this order:
    1. An explicit ``client`` (a ``BlobServiceClient`` or test double)
    2. An explicit ``connection_string``
    3. ``account_url`` with ``DefaultAzureCredential`` (managed identity, env vars, etc)
    4. The AZURE_STORAGE_CONNECTION_STRING environment variable

    Environment setup:
        export AZURE_STORAGE_CONNECTION_STRING="DefaultEndpointsProtocol=https;..."
    """

    def __init__(
        self,
        connection_string: str | None = None,
        account_url: str | None = None,
        client: BlobServiceClient | None = None,
    ):
        if client is not None:
            self.client = client
        elif connection_string:
            self.client = BlobServiceClient.from_connection_string(connection_string)
        elif account_url:
            from azure.identity import DefaultAzureCredential

            self.client = BlobServiceClient(
                account_url=account_url, credential=DefaultAzureCredential()
            )
        else:
            conn_str = os.environ.get("AZURE_STORAGE_CONNECTION_STRING")
            if not conn_str:
                raise ValueError(
                    "Azure storage connection not found. Either:\n"
                    "1. Pass connection_string or account_url\n"
                    "2. Set AZURE_STORAGE_CONNECTION_STRING environment variable"
                )
            self.client = BlobServiceClient.from_connection_string(conn_str)

        self._known_containers: set[str] = set()

    def ensure_container(self, container: str) -> None:
        """Ensure container exists."""
        if container in self._known_containers:
            return

        try:
            container_client = self.client.get_container_client(container)
            container_client.create_container()
            logger.info(f"Created container: {container}")
        except ResourceExistsError:
            # Already there, possibly created by a concurrent writer
            logger.debug(f"Container exists: {container}")
        except (*_UNAVAILABLE_ERRORS, HttpResponseError) as e:
            raise BackendUnavailable(f"Cannot create container {container}: {e}") from e

        self._known_containers.add(container)

    def exists(self, container: str, key: str) -> bool:
        try:
            return self.client.get_blob_client(container, key).exists()
        except (*_UNAVAILABLE_ERRORS, HttpResponseError) as e:
            raise BackendUnavailable(f"Error checking existence of {container}/{key}: {e}") from e

    def load(self, container: str, key: str) -> bytes:
        blob_client = self.client.get_blob_client(container, key)
        try:
            data = blob_client.download_blob().readall()
        except ResourceNotFoundError:
            raise NotFound(f"Object not found: {container}/{key}")
        except (*_UNAVAILABLE_ERRORS, HttpResponseError) as e:
            raise BackendUnavailable(f"Failed to load {container}/{key}: {e}") from e

        logger.debug(f"Loaded {len(data)} bytes from {container}/{key}")
        return data

    def save(
        self,
        container: str,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Upload the whole payload in one call.

        Azure commits a blob only once the upload completes, so an
        interrupted upload never exposes a partial object under ``key``.
        """
        blob_client = self.client.get_blob_client(container, key)
        try:
            blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
                metadata=metadata or {},
            )
        except ResourceNotFoundError as e:
            # Deleted out-of-band; the next ensure_container recreates it
            self._known_containers.discard(container)
            raise BackendUnavailable(f"Container does not exist: {container}") from e
        except _UNAVAILABLE_ERRORS as e:
            raise BackendUnavailable(f"Failed to reach storage for {container}/{key}: {e}") from e
        except HttpResponseError as e:
            raise WriteFailed(f"Failed to save {container}/{key}: {e}") from e

        logger.debug(f"Saved {len(data)} bytes to {container}/{key}")

    def get_metadata(self, container: str, key: str) -> dict[str, str]:
        blob_client = self.client.get_blob_client(container, key)
        try:
            props = blob_client.get_blob_properties()
        except ResourceNotFoundError:
            raise NotFound(f"Object not found: {container}/{key}")
        except (*_UNAVAILABLE_ERRORS, HttpResponseError) as e:
            raise BackendUnavailable(f"Failed to read properties of {container}/{key}: {e}") from e

        meta = dict(props.metadata or {})
        meta["contentType"] = props.content_settings.content_type
        return meta
