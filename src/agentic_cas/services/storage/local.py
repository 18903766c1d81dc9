"""Local filesystem backend for development and testing."""

import json
import logging
from pathlib import Path

from ...errors import BackendUnavailable, NotFound, WriteFailed
from ..storage_utils import atomic_write, atomic_write_json, ensure_dir, safe_read

logger = logging.getLogger(__name__)

META_DIR = ".meta"


class LocalFileBackend:
    """Local filesystem backend implementation.

    Each container is a directory under ``base_path`` and each object is a
    file at ``<base_path>/<container>/<key>``. Object metadata lives in a
    JSON sidecar under ``<container>/.meta/<key>.json`` so the stored file
    holds exactly the caller's bytes.

    Useful for:
    - Development and testing
    - Single-host deployments without cloud storage
    """

    def __init__(self, base_path: str | Path = "/tmp/agentic_cas"):
        """Initialize local backend.

        Args:
            base_path: Base directory for storage
        """
        self.base_path = Path(base_path).expanduser()
        logger.info(f"Initialized local storage at: {self.base_path}")

    def _container_path(self, container: str) -> Path:
        if not container or "/" in container or "\\" in container or container in (".", ".."):
            raise ValueError(f"Invalid container name: {container!r}")
        return self.base_path / container

    def _get_path(self, container: str, key: str) -> Path:
        """Convert container + key to a filesystem path.

        Args:
            container: Container name
            key: Object key (e.g., "cas/<digest>.md")

        Returns:
            Path object for the key
        """
        # Ensure path is safe (no .. or absolute paths)
        if not key or ".." in key.split("/") or Path(key).is_absolute():
            raise ValueError(f"Invalid key: {key}")
        if key.split("/", 1)[0] == META_DIR:
            raise ValueError(f"Key collides with metadata directory: {key}")
        return self._container_path(container) / key

    def _meta_path(self, container: str, key: str) -> Path:
        return self._container_path(container) / META_DIR / f"{key}.json"

    def _lookup_path(self, container: str, key: str) -> Path | None:
        """Resolve a path for reading, or None if the name can't exist here."""
        try:
            return self._get_path(container, key)
        except ValueError:
            logger.debug(f"Unmappable location {container!r}/{key!r}")
            return None

    def ensure_container(self, container: str) -> None:
        """Create the container directory if missing."""
        path = self._container_path(container)
        try:
            # exist_ok makes concurrent first writers safe
            ensure_dir(path)
        except OSError as e:
            raise BackendUnavailable(f"Cannot create container directory {path}: {e}") from e

    def exists(self, container: str, key: str) -> bool:
        """Check if file exists."""
        path = self._lookup_path(container, key)
        return path is not None and path.is_file()

    def load(self, container: str, key: str) -> bytes:
        """Load file data."""
        path = self._lookup_path(container, key)
        if path is None:
            raise NotFound(f"Object not found: {container}/{key}")
        try:
            data = safe_read(path)
        except OSError as e:
            raise BackendUnavailable(f"Failed to read {container}/{key}: {e}") from e
        if data is None:
            raise NotFound(f"Object not found: {container}/{key}")

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
        """Record metadata, then save data to file atomically."""
        path = self._get_path(container, key)
        container_path = self._container_path(container)
        if not container_path.is_dir():
            raise BackendUnavailable(f"Container does not exist: {container}")

        try:
            # Sidecar first: a visible object always has its metadata
            atomic_write_json(
                self._meta_path(container, key),
                {"contentType": content_type, **(metadata or {})},
            )
            atomic_write(path, data)
        except OSError as e:
            raise WriteFailed(f"Failed to save {container}/{key}: {e}") from e

        logger.debug(f"Saved {len(data)} bytes to {container}/{key}")

    def get_metadata(self, container: str, key: str) -> dict[str, str]:
        """Load the metadata sidecar for an object."""
        if not self.exists(container, key):
            raise NotFound(f"Object not found: {container}/{key}")

        meta_path = self._meta_path(container, key)
        try:
            return json.loads(meta_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            # Object written by something other than save()
            return {}
        except (OSError, json.JSONDecodeError) as e:
            raise BackendUnavailable(f"Failed to read metadata for {container}/{key}: {e}") from e
