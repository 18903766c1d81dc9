"""In-memory blob backend for testing.

This provides a thread-safe, in-memory implementation of the BlobBackend
protocol so the content-addressable store can be exercised without disk
or network access.
"""

import threading

from ...errors import BackendUnavailable, NotFound


class InMemoryBlobBackend:
    """In-memory blob storage for testing.

    Note: Data is lost when process exits!
    """

    def __init__(self):
        """Initialize empty store with thread safety."""
        self._containers: dict[str, dict[str, bytes]] = {}
        self._metadata: dict[tuple[str, str], dict[str, str]] = {}
        self._lock = threading.Lock()
        self.save_calls = 0

    def ensure_container(self, container: str) -> None:
        """Create container if absent."""
        with self._lock:
            self._containers.setdefault(container, {})

    def exists(self, container: str, key: str) -> bool:
        with self._lock:
            return key in self._containers.get(container, {})

    def load(self, container: str, key: str) -> bytes:
        with self._lock:
            try:
                return self._containers[container][key]
            except KeyError:
                raise NotFound(f"Object not found: {container}/{key}")

    def save(
        self,
        container: str,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        with self._lock:
            if container not in self._containers:
                raise BackendUnavailable(f"Container does not exist: {container}")
            self._containers[container][key] = bytes(data)
            self._metadata[(container, key)] = {"contentType": content_type, **(metadata or {})}
            self.save_calls += 1

    def get_metadata(self, container: str, key: str) -> dict[str, str]:
        with self._lock:
            if key not in self._containers.get(container, {}):
                raise NotFound(f"Object not found: {container}/{key}")
            return dict(self._metadata.get((container, key), {}))

    def delete(self, container: str, key: str) -> None:
        """Remove an object, simulating out-of-band deletion in tests."""
        with self._lock:
            self._containers.get(container, {}).pop(key, None)
            self._metadata.pop((container, key), None)

    def object_count(self, container: str | None = None) -> int:
        """Get number of objects stored, optionally for one container."""
        with self._lock:
            if container is not None:
                return len(self._containers.get(container, {}))
            return sum(len(objects) for objects in self._containers.values())

    def clear(self) -> None:
        """Clear all data (useful for tests)."""
        with self._lock:
            self._containers.clear()
            self._metadata.clear()
            self.save_calls = 0
