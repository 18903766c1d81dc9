"""Content-addressable storage for generated documentation artifacts.

Payloads are stored under a name derived from the SHA-256 digest of their
own bytes: ``<container>/cas/<digest>.<extension>``. Identical bytes always
resolve to the same location, so repeated or concurrent puts of the same
content write the same object and need no locking.

The extension is part of the physical name but not of the identity: the
same bytes stored as "md" and as "json" become two objects sharing one
``contentHash``.
"""

import hashlib
import json
import logging
from typing import Any

from ..errors import Corrupted
from .reference import StorageReference, coerce_reference
from .storage.base import BlobBackend

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "cas"

Payload = bytes | bytearray | memoryview | str


def _as_bytes(payload: Payload) -> bytes:
    if isinstance(payload, str):
        return payload.encode("utf-8")
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    raise TypeError(f"Payload must be bytes or str, got {type(payload).__name__}")


def compute_digest(payload: Payload) -> str:
    """SHA-256 hex digest of the payload's exact bytes.

    Strings are hashed as their UTF-8 encoding.
    """
    return hashlib.sha256(_as_bytes(payload)).hexdigest()


def _normalize_extension(extension: str) -> str:
    if not isinstance(extension, str) or not extension.strip():
        raise ValueError("extension must be a non-empty string")
    ext = extension[1:] if extension.startswith(".") else extension
    if not ext or "/" in ext or "\\" in ext:
        raise ValueError(f"Invalid extension: {extension!r}")
    return ext


class ContentAddressableStore:
    """Stores immutable byte payloads keyed by their SHA-256 digest.

    The backend is injected, so tests can use ``InMemoryBlobBackend`` or a
    temp-directory ``LocalFileBackend`` and production can use Azure.

    Args:
        backend: Blob backend that persists the bytes
        default_container: Container used when a call doesn't name one
        prefix: Namespace prefix for all object keys
        verify_on_read: Recompute the digest in get() and raise Corrupted on mismatch
    """

    def __init__(
        self,
        backend: BlobBackend,
        default_container: str,
        prefix: str = DEFAULT_PREFIX,
        verify_on_read: bool = True,
    ):
        if not default_container:
            raise ValueError("default_container must be a non-empty string")
        self.backend = backend
        self.default_container = default_container
        self.prefix = prefix.strip("/") or DEFAULT_PREFIX
        self.verify_on_read = verify_on_read

    @staticmethod
    def digest(payload: Payload) -> str:
        """Compute the content identity without storing anything."""
        return compute_digest(payload)

    def _key(self, filename: str) -> str:
        return f"{self.prefix}/{filename}"

    def put(
        self,
        payload: Payload,
        content_type: str,
        extension: str,
        container: str | None = None,
    ) -> StorageReference:
        """Store a payload and return its reference.

        Storing content that already exists is the normal dedup path: the
        object is rewritten with the same bytes and the same reference is
        returned.

        Args:
            payload: Bytes (or text, stored as UTF-8) to store; may be empty
            content_type: MIME type recorded with the object and the reference
            extension: Filename extension, e.g. "md" (not part of the digest)
            container: Target container, defaults to ``default_container``

        Returns:
            Reference to the stored object

        Raises:
            BackendUnavailable: If the container cannot be created or reached
            WriteFailed: If the backend write does not complete
        """
        data = _as_bytes(payload)
        if not isinstance(content_type, str) or not content_type.strip():
            raise ValueError("content_type must be a non-empty string")
        ext = _normalize_extension(extension)
        container = container or self.default_container

        content_hash = compute_digest(data)
        filename = f"{content_hash}.{ext}"
        key = self._key(filename)

        self.backend.ensure_container(container)
        self.backend.save(
            container,
            key,
            data,
            content_type=content_type,
            metadata={"contentHash": content_hash, "originalExtension": ext},
        )
        logger.debug(f"Stored {len(data)} bytes at {container}/{key}")

        return StorageReference(
            bucket=container,
            path=self.prefix,
            filename=filename,
            content_hash=content_hash,
            content_type=content_type,
            size=len(data),
        )

    def get(self, reference: StorageReference | dict | str) -> bytes:
        """Return the bytes a reference points to.

        Accepts the reference object itself, its dict form, or the JSON
        string callers keep in their own records.

        Raises:
            NotFound: If no object exists at the reference's location
            Corrupted: If verification is on and the bytes don't match the digest
            InvalidReferenceError: If the reference cannot be parsed
        """
        ref = coerce_reference(reference)
        data = self.backend.load(ref.bucket, ref.key)

        if self.verify_on_read:
            actual = compute_digest(data)
            if actual != ref.content_hash:
                raise Corrupted(ref.content_hash, actual, ref.location)

        return data

    def get_text(self, reference: StorageReference | dict | str, encoding: str = "utf-8") -> str:
        """Return the referenced object decoded as text."""
        return self.get(reference).decode(encoding)

    def exists(self, reference: StorageReference | dict | str) -> bool:
        ref = coerce_reference(reference)
        return self.backend.exists(ref.bucket, ref.key)

    def contains(self, payload: Payload, extension: str, container: str | None = None) -> bool:
        """Check whether this payload is already stored under ``extension``."""
        filename = f"{compute_digest(payload)}.{_normalize_extension(extension)}"
        return self.backend.exists(container or self.default_container, self._key(filename))

    def metadata(self, reference: StorageReference | dict | str) -> dict[str, str]:
        """Backend metadata recorded for the referenced object."""
        ref = coerce_reference(reference)
        return self.backend.get_metadata(ref.bucket, ref.key)

    # Artifact helpers used by the documentation generator

    def store_readme(
        self, readme: str, package_name: str | None = None, package_version: str | None = None
    ) -> StorageReference:
        """Store a generated README as markdown.

        Package name and version are only used for logging; they never
        affect where the content is stored.
        """
        ref = self.put(readme, "text/markdown", "md")
        logger.info(f"Stored README for {_label(package_name, package_version)} at {ref.location}")
        return ref

    def store_analysis_results(
        self, results: Any, package_name: str | None = None, package_version: str | None = None
    ) -> StorageReference:
        """Store analysis results as pretty-printed JSON."""
        ref = self.put(json.dumps(results, indent=2), "application/json", "json")
        logger.info(
            f"Stored analysis results for {_label(package_name, package_version)} at {ref.location}"
        )
        return ref

    def store_log_output(
        self, log: str, package_name: str | None = None, package_version: str | None = None
    ) -> StorageReference:
        """Store execution log output as plain text."""
        ref = self.put(log, "text/plain", "log")
        logger.info(f"Stored log output for {_label(package_name, package_version)} at {ref.location}")
        return ref


def _label(package_name: str | None, package_version: str | None) -> str:
    if not package_name:
        return "unnamed package"
    return f"{package_name}@{package_version}" if package_version else package_name
