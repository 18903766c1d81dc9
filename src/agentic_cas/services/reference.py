"""Storage references returned by the content-addressable store.

A reference is the only thing callers persist. It is typically embedded as
a JSON string inside an unrelated database row (a README record's content
field, an analysis row's results column), so the JSON form uses the
camelCase keys those records already carry:

    {"bucket": "...", "path": "cas", "filename": "<digest>.md",
     "contentHash": "<digest>", "contentType": "text/markdown", "size": 8}
"""

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import InvalidReferenceError

DIGEST_PATTERN = re.compile(r"^[0-9a-f]{64}$")

# Keys a JSON object must carry to be treated as an embedded reference
_EMBEDDED_MARKERS = ("contentHash", "bucket", "path", "filename")


class StorageReference(BaseModel):
    """Pointer to an immutable object in content-addressable storage."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bucket: str = Field(min_length=1)
    path: str = Field(min_length=1)
    filename: str = Field(min_length=1)
    content_hash: str = Field(alias="contentHash")
    content_type: str = Field(alias="contentType", min_length=1)
    size: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_consistency(self) -> "StorageReference":
        if not DIGEST_PATTERN.match(self.content_hash):
            raise ValueError(f"contentHash must be 64 lowercase hex chars, got {self.content_hash!r}")
        if not self.filename.startswith(f"{self.content_hash}.") or "/" in self.filename:
            raise ValueError(
                f"filename {self.filename!r} does not match contentHash {self.content_hash}"
            )
        if self.path.startswith("/") or ".." in self.path.split("/"):
            raise ValueError(f"Invalid path: {self.path!r}")
        return self

    @property
    def key(self) -> str:
        """Object key inside the bucket."""
        return f"{self.path}/{self.filename}"

    @property
    def location(self) -> str:
        """Human-readable bucket/path/filename triple."""
        return f"{self.bucket}/{self.key}"

    @property
    def extension(self) -> str:
        return self.filename[len(self.content_hash) + 1 :]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StorageReference":
        """Build a reference from a mapping with camelCase or snake_case keys.

        Raises:
            InvalidReferenceError: If required fields are missing or invalid
        """
        if not isinstance(data, dict):
            raise InvalidReferenceError(f"Reference must be a JSON object, got {type(data).__name__}")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidReferenceError(f"Invalid storage reference: {e}") from e

    @classmethod
    def from_json(cls, text: str | bytes) -> "StorageReference":
        """Parse the serialized form produced by :meth:`to_json`.

        Raises:
            InvalidReferenceError: On malformed JSON or schema mismatch
        """
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidReferenceError(f"Reference is not valid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def parse_embedded(cls, text: str | None) -> "StorageReference | None":
        """Return the reference held in a text field, or None.

        Text fields may hold either inline content (e.g. a README body) or a
        JSON-encoded reference. Anything that does not decode to a JSON
        object carrying the reference markers is treated as inline content.
        """
        if not text:
            return None
        stripped = text.strip()
        if not stripped.startswith("{"):
            return None
        try:
            data = json.loads(stripped)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict) or not all(data.get(k) for k in _EMBEDDED_MARKERS):
            return None
        try:
            return cls.model_validate(data)
        except ValidationError:
            return None


def coerce_reference(value: "StorageReference | dict | str | bytes") -> StorageReference:
    """Accept a reference object, its dict form, or its JSON string."""
    if isinstance(value, StorageReference):
        return value
    if isinstance(value, dict):
        return StorageReference.from_dict(value)
    if isinstance(value, (str, bytes)):
        return StorageReference.from_json(value)
    raise InvalidReferenceError(f"Cannot interpret {type(value).__name__} as a storage reference")
