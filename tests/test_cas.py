"""Tests for ContentAddressableStore put/get semantics.

Every test here runs against both the in-memory and the local filesystem
backend via the parametrized ``store`` fixture.
"""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from agentic_cas.errors import Corrupted, InvalidReferenceError, NotFound
from agentic_cas.services.cas import ContentAddressableStore, compute_digest
from agentic_cas.services.reference import StorageReference
from agentic_cas.services.storage.memory import InMemoryBlobBackend


HELLO_DIGEST = "90f8ec5669cd34183b9b0fdf8b94f5efb4c3672876330f4aa76088c2b4ad17be"
EMPTY_DIGEST = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
TEST_CONTAINER = "test-cas"


class TestDigest:
    """Content identity computation."""

    def test_known_vector(self):
        assert compute_digest(b"abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_deterministic(self):
        payload = b"same bytes every time"
        assert compute_digest(payload) == compute_digest(payload)

    def test_single_byte_difference_changes_digest(self):
        assert compute_digest(b"payload-a") != compute_digest(b"payload-b")

    def test_text_hashed_as_utf8(self):
        assert compute_digest("héllo") == compute_digest("héllo".encode("utf-8"))

    def test_empty_payload_has_digest(self):
        assert compute_digest(b"") == EMPTY_DIGEST
        assert compute_digest(b"") != compute_digest(b"\x00")

    def test_store_digest_matches_module_function(self, store):
        """put() and digest() must never diverge."""
        ref = store.put(b"payload", "text/plain", "txt")
        assert store.digest(b"payload") == ref.content_hash == compute_digest(b"payload")

    def test_rejects_none(self):
        with pytest.raises(TypeError):
            compute_digest(None)


class TestPutGet:
    """Round-trip and reference shape."""

    def test_hello_scenario(self, store):
        ref = store.put("# Hello\n", "text/markdown", "md")

        assert ref.filename == f"{HELLO_DIGEST}.md"
        assert ref.content_hash == HELLO_DIGEST
        assert ref.size == 8
        assert ref.path == "cas"
        assert ref.bucket == TEST_CONTAINER
        assert ref.content_type == "text/markdown"

        assert store.get(ref) == b"# Hello\n"
        assert store.get_text(ref) == "# Hello\n"

    @pytest.mark.parametrize(
        "payload",
        [b"", b"\x00\xff\x10binary", "unicode ✓ text".encode("utf-8"), b"x" * 100_000],
    )
    def test_round_trip(self, store, payload):
        ref = store.put(payload, "application/octet-stream", "bin")
        assert store.get(ref) == payload

    def test_empty_payload(self, store):
        ref = store.put(b"", "text/plain", "txt")

        assert ref.content_hash == EMPTY_DIGEST
        assert ref.size == 0
        assert store.get(ref) == b""

    def test_explicit_container(self, store):
        ref = store.put(b"elsewhere", "text/plain", "txt", container="other-bucket")

        assert ref.bucket == "other-bucket"
        assert store.get(ref) == b"elsewhere"
        assert not store.contains(b"elsewhere", "txt")
        assert store.contains(b"elsewhere", "txt", container="other-bucket")

    def test_leading_dot_in_extension_is_stripped(self, store):
        ref = store.put(b"data", "text/plain", ".txt")
        assert ref.filename.endswith(".txt")
        assert ".." not in ref.filename

    @pytest.mark.parametrize("extension", ["", "   ", "a/b", "."])
    def test_invalid_extension(self, store, extension):
        with pytest.raises(ValueError):
            store.put(b"data", "text/plain", extension)

    def test_empty_content_type(self, store):
        with pytest.raises(ValueError):
            store.put(b"data", "", "txt")

    def test_metadata_recorded(self, store):
        ref = store.put(b"{}", "application/json", "json")
        meta = store.metadata(ref)

        assert meta["contentType"] == "application/json"
        assert meta["contentHash"] == ref.content_hash
        assert meta["originalExtension"] == "json"


class TestDeduplication:
    """Identical content resolves to the same object."""

    def test_put_twice_same_reference(self, store):
        first = store.put(b"duplicate me", "text/plain", "txt")
        second = store.put(b"duplicate me", "text/plain", "txt")

        assert first == second
        assert first.filename == second.filename

    def test_put_twice_single_object(self):
        backend = InMemoryBlobBackend()
        store = ContentAddressableStore(backend, default_container=TEST_CONTAINER)

        store.put(b"duplicate me", "text/plain", "txt")
        store.put(b"duplicate me", "text/plain", "txt")

        assert backend.object_count(TEST_CONTAINER) == 1
        # Second put rewrites the same object rather than adding a copy
        assert backend.save_calls == 2

    def test_content_type_does_not_affect_location(self, store):
        a = store.put(b"same", "text/plain", "txt")
        b = store.put(b"same", "application/octet-stream", "txt")
        assert a.key == b.key

    def test_extension_is_part_of_physical_name(self, store):
        md = store.put(b"same bytes", "text/markdown", "md")
        js = store.put(b"same bytes", "application/json", "json")

        assert md.content_hash == js.content_hash
        assert md.filename != js.filename
        assert store.exists(md)
        assert store.exists(js)

    def test_contains_before_put(self, store):
        assert not store.contains(b"not yet", "txt")
        store.put(b"not yet", "text/plain", "txt")
        assert store.contains(b"not yet", "txt")
        # Same bytes under another extension are a different object
        assert not store.contains(b"not yet", "md")

    def test_concurrent_identical_puts(self, store):
        """Racing writers of the same content all succeed with one answer."""
        payload = b"shared artifact " * 1000

        with ThreadPoolExecutor(max_workers=8) as pool:
            refs = list(pool.map(lambda _: store.put(payload, "text/plain", "txt"), range(32)))

        assert len({r.filename for r in refs}) == 1
        assert len({r.content_hash for r in refs}) == 1
        assert store.get(refs[0]) == payload


class TestGetErrors:
    """Failure modes of get()."""

    def _ref_for(self, payload: bytes, bucket: str = TEST_CONTAINER) -> StorageReference:
        digest = compute_digest(payload)
        return StorageReference(
            bucket=bucket,
            path="cas",
            filename=f"{digest}.txt",
            content_hash=digest,
            content_type="text/plain",
            size=len(payload),
        )

    def test_never_written(self, store):
        with pytest.raises(NotFound):
            store.get(self._ref_for(b"never stored"))

    def test_unknown_container(self, store):
        with pytest.raises(NotFound):
            store.get(self._ref_for(b"never stored", bucket="no-such-bucket"))

    def test_deleted_object(self):
        backend = InMemoryBlobBackend()
        store = ContentAddressableStore(backend, default_container=TEST_CONTAINER)
        ref = store.put(b"short lived", "text/plain", "txt")

        backend.delete(ref.bucket, ref.key)

        with pytest.raises(NotFound):
            store.get(ref)
        assert not store.exists(ref)

    def test_not_found_is_lookup_error(self, store):
        with pytest.raises(LookupError):
            store.get(self._ref_for(b"never stored"))

    def test_corrupted_object(self):
        backend = InMemoryBlobBackend()
        store = ContentAddressableStore(backend, default_container=TEST_CONTAINER)
        ref = store.put(b"original", "text/plain", "txt")

        # Tamper with stored bytes behind the store's back
        backend.save(ref.bucket, ref.key, b"tampered", content_type="text/plain")

        with pytest.raises(Corrupted) as exc_info:
            store.get(ref)
        assert exc_info.value.expected == ref.content_hash

    def test_verification_can_be_disabled(self):
        backend = InMemoryBlobBackend()
        store = ContentAddressableStore(
            backend, default_container=TEST_CONTAINER, verify_on_read=False
        )
        ref = store.put(b"original", "text/plain", "txt")
        backend.save(ref.bucket, ref.key, b"tampered", content_type="text/plain")

        assert store.get(ref) == b"tampered"

    def test_malformed_reference(self, store):
        with pytest.raises(InvalidReferenceError):
            store.get('{"bucket": "x"}')

    @pytest.mark.parametrize(
        "bucket,path",
        [("a/b", "cas"), ("..", "cas"), (TEST_CONTAINER, ".meta")],
    )
    def test_foreign_reference(self, store, bucket, path):
        store.put(b"never stored", "text/plain", "txt")
        ref = self._ref_for(b"never stored", bucket=bucket).to_dict()
        ref["path"] = path

        with pytest.raises(NotFound):
            store.get(ref)
        with pytest.raises(NotFound):
            store.metadata(ref)
        assert store.exists(ref) is False


class TestReconstructedReferences:
    """References read back from a caller's own records."""

    def test_get_from_json_string(self, store):
        ref = store.put(b"persisted elsewhere", "text/plain", "log")
        stored_column = ref.to_json()

        assert store.get(stored_column) == b"persisted elsewhere"

    def test_get_from_parsed_dict(self, store):
        ref = store.put(b"persisted elsewhere", "text/plain", "log")
        parsed = json.loads(ref.to_json())

        assert store.get(parsed) == b"persisted elsewhere"


class TestArtifactHelpers:
    """README, analysis result and log helpers."""

    def test_store_readme(self, store):
        ref = store.store_readme("# pkg\n", "left-pad", "1.3.0")

        assert ref.filename.endswith(".md")
        assert ref.content_type == "text/markdown"
        assert store.get_text(ref) == "# pkg\n"

    def test_readme_identity_ignores_package(self, store):
        a = store.store_readme("# shared\n", "pkg-a", "1.0.0")
        b = store.store_readme("# shared\n", "pkg-b", "2.0.0")
        assert a == b

    def test_store_analysis_results(self, store):
        results = {"exports": [{"name": "leftPad", "kind": "function"}]}
        ref = store.store_analysis_results(results, "left-pad", "1.3.0")

        assert ref.content_type == "application/json"
        assert ref.filename.endswith(".json")
        assert json.loads(store.get(ref)) == results
        assert store.get_text(ref) == json.dumps(results, indent=2)

    def test_store_log_output(self, store):
        ref = store.store_log_output("fetching tarball\nanalyzing\n")

        assert ref.content_type == "text/plain"
        assert ref.filename.endswith(".log")
        assert store.get_text(ref) == "fetching tarball\nanalyzing\n"


class TestConstruction:
    def test_requires_container(self):
        with pytest.raises(ValueError):
            ContentAddressableStore(InMemoryBlobBackend(), default_container="")

    def test_custom_prefix(self):
        store = ContentAddressableStore(
            InMemoryBlobBackend(), default_container=TEST_CONTAINER, prefix="/artifacts/"
        )
        ref = store.put(b"x", "text/plain", "txt")

        assert ref.path == "artifacts"
        assert ref.key == f"artifacts/{ref.filename}"
        assert store.get(ref) == b"x"
