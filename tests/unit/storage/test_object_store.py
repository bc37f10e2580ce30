"""Unit tests for storage.object_store module."""

import os

import pytest

from docpub.storage import (
    IMMUTABLE_MAX_AGE,
    POINTER_MAX_AGE,
    FilesystemObjectStore,
    InMemoryObjectStore,
    ObjectExistsError,
    ObjectNotFoundError,
    StorageError,
)


class TestInMemoryObjectStore:
    """Test cases for InMemoryObjectStore."""

    def test_immutable_put_refuses_overwrite(self, object_store):
        """A second immutable write to the same key fails."""
        object_store.put_immutable("a.json", b"1")
        with pytest.raises(ObjectExistsError):
            object_store.put_immutable("a.json", b"2")
        assert object_store.get("a.json") == b"1"

    def test_mutable_put_overwrites(self, object_store):
        """Mutable writes replace the object and use the pointer cache lifetime."""
        object_store.put_mutable("latest.json", b"1")
        object_store.put_mutable("latest.json", b"2")
        assert object_store.get("latest.json") == b"2"
        assert object_store.objects["latest.json"].cache_max_age == POINTER_MAX_AGE

    def test_immutable_cache_lifetime(self, object_store):
        """Immutable objects are cached for a year."""
        object_store.put_immutable("a.json", b"1")
        assert object_store.objects["a.json"].cache_max_age == IMMUTABLE_MAX_AGE

    def test_get_missing(self, object_store):
        """Missing keys raise ObjectNotFoundError."""
        with pytest.raises(ObjectNotFoundError):
            object_store.get("nope")
        assert object_store.exists("nope") is False

    def test_url_for(self):
        """URLs join the base URL and key."""
        store = InMemoryObjectStore("https://cdn.example.com/")
        assert store.url_for("sites/a/latest.json") == "https://cdn.example.com/sites/a/latest.json"


class TestFilesystemObjectStore:
    """Test cases for FilesystemObjectStore."""

    @pytest.fixture
    def store(self, tmp_path):
        return FilesystemObjectStore(str(tmp_path / "objects"))

    def test_write_and_read(self, store, tmp_path):
        """Objects are written below the root."""
        store.put_immutable("orgs/o/blobs/h.json", b"{}")
        assert store.get("orgs/o/blobs/h.json") == b"{}"
        assert (tmp_path / "objects" / "orgs" / "o" / "blobs" / "h.json").exists()

    def test_immutable_put_refuses_overwrite(self, store):
        """Existing objects cannot be replaced by immutable writes."""
        store.put_immutable("a.json", b"1")
        with pytest.raises(ObjectExistsError):
            store.put_immutable("a.json", b"2")
        assert store.get("a.json") == b"1"

    def test_no_temp_files_left(self, store, tmp_path):
        """Temp files are removed after both successful and refused writes."""
        store.put_immutable("a.json", b"1")
        with pytest.raises(ObjectExistsError):
            store.put_immutable("a.json", b"2")
        store.put_mutable("b.json", b"1")
        assert sorted(os.listdir(tmp_path / "objects")) == ["a.json", "b.json"]

    def test_mutable_put_overwrites(self, store):
        """Mutable writes replace the object."""
        store.put_mutable("latest.json", b"1")
        store.put_mutable("latest.json", b"2")
        assert store.get("latest.json") == b"2"

    def test_rejects_escaping_keys(self, store):
        """Keys may not escape the root."""
        with pytest.raises(StorageError):
            store.put_mutable("../outside.json", b"x")

    def test_missing_object(self, store):
        """Missing objects raise ObjectNotFoundError."""
        with pytest.raises(ObjectNotFoundError):
            store.get("missing.json")

    def test_default_base_url(self, store, tmp_path):
        """The default base URL is a file URL of the root."""
        assert store.url_for("a.json") == f"file://{tmp_path / 'objects'}/a.json"
