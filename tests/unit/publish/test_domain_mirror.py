"""Unit tests for publish.domain_mirror module."""

import json
from unittest.mock import patch

from docpub.publish import DomainPointerMirror, Pointer, normalized_hosts
from docpub.storage import StorageError

POINTER = Pointer(build_id="b1", manifest_url="m", tree_url="t", theme_url="th")


class TestNormalizedHosts:
    """Test cases for normalized_hosts."""

    def test_dedupes_and_normalizes(self):
        """Hosts are normalized, deduplicated and empties dropped."""
        hosts = ["Docs.Acme.io", "docs.acme.io:443", None, "", "b.acme.io"]
        assert normalized_hosts(hosts) == ["docs.acme.io", "b.acme.io"]


class TestDomainPointerMirror:
    """Test cases for DomainPointerMirror."""

    def test_writes_every_host(self, blob_store, object_store):
        """The pointer is written under each host's key."""
        report = DomainPointerMirror(blob_store).mirror(["a.acme.io", "b.acme.io"], POINTER)

        assert report.ok
        assert report.written == ["a.acme.io", "b.acme.io"]
        payload = json.loads(object_store.get("domains/b.acme.io/latest.json"))
        assert payload == POINTER.to_dict()

    def test_failure_isolated_per_host(self, blob_store, object_store):
        """One failing host does not prevent the others."""
        original = blob_store.write_pointer

        def flaky(key, payload):
            if "bad.acme.io" in key:
                raise StorageError("put", key, "HTTP 500")
            original(key, payload)

        with patch.object(blob_store, "write_pointer", side_effect=flaky) as mock_write:
            report = DomainPointerMirror(blob_store, attempts=2).mirror(
                ["bad.acme.io", "good.acme.io"], POINTER
            )

        assert report.written == ["good.acme.io"]
        assert list(report.failed) == ["bad.acme.io"]
        assert not report.ok
        assert mock_write.call_count == 3
        assert object_store.exists("domains/good.acme.io/latest.json")

    def test_retry_succeeds(self, blob_store):
        """A host that fails once is written on the retry."""
        calls = []
        original = blob_store.write_pointer

        def fail_once(key, payload):
            calls.append(key)
            if len(calls) == 1:
                raise StorageError("put", key, "timeout")
            original(key, payload)

        with patch.object(blob_store, "write_pointer", side_effect=fail_once):
            report = DomainPointerMirror(blob_store).mirror(["a.acme.io"], POINTER)

        assert report.ok
        assert len(calls) == 2
