"""Unit tests for publish.revert module."""

import json

import pytest

from docpub.errors import InvalidRevertTargetError
from docpub.models import Build, BuildOperation, BuildStatus
from docpub.publish import BuildOrchestrator, RepositoryContentSource, RevertOperator, validate_revert_target
from docpub.publish.build_ids import new_build_id
from tests.fixtures.sample_content import OWNER_ACTOR, SAMPLE_DOC_INSTALL, paragraph_doc
from tests.unit.publish.test_orchestrator import queue_publish


def queue_revert(repository, site, target_build_id) -> Build:
    """Insert a queued revert build for ``site``."""
    return repository.add_build_if_idle(Build(
        site_id=site.id,
        build_id=new_build_id(),
        owner_id=site.owner_id,
        operation=BuildOperation.REVERT,
        status=BuildStatus.QUEUED,
        actor_id=OWNER_ACTOR,
        target_build_id=target_build_id,
    ))


class RevertTestBase:
    """Base class with a site published twice."""

    @pytest.fixture
    def published(self, repository, blob_store, seeded):
        orchestrator = BuildOrchestrator(repository, RepositoryContentSource(repository), blob_store)
        repository.set_content(seeded.documents["Install"].id, SAMPLE_DOC_INSTALL)
        first = orchestrator.run(queue_publish(repository, seeded.site).build_id)
        repository.set_content(seeded.documents["Install"].id, paragraph_doc("Changed"))
        second = orchestrator.run(queue_publish(repository, seeded.site).build_id)
        return first, second


class TestValidateRevertTarget(RevertTestBase):
    """Test cases for validate_revert_target."""

    def test_valid_target(self, repository, seeded, published):
        """A successful publish of the same site is a valid target."""
        first, _ = published
        assert validate_revert_target(repository, seeded.site.id, first.build_id).build_id == first.build_id

    @pytest.mark.parametrize("target", [None, "", "missing"])
    def test_missing_target(self, repository, seeded, target):
        """Missing or unknown targets are rejected."""
        with pytest.raises(InvalidRevertTargetError):
            validate_revert_target(repository, seeded.site.id, target)

    def test_other_site(self, repository, seeded, published):
        """Builds of another site are rejected."""
        first, _ = published
        with pytest.raises(InvalidRevertTargetError):
            validate_revert_target(repository, "other-site", first.build_id)

    def test_failed_target(self, repository, seeded):
        """Failed builds cannot be reverted to."""
        build = queue_publish(repository, seeded.site)
        repository.update_build(build.build_id, status=BuildStatus.FAILED)
        with pytest.raises(InvalidRevertTargetError) as exc_info:
            validate_revert_target(repository, seeded.site.id, build.build_id)
        assert "failed" in exc_info.value.reason

    def test_revert_target(self, repository, blob_store, seeded, published):
        """Revert builds are not valid targets."""
        first, _ = published
        revert = RevertOperator(repository, blob_store).run(
            queue_revert(repository, seeded.site, first.build_id).build_id
        )
        with pytest.raises(InvalidRevertTargetError):
            validate_revert_target(repository, seeded.site.id, revert.build_id)


class TestRevertOperator(RevertTestBase):
    """Test cases for RevertOperator."""

    def test_revert_aliases_target(self, repository, blob_store, object_store, seeded, published):
        """The revert manifest repeats the target's pages under a new build id."""
        # Arrange
        first, second = published
        operator = RevertOperator(repository, blob_store)

        # Act
        build = operator.run(queue_revert(repository, seeded.site, first.build_id).build_id)

        # Assert
        assert build.status == BuildStatus.SUCCESS
        assert build.items_total == 4
        assert build.items_done == 4
        target = blob_store.read_versioned(seeded.site.id, first.build_id, "manifest")
        manifest = blob_store.read_versioned(seeded.site.id, build.build_id, "manifest")
        assert manifest["pages"] == target["pages"]
        assert manifest["buildId"] == build.build_id
        assert manifest["aliasedFromBuildId"] == first.build_id
        tree = blob_store.read_versioned(seeded.site.id, build.build_id, "tree")
        assert tree["buildId"] == build.build_id
        assert blob_store.read_versioned(seeded.site.id, build.build_id, "theme") == \
            blob_store.read_versioned(seeded.site.id, first.build_id, "theme")

        pointer = json.loads(object_store.get(f"sites/{seeded.site.id}/latest.json"))
        assert pointer["buildId"] == build.build_id
        assert repository.get_site(seeded.site.id).last_build_id == build.build_id

    def test_revert_uploads_no_blobs(self, repository, blob_store, object_store, seeded, published):
        """Reverting writes only the versioned artifacts and pointers."""
        first, _ = published
        before = set(object_store.objects)

        build = RevertOperator(repository, blob_store).run(
            queue_revert(repository, seeded.site, first.build_id).build_id
        )

        added = set(object_store.objects) - before
        assert all(key.startswith(f"sites/{seeded.site.id}/{build.build_id}/") or key.endswith("latest.json")
                   for key in added)
        assert build.pages_written == 0

    def test_missing_artifacts_fail_build(self, repository, blob_store, object_store, seeded, published):
        """A target whose manifest is gone fails the revert."""
        first, second = published
        del object_store.objects[f"sites/{seeded.site.id}/{first.build_id}/manifest.json"]

        build = RevertOperator(repository, blob_store).run(
            queue_revert(repository, seeded.site, first.build_id).build_id
        )

        assert build.status == BuildStatus.FAILED
        assert "artifact missing" in build.error
        pointer = json.loads(object_store.get(f"sites/{seeded.site.id}/latest.json"))
        assert pointer["buildId"] == second.build_id
