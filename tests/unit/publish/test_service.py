"""Unit tests for publish.service module."""

from unittest.mock import Mock

import pytest

from docpub.errors import BuildInFlightError, ForbiddenError, InvalidRevertTargetError, NotFoundError
from docpub.models import BuildOperation, BuildStatus
from docpub.publish import create_publish_service
from tests.fixtures.sample_content import MEMBER_ACTOR, OWNER_ACTOR


class TestPublishService:
    """Test cases for PublishService."""

    @pytest.fixture
    def service(self, repository, object_store):
        return create_publish_service(repository, object_store)

    def test_request_publish_runs_inline(self, service, seeded):
        """With the inline dispatcher the returned build is finished."""
        build = service.request_publish(seeded.site.id, OWNER_ACTOR)

        assert build.status == BuildStatus.SUCCESS
        assert build.operation == BuildOperation.PUBLISH
        assert build.actor_id == OWNER_ACTOR
        assert build.selected_space_ids_snapshot == (seeded.guides.id, seeded.reference.id)
        assert service.current_pointer(seeded.site.id).build_id == build.build_id

    def test_member_forbidden(self, service, seeded, repository):
        """Members without a publish role cannot publish."""
        with pytest.raises(ForbiddenError):
            service.request_publish(seeded.site.id, MEMBER_ACTOR)
        assert repository.list_builds(seeded.site.id) == []

    def test_unknown_site(self, service):
        """Publishing an unknown site raises NotFoundError."""
        with pytest.raises(NotFoundError):
            service.request_publish("nope", OWNER_ACTOR)

    def test_single_flight(self, repository, object_store, seeded):
        """A second publish is rejected while one is queued."""
        # Arrange
        dispatcher = Mock()
        service = create_publish_service(repository, object_store, dispatcher=dispatcher)
        queued = service.request_publish(seeded.site.id, OWNER_ACTOR)

        # Act / Assert
        assert queued.status == BuildStatus.QUEUED
        with pytest.raises(BuildInFlightError) as exc_info:
            service.request_publish(seeded.site.id, OWNER_ACTOR)
        assert exc_info.value.build_id == queued.build_id
        dispatcher.dispatch.assert_called_once_with(queued.build_id, service.orchestrator.run)

    def test_request_revert(self, service, seeded):
        """Reverting queues and runs a revert build."""
        first = service.request_publish(seeded.site.id, OWNER_ACTOR)
        service.request_publish(seeded.site.id, OWNER_ACTOR)

        revert = service.request_revert(seeded.site.id, OWNER_ACTOR, first.build_id)

        assert revert.operation == BuildOperation.REVERT
        assert revert.status == BuildStatus.SUCCESS
        assert revert.target_build_id == first.build_id
        assert service.current_pointer(seeded.site.id).build_id == revert.build_id

    def test_revert_validated_before_queueing(self, service, seeded, repository):
        """Invalid targets are rejected synchronously."""
        with pytest.raises(InvalidRevertTargetError):
            service.request_revert(seeded.site.id, OWNER_ACTOR, "missing")
        assert repository.list_builds(seeded.site.id) == []

    def test_revert_forbidden(self, service, seeded):
        """Members cannot revert."""
        first = service.request_publish(seeded.site.id, OWNER_ACTOR)
        with pytest.raises(ForbiddenError):
            service.request_revert(seeded.site.id, MEMBER_ACTOR, first.build_id)

    def test_get_and_list_builds(self, service, seeded):
        """Builds are listed newest first and fetched per site."""
        first = service.request_publish(seeded.site.id, OWNER_ACTOR)
        second = service.request_publish(seeded.site.id, OWNER_ACTOR)

        assert [b.build_id for b in service.list_builds(seeded.site.id)] == [second.build_id, first.build_id]
        assert service.get_build(seeded.site.id, first.build_id).build_id == first.build_id
        with pytest.raises(NotFoundError):
            service.get_build("other-site", first.build_id)

    def test_current_pointer_before_publish(self, service, seeded):
        """No pointer exists before the first publish."""
        assert service.current_pointer(seeded.site.id) is None
