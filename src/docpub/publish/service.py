"""Publish request handling.

The service validates and authorizes publish and revert requests
synchronously, queues a build under the site's single-flight gate and
hands it to a dispatcher. Nothing about the build's execution is reported
back to the caller beyond the queued build record.
"""

import logging
from typing import List, Optional

from docpub.clock import utc_now_iso
from docpub.errors import NotFoundError
from docpub.models import Build, BuildOperation, BuildStatus
from docpub.state import Repository
from docpub.storage import ContentBlobStore, ObjectStore

from .authorization import PUBLISH_ROLES, Authorizer, MembershipAuthorizer
from .build_ids import new_build_id
from .content_source import ContentSource, RepositoryContentSource
from .dispatcher import Dispatcher, InlineDispatcher
from .models import Pointer
from .orchestrator import MAX_WORKERS, BuildOrchestrator
from .pointers import PointerPublisher
from .revert import RevertOperator, validate_revert_target

logger = logging.getLogger(__name__)


class PublishService:
    """Entry point for publish, revert and build queries.

    Example:
        >>> service = create_publish_service(repo, InMemoryObjectStore())
        >>> build = service.request_publish(site.id, "user-1")
        >>> service.get_build(site.id, build.build_id).status
        <BuildStatus.SUCCESS: 'success'>
    """

    def __init__(
        self,
        repository: Repository,
        orchestrator: BuildOrchestrator,
        revert_operator: RevertOperator,
        authorizer: Optional[Authorizer] = None,
        dispatcher: Optional[Dispatcher] = None,
        pointer_publisher: Optional[PointerPublisher] = None,
    ):
        self.repository = repository
        self.orchestrator = orchestrator
        self.revert_operator = revert_operator
        self.authorizer = authorizer or MembershipAuthorizer(repository)
        self.dispatcher = dispatcher or InlineDispatcher()
        self.pointer_publisher = pointer_publisher or orchestrator.pointer_publisher

    def request_publish(self, site_id: str, actor_id: str) -> Build:
        """Queue a publish of the site's current space selection.

        Raises:
            NotFoundError: If the site does not exist
            ForbiddenError: If the actor may not publish the site
            BuildInFlightError: If the site already has a queued or running build
        """
        site = self.repository.get_site(site_id)
        self.authorizer.authorize(actor_id, site.owner_id).require(PUBLISH_ROLES)

        build = self.repository.add_build_if_idle(Build(
            site_id=site.id,
            build_id=new_build_id(),
            owner_id=site.owner_id,
            operation=BuildOperation.PUBLISH,
            status=BuildStatus.QUEUED,
            actor_id=actor_id,
            selected_space_ids_snapshot=tuple(site.selected_space_ids),
            created_at=utc_now_iso(),
        ))
        logger.info(
            f"Queued publish {build.build_id} for site {site_id} "
            f"({len(build.selected_space_ids_snapshot)} space(s))"
        )
        self.dispatcher.dispatch(build.build_id, self.orchestrator.run)
        return self.repository.get_build(build.build_id)

    def request_revert(self, site_id: str, actor_id: str, target_build_id: str) -> Build:
        """Queue a revert to a prior successful publish.

        Raises:
            NotFoundError: If the site does not exist
            ForbiddenError: If the actor may not revert the site
            InvalidRevertTargetError: If the target cannot be reverted to
            BuildInFlightError: If the site already has a queued or running build
        """
        site = self.repository.get_site(site_id)
        self.authorizer.authorize(actor_id, site.owner_id).require(PUBLISH_ROLES)
        validate_revert_target(self.repository, site_id, target_build_id)

        build = self.repository.add_build_if_idle(Build(
            site_id=site.id,
            build_id=new_build_id(),
            owner_id=site.owner_id,
            operation=BuildOperation.REVERT,
            status=BuildStatus.QUEUED,
            actor_id=actor_id,
            target_build_id=target_build_id,
            created_at=utc_now_iso(),
        ))
        logger.info(f"Queued revert {build.build_id} of site {site_id} to build {target_build_id}")
        self.dispatcher.dispatch(build.build_id, self.revert_operator.run)
        return self.repository.get_build(build.build_id)

    def get_build(self, site_id: str, build_id: str) -> Build:
        """Get one build of a site.

        Raises:
            NotFoundError: If the site has no such build
        """
        build = self.repository.find_build(site_id, build_id)
        if build is None:
            raise NotFoundError("Build", build_id)
        return build

    def list_builds(self, site_id: str) -> List[Build]:
        """Builds of a site, newest first."""
        self.repository.get_site(site_id)
        return self.repository.list_builds(site_id)

    def current_pointer(self, site_id: str) -> Optional[Pointer]:
        """The site's live pointer, or None before the first publish."""
        return self.pointer_publisher.current(site_id)


def create_publish_service(
    repository: Repository,
    object_store: ObjectStore,
    content_source: Optional[ContentSource] = None,
    dispatcher: Optional[Dispatcher] = None,
    authorizer: Optional[Authorizer] = None,
    max_workers: int = MAX_WORKERS,
) -> PublishService:
    """Wire a PublishService over one object store.

    The content source defaults to the editor-backed RepositoryContentSource.
    """
    blob_store = ContentBlobStore(object_store, repository)
    pointer_publisher = PointerPublisher(blob_store)
    orchestrator = BuildOrchestrator(
        repository,
        content_source or RepositoryContentSource(repository),
        blob_store,
        pointer_publisher=pointer_publisher,
        max_workers=max_workers,
    )
    revert_operator = RevertOperator(repository, blob_store, pointer_publisher=pointer_publisher)
    return PublishService(
        repository,
        orchestrator,
        revert_operator,
        authorizer=authorizer,
        dispatcher=dispatcher,
        pointer_publisher=pointer_publisher,
    )
