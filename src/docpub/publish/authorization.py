"""Authorization collaborator.

The pipeline does not authenticate anyone. It asks an authorizer for the
roles an actor holds within a site's owner and trusts the answer.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from docpub.errors import ForbiddenError
from docpub.models import ROLE_ADMIN, ROLE_OWNER
from docpub.state import Repository

logger = logging.getLogger(__name__)

# Roles allowed to publish or revert a site
PUBLISH_ROLES = frozenset({ROLE_OWNER, ROLE_ADMIN})


@dataclass(frozen=True)
class ActorContext:
    """An actor and the roles it holds within one owner."""
    actor_id: str
    roles: FrozenSet[str] = field(default_factory=frozenset)

    def require(self, allowed_roles: Iterable[str]) -> None:
        """Raise ForbiddenError unless the actor holds one of ``allowed_roles``."""
        allowed = frozenset(allowed_roles)
        if not self.roles & allowed:
            raise ForbiddenError(self.actor_id, allowed)


class Authorizer(ABC):
    """Resolves the roles of an actor within an owner."""

    @abstractmethod
    def authorize(self, actor_id: str, owner_id: str) -> ActorContext:
        """Return the actor's roles, empty when the actor is not a member."""


class MembershipAuthorizer(Authorizer):
    """Authorizer backed by the Repository's membership table."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def authorize(self, actor_id: str, owner_id: str) -> ActorContext:
        role = self.repository.get_role(owner_id, actor_id)
        if role is None:
            logger.debug(f"Actor {actor_id} has no membership in {owner_id}")
            return ActorContext(actor_id=actor_id)
        return ActorContext(actor_id=actor_id, roles=frozenset({role}))
