"""
Project-level access control for metadata operations.

Single source of truth for who may read or edit a project's metadata. Every
route goes through can_read / can_edit (or the require_* variants) instead of
re-deriving the rule locally.

Rules:
- read: the project owner, or any member regardless of role
- edit metadata, milestones, field definitions: owner, or member with role
  owner/admin
- edit custom field values only: owner, or member with role admin/member

Pure Python logic - no FastAPI imports, no database access.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from projmeta.core.errors import AuthorizationError, NotFoundError
from projmeta.models.project import MemberRole


class EditScope(str, Enum):
    METADATA = "metadata"
    FIELD_VALUES = "field_values"


# Member roles (besides the project owner) allowed to edit, per scope.
# A member whose role is "owner" can redefine fields but is not listed for
# value edits; the project owner itself always passes.
EDIT_ROLES: Dict[EditScope, FrozenSet[str]] = {
    EditScope.METADATA: frozenset({MemberRole.OWNER.value, MemberRole.ADMIN.value}),
    EditScope.FIELD_VALUES: frozenset({MemberRole.ADMIN.value, MemberRole.MEMBER.value}),
}


@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""
    id: str
    role: Optional[str] = None


@dataclass(frozen=True)
class Membership:
    user_id: str
    role: str


@dataclass(frozen=True)
class ProjectAccess:
    """The parts of a project record that access decisions depend on."""
    id: int
    owner_id: Optional[str]
    members: Tuple[Membership, ...] = field(default_factory=tuple)

    def member_role(self, user_id: str) -> Optional[str]:
        for member in self.members:
            if member.user_id == user_id:
                return member.role.lower() if member.role else member.role
        return None


def _is_owner(principal: Principal, project: ProjectAccess) -> bool:
    return project.owner_id is not None and project.owner_id == principal.id


def can_read(principal: Principal, project: ProjectAccess) -> bool:
    if _is_owner(principal, project):
        return True
    return any(member.user_id == principal.id for member in project.members)


def can_edit(principal: Principal, project: ProjectAccess, scope: EditScope = EditScope.METADATA) -> bool:
    if _is_owner(principal, project):
        return True
    return project.member_role(principal.id) in EDIT_ROLES[scope]


def require_read(principal: Principal, project: ProjectAccess) -> None:
    """
    Raises:
        NotFoundError: Same error as a missing project, so existence is not leaked
    """
    if not can_read(principal, project):
        raise NotFoundError("Project not found or access denied")


def require_edit(
    principal: Principal,
    project: ProjectAccess,
    scope: EditScope = EditScope.METADATA,
    what: str = "project metadata",
) -> None:
    """
    Raises:
        NotFoundError: If the principal cannot even read the project
        AuthorizationError: If the principal can read but not edit
    """
    require_read(principal, project)
    if not can_edit(principal, project, scope):
        raise AuthorizationError(f"Insufficient permissions to edit {what}")
