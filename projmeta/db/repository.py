"""
Project record accessor.

The only module that reads or writes project rows for the metadata engine.
It hands the service plain ProjectRecord snapshots, so nothing above this
layer holds on to ORM objects or sessions.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from projmeta.core.errors import NotFoundError, PersistenceError
from projmeta.metadata.permissions import Membership, ProjectAccess
from projmeta.models.project import MemberRole, Project, ProjectMember

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProjectRecord:
    id: int
    name: str
    owner_id: Optional[str]
    members: Tuple[Membership, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def access(self) -> ProjectAccess:
        return ProjectAccess(id=self.id, owner_id=self.owner_id, members=self.members)


class ProjectRepository:
    def __init__(self, db: Session):
        self.db = db

    def _snapshot(self, project: Project) -> ProjectRecord:
        rows = self.db.exec(
            select(ProjectMember).where(ProjectMember.project_id == project.id)
        ).all()
        return ProjectRecord(
            id=project.id,
            name=project.name,
            owner_id=project.owner_id,
            members=tuple(Membership(user_id=row.user_id, role=row.role) for row in rows),
            metadata=dict(project.project_metadata or {}),
        )

    def get(self, project_id: int) -> Optional[ProjectRecord]:
        project = self.db.get(Project, project_id)
        if project is None:
            return None
        return self._snapshot(project)

    def save_metadata(self, project_id: int, metadata: Dict[str, Any]) -> ProjectRecord:
        """
        Persist a new metadata document for the project.

        Raises:
            NotFoundError: If the project disappeared between read and write
            PersistenceError: If the database rejects the write
        """
        project = self.db.get(Project, project_id)
        if project is None:
            raise NotFoundError("Project not found")

        project.project_metadata = metadata
        project.updated_at = datetime.now(timezone.utc).isoformat()
        try:
            self.db.add(project)
            self.db.commit()
            self.db.refresh(project)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to save project metadata", project_id=project_id, error=str(exc))
            raise PersistenceError("Failed to update project metadata") from exc

        return self._snapshot(project)

    def create(
        self,
        name: str,
        owner_id: str,
        metadata: Dict[str, Any],
        description: Optional[str] = None,
    ) -> ProjectRecord:
        """
        Create a project and register its owner as an owner-role member.

        Raises:
            PersistenceError: If the database rejects the insert
        """
        project = Project(
            name=name,
            description=description,
            owner_id=owner_id,
            project_metadata=metadata,
        )
        try:
            self.db.add(project)
            self.db.flush()
            self.db.add(ProjectMember(
                project_id=project.id, user_id=owner_id, role=MemberRole.OWNER.value
            ))
            self.db.commit()
            self.db.refresh(project)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to create project", owner_id=owner_id, error=str(exc))
            raise PersistenceError("Failed to create project") from exc

        return self._snapshot(project)
