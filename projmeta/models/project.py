"""
Project Model Module

This module defines the Project record and its ProjectMember junction table.
The project's metadata bag is stored as a single JSON document on the project
row; its shape is owned by projmeta.schemas.metadata, not by the table.
"""
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import SQLModel, Field, JSON, Column
from datetime import datetime, timezone


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class MemberRole(str, Enum):
    """
    Role a user holds within a single project.

    Unlike UserRole, these decide project-level read/edit access:
    - OWNER / ADMIN: may redefine metadata, milestones and custom fields
    - MEMBER: may read, and may edit custom field values
    - VIEWER: read-only
    """
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class ProjectMember(SQLModel, table=True):
    """
    Junction table between Projects and Users carrying the member's role.

    Attributes:
        project_id: Foreign key to the project
        user_id: Foreign key to the member user
        role: MemberRole value, stored as plain text
    """
    __tablename__ = "project_members"

    project_id: int = Field(foreign_key="projects.id", primary_key=True)
    user_id: str = Field(foreign_key="users.id", primary_key=True)
    role: str = Field(default=MemberRole.MEMBER.value)


class Project(SQLModel, table=True):
    """
    Project record.

    Attributes:
        id: Auto-incrementing primary key
        name: Project name/title (required)
        description: Free-text description
        owner_id: Foreign key to the User who owns this project
        project_metadata: JSON metadata document (column name "metadata";
            SQLModel reserves the attribute name)
        created_at: ISO timestamp when the project was created
        updated_at: ISO timestamp when the project was last modified
    """
    __tablename__ = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(nullable=False)
    description: Optional[str] = None

    owner_id: Optional[str] = Field(default=None, foreign_key="users.id")

    project_metadata: Dict[str, Any] = Field(
        default_factory=dict, sa_column=Column("metadata", JSON)
    )

    created_at: Optional[str] = Field(default_factory=_utcnow)
    updated_at: Optional[str] = Field(default_factory=_utcnow)
