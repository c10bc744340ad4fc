"""
User Model Module

This module defines the User model used to resolve the authenticated principal.
Accounts are provisioned by the identity provider; this service only reads them.
"""
from enum import Enum
from typing import List, Optional
from sqlmodel import SQLModel, Field, JSON, Column
import uuid
from datetime import datetime, timezone


class UserRole(str, Enum):
    """
    Application-wide roles.

    These are not used for project authorization, which depends only on the
    project's owner and member list (see projmeta.metadata.permissions).
    """
    USER = "user"
    STAFF = "staff"
    MANAGER = "manager"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class User(SQLModel, table=True):
    """
    User model representing an authenticated account.

    Attributes:
        id: Unique identifier (UUID) automatically generated for each user
        email: User's email address, the subject of issued tokens (unique, indexed)
        full_name: User's full display name
        roles: List of UserRole values assigned to this user (default: [STAFF])
        created_at: ISO timestamp when the user account was created
    """
    __tablename__ = "users"

    # Primary key - auto-generated UUID for global uniqueness
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    email: str = Field(unique=True, index=True, nullable=False)
    full_name: Optional[str] = None

    # Stored as JSON array in database
    roles: List[UserRole] = Field(default=[UserRole.STAFF], sa_column=Column(JSON))

    created_at: Optional[str] = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def primary_role(self) -> Optional[str]:
        """The first assigned role, or None for an account without roles."""
        if not self.roles:
            return None
        role = self.roles[0]
        return role.value if isinstance(role, UserRole) else str(role)
