from .user import User, UserRole
from .project import Project, ProjectMember, MemberRole

__all__ = [
    "User", "UserRole",
    "Project", "ProjectMember", "MemberRole",
]
