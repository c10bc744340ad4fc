"""
API Dependencies Module

FastAPI dependency functions for resolving the authenticated principal and
building the metadata service for a request. Authentication accepts a bearer
token (API clients) or the access_token HTTP-only cookie (browser clients).
"""
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select

from projmeta.core.config import settings
from projmeta.core.errors import AuthenticationError
from projmeta.core.security import decode_access_token
from projmeta.db.repository import ProjectRepository
from projmeta.db.session import get_db
from projmeta.metadata.permissions import Principal
from projmeta.metadata.service import MetadataService
from projmeta.models.user import User

# auto_error=False lets us fall back to the cookie
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False
)


def _extract_token(request: Request, token: Optional[str]) -> Optional[str]:
    if token:
        return token
    token = request.cookies.get("access_token")
    # Cookie format is "Bearer <token>"
    if token and token.startswith("Bearer "):
        token = token[len("Bearer "):]
    return token or None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(reusable_oauth2)
) -> User:
    """
    Dependency that retrieves and validates the current authenticated user.

    Args:
        request: FastAPI request object (used to access cookies)
        db: Database session
        token: Optional bearer token from Authorization header

    Returns:
        User: The authenticated user object

    Raises:
        AuthenticationError: If no token is supplied, the token is invalid, or
            the user it names no longer exists
    """
    token = _extract_token(request, token)
    if not token:
        raise AuthenticationError("Not authenticated")

    email = decode_access_token(token)

    user = db.exec(select(User).where(User.email == email)).first()
    if not user:
        raise AuthenticationError("Could not validate credentials")
    return user


def get_current_principal(current_user: User = Depends(get_current_user)) -> Principal:
    return Principal(id=current_user.id, role=current_user.primary_role)


def get_optional_principal(
    request: Request,
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(reusable_oauth2)
) -> Optional[Principal]:
    """Like get_current_principal, but returns None instead of raising."""
    try:
        user = get_current_user(request, db, token)
    except AuthenticationError:
        return None
    return Principal(id=user.id, role=user.primary_role)


def get_metadata_service(db: Session = Depends(get_db)) -> MetadataService:
    return MetadataService(ProjectRepository(db))
