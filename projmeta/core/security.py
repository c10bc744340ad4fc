"""
Token helpers.

Tokens are issued by the identity provider in front of this service; this
module only needs to verify them. ``create_access_token`` exists for tooling
and tests that have to mint a token signed with the shared secret.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from projmeta.core.config import settings
from projmeta.core.errors import AuthenticationError


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    Decode a JWT and return its subject (the user's email).

    Raises:
        AuthenticationError: If the token is malformed, expired or has no subject
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthenticationError("Could not validate credentials")

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Could not validate credentials")
    return subject
