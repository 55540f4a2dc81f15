"""
Authentication Utility - JWT verification and the request context.

Tokens are issued by the identity provider; this module only verifies them.

Provides:
- JWT token creation/verification (HS256, shared secret)
- ``get_request_context``: FastAPI dependency building a RequestContext
- ``require_admin``: dependency for admin-only routes
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from placement_portal.core.config import get_settings
from placement_portal.core.exceptions import AuthenticationError, AuthorizationError
from placement_portal.db.postgres import fetch_one, get_db_session
from placement_portal.models.domain import RequestContext
from placement_portal.schemas.schemas import UserRole

logger = logging.getLogger(__name__)

settings = get_settings()

# Bearer token extractor; missing headers are reported as 401 by us, not 403
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token (identity-provider compatible)."""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def load_or_provision_user(user_id: str, email: Optional[str], name: Optional[str]) -> RequestContext:
    """
    Resolve the caller's role from the users table.

    First sight of a subject creates its row as STUDENT; the stored role, not
    any claim in the token, decides what the caller may do. When a concurrent
    first request provisions the same subject, its row wins.
    """
    row = fetch_one("SELECT user_id, email, role FROM users WHERE user_id = :id", {"id": user_id})
    if row:
        return RequestContext(user_id=row["user_id"], role=UserRole(row["role"]), email=row["email"])

    try:
        with get_db_session() as db:
            db.execute(
                text("INSERT INTO users (user_id, email, name, role) VALUES (:id, :email, :name, :role)"),
                {"id": user_id, "email": email, "name": name, "role": UserRole.STUDENT.value}
            )
    except IntegrityError:
        row = fetch_one("SELECT user_id, email, role FROM users WHERE user_id = :id", {"id": user_id})
        if not row:
            raise
        logger.info("User %s was provisioned by a concurrent request", user_id)
        return RequestContext(user_id=row["user_id"], role=UserRole(row["role"]), email=row["email"])

    logger.info("Provisioned user %s as STUDENT", user_id)
    return RequestContext(user_id=user_id, role=UserRole.STUDENT, email=email)


async def get_request_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> RequestContext:
    """
    FastAPI dependency - who is calling.

    Usage:
        @router.get("/protected")
        async def route(ctx: RequestContext = Depends(get_request_context)):
            ...
    """
    if credentials is None:
        raise AuthenticationError("Unauthorized")

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")

    return load_or_provision_user(
        user_id=str(payload["sub"]),
        email=payload.get("email"),
        name=payload.get("name")
    )


async def require_admin(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    """Dependency - Require ADMIN role."""
    if not ctx.is_admin:
        raise AuthorizationError("Admin access required")
    return ctx
