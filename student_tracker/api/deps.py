"""
FastAPI Dependencies for Authentication and Authorization.

Key patterns:
1. get_current_user: Extracts and validates JWT, returns User object
2. No global "current user" state - always pass user explicitly
3. Content may be deleted only by the user who uploaded it

Security model:
- Passwords stored as bcrypt hashes
- JWT stored in HttpOnly cookie (recommended) or Authorization header
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated

import bcrypt
from fastapi import Cookie, Depends, Header, HTTPException, status
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from student_tracker.config import get_settings
from student_tracker.db.models import User, UserRole
from student_tracker.db.session import get_db

settings = get_settings()


# =============================================================================
# PASSWORDS
# =============================================================================


def hash_password(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# =============================================================================
# JWT UTILITIES
# =============================================================================


def create_access_token(user_id: int) -> str:
    """
    Create a JWT access token for a user.

    Token payload contains:
    - sub: user_id as string (standard JWT subject claim)
    - exp: expiration timestamp
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": str(user_id),
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int | None:
    """
    Decode and validate a JWT access token.

    Returns user_id if valid, None if invalid/expired.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        user_id_str = payload.get("sub")
        if user_id_str is None:
            return None
        return int(user_id_str)
    except (JWTError, ValueError):
        return None


# =============================================================================
# AUTHENTICATION DEPENDENCIES
# =============================================================================


async def get_token_from_request(
    authorization: Annotated[str | None, Header()] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> str:
    """
    Extract JWT token from request.

    Supports two methods (in order of preference):
    1. HttpOnly cookie named 'access_token'
    2. Authorization header: 'Bearer <token>'
    """
    # Try cookie first
    if access_token:
        return access_token

    # Fall back to Authorization header
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Annotated[str, Depends(get_token_from_request)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Validate JWT and return the current authenticated user.

    Raises 401 if:
    - Token is missing, invalid, or expired
    - User no longer exists in database
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = decode_access_token(token)
    if user_id is None:
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None:
        raise credentials_exception

    return user


# Type alias for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


# =============================================================================
# AUTHORIZATION HELPERS
# =============================================================================


async def require_teacher(current_user: CurrentUser) -> User:
    """Dependency for teacher-only actions (creating units and assignments)."""
    if current_user.role != UserRole.TEACHER.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only teachers can perform this action",
        )
    return current_user


TeacherUser = Annotated[User, Depends(require_teacher)]


async def get_unit_item_or_404(
    db: AsyncSession,
    model: type,
    item_id: int,
    unit_code: str,
):
    """
    Fetch a note, assignment or past paper by id within a unit.

    Items that exist under a different unit are reported as not found.
    """
    item = await db.get(model, item_id)
    if item is None or item.unit_code != unit_code:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return item


def require_owner(resource_user_id: int, current_user: User) -> None:
    """
    Verify the current user uploaded the resource.

    We return 403 Forbidden (not 404) when user doesn't own resource.
    """
    if resource_user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to modify this resource",
        )
