"""
Authentication Routes

Endpoints:
- POST /auth/register - Create an account
- POST /auth/login - Exchange admission number + password for a session
- POST /auth/logout - Clear session
- GET /auth/me - Get current user profile
- PATCH /auth/me - Update display name or profile image

Auth Flow:
1. Frontend POSTs admission number + password to /auth/login
2. Backend checks the bcrypt hash
3. Backend returns JWT (in HttpOnly cookie and response body)
"""

import logging

from fastapi import APIRouter, HTTPException, Response, status
from sqlalchemy import select

from student_tracker.api.deps import (
    CurrentUser,
    DbSession,
    create_access_token,
    hash_password,
    verify_password,
)
from student_tracker.config import get_settings
from student_tracker.db.models import User, UserRole
from student_tracker.schemas import LoginRequest, TokenResponse, UserCreate, UserRead, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
settings = get_settings()


def _set_session_cookie(response: Response, access_token: str, max_age: int) -> None:
    # For cross-domain deployments use samesite="none" + secure=True
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
        max_age=max_age,
    )


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(data: UserCreate, db: DbSession) -> UserRead:
    """
    Create an account.

    Self-registration always yields a student. Admission numbers listed in
    the teacher_admission_numbers setting are registered as teachers.
    """
    existing = await db.scalar(
        select(User.id).where(User.admission_number == data.admission_number)
    )
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Admission number already registered",
        )

    user = User(
        name=data.name,
        admission_number=data.admission_number,
        password_hash=hash_password(data.password),
        role=(
            UserRole.TEACHER.value
            if data.admission_number in settings.teacher_admission_numbers
            else UserRole.STUDENT.value
        ),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.role)
    return UserRead.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, response: Response, db: DbSession) -> TokenResponse:
    """Exchange admission number + password for a session JWT."""
    user = await db.scalar(select(User).where(User.admission_number == request.admission_number))
    if user is None or not verify_password(request.password, user.password_hash):
        logger.info("Failed login for admission number %s", request.admission_number)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admission number or password",
        )

    access_token = create_access_token(user.id)
    expires_in = settings.jwt_expire_minutes * 60
    _set_session_cookie(response, access_token, expires_in)

    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    """
    Clear the authentication session.

    This only clears the cookie. A JWT stored elsewhere stays valid until expiry.
    """
    response.delete_cookie(
        key="access_token",
        httponly=True,
        secure=settings.cookie_cross_domain or settings.environment != "development",
        samesite="none" if settings.cookie_cross_domain else "lax",
    )


@router.get("/me", response_model=UserRead)
async def get_me(current_user: CurrentUser) -> UserRead:
    """Get the current authenticated user's profile."""
    return UserRead.model_validate(current_user)


@router.patch("/me", response_model=UserRead)
async def update_me(data: UserUpdate, current_user: CurrentUser, db: DbSession) -> UserRead:
    """Update the current user's name or profile image URL."""
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(current_user, key, value)
    await db.commit()
    await db.refresh(current_user)
    return UserRead.model_validate(current_user)
