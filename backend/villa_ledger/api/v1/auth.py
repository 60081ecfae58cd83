"""Auth API router: staff login, token refresh, current profile."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from villa_ledger.api.deps import get_current_staff, get_db
from villa_ledger.auth.jwt import REFRESH, create_token_pair, decode_token
from villa_ledger.auth.passwords import verify_password
from villa_ledger.config import settings
from villa_ledger.models.user import AdminUser
from villa_ledger.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    StaffResponse,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _tokens_for(user: AdminUser) -> TokenResponse:
    return TokenResponse(
        **create_token_pair(str(user.id), user.role),
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Authenticate a staff member with email and password."""
    result = await db.execute(select(AdminUser).where(AdminUser.email == body.email.lower()))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.hashed_password):
        logger.info("Failed login for %s", body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    return AuthResponse(
        user=StaffResponse.model_validate(user),
        tokens=_tokens_for(user),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired refresh token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(body.refresh_token)
    except JWTError:
        raise invalid from None

    if payload.get("type") != REFRESH:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise invalid from None

    result = await db.execute(select(AdminUser).where(AdminUser.id == user_id))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise invalid

    return _tokens_for(user)


@router.get("/me", response_model=StaffResponse)
async def me(current_user: AdminUser = Depends(get_current_staff)) -> StaffResponse:
    """Return the authenticated staff profile."""
    return StaffResponse.model_validate(current_user)
