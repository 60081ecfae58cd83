"""Schemas for back-office sign-in: credentials, token pairs and the staff profile."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

StaffRole = Literal["admin", "staff"]


class LoginRequest(BaseModel):
    email: EmailStr
    # bcrypt only looks at the first 72 bytes
    password: str = Field(..., min_length=1, max_length=72)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Bearer token pair; ``expires_in`` is the access token lifetime in seconds."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class StaffResponse(BaseModel):
    """Who is signed in, and whether they may override statuses and edit villas."""

    id: uuid.UUID
    email: str
    name: str
    role: StaffRole
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: StaffResponse
    tokens: TokenResponse
