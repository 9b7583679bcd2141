"""
Auth API routes — register, login.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, Field, field_validator

from auth.dependencies import get_auth_service
from auth.models import PublicUser
from auth.service import AuthService

router = APIRouter(tags=["auth"])

# bcrypt only looks at the first 72 bytes of a password.
_MAX_PASSWORD_BYTES = 72


# ── Request / response schemas ─────────────────────────────────────────


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128, validation_alias=AliasChoices("name", "sname"))
    email: str = Field(..., min_length=3, max_length=255, validation_alias=AliasChoices("email", "semail"))
    password: str = Field(..., min_length=1, validation_alias=AliasChoices("password", "spass"))
    role: str

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > _MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {_MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    email: str = Field(..., validation_alias=AliasChoices("email", "semail"))
    password: str = Field(..., validation_alias=AliasChoices("password", "spass"))


class RegisterResponse(BaseModel):
    message: str
    user: PublicUser


class LoginResponse(BaseModel):
    token: str
    user: PublicUser


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new user."""
    user = await auth.register(req.name, req.email, req.password, req.role)
    return {"message": "User registered successfully", "user": user}


@router.post("/login", response_model=LoginResponse)
async def login(
    req: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    result = await auth.login(req.email, req.password)
    return {"token": result.token, "user": result.user}
