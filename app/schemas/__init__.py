"""Pydantic request/response schemas."""

from app.schemas.auth import CurrentUser, LoginRequest, Principal, TokenResponse
from app.schemas.health import HealthResponse
from app.schemas.user import (
    RoleRead,
    RolesListResponse,
    UserCreate,
    UserRead,
    UsersListResponse,
    UserUpdate,
)

__all__ = [
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "Principal",
    "RoleRead",
    "RolesListResponse",
    "TokenResponse",
    "UserCreate",
    "UserRead",
    "UsersListResponse",
    "UserUpdate",
]
