"""Pydantic schemas for user and role management."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.security import PASSWORD_MAX_LEN, looks_hashed

# Column width; only values carrying the hash marker may use more than PASSWORD_MAX_LEN.
STORED_PASSWORD_MAX_LEN = 255


def check_password_length(v: str | None) -> str | None:
    """Plaintext passwords must fit the login limit; marker-prefixed hashes are exempt."""
    if v is not None and not looks_hashed(v) and len(v) > PASSWORD_MAX_LEN:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_LEN} characters")
    return v


class RoleRead(BaseModel):
    id: int
    authority: str

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    """Body for POST /users. password is plaintext unless it starts with the hash marker."""

    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    password: str = Field(..., min_length=1, max_length=STORED_PASSWORD_MAX_LEN)
    roles: list[str] = Field(default_factory=list, description="Authority names, e.g. ROLE_USER")

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str | None) -> str | None:
        return check_password_length(v)


class UserUpdate(BaseModel):
    """
    Patch for PUT /users/{id}.

    Names, email and username overwrite the stored values (None clears the
    optional names). A None or blank password keeps the stored hash. roles=None
    keeps the current roles; a list replaces them entirely.
    """

    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, max_length=STORED_PASSWORD_MAX_LEN)
    roles: list[str] | None = None

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str | None) -> str | None:
        return check_password_length(v)


class UserRead(BaseModel):
    """User without the password hash; roles sorted by authority."""

    id: int
    username: str
    email: str
    first_name: str | None
    last_name: str | None
    roles: list[RoleRead]

    model_config = ConfigDict(from_attributes=True)

    @field_validator("roles", mode="before")
    @classmethod
    def sort_roles(cls, v: object) -> object:
        if isinstance(v, (set, frozenset)):
            return sorted(v, key=lambda role: role.authority)
        return v


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[UserRead]


class RolesListResponse(BaseModel):
    """Response for GET /roles (admin only)."""

    roles: list[RoleRead]
