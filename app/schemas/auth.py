"""Request/response schemas for auth endpoints and the principal handed to them."""

from pydantic import BaseModel, ConfigDict, Field

from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN


class LoginRequest(BaseModel):
    """Credentials for login. login is tried as an email if it contains '@', then as a username."""

    login: str = Field(..., min_length=1, max_length=255, description="Username or email")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class Principal(BaseModel):
    """Identity consumed by authentication: username, password hash and authorities."""

    model_config = ConfigDict(frozen=True)

    username: str
    password_hash: str = Field(repr=False)
    authorities: frozenset[str] = frozenset()

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities


class CurrentUser(BaseModel):
    """Authenticated user as returned by /auth/me (no password hash)."""

    username: str
    authorities: list[str]
