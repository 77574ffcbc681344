"""JWT login and auth dependencies (get_current_user, require_admin)."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.security import create_access_token, decode_access_token
from app.schemas.auth import CurrentUser, LoginRequest, Principal, TokenResponse
from app.services.users import AuthLookupError, UserDirectory

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_user_directory(db: Annotated[Session, Depends(get_db)]) -> UserDirectory:
    """Dependency: a UserDirectory bound to the request's session."""
    return UserDirectory(db)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("", response_model=TokenResponse)
def login(
    body: LoginRequest,
    directory: Annotated[UserDirectory, Depends(get_user_directory)],
) -> TokenResponse:
    """
    Authenticate with username (or email) and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    try:
        principal = directory.authenticate(body.login, body.password)
    except AuthLookupError:
        raise _unauthorized("Invalid username or password.")
    token = create_access_token(sub=principal.username, authorities=principal.authorities)
    return TokenResponse(access_token=token, token_type="bearer")


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    directory: Annotated[UserDirectory, Depends(get_user_directory)],
) -> Principal:
    """Dependency: require valid Bearer JWT and return the current principal. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    sub = payload.get("sub")
    if not sub:
        raise _unauthorized("Invalid token payload")
    # Authorities come from the store, not the token, so role changes apply immediately.
    try:
        return directory.load_principal_by_username(sub)
    except AuthLookupError as e:
        raise _unauthorized(e.message)


def require_admin(
    current_user: Annotated[Principal, Depends(get_current_user)],
) -> Principal:
    """Dependency: require the admin authority. Raises 403 otherwise."""
    if not current_user.has_authority(settings.ADMIN_AUTHORITY):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@router.get("/me", response_model=CurrentUser)
def read_me(
    current_user: Annotated[Principal, Depends(get_current_user)],
) -> CurrentUser:
    """Return the authenticated user's username and authorities."""
    return CurrentUser(
        username=current_user.username,
        authorities=sorted(current_user.authorities),
    )
