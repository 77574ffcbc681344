"""
User management endpoints (admin only): list, read, create, update, delete.

Directory errors propagate to the handlers registered in app.main
(404 unknown id, 409 duplicate username/email, 422 unknown role on create).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from app.api.v1.auth import get_user_directory, require_admin
from app.models import User
from app.schemas.auth import Principal
from app.schemas.user import UserCreate, UserRead, UsersListResponse, UserUpdate
from app.services.users import UserDirectory

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[Principal, Depends(require_admin)],
    directory: Annotated[UserDirectory, Depends(get_user_directory)],
) -> UsersListResponse:
    """List all users ordered by id."""
    users = directory.list_all()
    return UsersListResponse(users=[UserRead.model_validate(u) for u in users])


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
    directory: Annotated[UserDirectory, Depends(get_user_directory)],
) -> UserRead:
    return UserRead.model_validate(directory.find_by_id(user_id))


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    _admin: Annotated[Principal, Depends(require_admin)],
    directory: Annotated[UserDirectory, Depends(get_user_directory)],
) -> UserRead:
    """Create a user. Every role in body.roles must exist."""
    user = User(
        username=body.username,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        password=body.password,
    )
    directory.create(user, body.roles)
    return UserRead.model_validate(user)


@router.put("/{user_id}", response_model=UserRead)
def update_user(
    user_id: int,
    body: UserUpdate,
    _admin: Annotated[Principal, Depends(require_admin)],
    directory: Annotated[UserDirectory, Depends(get_user_directory)],
) -> UserRead:
    """
    Overwrite a user's fields. Blank password keeps the current one; roles=null
    keeps the current roles, a list replaces them (unknown names are ignored).
    """
    return UserRead.model_validate(directory.update(user_id, body, body.roles))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    _admin: Annotated[Principal, Depends(require_admin)],
    directory: Annotated[UserDirectory, Depends(get_user_directory)],
) -> Response:
    """Delete a user and its role associations. Deleting a missing id is a no-op."""
    directory.delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
