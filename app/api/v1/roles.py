"""Role listing endpoint (admin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.auth import get_user_directory, require_admin
from app.schemas.auth import Principal
from app.schemas.user import RoleRead, RolesListResponse
from app.services.users import UserDirectory

router = APIRouter()


@router.get("", response_model=RolesListResponse)
def list_roles(
    _admin: Annotated[Principal, Depends(require_admin)],
    directory: Annotated[UserDirectory, Depends(get_user_directory)],
) -> RolesListResponse:
    """List every role that can be assigned to users."""
    return RolesListResponse(
        roles=[RoleRead.model_validate(r) for r in directory.roles.list_all()]
    )
