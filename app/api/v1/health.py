"""Health check: database connectivity and whether the default roles are seeded."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import check_db_connected, get_db
from app.repositories.roles import SqlRoleStore
from app.schemas.health import HealthResponse
from app.services.roles import RoleNotFound, RoleResolver

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health status, database connectivity and missing default roles.
    Used by load balancers and monitoring.
    """
    if not check_db_connected(db):
        return HealthResponse(environment=settings.APP_ENV, database="disconnected")

    resolver = RoleResolver(SqlRoleStore(db))
    missing = [
        name
        for name in settings.default_roles
        if isinstance(resolver.resolve_by_authority(name), RoleNotFound)
    ]
    return HealthResponse(
        environment=settings.APP_ENV,
        database="connected",
        missing_roles=missing,
    )
