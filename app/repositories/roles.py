"""Role persistence: the RoleStore interface and its SQLAlchemy implementation."""

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Role


class RoleStore(Protocol):
    """Persistence operations the role resolver relies on."""

    def find_by_authority(self, authority: str) -> Role | None: ...

    def find_all(self) -> list[Role]: ...

    def save(self, role: Role) -> Role: ...


class SqlRoleStore:
    """RoleStore over a SQLAlchemy session. Flushes, never commits."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_authority(self, authority: str) -> Role | None:
        return self.session.scalars(
            select(Role).where(Role.authority == authority)
        ).first()

    def find_all(self) -> list[Role]:
        return list(self.session.scalars(select(Role).order_by(Role.id)))

    def save(self, role: Role) -> Role:
        self.session.add(role)
        self.session.flush()
        return role
