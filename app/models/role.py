"""ORM model for roles (authorities granted to users)."""

from sqlalchemy import Column, Integer, String

from app.models.base import Base


class Role(Base):
    """
    Named authority such as 'ROLE_ADMIN'. Immutable once created.

    Equality and hashing follow the authority name so role sets collapse
    duplicates regardless of which session loaded them.
    """

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    authority = Column(String(64), nullable=False, unique=True, index=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Role):
            return NotImplemented
        return self.authority == other.authority

    def __hash__(self) -> int:
        return hash(self.authority)

    def __repr__(self) -> str:
        return f"Role({self.authority!r})"
