"""Role resolution: authority names to Role rows, and roles to authority tokens."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from app.models import Role
from app.repositories.roles import RoleStore


@dataclass(frozen=True)
class RoleFound:
    """Lookup hit."""

    role: Role


@dataclass(frozen=True)
class RoleNotFound:
    """Lookup miss; carries the authority that was asked for."""

    authority: str


RoleLookup = RoleFound | RoleNotFound


class RoleNotFoundError(ValueError):
    """Raised when a request names roles that do not exist."""

    def __init__(self, authorities: Iterable[str]) -> None:
        self.authorities = list(authorities)
        self.message = "Unknown role(s): " + ", ".join(self.authorities)
        super().__init__(self.message)


class RoleResolver:
    """Maps authority names to roles and roles to the authority set of a principal."""

    def __init__(self, store: RoleStore) -> None:
        self.store = store

    def resolve_by_authority(self, authority: str) -> RoleLookup:
        role = self.store.find_by_authority(authority)
        if role is None:
            return RoleNotFound(authority)
        return RoleFound(role)

    def resolve_all(self, authorities: Iterable[str]) -> tuple[set[Role], list[str]]:
        """
        Resolve every name; return (resolved roles, names that missed).
        Duplicate names collapse into one role. Misses keep request order.
        """
        roles: set[Role] = set()
        missing: list[str] = []
        for authority in authorities:
            lookup = self.resolve_by_authority(authority)
            if isinstance(lookup, RoleFound):
                roles.add(lookup.role)
            elif authority not in missing:
                missing.append(authority)
        return roles, missing

    def list_all(self) -> list[Role]:
        return self.store.find_all()

    def ensure(self, authorities: Iterable[str]) -> list[Role]:
        """Create any missing roles; return the roles that were created."""
        created: list[Role] = []
        for authority in authorities:
            if isinstance(self.resolve_by_authority(authority), RoleNotFound):
                created.append(self.store.save(Role(authority=authority)))
        return created

    @staticmethod
    def to_authorities(roles: Iterable[Role]) -> frozenset[str]:
        return frozenset(role.authority for role in roles)
