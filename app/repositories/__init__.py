"""Persistence interfaces and their SQLAlchemy implementations."""

from app.repositories.roles import RoleStore, SqlRoleStore
from app.repositories.users import SqlUserStore, UserStore

__all__ = ["RoleStore", "SqlRoleStore", "SqlUserStore", "UserStore"]
