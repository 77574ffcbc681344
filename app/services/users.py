"""User directory: lookup, CRUD with role assignment, and principal lookup for login."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import transaction
from app.core.security import BcryptHasher, CredentialHasher, looks_hashed
from app.models import User
from app.repositories.roles import SqlRoleStore
from app.repositories.users import SqlUserStore, UserStore
from app.schemas.auth import Principal
from app.schemas.user import UserUpdate
from app.services.roles import RoleNotFoundError, RoleResolver

logger = logging.getLogger(__name__)


class UserDirectoryError(Exception):
    """Base class for user directory failures; message is safe to show to callers."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UserNotFoundError(UserDirectoryError, RuntimeError):
    """Raised when a user id does not exist."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class UserAlreadyExistsError(UserDirectoryError, ValueError):
    """Raised when a username or email is already owned by another user."""


class AuthLookupError(UserDirectoryError):
    """Raised when authentication cannot find the user or the password does not match."""


class UserDirectory:
    """
    Owns user lookup and mutation for one unit of work (one SQLAlchemy session).

    create/update/delete each run in a single transaction: role replacement,
    field changes and password re-hashing commit together or not at all.
    """

    def __init__(
        self,
        session: Session,
        store: UserStore | None = None,
        roles: RoleResolver | None = None,
        hasher: CredentialHasher | None = None,
    ) -> None:
        self.session = session
        self.store = store or SqlUserStore(session)
        self.roles = roles or RoleResolver(SqlRoleStore(session))
        self.hasher = hasher or BcryptHasher()

    # Lookup

    def find_by_username(self, username: str) -> User | None:
        return self.store.find_by_username(username)

    def find_by_email(self, email: str) -> User | None:
        return self.store.find_by_email(email)

    def find_by_id(self, user_id: int) -> User:
        user = self.store.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def list_all(self) -> list[User]:
        return self.store.find_all()

    # Principal lookup for authentication

    def load_principal_by_username(self, username: str) -> Principal:
        user = self.find_by_username(username)
        if user is None:
            raise AuthLookupError(f"User '{username}' not found")
        return self._principal(user)

    def load_principal_by_email(self, email: str) -> Principal:
        user = self.find_by_email(email)
        if user is None:
            raise AuthLookupError(f"User with email '{email}' not found")
        return self._principal(user)

    def authenticate(self, login: str, password: str) -> Principal:
        """
        Resolve login as an email when it contains '@', falling back to the username
        (usernames may contain '@' too), then check the password.
        """
        user = self.find_by_email(login) if "@" in login else None
        if user is None:
            user = self.find_by_username(login)
        if user is None:
            raise AuthLookupError(f"User '{login}' not found")
        if not self.hasher.verify(password, user.password):
            raise AuthLookupError("Invalid credentials")
        return self._principal(user)

    def _principal(self, user: User) -> Principal:
        return Principal(
            username=user.username,
            password_hash=user.password,
            authorities=self.roles.to_authorities(user.roles),
        )

    # Mutations

    def create(self, user: User, role_names: Sequence[str] | None = None) -> User:
        """
        Persist a new user. Every role name must resolve, otherwise nothing is written.
        A plaintext password is hashed; one carrying the hash marker is kept as-is.
        """
        if not user.password:
            raise ValueError("password must be set")
        submitted = user.password
        try:
            with transaction(self.session):
                self._check_unique(user.username, user.email, exclude_id=None)
                if role_names:
                    resolved, missing = self.roles.resolve_all(role_names)
                    if missing:
                        raise RoleNotFoundError(missing)
                    user.roles = resolved
                stored = self._stored_password(submitted)
                user.password = stored
                self._save(user)
        except Exception:
            # Caller keeps the password it passed in when nothing was written.
            user.password = submitted
            raise
        logger.info("User created: id=%s username=%s", user.id, user.username)
        return user

    def update(
        self, user_id: int, patch: UserUpdate, role_names: Sequence[str] | None = None
    ) -> User:
        """
        Overwrite names, email and username from the patch.

        role_names=None keeps the current roles; otherwise the role set is
        replaced by the names that resolve (unknown names are skipped).
        """
        with transaction(self.session):
            user = self.find_by_id(user_id)
            self._check_unique(patch.username, patch.email, exclude_id=user_id)

            user.first_name = patch.first_name
            user.last_name = patch.last_name
            user.email = patch.email
            user.username = patch.username

            if role_names is not None:
                resolved, missing = self.roles.resolve_all(role_names)
                if missing:
                    logger.warning(
                        "Skipping unknown roles on update: user_id=%s roles=%s",
                        user_id,
                        missing,
                    )
                user.roles = resolved

            if patch.password is not None and patch.password.strip():
                user.password = self._stored_password(patch.password)

            self._save(user)
        logger.info("User updated: id=%s username=%s", user.id, user.username)
        return user

    def delete(self, user_id: int) -> None:
        """Remove the user; role associations are cleared and flushed first. No-op if absent."""
        with transaction(self.session):
            user = self.store.find_by_id(user_id)
            if user is None:
                return
            user.roles.clear()
            self.store.save(user)
            self.store.delete_by_id(user_id)
        logger.info("User deleted: id=%s", user_id)

    def _save(self, user: User) -> None:
        # Another request may claim the username or email between the check and the flush.
        try:
            self.store.save(user)
        except IntegrityError as e:
            raise UserAlreadyExistsError(
                f"Username '{user.username}' or email '{user.email}' is already registered"
            ) from e

    def _stored_password(self, password: str) -> str:
        if looks_hashed(password):
            return password
        return self.hasher.hash(password)

    def _check_unique(self, username: str, email: str, exclude_id: int | None) -> None:
        owner = self.store.find_by_username(username)
        if owner is not None and owner.id != exclude_id:
            raise UserAlreadyExistsError(f"Username '{username}' is already taken")
        owner = self.store.find_by_email(email)
        if owner is not None and owner.id != exclude_id:
            raise UserAlreadyExistsError(f"Email '{email}' is already registered")
