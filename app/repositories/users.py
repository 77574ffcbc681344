"""User persistence: the UserStore interface and its SQLAlchemy implementation."""

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import User


class UserStore(Protocol):
    """Persistence operations the user directory relies on."""

    def save(self, user: User) -> User: ...

    def find_by_id(self, user_id: int) -> User | None: ...

    def find_all(self) -> list[User]: ...

    def delete_by_id(self, user_id: int) -> None: ...

    def find_by_username(self, username: str) -> User | None: ...

    def find_by_email(self, email: str) -> User | None: ...


class SqlUserStore:
    """
    UserStore over a SQLAlchemy session.

    save() flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def save(self, user: User) -> User:
        self.session.add(user)
        self.session.flush()
        return user

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def find_all(self) -> list[User]:
        return list(self.session.scalars(select(User).order_by(User.id)))

    def delete_by_id(self, user_id: int) -> None:
        user = self.session.get(User, user_id)
        if user is not None:
            self.session.delete(user)
            self.session.flush()

    def find_by_username(self, username: str) -> User | None:
        return self.session.scalars(
            select(User).where(User.username == username)
        ).first()

    def find_by_email(self, email: str) -> User | None:
        return self.session.scalars(select(User).where(User.email == email)).first()
