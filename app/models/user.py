"""ORM model for application users and their role associations."""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from app.models.base import Base
from app.models.role import Role

# Join relation for the many-to-many User <-> Role association.
users_roles = Table(
    "users_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id"), primary_key=True),
)


class User(Base):
    """
    User account with a bcrypt password hash and a set of roles.

    password holds a hash once persisted; the directory hashes plaintext on
    create/update. roles is replaced wholesale on update, never diffed.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    password = Column(String(255), nullable=False)

    roles = relationship(Role, secondary=users_roles, collection_class=set, lazy="selectin")

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r})"
