"""Tests for the CLI entry points app.scripts.create_user and app.scripts.seed_roles."""

import unittest
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.security import verify_password
from app.models import Base, Role
from app.repositories.roles import SqlRoleStore
from app.repositories.users import SqlUserStore
from app.scripts import create_user, seed_roles


def _session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


class TestSeedRoles(unittest.TestCase):
    def test_seeds_default_roles_idempotently(self) -> None:
        Session = _session_factory()
        with patch("app.scripts.seed_roles.SessionLocal", Session):
            self.assertEqual(seed_roles.main(), 0)
            self.assertEqual(seed_roles.main(), 0)
        with Session() as db:
            authorities = [r.authority for r in SqlRoleStore(db).find_all()]
        self.assertEqual(authorities, settings.default_roles)


class TestCreateUser(unittest.TestCase):
    def setUp(self) -> None:
        self.Session = _session_factory()
        with self.Session() as db:
            db.add(Role(authority="ROLE_ADMIN"))
            db.commit()
        patcher = patch("app.scripts.create_user.SessionLocal", self.Session)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_creates_user_with_hashed_password_and_roles(self) -> None:
        code = create_user.main(
            ["admin", "admin@example.com", "s3cret-pw", "--role", "ROLE_ADMIN", "--first-name", "Ada"]
        )
        self.assertEqual(code, 0)
        with self.Session() as db:
            user = SqlUserStore(db).find_by_username("admin")
            self.assertIsNotNone(user)
            self.assertEqual(user.first_name, "Ada")
            self.assertEqual({r.authority for r in user.roles}, {"ROLE_ADMIN"})
            self.assertTrue(verify_password("s3cret-pw", user.password))

    def test_unknown_role_fails_without_creating(self) -> None:
        code = create_user.main(["admin", "admin@example.com", "pw", "--role", "ROLE_ROOT"])
        self.assertEqual(code, 1)
        with self.Session() as db:
            self.assertIsNone(SqlUserStore(db).find_by_username("admin"))

    def test_duplicate_user_fails(self) -> None:
        self.assertEqual(create_user.main(["admin", "admin@example.com", "pw"]), 0)
        self.assertEqual(create_user.main(["admin", "other@example.com", "pw"]), 1)

    def test_blank_username_fails(self) -> None:
        self.assertEqual(create_user.main(["   ", "admin@example.com", "pw"]), 1)


if __name__ == "__main__":
    unittest.main()
