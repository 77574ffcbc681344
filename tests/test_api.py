"""API tests: login, admin-only user management and health, over an in-memory SQLite database."""

import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.v1.auth import get_user_directory
from app.core.config import settings
from app.core.database import get_db
from app.core.security import PASSWORD_MAX_LEN, BcryptHasher
from app.main import app
from app.models import Base, Role, User
from app.services.users import UserDirectory

PREFIX = settings.API_V1_PREFIX


def _session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.Session = _session_factory()
        with self.Session() as db:
            db.add_all([Role(authority=a) for a in settings.default_roles])
            db.commit()
            directory = UserDirectory(db, hasher=BcryptHasher(rounds=4))
            directory.create(
                User(username="admin", email="admin@example.com", password="admin-pw"),
                [settings.ADMIN_AUTHORITY],
            )
            directory.create(
                User(username="bob", email="bob@example.com", password="pw123"),
                ["ROLE_USER"],
            )

        def override_get_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        def override_get_user_directory():
            db = self.Session()
            try:
                yield UserDirectory(db, hasher=BcryptHasher(rounds=4))
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_user_directory] = override_get_user_directory
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _token(self, login: str, password: str) -> str:
        resp = self.client.post(f"{PREFIX}/auth", json={"login": login, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["access_token"]

    def _headers(self, login: str = "admin", password: str = "admin-pw") -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token(login, password)}"}


class TestLogin(ApiTestCase):
    def test_login_by_username_and_email(self) -> None:
        self.assertTrue(self._token("bob", "pw123"))
        self.assertTrue(self._token("bob@example.com", "pw123"))

    def test_wrong_password_is_401(self) -> None:
        resp = self.client.post(f"{PREFIX}/auth", json={"login": "bob", "password": "nope"})
        self.assertEqual(resp.status_code, 401)

    def test_unknown_user_is_401(self) -> None:
        resp = self.client.post(f"{PREFIX}/auth", json={"login": "ghost", "password": "pw123"})
        self.assertEqual(resp.status_code, 401)

    def test_me_returns_authorities(self) -> None:
        resp = self.client.get(f"{PREFIX}/auth/me", headers=self._headers("bob", "pw123"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"username": "bob", "authorities": ["ROLE_USER"]})

    def test_me_without_token_is_401(self) -> None:
        self.assertEqual(self.client.get(f"{PREFIX}/auth/me").status_code, 401)

    def test_garbage_token_is_401(self) -> None:
        resp = self.client.get(
            f"{PREFIX}/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )
        self.assertEqual(resp.status_code, 401)


class TestUserEndpoints(ApiTestCase):
    def test_non_admin_is_forbidden(self) -> None:
        resp = self.client.get(f"{PREFIX}/users", headers=self._headers("bob", "pw123"))
        self.assertEqual(resp.status_code, 403)

    def test_list_users_hides_passwords(self) -> None:
        resp = self.client.get(f"{PREFIX}/users", headers=self._headers())
        self.assertEqual(resp.status_code, 200)
        users = resp.json()["users"]
        self.assertEqual([u["username"] for u in users], ["admin", "bob"])
        self.assertNotIn("password", users[0])

    def test_create_then_login_as_new_user(self) -> None:
        body = {
            "username": "carol",
            "email": "carol@example.com",
            "password": "carol-pw",
            "roles": ["ROLE_USER", "ROLE_USER"],
        }
        resp = self.client.post(f"{PREFIX}/users", json=body, headers=self._headers())
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual([r["authority"] for r in resp.json()["roles"]], ["ROLE_USER"])
        self.assertTrue(self._token("carol", "carol-pw"))

    def test_password_at_max_length_can_log_in(self) -> None:
        password = "x" * PASSWORD_MAX_LEN
        body = {"username": "carol", "email": "carol@example.com", "password": password}
        resp = self.client.post(f"{PREFIX}/users", json=body, headers=self._headers())
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertTrue(self._token("carol", password))

    def test_password_over_max_length_is_422(self) -> None:
        headers = self._headers()
        body = {
            "username": "carol",
            "email": "carol@example.com",
            "password": "x" * (PASSWORD_MAX_LEN + 1),
        }
        resp = self.client.post(f"{PREFIX}/users", json=body, headers=headers)
        self.assertEqual(resp.status_code, 422)
        bob_id = self.client.get(f"{PREFIX}/users", headers=headers).json()["users"][1]["id"]
        body["username"], body["email"] = "bob", "bob@example.com"
        resp = self.client.put(f"{PREFIX}/users/{bob_id}", json=body, headers=headers)
        self.assertEqual(resp.status_code, 422)

    def test_username_with_at_sign_can_log_in(self) -> None:
        body = {"username": "dave@home", "email": "dave@example.com", "password": "pw-dave"}
        resp = self.client.post(f"{PREFIX}/users", json=body, headers=self._headers())
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertTrue(self._token("dave@home", "pw-dave"))

    def test_create_with_unknown_role_is_422(self) -> None:
        body = {
            "username": "carol",
            "email": "carol@example.com",
            "password": "carol-pw",
            "roles": ["ROLE_ROOT"],
        }
        resp = self.client.post(f"{PREFIX}/users", json=body, headers=self._headers())
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["roles"], ["ROLE_ROOT"])

    def test_create_duplicate_is_409(self) -> None:
        body = {"username": "bob", "email": "bob2@example.com", "password": "pw"}
        resp = self.client.post(f"{PREFIX}/users", json=body, headers=self._headers())
        self.assertEqual(resp.status_code, 409)

    def test_update_replaces_roles_and_keeps_password_when_blank(self) -> None:
        headers = self._headers()
        bob_id = self.client.get(f"{PREFIX}/users", headers=headers).json()["users"][1]["id"]
        body = {
            "username": "bob",
            "email": "bob@example.com",
            "first_name": "Bob",
            "password": "",
            "roles": ["ROLE_ADMIN", "ROLE_UNKNOWN"],
        }
        resp = self.client.put(f"{PREFIX}/users/{bob_id}", json=body, headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual([r["authority"] for r in resp.json()["roles"]], ["ROLE_ADMIN"])
        self.assertEqual(resp.json()["first_name"], "Bob")
        self.assertTrue(self._token("bob", "pw123"))

    def test_update_missing_user_is_404(self) -> None:
        body = {"username": "x", "email": "x@example.com"}
        resp = self.client.put(f"{PREFIX}/users/999", json=body, headers=self._headers())
        self.assertEqual(resp.status_code, 404)

    def test_delete_then_get_is_404(self) -> None:
        headers = self._headers()
        bob_id = self.client.get(f"{PREFIX}/users", headers=headers).json()["users"][1]["id"]
        self.assertEqual(self.client.get(f"{PREFIX}/users/{bob_id}", headers=headers).status_code, 200)
        resp = self.client.delete(f"{PREFIX}/users/{bob_id}", headers=headers)
        self.assertEqual(resp.status_code, 204)
        self.assertEqual(self.client.get(f"{PREFIX}/users/{bob_id}", headers=headers).status_code, 404)
        # Deleting again is a no-op.
        self.assertEqual(self.client.delete(f"{PREFIX}/users/{bob_id}", headers=headers).status_code, 204)

    def test_deleted_users_token_stops_working(self) -> None:
        bob_headers = self._headers("bob", "pw123")
        admin_headers = self._headers()
        bob_id = self.client.get(f"{PREFIX}/users", headers=admin_headers).json()["users"][1]["id"]
        self.client.delete(f"{PREFIX}/users/{bob_id}", headers=admin_headers)
        self.assertEqual(self.client.get(f"{PREFIX}/auth/me", headers=bob_headers).status_code, 401)

    def test_list_roles(self) -> None:
        resp = self.client.get(f"{PREFIX}/roles", headers=self._headers())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            [r["authority"] for r in resp.json()["roles"]], settings.default_roles
        )


class TestHealth(ApiTestCase):
    def test_health_reports_connected_and_seeded_roles(self) -> None:
        resp = self.client.get(f"{PREFIX}/health/")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["database"], "connected")
        self.assertEqual(body["missing_roles"], [])


if __name__ == "__main__":
    unittest.main()
