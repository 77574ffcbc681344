"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [--role ROLE ...]
Example:
  python -m app.scripts.create_user admin admin@example.com your-secure-password --role ROLE_ADMIN --role ROLE_USER
"""
import argparse
import logging
import sys

from app.core.database import SessionLocal
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from app.models import User
from app.services.roles import RoleNotFoundError
from app.services.users import UserAlreadyExistsError, UserDirectory

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user account (no registration UI).")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "--role",
        dest="roles",
        action="append",
        default=[],
        help="Authority to grant, e.g. ROLE_ADMIN (repeatable; must already exist)",
    )
    parser.add_argument("--first-name", default=None)
    parser.add_argument("--last-name", default=None)
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = User(
            username=username,
            email=args.email.strip(),
            first_name=args.first_name,
            last_name=args.last_name,
            password=args.password,
        )
        UserDirectory(db).create(user, args.roles)
        print(f"Created user '{username}' with roles {sorted(args.roles)}.")
        return 0
    except (RoleNotFoundError, UserAlreadyExistsError) as e:
        print(e.message, file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Create user failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
