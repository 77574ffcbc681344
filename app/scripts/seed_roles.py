"""
Insert any missing DEFAULT_ROLES. Safe to run repeatedly:

  python -m app.scripts.seed_roles
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal, transaction
from app.repositories.roles import SqlRoleStore
from app.services.roles import RoleResolver

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Create the roles named by DEFAULT_ROLES that are not in the database yet."""
    settings = get_settings()
    db = SessionLocal()
    try:
        with transaction(db):
            created = RoleResolver(SqlRoleStore(db)).ensure(settings.default_roles)
        logger.info("Seed roles completed: created=%s", [r.authority for r in created])
        return 0
    except Exception as e:
        logger.exception("Seed roles failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
