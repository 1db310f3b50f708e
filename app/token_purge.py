"""
CLI entrypoint for the expired token sweep. Run from cron, e.g.:

  python -m app.token_purge

Or hourly: 0 * * * * cd /path/to/tokengate && .venv/bin/python -m app.token_purge
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.errors import StorageFaultError
from app.services.token_purge import run_token_purge

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Run the sweep once: delete tokens whose expiry has passed."""
    settings = get_settings()
    db = SessionLocal()
    try:
        tokens_deleted = run_token_purge(db, settings)
        logger.info("Token purge completed: tokens_deleted=%s", tokens_deleted)
        return 0
    except StorageFaultError as e:
        logger.error("Token purge failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
