"""Expired token sweep: delete token rows whose expires_at has passed."""

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.errors import StorageFaultError
from app.services.tokens import purge_expired_tokens, utcnow

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def run_token_purge(session: Session, settings: "Settings") -> int:
    """
    Delete tokens with expires_at < now, revoked or not. Returns rows deleted.

    Idempotent: a second run with no new expirations deletes nothing. Expired
    tokens are already rejected on every request, so this is storage hygiene only.
    """
    if not settings.TOKEN_PURGE_ENABLED:
        logger.info("Token purge is disabled (TOKEN_PURGE_ENABLED=false); skipping.")
        return 0

    now = utcnow()
    deleted_count = purge_expired_tokens(session, now=now)
    if deleted_count > 0:
        logger.info(
            "Token purge run: cutoff=%s, tokens_deleted=%s",
            now.isoformat(),
            deleted_count,
        )
    return deleted_count


def purge_once(session_factory: Callable[[], Session], settings: "Settings") -> int | None:
    """Run one purge in its own session. Any failure is logged and left for the next run."""
    session = session_factory()
    try:
        return run_token_purge(session, settings)
    except StorageFaultError:
        logger.warning("Token purge failed; will retry at the next interval")
        return None
    except Exception as e:
        logger.exception("Token purge job failed: %s", e)
        return None
    finally:
        session.close()


async def run_token_purge_periodically(
    session_factory: Callable[[], Session],
    settings: "Settings",
) -> None:
    """Background loop for the app lifespan: purge every TOKEN_PURGE_INTERVAL_MINUTES until cancelled."""
    interval_seconds = settings.TOKEN_PURGE_INTERVAL_MINUTES * 60
    logger.info("Token purge loop started: interval_minutes=%s", settings.TOKEN_PURGE_INTERVAL_MINUTES)
    while True:
        await asyncio.sleep(interval_seconds)
        await asyncio.to_thread(purge_once, session_factory, settings)
