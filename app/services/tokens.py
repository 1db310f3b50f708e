"""
Token store and access resolution for opaque bearer tokens.

Every lookup goes to the database; nothing is cached in process. All
statements bind user-supplied values as parameters.
"""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from app.core.database import storage_errors
from app.core.errors import UnauthenticatedError
from app.core.security import generate_token_value, hash_token
from app.models import Token, User
from app.schemas.auth import Identity

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


def issue_token(
    db: Session,
    username: str,
    ttl: timedelta,
    now: datetime | None = None,
) -> str:
    """Persist a new token for username and return the raw value (the only time it is available)."""
    now = now or utcnow()
    raw_token = generate_token_value()
    with storage_errors(db):
        db.add(
            Token(
                token_hash=hash_token(raw_token),
                username=username,
                created_at=now,
                expires_at=now + ttl,
                revoked=False,
            )
        )
        db.commit()
    return raw_token


def revoke_token(db: Session, raw_token: str) -> bool:
    """Mark one token revoked. Unknown or already revoked tokens are a no-op; returns True if a row changed."""
    with storage_errors(db, "Logout failed"):
        result = db.execute(
            update(Token)
            .where(Token.token_hash == hash_token(raw_token), Token.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    return result.rowcount > 0


def revoke_all_user_tokens(db: Session, username: str) -> int:
    """Revoke every active token owned by username in one statement; returns rows changed."""
    with storage_errors(db, "Logout failed"):
        result = db.execute(
            update(Token)
            .where(Token.username == username, Token.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    return result.rowcount


def resolve_identity(db: Session, raw_token: str | None, now: datetime | None = None) -> Identity:
    """
    Map a presented token to the caller's identity.

    The token must exist, be unrevoked and unexpired, and its owner must still
    exist and be enabled. Any failure raises UnauthenticatedError.
    """
    if not raw_token:
        raise UnauthenticatedError()
    now = now or utcnow()
    with storage_errors(db):
        username = db.execute(
            select(Token.username).where(
                Token.token_hash == hash_token(raw_token),
                Token.revoked.is_(False),
                Token.expires_at > now,
            )
        ).scalar_one_or_none()
        if username is None:
            raise UnauthenticatedError()
        user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if user is None or not user.enabled:
        logger.info("Token owner missing or disabled: username=%s", username)
        raise UnauthenticatedError()
    return Identity.model_validate(user)


def purge_expired_tokens(db: Session, now: datetime | None = None) -> int:
    """Delete every token with expires_at < now, revoked or not. Returns rows deleted."""
    now = now or utcnow()
    with storage_errors(db):
        result = db.execute(
            delete(Token)
            .where(Token.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    return result.rowcount
