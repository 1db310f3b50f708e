"""Authentication and user management: login, registration, current user and logout."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import storage_errors
from app.core.errors import (
    EmailTakenError,
    ForbiddenError,
    InvalidCredentialsError,
    UnauthenticatedError,
    UsernameTakenError,
)
from app.core.security import (
    DUMMY_PASSWORD_HASH,
    KNOWN_ROLES,
    ROLE_ADMIN,
    ROLE_PREFIX,
    has_role,
    hash_password,
    verify_password,
)
from app.models import User
from app.schemas.auth import Identity
from app.services.tokens import issue_token, revoke_all_user_tokens, revoke_token

logger = logging.getLogger(__name__)


def _get_user_by_username(db: Session, username: str) -> User | None:
    return db.execute(select(User).where(User.username == username)).scalar_one_or_none()


def _username_exists(db: Session, username: str) -> bool:
    return db.execute(select(User.id).where(User.username == username)).first() is not None


def _email_exists(db: Session, email: str) -> bool:
    return db.execute(select(User.id).where(User.email == email)).first() is not None


def _ensure_available(db: Session, username: str, email: str) -> None:
    if _username_exists(db, username):
        raise UsernameTakenError()
    if _email_exists(db, email):
        raise EmailTakenError()


def authenticate(
    db: Session,
    username: str,
    password: str,
    *,
    token_ttl: timedelta,
    now: datetime | None = None,
) -> str:
    """
    Verify credentials and issue a new bearer token; returns the raw token.

    Unknown user, wrong password and disabled account all raise the same
    InvalidCredentialsError. bcrypt always runs so timing does not reveal
    whether the username exists.
    """
    with storage_errors(db):
        user = _get_user_by_username(db, username)
    if user is None:
        verify_password(password, DUMMY_PASSWORD_HASH)
        logger.info("Login rejected: username=%s", username)
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash) or not user.enabled:
        logger.info("Login rejected: username=%s", username)
        raise InvalidCredentialsError()

    token = issue_token(db, user.username, token_ttl, now=now)
    logger.info("Login succeeded: username=%s", user.username)
    return token


def get_current_user(db: Session, identity: Identity) -> User:
    """Load the full user record for an authenticated identity."""
    with storage_errors(db):
        user = _get_user_by_username(db, identity.username)
    if user is None:
        raise UnauthenticatedError("Unauthorized access attempt")
    return user


def create_user_account(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: str,
) -> User:
    """
    Insert a new enabled user after the uniqueness checks (username first, then email).
    No authorization check; callers are the admin-gated register_user and the bootstrap CLI.
    """
    if role.removeprefix(ROLE_PREFIX) not in KNOWN_ROLES:
        # Roles are free-form; keep the value but make unusual ones visible.
        logger.warning("Creating user with unrecognized role: username=%s role=%s", username, role)

    with storage_errors(db):
        _ensure_available(db, username, email)
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=role,
            enabled=True,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration; report which field collided.
            db.rollback()
            _ensure_available(db, username, email)
            raise
        db.refresh(user)
    logger.info("User created: id=%s username=%s role=%s", user.id, user.username, user.role)
    return user


def register_user(
    db: Session,
    actor: Identity | None,
    username: str,
    email: str,
    password: str,
    role: str,
) -> User:
    """Create a user on behalf of an authenticated administrator."""
    if actor is None or not has_role(actor.role, ROLE_ADMIN):
        raise ForbiddenError()
    user = create_user_account(db, username, email, password, role)
    logger.info("User %s registered by admin %s", user.username, actor.username)
    return user


def logout(db: Session, raw_token: str) -> None:
    """Revoke a single token. Unknown or already revoked tokens are not an error."""
    revoked = revoke_token(db, raw_token)
    logger.info("Logout (current token): revoked=%s", revoked)


def logout_all(db: Session, username: str) -> int:
    """Revoke every active token of username; returns the number revoked."""
    count = revoke_all_user_tokens(db, username)
    logger.info("Logout (all tokens): username=%s revoked=%s", username, count)
    return count
