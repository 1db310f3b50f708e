"""Shared helpers for database-backed tests."""

import unittest

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.database import SessionLocal, engine
from app.core.security import hash_password, hash_token
from app.models import Base, Token, User

DEFAULT_PASSWORD = "Abcdef1!"


def reset_database() -> None:
    """Drop and recreate every table in the in-memory test database."""
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)


def add_user(
    db: Session,
    username: str = "alice",
    email: str | None = None,
    password: str = DEFAULT_PASSWORD,
    role: str = "USER",
    enabled: bool = True,
) -> User:
    """Insert a user directly, bypassing the service layer."""
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        password_hash=hash_password(password),
        role=role,
        enabled=enabled,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def find_token(db: Session, raw_token: str) -> Token | None:
    """Stored row for a raw token, whatever its revocation or expiry state."""
    return db.execute(
        select(Token).where(Token.token_hash == hash_token(raw_token))
    ).scalar_one_or_none()


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema and an open session per test."""

    def setUp(self) -> None:
        reset_database()
        self.db = SessionLocal()

    def tearDown(self) -> None:
        self.db.close()
