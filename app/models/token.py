"""ORM model for issued bearer tokens."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.models.base import Base


class Token(Base):
    """
    One row per successful login.

    Only the SHA-256 digest of the raw token is stored. A token is valid while
    revoked is false and now < expires_at; revoked only ever goes false -> true.
    username refers to users.username by value (no foreign key).
    """

    __tablename__ = "tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    username = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    revoked = Column(Boolean, nullable=False, default=False)
