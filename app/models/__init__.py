"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.token import Token
from app.models.user import User

__all__ = ["Base", "Token", "User"]
