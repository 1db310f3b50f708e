"""Password hashing, opaque token generation and input policy for authentication."""

import hashlib
import re
import secrets
import uuid

import bcrypt
from email_validator import EmailNotValidError, validate_email

from app.core.config import settings

# Min/max lengths for username, email and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
# bcrypt only reads the first 72 bytes; anything longer would verify against its prefix.
PASSWORD_MAX_BYTES = 72

PASSWORD_PATTERN = re.compile(
    r"(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[@$!%*?&])[A-Za-z0-9@$!%*?&]{8,}"
)
PASSWORD_PATTERN_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, "
    "one number, and one special character (@$!%*?&)"
)

# Authorities are compared in prefixed form so "ADMIN" and "ROLE_ADMIN" are the same grant.
ROLE_PREFIX = "ROLE_"
ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"
KNOWN_ROLES = frozenset({ROLE_ADMIN, ROLE_USER})

# Random bytes per token; 32 bytes = 256 bits of entropy.
TOKEN_RANDOM_BYTES = 32


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Raises ValueError above PASSWORD_MAX_BYTES."""
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password exceeds {PASSWORD_MAX_BYTES} bytes")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Inputs bcrypt would truncate never match."""
    pw_bytes = plain_password.encode("utf-8")
    if len(pw_bytes) > PASSWORD_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Verified against when the username does not exist, so unknown users cost the same bcrypt work.
DUMMY_PASSWORD_HASH = hash_password(secrets.token_urlsafe(16))


def generate_token_value() -> str:
    """
    Return a new opaque bearer token: a random UUID plus 256 random bits, URL-safe.
    The UUID part keeps values unique even if the random part ever repeated.
    """
    return f"{uuid.uuid4()}-{secrets.token_urlsafe(TOKEN_RANDOM_BYTES)}"


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a raw token; only the digest is persisted."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _authority(role: str) -> str:
    role = role.strip()
    return role if role.startswith(ROLE_PREFIX) else f"{ROLE_PREFIX}{role}"


def has_role(granted: str | None, required: str) -> bool:
    """True if the granted role satisfies the required one (exact match after prefixing)."""
    if not granted:
        return False
    return _authority(granted) == _authority(required)


def validate_username(username: str) -> str | None:
    """Return an error message for an invalid username, or None."""
    if not username or not username.strip():
        return "Username is required"
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        return f"Username must be between {USERNAME_MIN_LEN} and {USERNAME_MAX_LEN} characters"
    return None


def validate_email_address(email: str) -> str | None:
    """Return an error message for a missing or malformed email address, or None."""
    if not email or not email.strip():
        return "Email is required"
    if len(email) > EMAIL_MAX_LEN:
        return "Email must be valid"
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return "Email must be valid"
    return None


def validate_password_policy(password: str) -> str | None:
    """
    Return an error message if the password violates the complexity policy, or None.
    Policy: at least 8 characters, upper, lower, digit and one of @$!%*?&, nothing else.
    """
    if not password or not password.strip():
        return "Password is required"
    if len(password) < PASSWORD_MIN_LEN:
        return f"Password must be at least {PASSWORD_MIN_LEN} characters"
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return f"Password must be at most {PASSWORD_MAX_BYTES} bytes"
    if not PASSWORD_PATTERN.fullmatch(password):
        return PASSWORD_PATTERN_MESSAGE
    return None
