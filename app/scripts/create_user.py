"""
Create a user (e.g. the first admin) without going through the API. Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user admin admin@example.com 'S3cure!pass' ADMIN
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.errors import AuthError
from app.core.security import (
    validate_email_address,
    validate_password_policy,
    validate_username,
)
from app.services.auth import create_user_account


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Tokengate user (bootstrap; no admin token needed).")
    parser.add_argument("username", help="Username (3-50 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (8-72 chars, upper, lower, digit, one of @$!%%*?&)")
    parser.add_argument("role", nargs="?", default="USER", help="Role tag, e.g. USER or ADMIN (default USER)")
    args = parser.parse_args()

    username = args.username.strip()
    for error in (
        validate_username(username),
        validate_email_address(args.email),
        validate_password_policy(args.password),
    ):
        if error:
            print(error, file=sys.stderr)
            return 1

    db = SessionLocal()
    try:
        user = create_user_account(db, username, args.email, args.password, args.role.strip())
    except AuthError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.username}' with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
