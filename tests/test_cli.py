"""Command-line entrypoints: bootstrap user creation and the one-shot token purge."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError

from app import token_purge
from app.core.config import get_settings
from app.core.security import verify_password
from app.models import Token, User
from app.scripts import create_user
from app.services.tokens import issue_token
from support import DatabaseTestCase, add_user


class TestCreateUserScript(DatabaseTestCase):
    def _run(self, *args: str) -> int:
        with patch("sys.argv", ["create_user", *args]):
            return create_user.main()

    def test_creates_admin(self) -> None:
        self.assertEqual(self._run("root", "root@corp.io", "Root1234!", "ADMIN"), 0)
        user = self.db.query(User).filter(User.username == "root").one()
        self.assertEqual(user.role, "ADMIN")
        self.assertTrue(verify_password("Root1234!", user.password_hash))

    def test_role_defaults_to_user(self) -> None:
        self.assertEqual(self._run("alice", "a@x.com", "Abcdef1!"), 0)
        self.assertEqual(self.db.query(User).one().role, "USER")

    def test_rejects_weak_password(self) -> None:
        self.assertEqual(self._run("alice", "a@x.com", "weakpass"), 1)
        self.assertEqual(self.db.query(User).count(), 0)

    def test_rejects_duplicate_username(self) -> None:
        add_user(self.db, "alice")
        self.assertEqual(self._run("alice", "other@x.com", "Abcdef1!"), 1)
        self.assertEqual(self.db.query(User).count(), 1)


class TestTokenPurgeScript(DatabaseTestCase):
    def test_deletes_expired_tokens(self) -> None:
        add_user(self.db, "alice")
        issue_token(self.db, "alice", timedelta(hours=1), now=datetime.now(UTC) - timedelta(days=2))
        issue_token(self.db, "alice", timedelta(hours=24))
        enabled = get_settings().model_copy(update={"TOKEN_PURGE_ENABLED": True})
        with patch("app.token_purge.get_settings", return_value=enabled):
            self.assertEqual(token_purge.main(), 0)
        self.assertEqual(self.db.query(Token).count(), 1)

    def test_storage_fault_exits_nonzero(self) -> None:
        session = MagicMock()
        session.execute.side_effect = OperationalError("DELETE", {}, Exception("db down"))
        enabled = get_settings().model_copy(update={"TOKEN_PURGE_ENABLED": True})
        with patch("app.token_purge.get_settings", return_value=enabled), patch(
            "app.token_purge.SessionLocal", return_value=session
        ):
            self.assertEqual(token_purge.main(), 1)
        session.close.assert_called_once()
