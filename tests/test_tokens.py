"""Tests for app.services.tokens against an in-memory database: issue, resolve, revoke, purge."""

import unittest
from datetime import UTC, datetime, timedelta

from app.core.errors import UnauthenticatedError
from app.core.security import hash_token
from app.models import Token
from app.services.tokens import (
    issue_token,
    purge_expired_tokens,
    resolve_identity,
    revoke_all_user_tokens,
    revoke_token,
)
from support import DatabaseTestCase, add_user, find_token

T0 = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
DAY = timedelta(hours=24)


class TestIssueAndResolve(DatabaseTestCase):
    """Issued tokens resolve to their owner until expiry."""

    def setUp(self) -> None:
        super().setUp()
        self.user = add_user(self.db, "alice", role="USER")

    def test_issued_token_resolves_immediately(self) -> None:
        token = issue_token(self.db, "alice", DAY, now=T0)
        identity = resolve_identity(self.db, token, now=T0)
        self.assertEqual(identity.username, "alice")
        self.assertEqual(identity.role, "USER")
        self.assertEqual(identity.id, self.user.id)

    def test_only_digest_is_stored(self) -> None:
        token = issue_token(self.db, "alice", DAY, now=T0)
        row = find_token(self.db, token)
        self.assertIsNotNone(row)
        self.assertEqual(row.token_hash, hash_token(token))
        self.assertNotIn(token, row.token_hash)
        self.assertFalse(row.revoked)
        self.assertEqual(row.expires_at - row.created_at, DAY)

    def test_each_issue_creates_distinct_independent_token(self) -> None:
        first = issue_token(self.db, "alice", DAY, now=T0)
        second = issue_token(self.db, "alice", DAY, now=T0)
        self.assertNotEqual(first, second)
        self.assertEqual(self.db.query(Token).count(), 2)
        revoke_token(self.db, first)
        self.assertEqual(resolve_identity(self.db, second, now=T0).username, "alice")

    def test_token_fails_at_and_after_expiry(self) -> None:
        token = issue_token(self.db, "alice", DAY, now=T0)
        self.assertEqual(
            resolve_identity(self.db, token, now=T0 + DAY - timedelta(seconds=1)).username,
            "alice",
        )
        with self.assertRaises(UnauthenticatedError):
            resolve_identity(self.db, token, now=T0 + DAY)
        with self.assertRaises(UnauthenticatedError):
            resolve_identity(self.db, token, now=T0 + DAY + timedelta(minutes=1))

    def test_unknown_or_empty_token(self) -> None:
        for token in ("", None, "nope", hash_token("nope")):
            with self.subTest(token=token):
                with self.assertRaises(UnauthenticatedError):
                    resolve_identity(self.db, token, now=T0)

    def test_disabled_owner_is_unauthenticated(self) -> None:
        token = issue_token(self.db, "alice", DAY, now=T0)
        self.user.enabled = False
        self.db.commit()
        with self.assertRaises(UnauthenticatedError):
            resolve_identity(self.db, token, now=T0)

    def test_missing_owner_is_unauthenticated(self) -> None:
        token = issue_token(self.db, "ghost", DAY, now=T0)
        with self.assertRaises(UnauthenticatedError):
            resolve_identity(self.db, token, now=T0)


class TestRevocation(DatabaseTestCase):
    """Single and bulk revocation."""

    def setUp(self) -> None:
        super().setUp()
        add_user(self.db, "alice")
        add_user(self.db, "bob")

    def test_revoked_token_never_resolves_again(self) -> None:
        token = issue_token(self.db, "alice", DAY, now=T0)
        self.assertTrue(revoke_token(self.db, token))
        for offset in (timedelta(0), timedelta(hours=1), timedelta(hours=23)):
            with self.assertRaises(UnauthenticatedError):
                resolve_identity(self.db, token, now=T0 + offset)

    def test_revoke_is_idempotent(self) -> None:
        token = issue_token(self.db, "alice", DAY, now=T0)
        self.assertTrue(revoke_token(self.db, token))
        self.assertFalse(revoke_token(self.db, token))
        self.assertFalse(revoke_token(self.db, "never-issued"))
        self.assertTrue(find_token(self.db, token).revoked)

    def test_revoke_all_affects_only_earlier_tokens_of_that_user(self) -> None:
        before_1 = issue_token(self.db, "alice", DAY, now=T0)
        before_2 = issue_token(self.db, "alice", DAY, now=T0)
        bob_token = issue_token(self.db, "bob", DAY, now=T0)

        self.assertEqual(revoke_all_user_tokens(self.db, "alice"), 2)
        after = issue_token(self.db, "alice", DAY, now=T0)

        for token in (before_1, before_2):
            with self.assertRaises(UnauthenticatedError):
                resolve_identity(self.db, token, now=T0)
        self.assertEqual(resolve_identity(self.db, after, now=T0).username, "alice")
        self.assertEqual(resolve_identity(self.db, bob_token, now=T0).username, "bob")

    def test_revoke_all_skips_already_revoked(self) -> None:
        token = issue_token(self.db, "alice", DAY, now=T0)
        revoke_token(self.db, token)
        self.assertEqual(revoke_all_user_tokens(self.db, "alice"), 0)
        self.assertEqual(revoke_all_user_tokens(self.db, "nobody"), 0)


class TestPurgeExpiredTokens(DatabaseTestCase):
    """Expired rows are deleted regardless of revocation."""

    def test_purge_deletes_only_expired_rows(self) -> None:
        add_user(self.db, "alice")
        expired = issue_token(self.db, "alice", timedelta(hours=1), now=T0)
        expired_revoked = issue_token(self.db, "alice", timedelta(hours=1), now=T0)
        revoke_token(self.db, expired_revoked)
        live = issue_token(self.db, "alice", DAY, now=T0)
        live_revoked = issue_token(self.db, "alice", DAY, now=T0)
        revoke_token(self.db, live_revoked)

        deleted = purge_expired_tokens(self.db, now=T0 + timedelta(hours=2))

        self.assertEqual(deleted, 2)
        self.assertIsNone(find_token(self.db, expired))
        self.assertIsNone(find_token(self.db, expired_revoked))
        self.assertIsNotNone(find_token(self.db, live))
        self.assertIsNotNone(find_token(self.db, live_revoked))

    def test_purge_twice_is_idempotent(self) -> None:
        add_user(self.db, "alice")
        issue_token(self.db, "alice", timedelta(hours=1), now=T0)
        now = T0 + timedelta(hours=2)
        self.assertEqual(purge_expired_tokens(self.db, now=now), 1)
        self.assertEqual(purge_expired_tokens(self.db, now=now), 0)

    def test_purge_on_empty_table(self) -> None:
        self.assertEqual(purge_expired_tokens(self.db, now=T0), 0)


if __name__ == "__main__":
    unittest.main()
