"""
Tests for AuthService — registration and login orchestration.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from auth.exceptions import (
    DuplicateEmail,
    DuplicateUsername,
    InternalError,
    InvalidCredentials,
)
from auth.jwt_handler import decode_unverified
from auth.password import is_bcrypt_hash, legacy_digest
from auth.service import AuthService
from database.models import User


async def _user_count(db) -> int:
    return await db.scalar(select(func.count()).select_from(User))


@pytest.fixture
def service(db, jwt_handler):
    return AuthService(db, jwt_handler)


class TestRegister:
    async def test_success_returns_decodable_token(self, service, jwt_handler):
        result = await service.register("alice", "a@x.com", "pw1")

        assert result.user.username == "alice"
        assert result.user.email == "a@x.com"
        assert result.user.id > 0

        identity = jwt_handler.validate(result.token)
        assert identity.username == "alice"
        assert identity.email == "a@x.com"
        assert identity.user_id == result.user.id

    async def test_stores_bcrypt_hash_not_plaintext(self, service, db):
        await service.register("alice", "a@x.com", "pw1")
        stored = await db.scalar(select(User.password_hash).where(User.username == "alice"))
        assert stored != "pw1"
        assert is_bcrypt_hash(stored)

    async def test_duplicate_username(self, service, db):
        await service.register("alice", "a@x.com", "pw1")
        with pytest.raises(DuplicateUsername) as exc_info:
            await service.register("alice", "other@x.com", "pw2")

        assert exc_info.value.message == "Username already exists"
        assert await _user_count(db) == 1

    async def test_duplicate_email(self, service, db):
        await service.register("alice", "a@x.com", "pw1")
        with pytest.raises(DuplicateEmail) as exc_info:
            await service.register("alicia", "a@x.com", "pw2")

        assert exc_info.value.message == "Email already exists"
        assert await _user_count(db) == 1

    async def test_constraint_violation_is_authoritative(self, service, db):
        """A writer that slips past the pre-check is stopped by the unique constraint."""
        await service.register("alice", "a@x.com", "pw1")

        # Pre-check misses the existing row, as if a concurrent insert landed after it.
        with patch("auth.service.username_taken", AsyncMock(side_effect=[False, True])), \
                patch("auth.service.email_taken", AsyncMock(return_value=False)):
            with pytest.raises(DuplicateUsername):
                await service.register("alice", "fresh@x.com", "pw2")

        assert await _user_count(db) == 1

    async def test_lookup_failure_is_internal_error(self, jwt_handler):
        session = MagicMock()
        session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))

        with pytest.raises(InternalError) as exc_info:
            await AuthService(session, jwt_handler).register("alice", "a@x.com", "pw1")
        assert exc_info.value.status_code == 500


class TestLogin:
    async def test_success(self, service, jwt_handler):
        registered = await service.register("alice", "a@x.com", "pw1")
        result = await service.login("alice", "pw1")

        assert result.user.id == registered.user.id
        assert jwt_handler.validate(result.token).username == "alice"

    async def test_wrong_password_matches_unknown_user(self, service):
        await service.register("alice", "a@x.com", "pw1")

        with pytest.raises(InvalidCredentials) as wrong_password:
            await service.login("alice", "wrong")
        with pytest.raises(InvalidCredentials) as unknown_user:
            await service.login("bob", "anything")

        assert wrong_password.value.message == unknown_user.value.message
        assert wrong_password.value.message == "Invalid username or password"

    @pytest.mark.parametrize("username", ["bob", "admin"])
    async def test_failed_lookup_still_checks_a_hash(self, service, db, username):
        db.add(User(username="admin", email="admin@messageboard.com", password_hash=""))
        await db.commit()

        with patch("auth.service.verify_password", MagicMock(return_value=False)) as verify:
            with pytest.raises(InvalidCredentials):
                await service.login(username, "anything")

        verify.assert_called_once()
        password, stored = verify.call_args.args
        assert password == "anything"
        assert is_bcrypt_hash(stored)

    async def test_each_login_issues_fresh_token(self, service):
        await service.register("alice", "a@x.com", "pw1")
        first = await service.login("alice", "pw1")
        second = await service.login("alice", "pw1")
        assert decode_unverified(first.token)["jti"] != decode_unverified(second.token)["jti"]

    async def test_user_without_password_cannot_log_in(self, service, db):
        db.add(User(username="admin", email="admin@messageboard.com", password_hash=""))
        await db.commit()

        with pytest.raises(InvalidCredentials):
            await service.login("admin", "")

    async def test_legacy_digest_upgraded_on_login(self, service, db):
        db.add(User(username="old", email="old@x.com", password_hash=legacy_digest("pw1")))
        await db.commit()

        result = await service.login("old", "pw1")
        assert result.user.username == "old"

        stored = await db.scalar(select(User.password_hash).where(User.username == "old"))
        assert is_bcrypt_hash(stored)

        # Still works after the upgrade.
        await service.login("old", "pw1")

    async def test_lookup_failure_is_internal_error(self, jwt_handler):
        session = MagicMock()
        session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))

        with pytest.raises(InternalError) as exc_info:
            await AuthService(session, jwt_handler).login("alice", "pw1")
        assert exc_info.value.message == "An error occurred during login"
