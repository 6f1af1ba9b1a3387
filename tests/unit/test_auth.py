"""Password hashing, session tokens and AuthService flows."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import jwt
import pytest
from sqlalchemy import func, select

from bagshub.auth.passwords import hash_password, verify_password
from bagshub.auth.service import ALREADY_EXISTS, INVALID_CREDENTIALS, AuthService, validate_registration
from bagshub.auth.tokens import issue_token, verify_token
from bagshub.db.models.user import User
from bagshub.db.repos.user_repo import UserRepo
from bagshub.exceptions import AuthenticationError, InvalidInputError, UserAlreadyExistsError

SECRET = "unit-test-secret"


class TestPasswords:
    async def test_round_trip(self):
        hashed = await hash_password("hunter2hunter2")
        assert hashed != "hunter2hunter2"
        assert await verify_password("hunter2hunter2", hashed)
        assert not await verify_password("wrong-password", hashed)

    async def test_malformed_hash_is_rejected(self):
        assert not await verify_password("whatever1", "not-a-bcrypt-hash")


class TestTokens:
    def test_issue_and_verify(self):
        user_id = uuid.uuid4()
        token, claims = issue_token(user_id, "alice", SECRET, timedelta(days=7))
        decoded = verify_token(token, SECRET)

        assert decoded == claims
        assert decoded.user_id == user_id
        assert decoded.expires_at - decoded.issued_at == 7 * 86400

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(days=8)
        token, _ = issue_token(uuid.uuid4(), "alice", SECRET, timedelta(days=7), now=past)
        assert verify_token(token, SECRET) is None

    def test_wrong_secret_rejected(self):
        token, _ = issue_token(uuid.uuid4(), "alice", SECRET)
        assert verify_token(token, "other-secret") is None

    def test_tampered_payload_rejected(self):
        token, _ = issue_token(uuid.uuid4(), "alice", SECRET)
        header, payload, signature = token.split(".")
        forged = jwt.encode({"sub": str(uuid.uuid4()), "username": "mallory", "iat": 0, "exp": 9999999999}, "guess")
        assert verify_token(".".join([header, forged.split(".")[1], signature]), SECRET) is None

    def test_garbage_and_bad_subject(self):
        assert verify_token("not.a.jwt", SECRET) is None
        bad_sub = jwt.encode({"sub": "not-a-uuid", "iat": 0, "exp": 9999999999}, SECRET, algorithm="HS256")
        assert verify_token(bad_sub, SECRET) is None


class TestValidation:
    @pytest.mark.parametrize(
        "username,password,email",
        [
            ("ab", "longenough", None),
            ("a" * 21, "longenough", None),
            ("bad name", "longenough", None),
            ("alice", "short", None),
            ("alice", "x" * 73, None),
            ("alice", "longenough", "not-an-email"),
        ],
    )
    def test_rejects(self, username, password, email):
        with pytest.raises(InvalidInputError):
            validate_registration(username, password, email)

    def test_accepts(self):
        validate_registration("alice_01", "longenough", "alice@example.com")


class TestAuthService:
    @pytest.fixture()
    def auth(self, session):
        return AuthService(session, SECRET)

    async def test_register_lowercases_and_issues_token(self, auth, session):
        result = await auth.register("Alice", "correct-horse", email="Alice@Example.com")

        assert result.user.username == "alice"
        assert result.user.email == "alice@example.com"
        assert result.user.display_name == "Alice"
        assert verify_token(result.token, SECRET).user_id == result.user.id
        assert await UserRepo(session).get_by_username("ALICE") is not None

    async def test_same_username_any_case_registers_once(self, auth, session):
        await auth.register("alice", "correct-horse")
        with pytest.raises(UserAlreadyExistsError) as exc_info:
            await auth.register("ALICE", "another-pass")
        assert exc_info.value.message == ALREADY_EXISTS

        count = await session.scalar(select(func.count()).select_from(User))
        assert count == 1

    async def test_duplicate_email_rejected(self, auth):
        await auth.register("alice", "correct-horse", email="a@example.com")
        with pytest.raises(UserAlreadyExistsError):
            await auth.register("bob", "correct-horse", email="A@example.com")

    async def test_login_success(self, auth):
        registered = await auth.register("alice", "correct-horse")
        result = await auth.login("Alice", "correct-horse")
        assert result.user.id == registered.user.id

    async def test_wrong_password_and_unknown_user_look_identical(self, auth):
        await auth.register("alice", "correct-horse")

        with pytest.raises(AuthenticationError) as wrong_password:
            await auth.login("alice", "wrong-horse")
        with pytest.raises(AuthenticationError) as unknown_user:
            await auth.login("nobody", "correct-horse")

        assert wrong_password.value.message == unknown_user.value.message == INVALID_CREDENTIALS
        assert wrong_password.value.status_code == unknown_user.value.status_code == 401

    async def test_unknown_user_still_runs_bcrypt(self, auth, monkeypatch):
        from bagshub.auth import service

        verify = AsyncMock(return_value=False)
        monkeypatch.setattr(service, "verify_password", verify)

        with pytest.raises(AuthenticationError):
            await auth.login("nobody", "correct-horse")

        verify.assert_awaited_once()
        password, password_hash = verify.await_args.args
        assert password == "correct-horse"
        assert password_hash.startswith("$2")

    async def test_resolve(self, auth):
        result = await auth.register("alice", "correct-horse")
        assert (await auth.resolve(result.token)).id == result.user.id
        assert await auth.resolve(None) is None
        assert await auth.resolve("garbage") is None

    async def test_resolve_token_for_deleted_user(self, auth):
        token, _ = issue_token(uuid.uuid4(), "ghost", SECRET)
        assert await auth.resolve(token) is None
