"""Registration, login and session resolution."""

import logging
import re
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bagshub.auth.passwords import MAX_PASSWORD_BYTES, dummy_hash, hash_password, verify_password
from bagshub.auth.tokens import SessionClaims, issue_token, verify_token
from bagshub.db.models.user import User
from bagshub.db.repos.user_repo import UserRepo
from bagshub.exceptions import AuthenticationError, InvalidInputError, UserAlreadyExistsError

logger = logging.getLogger(__name__)

USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
USERNAME_MIN, USERNAME_MAX = 3, 20
PASSWORD_MIN = 8

INVALID_CREDENTIALS = "Invalid username or password"
ALREADY_EXISTS = "Username or email already exists"


@dataclass
class AuthResult:
    user: User
    token: str
    claims: SessionClaims


def validate_registration(username: str, password: str, email: str | None) -> None:
    if not USERNAME_MIN <= len(username) <= USERNAME_MAX:
        raise InvalidInputError(f"Username must be between {USERNAME_MIN} and {USERNAME_MAX} characters")
    if not USERNAME_RE.match(username):
        raise InvalidInputError("Username can only contain letters, numbers, and underscores")
    if len(password) < PASSWORD_MIN:
        raise InvalidInputError(f"Password must be at least {PASSWORD_MIN} characters")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise InvalidInputError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    if email and not EMAIL_RE.match(email):
        raise InvalidInputError("Email address is not valid")


class AuthService:
    def __init__(self, session: AsyncSession, jwt_secret: str, token_lifetime: timedelta = timedelta(days=7)) -> None:
        self._session = session
        self._users = UserRepo(session)
        self._secret = jwt_secret
        self._lifetime = token_lifetime

    def _issue(self, user: User) -> AuthResult:
        token, claims = issue_token(user.id, user.username, self._secret, self._lifetime)
        return AuthResult(user=user, token=token, claims=claims)

    async def register(self, username: str, password: str, email: str | None = None) -> AuthResult:
        username = username.strip()
        email = email.strip() if email else None
        validate_registration(username, password, email)

        if await self._users.find_conflict(username, email) is not None:
            raise UserAlreadyExistsError(ALREADY_EXISTS)

        password_hash = await hash_password(password)
        try:
            user = await self._users.create(username, password_hash, email=email, display_name=username)
            await self._session.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same name
            await self._session.rollback()
            raise UserAlreadyExistsError(ALREADY_EXISTS)

        await self._session.refresh(user)
        logger.info("Registered user %s", user.username)
        return self._issue(user)

    async def login(self, username: str, password: str) -> AuthResult:
        user = await self._users.get_by_username(username.strip())
        if user is None:
            # unknown usernames pay the same bcrypt cost as wrong passwords
            await verify_password(password, await dummy_hash())
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not await verify_password(password, user.password_hash):
            raise AuthenticationError(INVALID_CREDENTIALS)
        return self._issue(user)

    async def resolve(self, token: str | None) -> User | None:
        """User behind a session token, or None for a missing, invalid or orphaned token."""
        if not token:
            return None
        claims = verify_token(token, self._secret)
        if claims is None:
            return None
        return await self._users.get_by_id(claims.user_id)
