import uuid
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bagshub.db.models.user import User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.username == username.lower()))
        return result.scalar_one_or_none()

    async def find_conflict(self, username: str, email: str | None = None) -> Optional[User]:
        """Return any user already holding this username or email (case-folded)."""
        clauses = [User.username == username.lower()]
        if email:
            clauses.append(User.email == email.lower())
        result = await self._session.execute(select(User).where(or_(*clauses)).limit(1))
        return result.scalar_one_or_none()

    async def create(
        self,
        username: str,
        password_hash: str,
        email: str | None = None,
        display_name: str | None = None,
    ) -> User:
        user = User(
            username=username.lower(),
            email=email.lower() if email else None,
            password_hash=password_hash,
            display_name=display_name,
        )
        self._session.add(user)
        await self._session.flush()
        return user
