import uuid
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from bagshub.db.models.bookmark import Bookmark


class BookmarkRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_user(self, user_id: uuid.UUID) -> list[Bookmark]:
        """Bookmarks of one user, newest first."""
        result = await self._session.execute(
            select(Bookmark)
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.token_mint)
        )
        return list(result.scalars().all())

    async def get(self, user_id: uuid.UUID, token_mint: str) -> Optional[Bookmark]:
        result = await self._session.execute(
            select(Bookmark).where(Bookmark.user_id == user_id, Bookmark.token_mint == token_mint)
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: uuid.UUID, token_mint: str, notes: str | None = None) -> Bookmark:
        bookmark = Bookmark(user_id=user_id, token_mint=token_mint, notes=notes)
        self._session.add(bookmark)
        await self._session.flush()
        return bookmark

    async def delete(self, user_id: uuid.UUID, token_mint: str) -> bool:
        """Delete one user's bookmark. Returns False if it did not exist."""
        result = await self._session.execute(
            delete(Bookmark).where(Bookmark.user_id == user_id, Bookmark.token_mint == token_mint)
        )
        await self._session.flush()
        return (result.rowcount or 0) > 0
