import uuid
from typing import Optional

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bagshub.db.session import Base, CreatedAtMixin, UUIDPrimaryKey


class Bookmark(UUIDPrimaryKey, CreatedAtMixin, Base):
    """A token on a user's watchlist."""

    __tablename__ = "bookmarks"
    __table_args__ = (UniqueConstraint("user_id", "token_mint", name="uq_bookmarks_user_id_token_mint"),)

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    token_mint: Mapped[str] = mapped_column(String(44), index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, default=None)

    user: Mapped["User"] = relationship(back_populates="bookmarks")  # noqa: F821
