from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bagshub.db.session import Base, TimestampMixin, UUIDPrimaryKey


class User(UUIDPrimaryKey, TimestampMixin, Base):
    """A registered account. Username and email are stored lower-cased."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, default=None)
    password_hash: Mapped[str] = mapped_column(String(100))
    display_name: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), default=None)

    bookmarks: Mapped[list["Bookmark"]] = relationship(  # noqa: F821
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
