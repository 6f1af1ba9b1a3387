"""Optimistic bookmark mutations over the cached bookmark list.

Each add/remove is a BookmarkMutation moving pending -> confirmed | rolled_back.
The cached list is edited before the server call and that edit is reverted if
the call fails; a confirmed call refetches the list from the server. Any list
fetch already in flight is detached first so it cannot overwrite the edit.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import httpx

from bagshub.sdk.cache import QueryCache, make_key
from bagshub.sdk.client import ApiRequestError, BagsHubClient

logger = logging.getLogger(__name__)

BOOKMARKS_KEY = make_key("bookmarks")


class MutationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


class MutationKind(str, Enum):
    ADD = "add"
    REMOVE = "remove"


class InvalidTransition(Exception):
    pass


@dataclass
class BookmarkMutation:
    kind: MutationKind
    token_mint: str
    snapshot: list[dict]
    notes: Optional[str] = None
    status: MutationStatus = MutationStatus.PENDING
    error: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def confirm(self) -> None:
        self._transition(MutationStatus.CONFIRMED)

    def roll_back(self, error: str) -> None:
        self._transition(MutationStatus.ROLLED_BACK)
        self.error = error

    def _transition(self, target: MutationStatus) -> None:
        if self.status != MutationStatus.PENDING:
            raise InvalidTransition(f"{self.kind.value} {self.token_mint}: {self.status.value} -> {target.value}")
        self.status = target


class BookmarkStore:
    def __init__(self, client: BagsHubClient, cache: QueryCache):
        self._client = client
        self._cache = cache
        self.history: list[BookmarkMutation] = []

    async def load(self) -> list[dict]:
        return await self._cache.fetch(BOOKMARKS_KEY, self._client.list_bookmarks)

    def current(self) -> list[dict]:
        return list(self._cache.get_data(BOOKMARKS_KEY) or [])

    def is_bookmarked(self, token_mint: str) -> bool:
        return any(b["token_mint"] == token_mint for b in self.current())

    async def add(self, token_mint: str, notes: Optional[str] = None) -> BookmarkMutation:
        self._cache.cancel(BOOKMARKS_KEY)
        snapshot = self.current()
        mutation = BookmarkMutation(MutationKind.ADD, token_mint, snapshot, notes=notes)
        placeholder = {
            "id": None,
            "token_mint": token_mint,
            "notes": notes,
            "created_at": mutation.created_at.isoformat(),
        }
        self._cache.set_data(BOOKMARKS_KEY, [placeholder, *snapshot])
        return await self._commit(mutation, self._client.add_bookmark(token_mint, notes))

    async def remove(self, token_mint: str) -> BookmarkMutation:
        self._cache.cancel(BOOKMARKS_KEY)
        snapshot = self.current()
        mutation = BookmarkMutation(MutationKind.REMOVE, token_mint, snapshot)
        self._cache.set_data(BOOKMARKS_KEY, [b for b in snapshot if b["token_mint"] != token_mint])
        return await self._commit(mutation, self._client.remove_bookmark(token_mint))

    async def _commit(self, mutation: BookmarkMutation, call) -> BookmarkMutation:
        self.history.append(mutation)
        try:
            await call
        except (ApiRequestError, httpx.HTTPError) as e:
            message = e.message if isinstance(e, ApiRequestError) else str(e)
            self._undo(mutation)
            mutation.roll_back(message)
            logger.info("Bookmark %s %s rolled back: %s", mutation.kind.value, mutation.token_mint, message)
            return mutation
        mutation.confirm()
        await self._reconcile()
        return mutation

    def _undo(self, mutation: BookmarkMutation) -> None:
        """Revert only this mutation's edit; other pending edits stay in the list."""
        self._cache.cancel(BOOKMARKS_KEY)
        current = self.current()
        if mutation.kind is MutationKind.ADD:
            restored = [b for b in current if not (b["token_mint"] == mutation.token_mint and b.get("id") is None)]
        else:
            restored = current
            if not any(b["token_mint"] == mutation.token_mint for b in current):
                for position, b in enumerate(mutation.snapshot):
                    if b["token_mint"] == mutation.token_mint:
                        restored = [*current[:position], b, *current[position:]]
                        break
        self._cache.set_data(BOOKMARKS_KEY, restored)
        self._cache.invalidate(BOOKMARKS_KEY)

    async def _reconcile(self) -> None:
        self._cache.cancel(BOOKMARKS_KEY)
        try:
            await self._cache.fetch(BOOKMARKS_KEY, self._client.list_bookmarks, force=True)
        except (ApiRequestError, httpx.HTTPError) as e:
            self._cache.invalidate(BOOKMARKS_KEY)
            logger.warning("Bookmark list refetch failed: %s", e)
