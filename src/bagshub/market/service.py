"""TokenService: orchestrates token reads across upstream sources with graceful fallback."""

import asyncio
import logging

import httpx

from bagshub.domain.enums import LeaderboardType, TokenListType
from bagshub.domain.models.token import Token, TokenDetail, TokenQuery
from bagshub.exceptions import BagsHubError
from bagshub.market.ranking import dedupe_by_mint, rank_tokens
from bagshub.market.sources import TokenSource

logger = logging.getLogger(__name__)

# Failures a read path absorbs before handing over to the next source
READ_FAILURES = (BagsHubError, httpx.HTTPError, ValueError)

# Upper bound on simultaneous detail lookups when resolving a watchlist
MAX_CONCURRENT_LOOKUPS = 8


class TokenService:
    """Read orchestrator: primary source -> secondary source -> empty list.

    Read methods never raise for upstream trouble; they log and fall through.
    """

    def __init__(self, sources: list[TokenSource]) -> None:
        self._sources = sources

    async def get_tokens(self, query: TokenQuery) -> list[Token]:
        for source in self._sources:
            try:
                raw = await source.fetch_tokens(query)
            except READ_FAILURES as e:
                logger.warning("Token list from %s failed (%s), trying next source", source.source.value, e)
                continue

            tokens = dedupe_by_mint(raw)
            if not query.search:
                tokens = rank_tokens(tokens, query.list_type, min_volume=source.min_leaderboard_volume)
            if not source.paginates_upstream:
                start = (query.page - 1) * query.limit
                tokens = tokens[start:]
            tokens = tokens[: query.limit]

            if tokens:
                logger.debug("Served %d tokens from %s", len(tokens), source.source.value)
                return tokens
            logger.info("No tokens from %s for %s, trying next source", source.source.value, query.list_type.value)

        return []

    async def get_leaderboard(self, kind: LeaderboardType, limit: int = 20) -> list[Token]:
        return await self.get_tokens(TokenQuery(list_type=kind.to_list_type(), limit=limit))

    async def get_trending(self, limit: int = 20) -> list[Token]:
        return await self.get_tokens(TokenQuery(list_type=TokenListType.TRENDING, limit=limit))

    async def search(self, query: str, limit: int = 20) -> list[Token]:
        if not query.strip():
            return []
        return await self.get_tokens(TokenQuery(search=query.strip(), limit=limit))

    async def get_token_detail(self, mint: str) -> TokenDetail | None:
        """First source that knows the mint wins. None when no source does."""
        for source in self._sources:
            try:
                detail = await source.fetch_detail(mint)
            except READ_FAILURES as e:
                logger.warning("Token %s from %s failed (%s), trying next source", mint, source.source.value, e)
                continue
            if detail is not None:
                return detail
        return None

    async def get_tokens_by_mints(self, mints: list[str]) -> dict[str, Token]:
        """Resolve a watchlist. Unknown mints are simply absent from the result."""
        gate = asyncio.Semaphore(MAX_CONCURRENT_LOOKUPS)

        async def lookup(mint: str) -> TokenDetail | None:
            async with gate:
                return await self.get_token_detail(mint)

        details = await asyncio.gather(*(lookup(mint) for mint in mints))
        return {mint: detail.token for mint, detail in zip(mints, details) if detail is not None}
