"""Adapters that turn each upstream client into a uniform token source."""

import logging
from typing import Protocol

from bagshub.domain.enums import DataSource, TokenListType
from bagshub.domain.models.token import Token, TokenDetail, TokenQuery
from bagshub.exceptions import BagsApiError
from bagshub.infra.bags.client import BagsApiClient, bags_token_to_token, tokens_from_list
from bagshub.infra.dexscreener.client import (
    DexScreenerClient,
    pair_liquidity,
    pair_to_summary,
    pair_to_token,
    pair_txns,
    pairs_to_tokens,
)
from bagshub.market.ranking import MIN_LEADERBOARD_VOLUME, dedupe_by_mint, only_bags_mints

logger = logging.getLogger(__name__)


class TokenSource(Protocol):
    source: DataSource
    paginates_upstream: bool
    min_leaderboard_volume: float

    async def fetch_tokens(self, query: TokenQuery) -> list[Token]: ...

    async def fetch_detail(self, mint: str) -> TokenDetail | None: ...


class BagsTokenSource:
    """Primary source. Everything it returns is a Bags token by definition."""

    source = DataSource.BAGS
    paginates_upstream = True
    min_leaderboard_volume = 0.0

    def __init__(self, client: BagsApiClient) -> None:
        self._client = client

    async def fetch_tokens(self, query: TokenQuery) -> list[Token]:
        if not self._client.configured:
            logger.debug("Bags API key not configured, skipping primary source")
            return []

        limit, page, tf = query.limit, query.page, query.time_frame
        if query.search:
            payload = await self._client.search_tokens(query.search, limit=limit, page=page)
        elif query.list_type is TokenListType.TRENDING:
            payload = await self._client.get_trending_tokens(limit=limit, time_frame=tf)
        elif query.list_type is TokenListType.VOLUME:
            payload = await self._client.get_by_volume(limit=limit, time_frame=tf)
        elif query.list_type is TokenListType.GAINERS:
            payload = await self._client.get_top_gainers(limit=limit, time_frame=tf)
        elif query.list_type is TokenListType.LOSERS:
            payload = await self._client.get_top_losers(limit=limit, time_frame=tf)
        elif query.list_type is TokenListType.NEW:
            payload = await self._client.get_new_tokens(limit=limit, page=page)
        else:
            payload = await self._client.get_tokens(page=page, limit=limit)
        return tokens_from_list(payload)

    async def fetch_detail(self, mint: str) -> TokenDetail | None:
        if not self._client.configured:
            return None
        try:
            raw = await self._client.get_token(mint)
        except BagsApiError as e:
            if e.upstream_status == 404:
                return None
            raise
        if not isinstance(raw, dict):
            logger.warning("Unexpected Bags detail payload for %s", mint)
            return None
        token = bags_token_to_token(raw)
        return TokenDetail(token=token) if token.mint else None


class DexScreenerTokenSource:
    """Secondary source: any Solana token, optionally narrowed to mints ending in BAGS."""

    source = DataSource.DEXSCREENER
    paginates_upstream = False
    min_leaderboard_volume = MIN_LEADERBOARD_VOLUME

    def __init__(self, client: DexScreenerClient, bags_only: bool = False) -> None:
        self._client = client
        self._bags_only = bags_only

    async def fetch_tokens(self, query: TokenQuery) -> list[Token]:
        if query.search:
            pairs = await self._client.search_pairs(query.search)
        elif query.list_type is TokenListType.TRENDING:
            pairs = await self._client.get_trending_pairs()
        elif query.list_type is TokenListType.NEW:
            pairs = await self._client.get_latest_pairs()
        else:
            pairs = await self._client.search_pairs("solana")

        tokens = dedupe_by_mint(pairs_to_tokens(pairs))
        tokens = [t for t in tokens if t.mint]
        if self._bags_only:
            tokens = only_bags_mints(tokens)
        return tokens

    async def fetch_detail(self, mint: str) -> TokenDetail | None:
        pairs = await self._client.get_token_pairs(mint)
        if not pairs:
            return None
        pairs = sorted(pairs, key=pair_liquidity, reverse=True)
        best = pairs[0]
        return TokenDetail(
            token=pair_to_token(best),
            pairs=[pair_to_summary(p) for p in pairs],
            txns=pair_txns(best),
        )
