"""TokenService fallback, ranking and pagination across sources."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from factories import BONK_MINT, SOL_MINT, USDC_MINT, bags_record, dex_pair, make_token

from bagshub.domain.enums import DataSource, LeaderboardType, TokenListType
from bagshub.domain.models.token import TokenDetail, TokenQuery
from bagshub.exceptions import BagsApiError, RateLimitExceededError
from bagshub.market.service import MAX_CONCURRENT_LOOKUPS, TokenService
from bagshub.market.sources import BagsTokenSource, DexScreenerTokenSource


def _source(tokens=None, detail=None, error=None, paginates=True, min_volume=0.0, name=DataSource.BAGS):
    source = MagicMock()
    source.source = name
    source.paginates_upstream = paginates
    source.min_leaderboard_volume = min_volume
    source.fetch_tokens = AsyncMock(return_value=tokens or [], side_effect=error)
    source.fetch_detail = AsyncMock(return_value=detail, side_effect=error)
    return source


class TestGetTokens:
    async def test_primary_wins(self):
        primary = _source([make_token(SOL_MINT, volume_24h=10)])
        secondary = _source([make_token(USDC_MINT)], name=DataSource.DEXSCREENER)
        service = TokenService([primary, secondary])

        result = await service.get_tokens(TokenQuery(list_type=TokenListType.VOLUME))
        assert [t.mint for t in result] == [SOL_MINT]
        secondary.fetch_tokens.assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [BagsApiError("boom", upstream_status=500), RateLimitExceededError("slow down", 30), httpx.ConnectError("down")],
    )
    async def test_primary_failure_falls_back(self, error):
        primary = _source(error=error)
        secondary = _source([make_token(USDC_MINT)], name=DataSource.DEXSCREENER)

        result = await TokenService([primary, secondary]).get_tokens(TokenQuery(list_type=TokenListType.VOLUME))
        assert [t.mint for t in result] == [USDC_MINT]

    async def test_empty_primary_falls_back(self):
        secondary = _source([make_token(USDC_MINT)], name=DataSource.DEXSCREENER)
        result = await TokenService([_source([]), secondary]).get_tokens(TokenQuery())
        assert len(result) == 1

    async def test_everything_failing_gives_empty_list(self):
        service = TokenService([_source(error=BagsApiError("x")), _source(error=httpx.ReadTimeout("slow"))])
        assert await service.get_tokens(TokenQuery()) == []

    async def test_unexpected_errors_propagate(self):
        service = TokenService([_source(error=RuntimeError("bug"))])
        with pytest.raises(RuntimeError):
            await service.get_tokens(TokenQuery())

    async def test_duplicates_collapsed(self):
        source = _source([make_token(SOL_MINT, liquidity=1), make_token(SOL_MINT, liquidity=5, name="best")])
        result = await TokenService([source]).get_tokens(TokenQuery(list_type=TokenListType.VOLUME))
        assert len(result) == 1
        assert result[0].name == "best"

    async def test_gainers_limit(self):
        changes = [12, -3, 5, 40, -8, 1.5, 7, 22]
        source = _source([make_token(f"m{i}", price_change_24h=c) for i, c in enumerate(changes)])
        result = await TokenService([source]).get_tokens(TokenQuery(list_type=TokenListType.GAINERS, limit=5))
        assert [t.price_change_24h for t in result] == [40, 22, 12, 7, 5]

    async def test_local_pagination_for_non_paginating_source(self):
        tokens = [make_token(f"m{i}", volume_24h=100 - i) for i in range(7)]
        source = _source(tokens, paginates=False, name=DataSource.DEXSCREENER)
        result = await TokenService([source]).get_tokens(TokenQuery(list_type=TokenListType.VOLUME, limit=3, page=2))
        assert [t.mint for t in result] == ["m3", "m4", "m5"]

    async def test_search_keeps_upstream_order(self):
        source = _source([make_token("b", volume_24h=1), make_token("a", volume_24h=99)])
        result = await TokenService([source]).get_tokens(TokenQuery(search="x"))
        assert [t.mint for t in result] == ["b", "a"]


class TestHelpers:
    async def test_leaderboard_newest_maps_to_new(self):
        source = _source([make_token(SOL_MINT)])
        await TokenService([source]).get_leaderboard(LeaderboardType.NEWEST, limit=7)
        query = source.fetch_tokens.await_args.args[0]
        assert query.list_type is TokenListType.NEW
        assert query.limit == 7

    async def test_blank_search_skips_upstream(self):
        source = _source([make_token(SOL_MINT)])
        assert await TokenService([source]).search("   ") == []
        source.fetch_tokens.assert_not_called()

    async def test_detail_falls_through_to_next_source(self):
        detail = TokenDetail(token=make_token(SOL_MINT))
        service = TokenService([_source(detail=None), _source(detail=detail, name=DataSource.DEXSCREENER)])
        assert (await service.get_token_detail(SOL_MINT)).token.mint == SOL_MINT

    async def test_detail_unknown_everywhere(self):
        service = TokenService([_source(error=BagsApiError("x")), _source(detail=None)])
        assert await service.get_token_detail(SOL_MINT) is None

    async def test_tokens_by_mints_skips_unknown(self):
        async def detail_for(mint):
            return TokenDetail(token=make_token(mint)) if mint == SOL_MINT else None

        source = _source()
        source.fetch_detail = AsyncMock(side_effect=detail_for)
        found = await TokenService([source]).get_tokens_by_mints([SOL_MINT, BONK_MINT])
        assert list(found) == [SOL_MINT]

    async def test_tokens_by_mints_looks_up_concurrently(self):
        in_flight = 0
        peak = 0

        async def detail_for(mint):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return TokenDetail(token=make_token(mint))

        mints = [f"Mint{i}BAGS" for i in range(20)]
        source = _source()
        source.fetch_detail = AsyncMock(side_effect=detail_for)
        found = await TokenService([source]).get_tokens_by_mints(mints)

        assert list(found) == mints
        assert 1 < peak <= MAX_CONCURRENT_LOOKUPS


class TestSources:
    async def test_bags_source_skipped_without_key(self):
        client = MagicMock()
        client.configured = False
        client.get_top_gainers = AsyncMock()
        assert await BagsTokenSource(client).fetch_tokens(TokenQuery(list_type=TokenListType.GAINERS)) == []
        client.get_top_gainers.assert_not_called()

    async def test_bags_source_routes_list_types(self):
        client = MagicMock()
        client.configured = True
        client.get_top_losers = AsyncMock(return_value={"tokens": [bags_record(SOL_MINT, change_24h=-4)]})
        tokens = await BagsTokenSource(client).fetch_tokens(TokenQuery(list_type=TokenListType.LOSERS, limit=5))
        assert tokens[0].price_change_24h == -4
        client.get_top_losers.assert_awaited_once()

    async def test_bags_detail_404_is_none(self):
        client = MagicMock()
        client.configured = True
        client.get_token = AsyncMock(side_effect=BagsApiError("Token not found", upstream_status=404))
        assert await BagsTokenSource(client).fetch_detail(SOL_MINT) is None

    async def test_bags_detail_other_errors_raise(self):
        client = MagicMock()
        client.configured = True
        client.get_token = AsyncMock(side_effect=BagsApiError("boom", upstream_status=500))
        with pytest.raises(BagsApiError):
            await BagsTokenSource(client).fetch_detail(SOL_MINT)

    async def test_dexscreener_detail_picks_deepest_pair(self):
        client = MagicMock()
        client.get_token_pairs = AsyncMock(return_value=[
            dex_pair(SOL_MINT, liquidity=10, pair_address="shallow"),
            dex_pair(SOL_MINT, liquidity=500, pair_address="deep"),
        ])
        detail = await DexScreenerTokenSource(client).fetch_detail(SOL_MINT)
        assert detail.token.liquidity == 500
        assert [p.pair_address for p in detail.pairs] == ["deep", "shallow"]
        assert detail.txns == {"h24": {"buys": 10, "sells": 4}}

    async def test_dexscreener_bags_only(self):
        client = MagicMock()
        client.search_pairs = AsyncMock(return_value=[dex_pair(SOL_MINT), dex_pair("moonBAGS", pair_address="p2")])
        tokens = await DexScreenerTokenSource(client, bags_only=True).fetch_tokens(TokenQuery(list_type=TokenListType.VOLUME))
        assert [t.mint for t in tokens] == ["moonBAGS"]
        client.search_pairs.assert_awaited_once_with("solana")

    async def test_dexscreener_gainers_need_volume(self):
        client = MagicMock()
        client.search_pairs = AsyncMock(return_value=[
            dex_pair(SOL_MINT, change_24h=50, volume=200),
            dex_pair(BONK_MINT, change_24h=10, volume=5000, pair_address="p2"),
        ])
        service = TokenService([DexScreenerTokenSource(client)])
        result = await service.get_tokens(TokenQuery(list_type=TokenListType.GAINERS))
        assert [t.mint for t in result] == [BONK_MINT]
