"""DexScreener client: free Solana pair data used as the secondary market-data source.

Docs: https://docs.dexscreener.com/api/reference
"""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from bagshub.domain.enums import TokenTag
from bagshub.domain.models.token import Token, TokenPair
from bagshub.exceptions import DexScreenerError
from bagshub.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

SOLANA_CHAIN_ID = "solana"

# Boost / profile listings are enriched one mint at a time; cap the fan-out.
MAX_ENRICHED_MINTS = 10

SOCIAL_LINK_TYPES = ("twitter", "telegram", "discord")

TAG_KEYWORDS: list[tuple[TokenTag, tuple[str, ...]]] = [
    (TokenTag.AI, ("ai", "gpt", "bot")),
    (TokenTag.GAMING, ("game", "play")),
    (TokenTag.DEFI, ("defi", "swap", "finance")),
    (TokenTag.MEME, ("dog", "cat", "pepe", "doge", "shib", "inu")),
    (TokenTag.NFT, ("nft",)),
]


class DexScreenerClient:
    def __init__(self, http_client: RateLimitedClient, base_url: str = "https://api.dexscreener.com") -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    async def _get_json(self, path: str, params: dict | None = None) -> Any:
        response = await self._http.get(f"{self._base_url}{path}", params=params)
        if response.status_code != 200:
            raise DexScreenerError(f"DexScreener API error: {response.status_code}", upstream_status=response.status_code)
        return response.json()

    async def search_pairs(self, query: str) -> list[dict]:
        """Search pairs by free text. Solana pairs only."""
        data = await self._get_json("/latest/dex/search", params={"q": query})
        return _solana_pairs(data)

    async def get_token_pairs(self, mint: str) -> list[dict]:
        """All Solana pairs for a token, in upstream order."""
        data = await self._get_json(f"/latest/dex/tokens/{mint}")
        return _solana_pairs(data)

    async def get_trending_pairs(self) -> list[dict]:
        """Best pair of each top-boosted Solana token.

        Falls back to a plain "solana" search when the boosts endpoint fails or has
        no Solana entries.
        """
        try:
            boosts = await self._get_json("/token-boosts/top/v1")
        except DexScreenerError:
            logger.warning("DexScreener boosts unavailable, falling back to search")
            return await self.search_pairs("solana")

        mints = [b.get("tokenAddress") for b in _solana_entries(boosts)]
        mints = [m for m in mints if m][:MAX_ENRICHED_MINTS]
        if not mints:
            return await self.search_pairs("solana")

        pairs = []
        for mint in mints:
            pair = await self._first_pair(mint)
            if pair is not None:
                pairs.append(pair)
        return pairs

    async def get_latest_pairs(self) -> list[dict]:
        """Newly profiled Solana tokens, each merged with its profile icon and links."""
        profiles = await self._get_json("/token-profiles/latest/v1")

        pairs = []
        for profile in _solana_entries(profiles)[:MAX_ENRICHED_MINTS]:
            mint = profile.get("tokenAddress")
            if not mint:
                continue
            pair = await self._first_pair(mint)
            if pair is None:
                continue
            links = [link for link in _as_list(profile.get("links")) if isinstance(link, dict)]
            pair["info"] = {
                "imageUrl": profile.get("icon"),
                "websites": [link for link in links if link.get("type") == "website"],
                "socials": [link for link in links if link.get("type") in SOCIAL_LINK_TYPES],
            }
            pairs.append(pair)
        return pairs

    async def _first_pair(self, mint: str) -> dict | None:
        try:
            pairs = await self.get_token_pairs(mint)
        except (DexScreenerError, httpx.HTTPError):
            logger.warning("DexScreener pair lookup failed for %s, skipping", mint, exc_info=True)
            return None
        return pairs[0] if pairs else None


def _solana_entries(data: Any) -> list[dict]:
    if not isinstance(data, list):
        return []
    return [d for d in data if isinstance(d, dict) and d.get("chainId") == SOLANA_CHAIN_ID]


def _solana_pairs(data: Any) -> list[dict]:
    if not isinstance(data, dict):
        return []
    return _solana_entries(data.get("pairs") or [])


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_text(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _num(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def pair_liquidity(pair: dict) -> float:
    return _num(_as_dict(pair.get("liquidity")).get("usd"))


def pair_volume_24h(pair: dict) -> float:
    return _num(_as_dict(pair.get("volume")).get("h24"))


def guess_tags(name: str, symbol: str) -> list[str]:
    """Keyword tags from name/symbol. Defaults to meme, as most Solana tokens are."""
    combined = f"{name} {symbol}".lower()
    tags = [tag.value for tag, words in TAG_KEYWORDS if any(w in combined for w in words)]
    return tags or [TokenTag.MEME.value]


def _strip_prefixes(url: str | None, prefixes: tuple[str, ...]) -> str | None:
    if not url:
        return None
    for prefix in prefixes:
        url = url.replace(prefix, "")
    return url


def _pair_created_at(value: Any) -> datetime | None:
    created_ms = _num(value)
    if created_ms <= 0:
        return None
    try:
        return datetime.fromtimestamp(created_ms / 1000, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def pair_to_token(pair: dict) -> Token:
    """Normalise a DexScreener pair into a Token describing its base token."""
    base = _as_dict(pair.get("baseToken"))
    info = _as_dict(pair.get("info"))
    change = _as_dict(pair.get("priceChange"))
    socials = [s for s in _as_list(info.get("socials")) if isinstance(s, dict)]
    websites = [w for w in _as_list(info.get("websites")) if isinstance(w, dict)]

    twitter = next((_as_text(s.get("url")) for s in socials if s.get("type") == "twitter"), None)
    telegram = next((_as_text(s.get("url")) for s in socials if s.get("type") == "telegram"), None)

    name = _as_text(base.get("name")) or ""
    symbol = _as_text(base.get("symbol")) or ""
    return Token(
        mint=_as_text(base.get("address")) or "",
        name=name,
        symbol=symbol,
        image_url=_as_text(info.get("imageUrl")),
        created_at=_pair_created_at(pair.get("pairCreatedAt")),
        price=_num(pair.get("priceUsd")),
        price_change_1h=_num(change.get("h1")),
        price_change_24h=_num(change.get("h24")),
        volume_24h=pair_volume_24h(pair),
        market_cap=_num(pair.get("marketCap") or pair.get("fdv")),
        liquidity=pair_liquidity(pair),
        twitter=_strip_prefixes(twitter, ("https://twitter.com/", "https://x.com/")),
        telegram=_strip_prefixes(telegram, ("https://t.me/",)),
        website=_as_text(websites[0].get("url")) if websites else None,
        tags=guess_tags(name, symbol),
    )


def pair_to_summary(pair: dict) -> TokenPair:
    return TokenPair(
        pair_address=_as_text(pair.get("pairAddress")) or "",
        dex_id=_as_text(pair.get("dexId")) or "",
        liquidity=pair_liquidity(pair),
        volume_24h=pair_volume_24h(pair),
        url=_as_text(pair.get("url")),
    )


def pair_txns(pair: dict) -> dict:
    return _as_dict(pair.get("txns"))


def pairs_to_tokens(pairs: list[dict]) -> list[Token]:
    """Normalise many pairs, logging and skipping any that fail."""
    tokens = []
    for pair in pairs:
        try:
            tokens.append(pair_to_token(pair))
        except ValueError as e:
            logger.warning("Skipping malformed DexScreener pair %r: %s", pair.get("pairAddress"), e)
    return tokens
