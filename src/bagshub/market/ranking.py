"""De-duplication, filtering and ordering of token lists."""

from datetime import datetime, timezone

from bagshub.domain.enums import TokenListType
from bagshub.domain.models.token import Token

# Gainers/losers from DexScreener ignore pairs with less than this 24h volume (USD)
MIN_LEADERBOARD_VOLUME = 1000.0

BAGS_MINT_SUFFIX = "BAGS"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def dedupe_by_mint(tokens: list[Token]) -> list[Token]:
    """One record per mint. The highest-liquidity record wins; first-seen order is kept."""
    best: dict[str, Token] = {}
    order: list[str] = []
    for token in tokens:
        current = best.get(token.mint)
        if current is None:
            order.append(token.mint)
            best[token.mint] = token
        elif token.liquidity > current.liquidity:
            best[token.mint] = token
    return [best[mint] for mint in order]


def only_bags_mints(tokens: list[Token]) -> list[Token]:
    return [t for t in tokens if t.mint.endswith(BAGS_MINT_SUFFIX)]


def _created_key(token: Token) -> datetime:
    created = token.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def rank_tokens(tokens: list[Token], list_type: TokenListType, min_volume: float = 0.0) -> list[Token]:
    """Filter and order a de-duplicated list for one list type.

    gainers keep only positive 24h change (descending); losers only negative
    (most negative first). Both also drop tokens at or under min_volume when set.
    """
    if list_type is TokenListType.GAINERS:
        kept = [t for t in tokens if t.price_change_24h > 0 and (not min_volume or t.volume_24h > min_volume)]
        return sorted(kept, key=lambda t: t.price_change_24h, reverse=True)

    if list_type is TokenListType.LOSERS:
        kept = [t for t in tokens if t.price_change_24h < 0 and (not min_volume or t.volume_24h > min_volume)]
        return sorted(kept, key=lambda t: t.price_change_24h)

    if list_type in (TokenListType.VOLUME, TokenListType.TRENDING):
        return sorted(tokens, key=lambda t: t.volume_24h, reverse=True)

    if list_type is TokenListType.NEW:
        return sorted(tokens, key=_created_key, reverse=True)

    if list_type is TokenListType.HOLDERS:
        return sorted(tokens, key=lambda t: t.holder_count, reverse=True)

    return list(tokens)

