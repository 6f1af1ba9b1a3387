from enum import Enum


class TokenListType(str, Enum):
    """List kinds accepted by GET /api/tokens?type=."""

    TRENDING = "trending"
    VOLUME = "volume"
    GAINERS = "gainers"
    LOSERS = "losers"
    NEW = "new"
    HOLDERS = "holders"


class LeaderboardType(str, Enum):
    """Leaderboard metrics accepted by GET /api/bags/leaderboard?type=."""

    GAINERS = "gainers"
    LOSERS = "losers"
    VOLUME = "volume"
    NEWEST = "newest"
    HOLDERS = "holders"

    def to_list_type(self) -> TokenListType:
        if self is LeaderboardType.NEWEST:
            return TokenListType.NEW
        return TokenListType(self.value)


class TimeFrame(str, Enum):
    H1 = "1h"
    H6 = "6h"
    H24 = "24h"
    D7 = "7d"
