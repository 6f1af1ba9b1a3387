from bagshub.domain.enums.source import DataSource
from bagshub.domain.enums.tag import TokenTag
from bagshub.domain.enums.token_list import LeaderboardType, TimeFrame, TokenListType

__all__ = [
    "DataSource",
    "LeaderboardType",
    "TimeFrame",
    "TokenListType",
    "TokenTag",
]
