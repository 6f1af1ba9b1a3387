from enum import Enum


class DataSource(str, Enum):
    """Upstream market-data providers, in fallback order."""

    BAGS = "bags"
    DEXSCREENER = "dexscreener"
