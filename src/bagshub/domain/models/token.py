"""Domain types for normalised token market data."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from bagshub.domain.enums import TimeFrame, TokenListType


class Token(BaseModel):
    """One token, keyed by mint. Built fresh from upstream data on every request."""

    mint: str
    name: str
    symbol: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    creator_address: str = ""
    created_at: Optional[datetime] = None
    supply: str = "0"
    decimals: int = 9
    price: float = 0.0
    price_change_1h: float = 0.0
    price_change_24h: float = 0.0
    price_change_7d: float = 0.0
    volume_24h: float = 0.0
    market_cap: float = 0.0
    liquidity: float = 0.0
    holder_count: int = 0
    twitter: Optional[str] = None
    telegram: Optional[str] = None
    website: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class TokenPair(BaseModel):
    """A trading venue for a token, as listed on the detail endpoint."""

    pair_address: str
    dex_id: str
    liquidity: float = 0.0
    volume_24h: float = 0.0
    url: Optional[str] = None


class TokenDetail(BaseModel):
    token: Token
    pairs: list[TokenPair] = Field(default_factory=list)
    txns: dict = Field(default_factory=dict)


class TokenQuery(BaseModel):
    """Request shape for a token list. Search, when set, takes priority over list_type."""

    list_type: TokenListType = TokenListType.TRENDING
    limit: int = Field(20, ge=1, le=100)
    page: int = Field(1, ge=1)
    search: Optional[str] = None
    time_frame: TimeFrame = TimeFrame.H24
