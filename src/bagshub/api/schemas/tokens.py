from typing import Any, Optional

from pydantic import BaseModel, Field

from bagshub.domain.models.token import Token, TokenDetail


class TokenListData(BaseModel):
    tokens: list[Token]


class TokenListEnvelope(BaseModel):
    success: bool = True
    data: TokenListData


class TokenDetailEnvelope(BaseModel):
    success: bool = True
    data: TokenDetail


class Pagination(BaseModel):
    page: int
    limit: int
    has_more: bool


class BagsTokenList(BaseModel):
    tokens: list[Token]
    pagination: Optional[Pagination] = None


class CreateTokenBody(BaseModel):
    name: str = Field(min_length=2, max_length=32)
    symbol: str = Field(min_length=2, max_length=10)
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = None
    twitter: Optional[str] = None
    telegram: Optional[str] = None
    website: Optional[str] = None


class CreateTokenEnvelope(BaseModel):
    success: bool = True
    data: dict[str, Any]


class UploadEnvelope(BaseModel):
    success: bool = True
    url: Optional[str] = None
