"""Bags-flavoured list endpoints. Same data as /api/tokens, leaner {tokens: [...]} envelope."""

from fastapi import APIRouter, Query

from bagshub.api.deps import TokenServiceDep
from bagshub.api.schemas.tokens import BagsTokenList, Pagination
from bagshub.domain.enums import LeaderboardType, TokenListType
from bagshub.domain.models.token import TokenDetail, TokenQuery
from bagshub.exceptions import InvalidInputError, NotFoundError

router = APIRouter(prefix="/api/bags", tags=["bags"])

SORT_TO_LIST_TYPE = {
    "volume": TokenListType.VOLUME,
    "newest": TokenListType.NEW,
    "trending": TokenListType.TRENDING,
    "gainers": TokenListType.GAINERS,
    "losers": TokenListType.LOSERS,
    "holders": TokenListType.HOLDERS,
}


@router.get("/tokens", response_model=BagsTokenList)
async def list_tokens(
    service: TokenServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    sort: str = Query("volume"),
) -> BagsTokenList:
    list_type = SORT_TO_LIST_TYPE.get(sort)
    if list_type is None:
        raise InvalidInputError(f"Unknown sort '{sort}'")
    tokens = await service.get_tokens(TokenQuery(list_type=list_type, page=page, limit=limit))
    return BagsTokenList(tokens=tokens, pagination=Pagination(page=page, limit=limit, has_more=len(tokens) == limit))


@router.get("/tokens/{mint}", response_model=TokenDetail)
async def get_token(mint: str, service: TokenServiceDep) -> TokenDetail:
    detail = await service.get_token_detail(mint)
    if detail is None:
        raise NotFoundError("Token not found")
    return detail


@router.get("/trending", response_model=BagsTokenList)
async def trending(service: TokenServiceDep, limit: int = Query(20, ge=1, le=100)) -> BagsTokenList:
    return BagsTokenList(tokens=await service.get_trending(limit))


@router.get("/leaderboard", response_model=BagsTokenList)
async def leaderboard(
    service: TokenServiceDep,
    type: LeaderboardType = Query(LeaderboardType.GAINERS),
    limit: int = Query(20, ge=1, le=100),
) -> BagsTokenList:
    return BagsTokenList(tokens=await service.get_leaderboard(type, limit))


@router.get("/search", response_model=BagsTokenList)
async def search(service: TokenServiceDep, q: str = Query(""), limit: int = Query(20, ge=1, le=100)) -> BagsTokenList:
    if not q.strip():
        return BagsTokenList(tokens=[])
    return BagsTokenList(tokens=await service.search(q, limit))
