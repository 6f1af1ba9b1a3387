import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, UploadFile, status

from bagshub.api.deps import TokenServiceDep, UserDep, get_bags_client, get_rate_limit_tracker
from bagshub.api.schemas.tokens import (
    CreateTokenBody,
    CreateTokenEnvelope,
    TokenDetailEnvelope,
    TokenListData,
    TokenListEnvelope,
    UploadEnvelope,
)
from bagshub.domain.enums import TimeFrame, TokenListType
from bagshub.domain.models.rate_limit import RateLimitInfo
from bagshub.domain.models.token import TokenQuery
from bagshub.exceptions import InvalidInputError, NotFoundError
from bagshub.infra.bags.client import BagsApiClient, CreateTokenRequest
from bagshub.infra.http.rate_limit import RateLimitTracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tokens"])

MAX_UPLOAD_BYTES = 2 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}


@router.get("/tokens", response_model=TokenListEnvelope)
async def list_tokens(
    service: TokenServiceDep,
    type: TokenListType = Query(TokenListType.TRENDING),
    limit: int = Query(20, ge=1, le=100),
    page: int = Query(1, ge=1),
    search: Optional[str] = Query(None),
    time_frame: TimeFrame = Query(TimeFrame.H24),
) -> TokenListEnvelope:
    query = TokenQuery(
        list_type=type,
        limit=limit,
        page=page,
        search=search.strip() if search and search.strip() else None,
        time_frame=time_frame,
    )
    tokens = await service.get_tokens(query)
    return TokenListEnvelope(data=TokenListData(tokens=tokens))


@router.get("/tokens/{mint}", response_model=TokenDetailEnvelope)
async def get_token(mint: str, service: TokenServiceDep) -> TokenDetailEnvelope:
    detail = await service.get_token_detail(mint)
    if detail is None:
        raise NotFoundError("Token not found")
    return TokenDetailEnvelope(data=detail)


@router.post("/tokens", response_model=CreateTokenEnvelope, status_code=status.HTTP_201_CREATED)
async def create_token(
    body: CreateTokenBody,
    user: UserDep,
    client: BagsApiClient = Depends(get_bags_client),
) -> CreateTokenEnvelope:
    """Launch a token through the Bags API. Requires BAGS_API_KEY."""
    logger.info("User %s launching token %s", user.username, body.symbol)
    result = await client.create_token(CreateTokenRequest(**body.model_dump()))
    return CreateTokenEnvelope(data=result)


@router.post("/upload", response_model=UploadEnvelope)
async def upload_image(
    file: UploadFile,
    user: UserDep,
    client: BagsApiClient = Depends(get_bags_client),
) -> UploadEnvelope:
    content_type = file.content_type or ""
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidInputError("Image must be PNG, JPEG, GIF or WebP")
    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise InvalidInputError("Image must be 2MB or smaller")
    result = await client.upload_image(content, file.filename or "image", content_type)
    return UploadEnvelope(success=bool(result.get("success", True)), url=result.get("url"))


@router.get("/rate-limit", response_model=RateLimitInfo)
async def rate_limit_status(tracker: RateLimitTracker = Depends(get_rate_limit_tracker)) -> RateLimitInfo:
    return tracker.snapshot()
