"""Bags public API client: token lists, details and token launch. Server side only."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel

from bagshub.domain.enums import TimeFrame
from bagshub.domain.models.token import Token
from bagshub.exceptions import BagsApiError, ConfigurationError
from bagshub.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


class CreateTokenRequest(BaseModel):
    name: str
    symbol: str
    description: Optional[str] = None
    image: Optional[str] = None  # URL returned by upload_image
    twitter: Optional[str] = None
    telegram: Optional[str] = None
    website: Optional[str] = None


class BagsApiClient:
    """Thin wrapper over https://public-api-v2.bags.fm/api/v1.

    All calls go through the shared RateLimitedClient, so an exhausted quota
    raises RateLimitExceededError before any request is sent.
    """

    def __init__(self, http_client: RateLimitedClient, base_url: str, api_key: str = "") -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _require_key(self) -> str:
        if not self._api_key:
            raise ConfigurationError("BAGS_API_KEY is not configured")
        return self._api_key

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json: dict | None = None,
        files: dict | None = None,
    ) -> Any:
        key = self._require_key()
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        response = await self._http.request(
            method,
            f"{self._base_url}{endpoint}",
            params=clean or None,
            json=json,
            files=files,
            headers={API_KEY_HEADER: key},
        )
        if response.status_code >= 400:
            message = f"API request failed with status {response.status_code}"
            try:
                body = response.json()
                message = body.get("message") or body.get("error") or message
            except (ValueError, AttributeError):
                pass
            raise BagsApiError(message, upstream_status=response.status_code)
        return response.json()

    # Token lists

    async def get_tokens(
        self,
        page: int | None = None,
        limit: int | None = None,
        sort: str | None = None,
        search: str | None = None,
    ) -> dict:
        """Raw token list: {"tokens": [...], "pagination": {...}}."""
        return await self._request("GET", "/tokens", params={"page": page, "limit": limit, "sort": sort, "search": search})

    async def get_trending_tokens(self, limit: int | None = None, time_frame: TimeFrame | None = None) -> dict:
        params = {"limit": limit, "timeFrame": time_frame.value if time_frame else None}
        return await self._request("GET", "/tokens/trending", params=params)

    async def get_new_tokens(self, limit: int | None = None, page: int | None = None) -> dict:
        return await self.get_tokens(page=page, limit=limit, sort="newest")

    async def search_tokens(self, query: str, limit: int | None = None, page: int | None = None) -> dict:
        return await self.get_tokens(page=page, limit=limit, search=query)

    async def _sorted(self, sort: str, limit: int | None, time_frame: TimeFrame | None) -> dict:
        params = {"sort": sort, "limit": limit, "timeFrame": time_frame.value if time_frame else None}
        return await self._request("GET", "/tokens", params=params)

    async def get_top_gainers(self, limit: int | None = None, time_frame: TimeFrame | None = None) -> dict:
        return await self._sorted("gainers", limit, time_frame)

    async def get_top_losers(self, limit: int | None = None, time_frame: TimeFrame | None = None) -> dict:
        return await self._sorted("losers", limit, time_frame)

    async def get_by_volume(self, limit: int | None = None, time_frame: TimeFrame | None = None) -> dict:
        return await self._sorted("volume", limit, time_frame)

    # Single token

    async def get_token(self, mint: str) -> dict:
        return await self._request("GET", f"/tokens/{mint}")

    async def get_token_holders(self, mint: str, page: int | None = None, limit: int | None = None) -> dict:
        return await self._request("GET", f"/tokens/{mint}/holders", params={"page": page, "limit": limit})

    async def get_token_transactions(
        self,
        mint: str,
        page: int | None = None,
        limit: int | None = None,
        tx_type: str | None = None,
    ) -> dict:
        params = {"page": page, "limit": limit, "type": tx_type if tx_type and tx_type != "all" else None}
        return await self._request("GET", f"/tokens/{mint}/transactions", params=params)

    async def get_token_price_history(
        self,
        mint: str,
        interval: str | None = None,
        from_ts: int | None = None,
        to_ts: int | None = None,
    ) -> dict:
        params = {"interval": interval, "from": from_ts, "to": to_ts}
        return await self._request("GET", f"/tokens/{mint}/prices", params=params)

    # Writes

    async def upload_image(self, content: bytes, filename: str, mime_type: str) -> dict:
        """Upload a token image. Returns {"success": bool, "url": str}."""
        self._require_key()
        logger.info("Uploading token image %s (%d bytes)", filename, len(content))
        return await self._request("POST", "/upload", files={"file": (filename, content, mime_type)})

    async def create_token(self, request: CreateTokenRequest) -> dict:
        self._require_key()
        logger.info("Creating token %s (%s)", request.name, request.symbol)
        return await self._request("POST", "/tokens", json=request.model_dump(exclude_none=True))


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _as_int(value: Any) -> int:
    number = _as_float(value)
    return int(number) if number == number and abs(number) != float("inf") else 0


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _parse_created_at(value: Any) -> datetime | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            # Bags returns ISO strings; numeric values are treated as epoch milliseconds.
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError):
        return None


def bags_token_to_token(raw: dict) -> Token:
    """Normalise one Bags API token record (list item or detail) into a Token.

    Fields of the wrong type fall back to their defaults rather than failing the record.
    """
    change = raw.get("priceChange")
    if not isinstance(change, dict):
        change = {"24h": change} if change is not None else {}
    tags = raw.get("tags")
    decimals = _as_int(raw.get("decimals"))
    return Token(
        mint=_as_text(raw.get("mint")) or _as_text(raw.get("id")) or "",
        name=_as_text(raw.get("name")) or "",
        symbol=_as_text(raw.get("symbol")) or "",
        description=_as_text(raw.get("description")),
        image_url=_as_text(raw.get("image")) or _as_text(raw.get("imageUrl")),
        creator_address=_as_text(raw.get("creator")) or _as_text(raw.get("creatorAddress")) or "",
        created_at=_parse_created_at(raw.get("createdAt")),
        supply=_as_text(raw.get("supply")) or "0",
        decimals=decimals if decimals > 0 else 9,
        price=_as_float(raw.get("price")),
        price_change_1h=_as_float(change.get("1h", raw.get("priceChange1h"))),
        price_change_24h=_as_float(change.get("24h", raw.get("priceChange24h"))),
        price_change_7d=_as_float(change.get("7d", raw.get("priceChange7d"))),
        volume_24h=_as_float(raw.get("volume24h")),
        market_cap=_as_float(raw.get("marketCap")),
        liquidity=_as_float(raw.get("liquidity")),
        holder_count=_as_int(raw.get("holders")) or _as_int(raw.get("holderCount")),
        twitter=_as_text(raw.get("twitter")),
        telegram=_as_text(raw.get("telegram")),
        website=_as_text(raw.get("website")),
        tags=[t for t in tags if isinstance(t, str)] if isinstance(tags, list) else [],
    )


def tokens_from_list(payload: Any) -> list[Token]:
    """Extract tokens from a list payload, skipping records without a mint or that fail to normalise."""
    if isinstance(payload, dict):
        items = payload.get("tokens")
    else:
        items = payload
    if not isinstance(items, list):
        return []

    tokens = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            token = bags_token_to_token(item)
        except ValueError as e:
            logger.warning("Skipping malformed Bags token record %r: %s", item.get("mint"), e)
            continue
        if token.mint:
            tokens.append(token)
    return tokens
