"""Async client for the BagsHub JSON API."""

import logging
from typing import Any, Optional

import httpx

from bagshub.domain.enums import LeaderboardType, TokenListType
from bagshub.domain.models.token import Token, TokenDetail

logger = logging.getLogger(__name__)


class ApiRequestError(Exception):
    """Raised when the API answers with an error envelope or a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class BagsHubClient:
    def __init__(self, base_url: str = "http://localhost:8000", token: Optional[str] = None,
                 timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        headers = {"Authorization": f"Bearer {token}"} if token else None
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, headers=headers, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        resp = await self._client.request(method, url, **kwargs)
        try:
            body = resp.json()
        except ValueError:
            body = None
        if resp.status_code >= 400 or (isinstance(body, dict) and body.get("success") is False):
            message = body.get("error") if isinstance(body, dict) else None
            raise ApiRequestError(resp.status_code, message or resp.reason_phrase or "Request failed")
        return body

    # -- tokens --

    async def get_tokens(self, list_type: TokenListType = TokenListType.TRENDING, limit: int = 20,
                         search: Optional[str] = None) -> list[Token]:
        params: dict[str, Any] = {"type": list_type.value, "limit": limit}
        if search:
            params["search"] = search
        body = await self._request("GET", "/api/tokens", params=params)
        return [Token.model_validate(t) for t in body["data"]["tokens"]]

    async def get_token(self, mint: str) -> TokenDetail:
        body = await self._request("GET", f"/api/tokens/{mint}")
        return TokenDetail.model_validate(body["data"])

    async def get_leaderboard(self, kind: LeaderboardType = LeaderboardType.GAINERS, limit: int = 20) -> list[Token]:
        body = await self._request("GET", "/api/bags/leaderboard", params={"type": kind.value, "limit": limit})
        return [Token.model_validate(t) for t in body["tokens"]]

    # -- bookmarks --

    async def list_bookmarks(self) -> list[dict]:
        body = await self._request("GET", "/api/bookmarks")
        return body["bookmarks"]

    async def add_bookmark(self, token_mint: str, notes: Optional[str] = None) -> dict:
        body = await self._request("POST", "/api/bookmarks", json={"token_mint": token_mint, "notes": notes})
        return body["bookmark"]

    async def remove_bookmark(self, token_mint: str) -> None:
        await self._request("DELETE", f"/api/bookmarks/{token_mint}")
