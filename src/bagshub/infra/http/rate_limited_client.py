import httpx

from bagshub.infra.http.rate_limit import RateLimitTracker


class RateLimitedClient:
    """Async HTTP client guarded by upstream rate-limit headers.

    Before each request the tracker may refuse the call; after each response the
    tracker is refreshed from the response headers. Without a tracker the client
    is a plain timeout-bound wrapper.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 15.0,
        headers: dict[str, str] | None = None,
        tracker: RateLimitTracker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._tracker = tracker
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @property
    def tracker(self) -> RateLimitTracker | None:
        return self._tracker

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._tracker is not None:
            self._tracker.check()
        response = await self._client.request(method, url, **kwargs)
        if self._tracker is not None:
            self._tracker.update(response.headers)
        return response

    async def get(self, url: str, params: dict | None = None) -> httpx.Response:
        return await self.request("GET", url, params=params)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RateLimitedClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
