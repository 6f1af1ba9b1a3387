from types import SimpleNamespace

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from bagshub.api.deps import get_bags_client, get_db, get_rate_limit_tracker, get_settings, get_token_service
from bagshub.api.main import app
from bagshub.config import Settings
from bagshub.db.session import Base
from bagshub.infra.bags.client import BagsApiClient
from bagshub.infra.dexscreener.client import DexScreenerClient
from bagshub.infra.http.rate_limit import RateLimitTracker
from bagshub.infra.http.rate_limited_client import RateLimitedClient
from bagshub.market.service import TokenService
from bagshub.market.sources import BagsTokenSource, DexScreenerTokenSource
import bagshub.db.models  # noqa: F401

BAGS_URL = "https://bags.test/api/v1"
DEX_URL = "https://dex.test"


class FakeUpstream:
    """MockTransport handler routing on (method, path). Unknown routes answer 404."""

    def __init__(self):
        self.routes = {}
        self.calls: list[httpx.Request] = []

    def add(self, path, payload, status=200, method="GET", headers=None):
        self.routes[(method, path)] = (status, payload, headers or {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        status, payload, headers = self.routes.get(
            (request.method, request.url.path), (404, {"error": "Not found"}, {})
        )
        return httpx.Response(status, json=payload, headers=headers)

    def hosts(self) -> list[str]:
        return [r.url.host for r in self.calls]


@pytest.fixture()
def upstream():
    return FakeUpstream()


@pytest.fixture()
def settings():
    return Settings(
        bags_api_url=BAGS_URL,
        bags_api_key="test-key",
        dexscreener_api_url=DEX_URL,
        jwt_secret="integration-secret",
        environment="test",
    )


@pytest.fixture()
async def services(upstream, settings):
    transport = httpx.MockTransport(upstream.handler)
    tracker = RateLimitTracker(reserve=0)
    bags_http = RateLimitedClient(tracker=tracker, transport=transport)
    dex_http = RateLimitedClient(transport=transport)
    bags = BagsApiClient(bags_http, settings.bags_api_url, settings.bags_api_key)
    dex = DexScreenerClient(dex_http, settings.dexscreener_api_url)
    service = TokenService([BagsTokenSource(bags), DexScreenerTokenSource(dex)])
    yield SimpleNamespace(tracker=tracker, bags=bags, dex=dex, token_service=service)
    await bags_http.close()
    await dex_http.close()


@pytest.fixture()
async def client(services, settings):
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_token_service] = lambda: services.token_service
    app.dependency_overrides[get_bags_client] = lambda: services.bags
    app.dependency_overrides[get_rate_limit_tracker] = lambda: services.tracker
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def logged_in(client):
    """Register alice; the client's cookie jar now carries her session."""
    res = await client.post("/api/auth/register", json={"username": "alice", "password": "correct-horse"})
    assert res.status_code == 201
    return res.json()["user"]
