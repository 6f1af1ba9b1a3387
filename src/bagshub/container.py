from dependency_injector import containers, providers

from bagshub.config import Settings
from bagshub.db.session import build_engine, build_session_factory
from bagshub.infra.bags.client import BagsApiClient
from bagshub.infra.dexscreener.client import DexScreenerClient
from bagshub.infra.http.rate_limit import RateLimitTracker
from bagshub.infra.http.rate_limited_client import RateLimitedClient
from bagshub.market.service import TokenService
from bagshub.market.sources import BagsTokenSource, DexScreenerTokenSource


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["bagshub.api.deps"])

    settings = providers.Singleton(Settings)

    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    # One tracker per process, shared by every Bags call
    rate_limit_tracker = providers.Singleton(
        RateLimitTracker,
        reserve=settings.provided.rate_limit_reserve,
    )

    bags_http = providers.Singleton(
        RateLimitedClient,
        timeout=settings.provided.http_timeout,
        tracker=rate_limit_tracker,
    )

    dexscreener_http = providers.Singleton(
        RateLimitedClient,
        timeout=settings.provided.http_timeout,
    )

    bags_client = providers.Singleton(
        BagsApiClient,
        http_client=bags_http,
        base_url=settings.provided.bags_api_url,
        api_key=settings.provided.bags_api_key,
    )

    dexscreener_client = providers.Singleton(
        DexScreenerClient,
        http_client=dexscreener_http,
        base_url=settings.provided.dexscreener_api_url,
    )

    token_service = providers.Singleton(
        TokenService,
        sources=providers.List(
            providers.Factory(BagsTokenSource, client=bags_client),
            providers.Factory(
                DexScreenerTokenSource,
                client=dexscreener_client,
                bags_only=settings.provided.bags_only_mints,
            ),
        ),
    )
