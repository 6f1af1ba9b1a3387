from datetime import timedelta
from typing import Annotated, AsyncGenerator, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bagshub.auth.cookies import COOKIE_NAME
from bagshub.auth.service import AuthService
from bagshub.config import Settings
from bagshub.container import Container
from bagshub.db.models.user import User
from bagshub.exceptions import AuthenticationError
from bagshub.infra.bags.client import BagsApiClient
from bagshub.infra.http.rate_limit import RateLimitTracker
from bagshub.market.service import TokenService


@inject
async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(Provide[Container.session_factory]),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@inject
def get_settings(settings: Settings = Depends(Provide[Container.settings])) -> Settings:
    return settings


@inject
def get_token_service(service: TokenService = Depends(Provide[Container.token_service])) -> TokenService:
    return service


@inject
def get_bags_client(client: BagsApiClient = Depends(Provide[Container.bags_client])) -> BagsApiClient:
    return client


@inject
def get_rate_limit_tracker(
    tracker: RateLimitTracker = Depends(Provide[Container.rate_limit_tracker]),
) -> RateLimitTracker:
    return tracker


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(db, settings.jwt_secret, timedelta(days=settings.jwt_expires_days))


def _session_token(request: Request) -> str | None:
    """Session cookie first, then an Authorization: Bearer header."""
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


async def get_current_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    return await auth.resolve(_session_token(request))


async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise AuthenticationError("Authentication required")
    return user


DbDep = Annotated[AsyncSession, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CurrentUserDep = Annotated[Optional[User], Depends(get_current_user)]
UserDep = Annotated[User, Depends(require_user)]
