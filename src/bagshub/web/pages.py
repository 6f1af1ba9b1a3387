"""Server-rendered pages. One canonical view per route, data straight from TokenService."""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, Form, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.requests import Request
from starlette.templating import Jinja2Templates

from bagshub.api.deps import AuthServiceDep, CurrentUserDep, DbDep, SettingsDep, TokenServiceDep, get_bags_client
from bagshub.auth.cookies import set_session_cookie
from bagshub.db.repos.bookmark_repo import BookmarkRepo
from bagshub.domain.enums import LeaderboardType, TokenListType
from bagshub.domain.models.token import TokenQuery
from bagshub.exceptions import BagsHubError
from bagshub.infra.bags.client import BagsApiClient, CreateTokenRequest
from bagshub.market import formatting

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.filters.update(
    currency=formatting.format_currency,
    compact_currency=lambda v: formatting.format_currency(v, compact_mode=True),
    number=formatting.format_number,
    percent=formatting.format_percent,
    price=formatting.format_price,
    address=formatting.truncate_address,
    relative=formatting.format_relative_time,
)

LEADERBOARD_TABS = [
    (LeaderboardType.GAINERS, "Top Gainers"),
    (LeaderboardType.LOSERS, "Top Losers"),
    (LeaderboardType.VOLUME, "Volume"),
    (LeaderboardType.HOLDERS, "Holders"),
    (LeaderboardType.NEWEST, "Newest"),
]


def _safe_next(target: str) -> str:
    """Only same-site paths; anything else goes home.

    Browsers read a backslash as a slash and drop tabs and newlines, so targets
    containing either are refused before the host check.
    """
    if not target.startswith("/") or "\\" in target or any(ord(c) < 0x20 for c in target):
        return "/"
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return "/"
    return target


def _render(request: Request, name: str, user, status_code: int = 200, **context) -> HTMLResponse:
    return templates.TemplateResponse(request, name, {"user": user, **context}, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, service: TokenServiceDep, user: CurrentUserDep):
    tokens = await service.get_tokens(TokenQuery(list_type=TokenListType.TRENDING, limit=50))
    return _render(request, "home.html", user, tokens=tokens)


@router.get("/leaderboard", response_class=HTMLResponse)
async def leaderboard(
    request: Request,
    service: TokenServiceDep,
    user: CurrentUserDep,
    type: LeaderboardType = Query(LeaderboardType.GAINERS),
):
    tokens = await service.get_leaderboard(type, limit=50)
    return _render(request, "leaderboard.html", user, tokens=tokens, active=type, tabs=LEADERBOARD_TABS)


@router.get("/token/{mint}", response_class=HTMLResponse)
async def token_detail(request: Request, mint: str, service: TokenServiceDep, user: CurrentUserDep):
    detail = await service.get_token_detail(mint)
    if detail is None:
        return _render(request, "not_found.html", user, status_code=404, mint=mint)
    return _render(request, "token.html", user, detail=detail)


@router.get("/favorites", response_class=HTMLResponse)
async def favorites(request: Request, db: DbDep, service: TokenServiceDep, user: CurrentUserDep):
    if user is None:
        return RedirectResponse("/login?next=/favorites", status_code=303)
    bookmarks = await BookmarkRepo(db).list_for_user(user.id)
    tokens = await service.get_tokens_by_mints([b.token_mint for b in bookmarks])
    rows = [(b, tokens.get(b.token_mint)) for b in bookmarks]
    return _render(request, "favorites.html", user, rows=rows)


@router.get("/login", response_class=HTMLResponse)
async def login_page(request: Request, user: CurrentUserDep, next: str = "/"):
    return _render(request, "login.html", user, next=next, error=None)


@router.post("/login", response_class=HTMLResponse)
async def login_submit(
    request: Request,
    auth: AuthServiceDep,
    settings: SettingsDep,
    username: str = Form(""),
    password: str = Form(""),
    next: str = Form("/"),
):
    try:
        result = await auth.login(username, password)
    except BagsHubError as e:
        return _render(request, "login.html", None, status_code=e.status_code, next=next, error=e.message)
    response = RedirectResponse(_safe_next(next), status_code=303)
    set_session_cookie(
        response,
        result.token,
        max_age=result.claims.expires_at - result.claims.issued_at,
        secure=settings.is_production,
    )
    return response


@router.get("/register", response_class=HTMLResponse)
async def register_page(request: Request, user: CurrentUserDep):
    return _render(request, "register.html", user, error=None)


@router.post("/register", response_class=HTMLResponse)
async def register_submit(
    request: Request,
    auth: AuthServiceDep,
    settings: SettingsDep,
    username: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form(""),
    email: Optional[str] = Form(None),
):
    if password != confirm_password:
        return _render(request, "register.html", None, status_code=400, error="Passwords do not match")
    try:
        result = await auth.register(username, password, email=email or None)
    except BagsHubError as e:
        return _render(request, "register.html", None, status_code=e.status_code, error=e.message)
    response = RedirectResponse("/", status_code=303)
    set_session_cookie(
        response,
        result.token,
        max_age=result.claims.expires_at - result.claims.issued_at,
        secure=settings.is_production,
    )
    return response


@router.get("/launch", response_class=HTMLResponse)
async def launch_page(request: Request, user: CurrentUserDep):
    return _render(request, "launch.html", user, error=None, created=None)


@router.post("/launch", response_class=HTMLResponse)
async def launch_submit(
    request: Request,
    user: CurrentUserDep,
    name: str = Form(""),
    symbol: str = Form(""),
    description: Optional[str] = Form(None),
    twitter: Optional[str] = Form(None),
    telegram: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    client: BagsApiClient = Depends(get_bags_client),
):
    if user is None:
        return RedirectResponse("/login?next=/launch", status_code=303)
    if len(name) < 2 or not 2 <= len(symbol) <= 10:
        return _render(request, "launch.html", user, status_code=400, error="Name needs 2+ characters, symbol 2-10", created=None)
    token_request = CreateTokenRequest(
        name=name,
        symbol=symbol.upper(),
        description=description or None,
        twitter=twitter or None,
        telegram=telegram or None,
        website=website or None,
    )
    try:
        created = await client.create_token(token_request)
    except BagsHubError as e:
        logger.warning("Token launch by %s failed: %s", user.username, e.message)
        return _render(request, "launch.html", user, status_code=e.status_code, error=e.message, created=None)
    return _render(request, "launch.html", user, error=None, created=created)
