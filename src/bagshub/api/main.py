import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from bagshub.api.auth import router as auth_router
from bagshub.api.bags import router as bags_router
from bagshub.api.bookmarks import router as bookmarks_router
from bagshub.api.tokens import router as tokens_router
from bagshub.container import Container
from bagshub.exceptions import BagsHubError, RateLimitExceededError
from bagshub.web.pages import router as pages_router

logger = logging.getLogger("bagshub.api")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    settings = container.settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("BagsHub %s starting (%s)", VERSION, settings.environment)
    yield
    await container.bags_http().close()
    await container.dexscreener_http().close()
    engine = container.engine()
    await engine.dispose()


app = FastAPI(title="BagsHub", version=VERSION, lifespan=lifespan)


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message}, headers=headers)


@app.exception_handler(BagsHubError)
async def domain_exception_handler(request: Request, exc: BagsHubError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    return _error(exc.status_code, exc.message or "Request failed", headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error(400, message)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return _error(500, "Internal server error")


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tokens_router)
app.include_router(bags_router)
app.include_router(auth_router)
app.include_router(bookmarks_router)
app.include_router(pages_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": VERSION}
