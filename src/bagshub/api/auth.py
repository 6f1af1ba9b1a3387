from fastapi import APIRouter, status
from starlette.responses import Response

from bagshub.api.deps import AuthServiceDep, SettingsDep, UserDep
from bagshub.api.schemas.auth import AuthEnvelope, LoginRequest, RegisterRequest, UserResponse
from bagshub.auth.cookies import clear_session_cookie, set_session_cookie
from bagshub.auth.service import AuthResult
from bagshub.config import Settings
from bagshub.exceptions import InvalidInputError

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _respond(result: AuthResult, response: Response, settings: Settings) -> AuthEnvelope:
    max_age = result.claims.expires_at - result.claims.issued_at
    set_session_cookie(response, result.token, max_age=max_age, secure=settings.is_production)
    return AuthEnvelope(user=UserResponse.model_validate(result.user), expires_at=result.claims.expires_at)


@router.post("/register", response_model=AuthEnvelope, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, response: Response, auth: AuthServiceDep, settings: SettingsDep) -> AuthEnvelope:
    result = await auth.register(body.username, body.password, email=body.email or None)
    return _respond(result, response, settings)


@router.post("/login", response_model=AuthEnvelope)
async def login(body: LoginRequest, response: Response, auth: AuthServiceDep, settings: SettingsDep) -> AuthEnvelope:
    if not body.username or not body.password:
        raise InvalidInputError("Username and password are required")
    result = await auth.login(body.username, body.password)
    return _respond(result, response, settings)


@router.post("/logout")
async def logout(response: Response, settings: SettingsDep) -> dict:
    clear_session_cookie(response, secure=settings.is_production)
    return {"success": True}


@router.get("/me", response_model=AuthEnvelope)
async def me(user: UserDep) -> AuthEnvelope:
    return AuthEnvelope(user=UserResponse.model_validate(user))
