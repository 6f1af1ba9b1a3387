from starlette.responses import Response

COOKIE_NAME = "bagshub_token"


def set_session_cookie(response: Response, token: str, max_age: int, secure: bool) -> None:
    """httpOnly, SameSite=Lax, whole-app path; lifetime matches the token expiry."""
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=secure,
    )


def clear_session_cookie(response: Response, secure: bool) -> None:
    response.delete_cookie(COOKIE_NAME, path="/", httponly=True, samesite="lax", secure=secure)
