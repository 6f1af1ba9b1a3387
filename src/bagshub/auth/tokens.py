"""Signed session tokens (HS256 JWT)."""

import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class SessionClaims(BaseModel):
    user_id: uuid.UUID
    username: str
    issued_at: int
    expires_at: int


def issue_token(
    user_id: uuid.UUID,
    username: str,
    secret: str,
    expires_in: timedelta = timedelta(days=7),
    now: datetime | None = None,
) -> tuple[str, SessionClaims]:
    now = now or datetime.now(timezone.utc)
    iat = int(now.timestamp())
    exp = int((now + expires_in).timestamp())
    payload = {"sub": str(user_id), "username": username, "iat": iat, "exp": exp}
    token = jwt.encode(payload, secret, algorithm=ALGORITHM)
    return token, SessionClaims(user_id=user_id, username=username, issued_at=iat, expires_at=exp)


def verify_token(token: str, secret: str) -> SessionClaims | None:
    """Decode and validate a token. Expired, tampered or malformed tokens give None."""
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM], options={"require": ["sub", "exp", "iat"]})
        return SessionClaims(
            user_id=uuid.UUID(payload["sub"]),
            username=payload.get("username", ""),
            issued_at=payload["iat"],
            expires_at=payload["exp"],
        )
    except jwt.PyJWTError as e:
        logger.debug("Rejected session token: %s", e)
        return None
    except (ValueError, KeyError):
        return None
