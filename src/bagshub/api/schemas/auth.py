import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    username: str = ""
    password: str = ""
    email: Optional[str] = None


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthEnvelope(BaseModel):
    success: bool = True
    user: UserResponse
    expires_at: Optional[int] = None
