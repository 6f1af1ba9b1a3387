import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from bagshub.domain.models.token import Token


class BookmarkCreate(BaseModel):
    token_mint: str
    notes: Optional[str] = Field(None, max_length=2000)


class BookmarkResponse(BaseModel):
    id: uuid.UUID
    token_mint: str
    notes: Optional[str] = None
    created_at: datetime
    token: Optional[Token] = None

    model_config = {"from_attributes": True}


class BookmarkList(BaseModel):
    bookmarks: list[BookmarkResponse]
    total: int


class BookmarkEnvelope(BaseModel):
    success: bool = True
    bookmark: BookmarkResponse
