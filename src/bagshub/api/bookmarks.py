from fastapi import APIRouter, Query, status
from sqlalchemy.exc import IntegrityError

from bagshub.api.deps import DbDep, TokenServiceDep, UserDep
from bagshub.api.schemas.bookmarks import BookmarkCreate, BookmarkEnvelope, BookmarkList, BookmarkResponse
from bagshub.db.repos.bookmark_repo import BookmarkRepo
from bagshub.exceptions import DuplicateBookmarkError, InvalidInputError, NotFoundError
from bagshub.market.formatting import is_valid_solana_address

router = APIRouter(prefix="/api/bookmarks", tags=["bookmarks"])


@router.get("", response_model=BookmarkList)
async def list_bookmarks(
    db: DbDep,
    user: UserDep,
    service: TokenServiceDep,
    include_tokens: bool = Query(False, description="Attach live token data to each bookmark"),
) -> BookmarkList:
    repo = BookmarkRepo(db)
    bookmarks = await repo.list_for_user(user.id)
    items = [BookmarkResponse.model_validate(b) for b in bookmarks]
    if include_tokens and items:
        tokens = await service.get_tokens_by_mints([b.token_mint for b in items])
        for item in items:
            item.token = tokens.get(item.token_mint)
    return BookmarkList(bookmarks=items, total=len(items))


@router.post("", response_model=BookmarkEnvelope, status_code=status.HTTP_201_CREATED)
async def add_bookmark(body: BookmarkCreate, db: DbDep, user: UserDep) -> BookmarkEnvelope:
    mint = body.token_mint.strip()
    if not is_valid_solana_address(mint):
        raise InvalidInputError("Invalid token mint address")

    repo = BookmarkRepo(db)
    if await repo.get(user.id, mint) is not None:
        raise DuplicateBookmarkError("Token already bookmarked")
    try:
        bookmark = await repo.create(user.id, mint, notes=body.notes)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateBookmarkError("Token already bookmarked")
    await db.refresh(bookmark)
    return BookmarkEnvelope(bookmark=BookmarkResponse.model_validate(bookmark))


@router.delete("/{mint}")
async def remove_bookmark(mint: str, db: DbDep, user: UserDep) -> dict:
    repo = BookmarkRepo(db)
    deleted = await repo.delete(user.id, mint)
    if not deleted:
        raise NotFoundError("Bookmark not found")
    await db.commit()
    return {"success": True}
