from bagshub.db.repos.bookmark_repo import BookmarkRepo
from bagshub.db.repos.user_repo import UserRepo

__all__ = ["BookmarkRepo", "UserRepo"]
