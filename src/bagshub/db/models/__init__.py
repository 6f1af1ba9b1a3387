from bagshub.db.models.bookmark import Bookmark
from bagshub.db.models.user import User

__all__ = [
    "Bookmark",
    "User",
]
