from __future__ import annotations

from pymongo.database import Database
from pymongo.write_concern import WriteConcern

from common.models.user import User
from common.mongo.types import to_sorted_list
from common.types.datetime import utc_now

from .documents.user_document import UserDocument
from .interfaces import UserRepositoryInterface
from .post_repository import DEFAULT_WRITE_CONCERN


USER_PROJECTION = {
    "user_code": 1,
    "username": 1,
    "name": 1,
    "profile_image": 1,
    "bookmarked_posts": 1,
    "created_at": 1,
    "updated_at": 1,
}


class UserRepository(UserRepositoryInterface):
    """users 컬렉션에 대한 MongoDB 접근 레이어 (post-service 용 축소판)."""

    def __init__(
        self,
        database: Database,
        write_concern: WriteConcern = DEFAULT_WRITE_CONCERN,
    ) -> None:
        self._db = database
        self._col = database.get_collection("users", write_concern=write_concern)

    @staticmethod
    def _from_document(doc: dict) -> User:
        return UserDocument.model_validate(doc).to_domain()

    def find_by_user_code(self, user_code: str) -> User | None:
        doc = self._col.find_one({"user_code": user_code}, USER_PROJECTION)
        if not doc:
            return None
        return self._from_document(doc)

    def find_by_user_codes(self, user_codes: list[str]) -> list[User]:
        if not user_codes:
            return []
        cursor = self._col.find(
            {"user_code": {"$in": list(user_codes)}}, USER_PROJECTION
        )
        return [self._from_document(doc) for doc in cursor]

    def save_bookmarks(self, user: User) -> bool:
        user.updated_at = utc_now()
        result = self._col.update_one(
            {"user_code": user.user_code},
            {
                "$set": {
                    "bookmarked_posts": to_sorted_list(user.bookmarked_posts),
                    "updated_at": user.updated_at,
                }
            },
        )
        return result.matched_count > 0

    def remove_bookmarked_post(self, post_id: str) -> int:
        result = self._col.update_many(
            {"bookmarked_posts": post_id},
            {
                "$pull": {"bookmarked_posts": post_id},
                "$set": {"updated_at": utc_now()},
            },
        )
        return result.modified_count
