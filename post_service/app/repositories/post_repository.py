from __future__ import annotations

from pymongo import DESCENDING
from pymongo.database import Database
from pymongo.write_concern import WriteConcern

from common.models.post import Post
from common.mongo.types import parse_object_id

from .documents.post_document import PostDocument
from .interfaces import PostRepositoryInterface


# 쓰기는 저널에 기록된 뒤에만 성공으로 본다.
DEFAULT_WRITE_CONCERN = WriteConcern(w="majority", j=True)

FEED_SORT = [("created_at", DESCENDING), ("_id", DESCENDING)]


class PostRepository(PostRepositoryInterface):
    """posts 컬렉션에 대한 MongoDB 접근 레이어."""

    def __init__(
        self,
        database: Database,
        write_concern: WriteConcern = DEFAULT_WRITE_CONCERN,
    ) -> None:
        self._db = database
        self._col = database.get_collection("posts", write_concern=write_concern)

    @staticmethod
    def _from_document(doc: dict) -> Post:
        return PostDocument.model_validate(doc).to_domain()

    def insert(self, post: Post) -> Post:
        payload = PostDocument.from_domain(post).to_mongo_record()
        result = self._col.insert_one(payload)
        payload["_id"] = result.inserted_id
        return self._from_document(payload)

    def find_by_id(self, post_id: str) -> Post | None:
        object_id = parse_object_id(post_id)
        if object_id is None:
            return None
        doc = self._col.find_one({"_id": object_id})
        if not doc:
            return None
        return self._from_document(doc)

    def list_all(self) -> list[Post]:
        cursor = self._col.find({}, sort=FEED_SORT)
        return [self._from_document(doc) for doc in cursor]

    def list_by_author(self, author_id: str) -> list[Post]:
        cursor = self._col.find({"author_id": author_id}, sort=FEED_SORT)
        return [self._from_document(doc) for doc in cursor]

    def save(self, post: Post) -> bool:
        object_id = parse_object_id(post.id)
        if object_id is None:
            return False
        payload = PostDocument.from_domain(post).to_mongo_record()
        result = self._col.replace_one({"_id": object_id}, payload)
        return result.matched_count > 0

    def delete_by_id(self, post_id: str) -> bool:
        object_id = parse_object_id(post_id)
        if object_id is None:
            return False
        result = self._col.delete_one({"_id": object_id})
        return result.deleted_count > 0
