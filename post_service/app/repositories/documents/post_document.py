from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from common.models.post import Comment, Media, Post
from common.mongo.types import (
    BaseDocument,
    MongoDateTime,
    PyObjectId,
    from_object_id,
    to_object_id,
    to_sorted_list,
)


class CommentDocument(BaseModel):
    """posts.comments 배열 원소. 댓글마다 자체 _id 를 가진다."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    id: PyObjectId = Field(alias="_id")
    content: str
    author_id: str
    created_at: MongoDateTime

    @classmethod
    def from_domain(cls, comment: Comment) -> "CommentDocument":
        if comment.id is None:
            raise ValueError("comment id must be assigned before persisting")
        return cls.model_validate(
            {
                "_id": to_object_id(comment.id),
                "content": comment.content,
                "author_id": comment.author_id,
                "created_at": comment.created_at,
            }
        )

    def to_domain(self) -> Comment:
        return Comment(
            id=from_object_id(self.id),
            content=self.content,
            author_id=self.author_id,
            created_at=self.created_at,
        )


class PostDocument(BaseDocument):
    """MongoDB posts 컬렉션 도큐먼트 모델.

    likes / bookmarked_by 는 정렬된 배열로 저장하고, 도메인으로 읽을 때 set 으로 되돌린다.
    """

    caption: str = ""
    # media 가 없으면 필드가 저장되지 않는다. (media 없음 ⇔ type 없음)
    media: Media | None = None
    author_id: str
    likes: list[str] = Field(default_factory=list)
    bookmarked_by: list[str] = Field(default_factory=list)
    comments: list[CommentDocument] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, post: Post) -> "PostDocument":
        data: dict[str, Any] = {
            "caption": post.caption,
            "media": post.media,
            "author_id": post.author_id,
            "likes": to_sorted_list(post.likes),
            "bookmarked_by": to_sorted_list(post.bookmarked_by),
            "comments": [CommentDocument.from_domain(c) for c in post.comments],
            "created_at": post.created_at,
            "updated_at": post.updated_at,
        }
        if post.id is not None:
            data["_id"] = to_object_id(post.id)
        return cls.model_validate(data)

    def to_domain(self) -> Post:
        return Post(
            id=from_object_id(self.id),
            caption=self.caption,
            media=self.media,
            author_id=self.author_id,
            likes=set(self.likes),
            bookmarked_by=set(self.bookmarked_by),
            comments=[c.to_domain() for c in self.comments],
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
