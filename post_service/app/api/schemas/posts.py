from __future__ import annotations

from pydantic import BaseModel, Field

from common.models.post import EnrichedComment, EnrichedPost, Media
from common.models.user import AuthorSummary
from common.types.datetime import UtcDateTime


class AuthorResponse(BaseModel):
    user_code: str
    username: str
    name: str
    profile_image: str

    @classmethod
    def from_domain(cls, author: AuthorSummary | None) -> "AuthorResponse | None":
        if author is None:
            return None
        return cls.model_validate(author.model_dump())


class CommentResponse(BaseModel):
    id: str | None
    content: str
    author_id: str
    author: AuthorResponse | None = None
    created_at: UtcDateTime

    @classmethod
    def from_domain(cls, comment: EnrichedComment) -> "CommentResponse":
        return cls(
            id=comment.id,
            content=comment.content,
            author_id=comment.author_id,
            author=AuthorResponse.from_domain(comment.author),
            created_at=comment.created_at,
        )


class PostResponse(BaseModel):
    """게시글 응답 DTO.

    도메인 모델을 그대로 노출하지 않고, 스토리지 키(public_id)는 응답에서 뺀다.
    """

    id: str | None
    caption: str
    media_url: str | None = None
    media_type: str | None = None
    author_id: str
    author: AuthorResponse | None = None
    likes: list[str]
    bookmarked_by: list[str]
    comments: list[CommentResponse]
    created_at: UtcDateTime
    updated_at: UtcDateTime

    @classmethod
    def from_domain(cls, post: EnrichedPost) -> "PostResponse":
        media: Media | None = post.media
        return cls(
            id=post.id,
            caption=post.caption,
            media_url=media.url if media else None,
            media_type=media.type.value if media else None,
            author_id=post.author_id,
            author=AuthorResponse.from_domain(post.author),
            likes=post.likes,
            bookmarked_by=post.bookmarked_by,
            comments=[CommentResponse.from_domain(c) for c in post.comments],
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class PostEnvelope(MessageResponse):
    post: PostResponse


class PostListResponse(BaseModel):
    success: bool = True
    posts: list[PostResponse]


class CommentCreateRequest(BaseModel):
    text: str = Field(default="", description="댓글 본문 (앞뒤 공백 제거 후 비어 있으면 안 됨)")


class CommentEnvelope(MessageResponse):
    comment: CommentResponse


class CommentListResponse(BaseModel):
    success: bool = True
    comments: list[CommentResponse]


class BookmarkResponse(MessageResponse):
    bookmarked: bool
