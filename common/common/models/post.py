from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from common.models.user import AuthorSummary
from common.types.objectid import IdSet, ObjectIdStr


class MediaType(str, Enum):
    """게시글 첨부 미디어 종류"""

    IMAGE = "image"
    VIDEO = "video"

    @classmethod
    def from_resolved(cls, value: str | None) -> "MediaType | None":
        """스토리지가 판별한 리소스 종류(image/video/raw 등)를 MediaType 으로 변환한다.

        image/video 가 아니면 None 을 반환한다.
        """

        if not value:
            return None
        normalized = value.strip().lower()
        for item in cls:
            if item.value == normalized:
                return item
        return None


class Media(BaseModel):
    """게시글 첨부 미디어. 게시글당 최대 1개."""

    url: str
    type: MediaType
    # 원격 삭제에 사용하는 스토리지 키 (예: posts/ab12.jpg)
    public_id: str | None = None


class Comment(BaseModel):
    """게시글 댓글. 부모 게시글 도큐먼트 안에 임베드되어 함께 생성/삭제된다."""

    id: ObjectIdStr | None = None
    content: str
    author_id: str
    created_at: datetime


class Post(BaseModel):
    """게시글 도메인 모델.

    - likes / bookmarked_by 는 user_code 의 set 이다. 중복은 구조적으로 불가능하다.
    - comments 는 append-only 이며 삽입 순서가 곧 표시 순서다.
    """

    id: ObjectIdStr | None = None
    caption: str = ""
    media: Media | None = None
    author_id: str
    likes: IdSet = Field(default_factory=set)
    bookmarked_by: IdSet = Field(default_factory=set)
    comments: list[Comment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class EnrichedComment(BaseModel):
    """작성자 정보가 채워진 댓글 (조회 시점 조인 결과)"""

    id: str | None
    content: str
    author_id: str
    author: AuthorSummary | None = None
    created_at: datetime


class EnrichedPost(BaseModel):
    """작성자/댓글 작성자 정보가 채워진 게시글 (조회 시점 조인 결과)"""

    id: str | None
    caption: str
    media: Media | None = None
    author_id: str
    author: AuthorSummary | None = None
    likes: list[str] = Field(default_factory=list)
    bookmarked_by: list[str] = Field(default_factory=list)
    comments: list[EnrichedComment] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
