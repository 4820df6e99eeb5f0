from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from common.types.objectid import IdSet


class User(BaseModel):
    """유저 도메인 모델.

    - Mongo users 컬렉션과 1:1로 매핑되는 공용 모델이다.
    - 계정 관리는 user-service 의 책임이며, post-service 는 bookmarked_posts 만 변경한다.
    """

    user_code: str = Field(alias="user_code")
    username: str = Field(default="", alias="username")
    name: str = Field(default="", alias="name")
    profile_image: str = Field(default="", alias="profile_image")
    bookmarked_posts: IdSet = Field(default_factory=set, alias="bookmarked_posts")
    created_at: datetime = Field(alias="created_at")
    updated_at: datetime = Field(alias="updated_at")

    def to_summary(self) -> "AuthorSummary":
        return AuthorSummary(
            user_code=self.user_code,
            username=self.username,
            name=self.name,
            profile_image=self.profile_image,
        )


class AuthorSummary(BaseModel):
    """게시글/댓글 응답에 붙는 작성자 표시용 필드 묶음."""

    user_code: str
    username: str
    name: str
    profile_image: str
