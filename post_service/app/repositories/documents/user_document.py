from __future__ import annotations

from pydantic import Field

from common.models.user import User
from common.mongo.types import BaseDocument


class UserDocument(BaseDocument):
    """MongoDB users 컬렉션 도큐먼트 모델.

    user-service 가 소유하는 필드 중 표시용 필드와 bookmarked_posts 만 읽는다.
    """

    user_code: str
    username: str = ""
    name: str = ""
    profile_image: str = ""
    bookmarked_posts: list[str] = Field(default_factory=list)

    def to_domain(self) -> User:
        return User(
            user_code=self.user_code,
            username=self.username,
            name=self.name,
            profile_image=self.profile_image,
            bookmarked_posts=set(self.bookmarked_posts),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
