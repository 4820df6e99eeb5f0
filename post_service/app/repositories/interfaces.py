from __future__ import annotations

from typing import Protocol

from common.models.post import Post
from common.models.user import User


class PostRepositoryInterface(Protocol):
    """PostRepository가 따라야 할 최소한의 계약.

    Service 레이어는 이 인터페이스에만 의존하고, 구체 구현(Mongo 등)은 몰라도 된다.
    목록 조회는 모두 created_at 내림차순(최신순)이다.
    """

    def insert(self, post: Post) -> Post:  # pragma: no cover - Protocol
        ...

    def find_by_id(self, post_id: str) -> Post | None:  # pragma: no cover - Protocol
        ...

    def list_all(self) -> list[Post]:  # pragma: no cover - Protocol
        ...

    def list_by_author(
        self, author_id: str
    ) -> list[Post]:  # pragma: no cover - Protocol
        ...

    def save(self, post: Post) -> bool:  # pragma: no cover - Protocol
        """도큐먼트 전체를 덮어쓴다. 대상이 없으면 False 를 반환한다."""
        ...

    def delete_by_id(self, post_id: str) -> bool:  # pragma: no cover - Protocol
        ...


class UserRepositoryInterface(Protocol):
    """users 컬렉션 중 post-service 가 필요로 하는 부분만 노출한다."""

    def find_by_user_code(
        self, user_code: str
    ) -> User | None:  # pragma: no cover - Protocol
        ...

    def find_by_user_codes(
        self, user_codes: list[str]
    ) -> list[User]:  # pragma: no cover - Protocol
        ...

    def save_bookmarks(self, user: User) -> bool:  # pragma: no cover - Protocol
        """user.bookmarked_posts 를 그대로 저장한다. 대상이 없으면 False."""
        ...

    def remove_bookmarked_post(
        self, post_id: str
    ) -> int:  # pragma: no cover - Protocol
        """모든 유저의 bookmarked_posts 에서 post_id 를 제거하고 변경된 유저 수를 반환한다."""
        ...
