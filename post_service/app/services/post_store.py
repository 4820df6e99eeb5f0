from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from fastapi import Depends
from pymongo.database import Database
from pymongo.errors import PyMongoError

from common.models.post import (
    Comment,
    EnrichedComment,
    EnrichedPost,
    Media,
    Post,
)
from common.models.user import AuthorSummary, User
from common.mongo.client import get_database
from common.types.datetime import utc_now

from ..exceptions import Forbidden, NotFound, PersistenceError, ValidationError
from ..media.object_storage import ObjectStorageInterface, get_object_storage
from ..repositories.interfaces import PostRepositoryInterface, UserRepositoryInterface
from ..repositories.post_repository import PostRepository
from ..repositories.user_repository import UserRepository


logger = logging.getLogger(__name__)


@contextmanager
def persistence(action: str) -> Iterator[None]:
    """pymongo 예외를 PersistenceError 로 감싸 호출자에게 올린다."""

    try:
        yield
    except PyMongoError as exc:
        logger.error("%s failed: %s", action, exc)
        raise PersistenceError(f"{action} failed: {exc}") from exc


class PostStore:
    """게시글 영속화 + 조회 시점 작성자 정보 조인.

    - 모든 쓰기는 저장소가 확정(acknowledged)한 뒤에만 반환한다.
    - 삭제 시 원격 미디어 정리는 best-effort 다. 실패해도 도큐먼트는 지운다.
    """

    def __init__(
        self,
        post_repo: PostRepositoryInterface,
        user_repo: UserRepositoryInterface,
        storage: ObjectStorageInterface,
    ) -> None:
        self._post_repo = post_repo
        self._user_repo = user_repo
        self._storage = storage

    # --- posts -------------------------------------------------------------------
    def create(self, author_id: str, caption: str | None, media: Media | None = None) -> Post:
        text = (caption or "").strip()
        if not text and media is None:
            raise ValidationError("Please provide either a caption or media file")

        now = utc_now()
        post = Post(
            caption=text,
            media=media,
            author_id=author_id,
            created_at=now,
            updated_at=now,
        )
        with persistence("insert post"):
            created = self._post_repo.insert(post)

        logger.info(
            "post created (post_id=%s author_id=%s media=%s)",
            created.id,
            author_id,
            media.type.value if media else None,
            extra={"post_id": created.id, "user_code": author_id},
        )
        return created

    def get_by_id(self, post_id: str) -> Post:
        with persistence("find post"):
            post = self._post_repo.find_by_id(post_id)
        if post is None:
            raise NotFound()
        return post

    def save(self, post: Post) -> None:
        with persistence("save post"):
            saved = self._post_repo.save(post)
        if not saved:
            raise NotFound()

    def delete(self, post_id: str, requesting_user_id: str) -> Post:
        post = self.get_by_id(post_id)
        if post.author_id != requesting_user_id:
            raise Forbidden("Unauthorized to delete this post")

        if post.media is not None:
            self._delete_media_quietly(post.id, post.media)

        with persistence("delete post"):
            deleted = self._post_repo.delete_by_id(post_id)
        if not deleted:
            raise NotFound()

        # 유저 쪽 북마크 역참조 정리도 미디어 정리와 마찬가지로 advisory 다.
        try:
            self._user_repo.remove_bookmarked_post(post_id)
        except PyMongoError as exc:
            logger.warning(
                "failed to clear bookmarks of deleted post %s: %s",
                post_id,
                exc,
                extra={"post_id": post_id},
            )

        logger.info(
            "post deleted (post_id=%s author_id=%s)",
            post_id,
            post.author_id,
            extra={"post_id": post_id, "user_code": requesting_user_id},
        )
        return post

    def _delete_media_quietly(self, post_id: str | None, media: Media) -> None:
        reference = media.public_id or media.url
        try:
            self._storage.delete(reference)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "failed to delete media %s of post %s, continuing: %s",
                reference,
                post_id,
                exc,
                extra={"post_id": post_id},
            )

    # --- users (bookmark mirror side) ----------------------------------------------
    def get_user(self, user_code: str) -> User:
        with persistence("find user"):
            user = self._user_repo.find_by_user_code(user_code)
        if user is None:
            raise NotFound("user not found")
        return user

    def save_user_bookmarks(self, user: User) -> None:
        with persistence("save user bookmarks"):
            saved = self._user_repo.save_bookmarks(user)
        if not saved:
            raise NotFound("user not found")

    # --- enriched reads ------------------------------------------------------------
    def enrich(self, post: Post) -> EnrichedPost:
        return self._enrich_posts([post])[0]

    def list_all(self) -> list[EnrichedPost]:
        with persistence("list posts"):
            posts = self._post_repo.list_all()
        return self._enrich_posts(posts)

    def list_by_author(self, author_id: str) -> list[EnrichedPost]:
        with persistence("list posts by author"):
            posts = self._post_repo.list_by_author(author_id)
        return self._enrich_posts(posts)

    def list_comments(self, post_id: str) -> list[EnrichedComment]:
        post = self.get_by_id(post_id)
        authors = self._load_authors(c.author_id for c in post.comments)
        return [self._enrich_comment(c, authors) for c in post.comments]

    def enrich_comment(self, comment: Comment) -> EnrichedComment:
        authors = self._load_authors([comment.author_id])
        return self._enrich_comment(comment, authors)

    def _enrich_posts(self, posts: list[Post]) -> list[EnrichedPost]:
        if not posts:
            return []

        user_codes: list[str] = []
        for post in posts:
            user_codes.append(post.author_id)
            user_codes.extend(c.author_id for c in post.comments)
        authors = self._load_authors(user_codes)

        return [
            EnrichedPost(
                id=post.id,
                caption=post.caption,
                media=post.media,
                author_id=post.author_id,
                author=authors.get(post.author_id),
                likes=sorted(post.likes),
                bookmarked_by=sorted(post.bookmarked_by),
                comments=[self._enrich_comment(c, authors) for c in post.comments],
                created_at=post.created_at,
                updated_at=post.updated_at,
            )
            for post in posts
        ]

    @staticmethod
    def _enrich_comment(
        comment: Comment, authors: dict[str, AuthorSummary]
    ) -> EnrichedComment:
        return EnrichedComment(
            id=comment.id,
            content=comment.content,
            author_id=comment.author_id,
            author=authors.get(comment.author_id),
            created_at=comment.created_at,
        )

    def _load_authors(self, user_codes: Iterable[str]) -> dict[str, AuthorSummary]:
        unique_codes = sorted(set(user_codes))
        if not unique_codes:
            return {}
        with persistence("load authors"):
            users = self._user_repo.find_by_user_codes(unique_codes)
        return {user.user_code: user.to_summary() for user in users}


def get_post_repository(
    db: Database = Depends(get_database),
) -> PostRepositoryInterface:
    """FastAPI DI용 PostRepository 팩토리."""

    return PostRepository(db)


def get_user_repository(
    db: Database = Depends(get_database),
) -> UserRepositoryInterface:
    """FastAPI DI용 UserRepository 팩토리."""

    return UserRepository(db)


def get_post_store(
    post_repo: PostRepositoryInterface = Depends(get_post_repository),
    user_repo: UserRepositoryInterface = Depends(get_user_repository),
    storage: ObjectStorageInterface = Depends(get_object_storage),
) -> PostStore:
    """FastAPI DI용 PostStore 팩토리."""

    return PostStore(post_repo=post_repo, user_repo=user_repo, storage=storage)
