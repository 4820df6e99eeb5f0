from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass

from fastapi import Depends, Request

from common.models.post import EnrichedComment, EnrichedPost

from ..exceptions import PersistenceError, PostServiceError, ValidationError
from ..media.attachment import MediaAttachment
from ..media.uploader import MediaUploader, get_media_uploader
from .engagement import EngagementManager
from .post_store import PostStore, get_post_store


logger = logging.getLogger(__name__)


BOOKMARK_WRITE_WORKERS = 8


def create_bookmark_executor() -> ThreadPoolExecutor:
    """북마크의 post/user 이중 쓰기를 동시에 내보내기 위한 풀. 앱 lifespan 이 소유한다."""

    return ThreadPoolExecutor(
        max_workers=BOOKMARK_WRITE_WORKERS, thread_name_prefix="bookmark-write"
    )


def get_bookmark_executor(request: Request) -> Executor:
    executor = getattr(request.app.state, "bookmark_executor", None)
    if executor is None:
        raise RuntimeError("bookmark executor is not running (app lifespan not started)")
    return executor


@dataclass(frozen=True, slots=True)
class BookmarkOutcome:
    bookmarked: bool

    @property
    def message(self) -> str:
        if self.bookmarked:
            return "Post bookmarked successfully"
        return "Post removed from bookmarks"


class PostService:
    """게시글 유스케이스 오케스트레이션.

    - 생성: MediaUploader → PostStore. 도큐먼트 저장이 실패하면 올린 미디어를 지운다.
    - 변경: PostStore 로드 → EngagementManager 전이 → PostStore 저장.
    - 요청 유저 ID 는 항상 인자로 받는다.
    """

    def __init__(
        self,
        store: PostStore,
        uploader: MediaUploader,
        executor: Executor,
        engagement: EngagementManager | None = None,
    ) -> None:
        self._store = store
        self._uploader = uploader
        self._engagement = engagement or EngagementManager()
        self._executor = executor

    def create_post(
        self,
        author_id: str,
        caption: str | None,
        attachment: MediaAttachment | None = None,
    ) -> EnrichedPost:
        if attachment is None and not (caption or "").strip():
            raise ValidationError("Please provide either a caption or media file")

        # upload() 는 어떤 경우에도 attachment 를 release 한다.
        media = self._uploader.upload(attachment) if attachment is not None else None

        try:
            post = self._store.create(author_id, caption, media)
        except Exception:
            if media is not None and media.public_id:
                logger.warning(
                    "post insert failed after upload, discarding media %s",
                    media.public_id,
                )
                self._uploader.discard(media.public_id)
            raise

        return self._store.enrich(post)

    def list_all_posts(self) -> list[EnrichedPost]:
        return self._store.list_all()

    def list_user_posts(self, author_id: str) -> list[EnrichedPost]:
        return self._store.list_by_author(author_id)

    def like_post(self, post_id: str, user_id: str) -> None:
        post = self._store.get_by_id(post_id)
        self._engagement.like(post, user_id)
        self._store.save(post)

    def dislike_post(self, post_id: str, user_id: str) -> None:
        post = self._store.get_by_id(post_id)
        self._engagement.dislike(post, user_id)
        self._store.save(post)

    def add_comment(
        self, post_id: str, author_id: str, text: str | None
    ) -> EnrichedComment:
        post = self._store.get_by_id(post_id)
        comment = self._engagement.add_comment(post, author_id, text)
        self._store.save(post)
        return self._store.enrich_comment(comment)

    def list_comments(self, post_id: str) -> list[EnrichedComment]:
        return self._store.list_comments(post_id)

    def delete_post(self, post_id: str, requesting_user_id: str) -> None:
        self._store.delete(post_id, requesting_user_id)

    def toggle_bookmark(self, post_id: str, user_id: str) -> BookmarkOutcome:
        """post.bookmarked_by 와 user.bookmarked_posts 를 함께 뒤집는다.

        두 쓰기는 동시에 내보내고 둘 다 끝날 때까지 기다린다. 하나라도 실패하면
        PersistenceError 를 올리며, 이미 반영된 쪽을 되돌리지는 않는다.
        """

        post = self._store.get_by_id(post_id)
        user = self._store.get_user(user_id)
        bookmarked = self._engagement.toggle_bookmark(post, user)

        futures = [
            self._executor.submit(self._store.save, post),
            self._executor.submit(self._store.save_user_bookmarks, user),
        ]
        errors: list[BaseException] = []
        for future in futures:
            exc = future.exception()
            if exc is not None:
                errors.append(exc)

        if errors:
            logger.error(
                "bookmark dual write failed (post_id=%s user_code=%s bookmarked=%s): %s",
                post_id,
                user_id,
                bookmarked,
                "; ".join(str(e) for e in errors),
                extra={"post_id": post_id, "user_code": user_id},
            )
            first = errors[0]
            if isinstance(first, PostServiceError):
                raise first
            raise PersistenceError(f"bookmark update failed: {first}") from first

        return BookmarkOutcome(bookmarked=bookmarked)


def get_posts_service(
    store: PostStore = Depends(get_post_store),
    uploader: MediaUploader = Depends(get_media_uploader),
    executor: Executor = Depends(get_bookmark_executor),
) -> PostService:
    """FastAPI DI용 PostService 팩토리."""

    return PostService(store=store, uploader=uploader, executor=executor)
