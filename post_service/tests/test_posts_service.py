from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, ServerSelectionTimeoutError

from common.models.post import MediaType
from post_service.app.exceptions import (
    AlreadyLiked,
    NotFound,
    NotLiked,
    PersistenceError,
    UnsupportedMediaType,
    ValidationError,
)
from post_service.app.media.attachment import MediaAttachment
from post_service.app.media.uploader import MediaUploader
from post_service.app.services.post_store import PostStore
from post_service.app.services.posts_service import PostService

from post_fakes import (
    FakeObjectStorage,
    FakePostRepository,
    FakeUserRepository,
    build_user,
)


@dataclass
class ServiceFixture:
    service: PostService
    post_repo: FakePostRepository
    user_repo: FakeUserRepository
    storage: FakeObjectStorage


@pytest.fixture
def executor() -> Iterator[ThreadPoolExecutor]:
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def fixture(executor: ThreadPoolExecutor) -> ServiceFixture:
    post_repo = FakePostRepository()
    user_repo = FakeUserRepository(
        [build_user("google:alice"), build_user("google:bob")]
    )
    storage = FakeObjectStorage()
    store = PostStore(post_repo=post_repo, user_repo=user_repo, storage=storage)
    service = PostService(
        store=store,
        uploader=MediaUploader(storage),
        executor=executor,
    )
    return ServiceFixture(
        service=service, post_repo=post_repo, user_repo=user_repo, storage=storage
    )


def _attachment(tmp_path: Path, content_type: str, name: str) -> MediaAttachment:
    path = tmp_path / name
    path.write_bytes(b"\x01" * 32)
    return MediaAttachment(content_type=content_type, size=32, path=str(path), filename=name)


def test_create_with_caption_only(fixture: ServiceFixture) -> None:
    post = fixture.service.create_post("google:alice", "hello")

    assert post.caption == "hello"
    assert post.media is None
    assert post.likes == [] and post.bookmarked_by == [] and post.comments == []
    assert post.author is not None and post.author.user_code == "google:alice"
    assert fixture.storage.upload_calls == []


def test_create_with_video_only(fixture: ServiceFixture, tmp_path: Path) -> None:
    post = fixture.service.create_post(
        "google:alice", None, _attachment(tmp_path, "video/mp4", "clip.mp4")
    )

    assert post.caption == ""
    assert post.media is not None
    assert post.media.type == MediaType.VIDEO
    assert post.media.url.startswith("https://storage.example.com/")
    assert len(fixture.post_repo.posts) == 1


def test_create_with_pdf_uploads_nothing_and_stores_nothing(
    fixture: ServiceFixture, tmp_path: Path
) -> None:
    with pytest.raises(UnsupportedMediaType):
        fixture.service.create_post(
            "google:alice", "look", _attachment(tmp_path, "application/pdf", "doc.pdf")
        )

    assert fixture.storage.upload_calls == []
    assert fixture.post_repo.posts == {}
    assert not (tmp_path / "doc.pdf").exists()


def test_create_without_caption_or_media_is_rejected_before_upload(
    fixture: ServiceFixture,
) -> None:
    with pytest.raises(ValidationError):
        fixture.service.create_post("google:alice", "  ", None)

    assert fixture.post_repo.posts == {}


def test_insert_failure_discards_uploaded_media(
    fixture: ServiceFixture, tmp_path: Path
) -> None:
    fixture.post_repo.fail_with = ServerSelectionTimeoutError("no primary")

    with pytest.raises(PersistenceError):
        fixture.service.create_post(
            "google:alice", "pic", _attachment(tmp_path, "image/png", "pic.png")
        )

    assert fixture.storage.deleted == ["posts/object-1"]
    assert fixture.storage.objects == {}


def test_like_twice_returns_already_liked_and_keeps_one_like(
    fixture: ServiceFixture,
) -> None:
    post = fixture.service.create_post("google:alice", "hello")

    fixture.service.like_post(post.id or "", "google:bob")
    with pytest.raises(AlreadyLiked):
        fixture.service.like_post(post.id or "", "google:bob")

    assert fixture.post_repo.posts[post.id or ""].likes == {"google:bob"}


def test_dislike_requires_prior_like(fixture: ServiceFixture) -> None:
    post = fixture.service.create_post("google:alice", "hello")

    with pytest.raises(NotLiked):
        fixture.service.dislike_post(post.id or "", "google:bob")

    fixture.service.like_post(post.id or "", "google:bob")
    fixture.service.dislike_post(post.id or "", "google:bob")

    assert fixture.post_repo.posts[post.id or ""].likes == set()


def test_engagement_on_unknown_post_is_not_found(fixture: ServiceFixture) -> None:
    missing = str(ObjectId())

    with pytest.raises(NotFound):
        fixture.service.like_post(missing, "google:bob")
    with pytest.raises(NotFound):
        fixture.service.add_comment(missing, "google:bob", "hi")
    with pytest.raises(NotFound):
        fixture.service.toggle_bookmark(missing, "google:bob")


def test_add_comment_returns_enriched_comment_and_persists(
    fixture: ServiceFixture,
) -> None:
    post = fixture.service.create_post("google:alice", "hello")

    comment = fixture.service.add_comment(post.id or "", "google:bob", " nice ")

    assert comment.content == "nice"
    assert comment.author is not None and comment.author.username == "bob"
    listed = fixture.service.list_comments(post.id or "")
    assert [c.id for c in listed] == [comment.id]


def test_toggle_bookmark_round_trip_mirrors_both_sides(
    fixture: ServiceFixture,
) -> None:
    post = fixture.service.create_post("google:alice", "hello")
    post_id = post.id or ""

    first = fixture.service.toggle_bookmark(post_id, "google:bob")

    assert first.bookmarked is True
    assert first.message == "Post bookmarked successfully"
    assert fixture.post_repo.posts[post_id].bookmarked_by == {"google:bob"}
    assert fixture.user_repo.users["google:bob"].bookmarked_posts == {post_id}

    second = fixture.service.toggle_bookmark(post_id, "google:bob")

    assert second.bookmarked is False
    assert second.message == "Post removed from bookmarks"
    assert fixture.post_repo.posts[post_id].bookmarked_by == set()
    assert fixture.user_repo.users["google:bob"].bookmarked_posts == set()


def test_toggle_bookmark_partial_failure_raises_without_rollback(
    fixture: ServiceFixture,
) -> None:
    post = fixture.service.create_post("google:alice", "hello")
    post_id = post.id or ""
    fixture.user_repo.fail_save_with = AutoReconnect("connection reset")

    with pytest.raises(PersistenceError):
        fixture.service.toggle_bookmark(post_id, "google:bob")

    # 게시글 쪽 쓰기는 이미 반영된 상태로 남는다.
    assert fixture.post_repo.posts[post_id].bookmarked_by == {"google:bob"}
    assert fixture.user_repo.users["google:bob"].bookmarked_posts == set()


def test_toggle_bookmark_for_unknown_user_is_not_found(
    fixture: ServiceFixture,
) -> None:
    post = fixture.service.create_post("google:alice", "hello")

    with pytest.raises(NotFound):
        fixture.service.toggle_bookmark(post.id or "", "google:nobody")

    assert fixture.post_repo.save_calls == []


def test_deleted_post_disappears_from_listings(fixture: ServiceFixture) -> None:
    kept = fixture.service.create_post("google:alice", "keep")
    dropped = fixture.service.create_post("google:alice", "drop")

    fixture.service.delete_post(dropped.id or "", "google:alice")

    assert [p.id for p in fixture.service.list_all_posts()] == [kept.id]
    assert [p.id for p in fixture.service.list_user_posts("google:alice")] == [kept.id]
