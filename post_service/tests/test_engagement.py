from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from common.models.post import Post
from post_service.app.exceptions import AlreadyLiked, NotLiked, ValidationError
from post_service.app.services.engagement import EngagementManager

from post_fakes import build_user


def _build_post(post_id: str = "65f000000000000000000001") -> Post:
    created = datetime.now(timezone.utc) - timedelta(minutes=5)
    return Post(
        id=post_id,
        caption="hello",
        author_id="google:author",
        created_at=created,
        updated_at=created,
    )


@pytest.fixture
def engagement() -> EngagementManager:
    return EngagementManager()


def test_like_twice_rejects_second_call_and_keeps_single_entry(
    engagement: EngagementManager,
) -> None:
    post = _build_post()

    engagement.like(post, "google:alice")
    with pytest.raises(AlreadyLiked):
        engagement.like(post, "google:alice")

    assert post.likes == {"google:alice"}


def test_like_refreshes_updated_at(engagement: EngagementManager) -> None:
    post = _build_post()
    before = post.updated_at

    engagement.like(post, "google:alice")

    assert post.updated_at > before


def test_dislike_without_like_raises_and_leaves_likes_unchanged(
    engagement: EngagementManager,
) -> None:
    post = _build_post()
    post.likes.add("google:bob")

    with pytest.raises(NotLiked):
        engagement.dislike(post, "google:alice")

    assert post.likes == {"google:bob"}


def test_dislike_removes_only_that_user(engagement: EngagementManager) -> None:
    post = _build_post()
    engagement.like(post, "google:alice")
    engagement.like(post, "google:bob")

    engagement.dislike(post, "google:alice")

    assert post.likes == {"google:bob"}


def test_toggle_bookmark_round_trip_keeps_both_sides_mirrored(
    engagement: EngagementManager,
) -> None:
    post = _build_post()
    user = build_user("google:alice")

    first = engagement.toggle_bookmark(post, user)

    assert first is True
    assert post.bookmarked_by == {"google:alice"}
    assert user.bookmarked_posts == {post.id}

    second = engagement.toggle_bookmark(post, user)

    assert second is False
    assert post.bookmarked_by == set()
    assert user.bookmarked_posts == set()


def test_toggle_bookmark_repairs_one_sided_state(engagement: EngagementManager) -> None:
    post = _build_post()
    user = build_user("google:alice")
    # 유저 쪽에만 남아 있는 어긋난 상태: 게시글 기준으로 "북마크 안 됨" 으로 읽는다.
    user.bookmarked_posts.add(post.id or "")

    bookmarked = engagement.toggle_bookmark(post, user)

    assert bookmarked is True
    assert post.bookmarked_by == {"google:alice"}
    assert user.bookmarked_posts == {post.id}


def test_toggle_bookmark_requires_persisted_post(engagement: EngagementManager) -> None:
    post = _build_post()
    post.id = None

    with pytest.raises(ValueError):
        engagement.toggle_bookmark(post, build_user("google:alice"))


@pytest.mark.parametrize("content", ["", "   ", "\n\t", None])
def test_add_comment_rejects_blank_content(
    engagement: EngagementManager, content: str | None
) -> None:
    post = _build_post()

    with pytest.raises(ValidationError):
        engagement.add_comment(post, "google:alice", content)

    assert post.comments == []


def test_add_comment_appends_in_insertion_order_with_trimmed_content(
    engagement: EngagementManager,
) -> None:
    post = _build_post()

    first = engagement.add_comment(post, "google:alice", "  first  ")
    second = engagement.add_comment(post, "google:bob", "second")

    assert [c.content for c in post.comments] == ["first", "second"]
    assert post.comments[-1] is second
    assert first.id and second.id and first.id != second.id
    assert first.author_id == "google:alice"
