from __future__ import annotations

from datetime import datetime, timezone

from bson import ObjectId

from common.models.post import Comment, Media, MediaType, Post
from post_service.app.repositories.documents.post_document import PostDocument


def _now() -> datetime:
    return datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_sets_are_stored_as_sorted_arrays_and_read_back_as_sets() -> None:
    post_id = str(ObjectId())
    comment_id = str(ObjectId())
    post = Post(
        id=post_id,
        caption="hello",
        author_id="google:alice",
        likes={"google:zed", "google:bob"},
        bookmarked_by={"google:carol"},
        comments=[
            Comment(
                id=comment_id,
                content="nice",
                author_id="google:bob",
                created_at=_now(),
            )
        ],
        created_at=_now(),
        updated_at=_now(),
    )

    record = PostDocument.from_domain(post).to_mongo_record()

    assert record["_id"] == ObjectId(post_id)
    assert record["likes"] == ["google:bob", "google:zed"]
    assert record["bookmarked_by"] == ["google:carol"]
    assert record["comments"][0]["_id"] == ObjectId(comment_id)

    restored = PostDocument.model_validate(record).to_domain()

    assert restored.id == post_id
    assert restored.likes == {"google:bob", "google:zed"}
    assert restored.comments[0].id == comment_id


def test_media_field_is_omitted_when_post_has_no_media() -> None:
    post = Post(
        caption="text only",
        author_id="google:alice",
        created_at=_now(),
        updated_at=_now(),
    )

    record = PostDocument.from_domain(post).to_mongo_record()

    assert "media" not in record
    assert "_id" not in record


def test_media_keeps_url_type_and_public_id() -> None:
    post = Post(
        media=Media(
            url="https://storage.example.com/posts/a.mp4",
            type=MediaType.VIDEO,
            public_id="posts/a.mp4",
        ),
        author_id="google:alice",
        created_at=_now(),
        updated_at=_now(),
    )

    record = PostDocument.from_domain(post).to_mongo_record()

    assert record["media"] == {
        "url": "https://storage.example.com/posts/a.mp4",
        "type": "video",
        "public_id": "posts/a.mp4",
    }


def test_naive_datetimes_from_mongo_are_read_as_utc() -> None:
    record = {
        "_id": ObjectId(),
        "caption": "hello",
        "author_id": "google:alice",
        "created_at": datetime(2026, 1, 2, 3, 4, 5),
        "updated_at": datetime(2026, 1, 2, 3, 4, 5),
    }

    post = PostDocument.model_validate(record).to_domain()

    assert post.created_at.tzinfo is not None
    assert post.created_at.utcoffset().total_seconds() == 0
