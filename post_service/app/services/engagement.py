from __future__ import annotations

from bson import ObjectId

from common.models.post import Comment, Post
from common.models.user import User
from common.types.datetime import utc_now

from ..exceptions import AlreadyLiked, NotLiked, ValidationError


class EngagementManager:
    """게시글 좋아요/북마크/댓글 상태 전이.

    저장소 I/O 없이 메모리 위의 Post(와 User)만 바꾼다. 저장은 호출자가 한다.
    모든 전이는 post.updated_at 을 갱신한다.
    """

    def like(self, post: Post, user_id: str) -> None:
        if user_id in post.likes:
            raise AlreadyLiked()
        post.likes.add(user_id)
        post.updated_at = utc_now()

    def dislike(self, post: Post, user_id: str) -> None:
        if user_id not in post.likes:
            raise NotLiked()
        post.likes.discard(user_id)
        post.updated_at = utc_now()

    def toggle_bookmark(self, post: Post, user: User) -> bool:
        """양쪽 set 을 함께 뒤집고, 전이 후 북마크 여부를 반환한다.

        멤버십은 post.bookmarked_by 기준으로 한 번만 읽는다. 한쪽만 어긋나 있던 경우에도
        결과는 두 set 이 서로를 비추는 상태가 된다.
        """

        if post.id is None:
            raise ValueError("cannot bookmark a post that has not been persisted")

        now = utc_now()
        if user.user_code in post.bookmarked_by:
            post.bookmarked_by.discard(user.user_code)
            user.bookmarked_posts.discard(post.id)
            bookmarked = False
        else:
            post.bookmarked_by.add(user.user_code)
            user.bookmarked_posts.add(post.id)
            bookmarked = True

        post.updated_at = now
        user.updated_at = now
        return bookmarked

    def add_comment(self, post: Post, author_id: str, content: str | None) -> Comment:
        text = (content or "").strip()
        if not text:
            raise ValidationError("Comment text is required")

        now = utc_now()
        comment = Comment(
            id=str(ObjectId()),
            content=text,
            author_id=author_id,
            created_at=now,
        )
        post.comments.append(comment)
        post.updated_at = now
        return comment
