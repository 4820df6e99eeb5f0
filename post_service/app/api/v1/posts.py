from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ...config import MediaConfig, load_media_config
from ...services.posts_service import PostService, get_posts_service
from ..deps import get_current_user_code, spool_upload
from ..schemas.posts import (
    BookmarkResponse,
    CommentCreateRequest,
    CommentEnvelope,
    CommentListResponse,
    CommentResponse,
    MessageResponse,
    PostEnvelope,
    PostListResponse,
    PostResponse,
)


router = APIRouter()


@router.post(
    "",
    response_model=PostEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="게시글 작성",
    description="caption 과 선택적 이미지/영상(JPEG, PNG, MP4) 한 개로 게시글을 만든다.",
)
def create_post(
    caption: str | None = Form(default=None),
    media: UploadFile | None = File(default=None),
    user_code: str = Depends(get_current_user_code),
    media_config: MediaConfig = Depends(load_media_config),
    service: PostService = Depends(get_posts_service),
) -> PostEnvelope:
    attachment = spool_upload(media, media_config) if media is not None else None
    post = service.create_post(user_code, caption, attachment)
    return PostEnvelope(
        message="Post created successfully",
        post=PostResponse.from_domain(post),
    )


@router.get(
    "/all",
    response_model=PostListResponse,
    summary="전체 게시글 조회 (최신순)",
)
def list_all_posts(
    user_code: str = Depends(get_current_user_code),
    service: PostService = Depends(get_posts_service),
) -> PostListResponse:
    posts = service.list_all_posts()
    return PostListResponse(posts=[PostResponse.from_domain(p) for p in posts])


@router.get(
    "/me",
    response_model=PostListResponse,
    summary="내 게시글 조회 (최신순)",
)
def list_my_posts(
    user_code: str = Depends(get_current_user_code),
    service: PostService = Depends(get_posts_service),
) -> PostListResponse:
    posts = service.list_user_posts(user_code)
    return PostListResponse(posts=[PostResponse.from_domain(p) for p in posts])


@router.get(
    "/users/{author_code}",
    response_model=PostListResponse,
    summary="특정 유저 게시글 조회 (최신순)",
)
def list_user_posts(
    author_code: str,
    user_code: str = Depends(get_current_user_code),
    service: PostService = Depends(get_posts_service),
) -> PostListResponse:
    posts = service.list_user_posts(author_code)
    return PostListResponse(posts=[PostResponse.from_domain(p) for p in posts])


@router.post(
    "/{post_id}/like",
    response_model=MessageResponse,
    summary="게시글 좋아요",
)
def like_post(
    post_id: str,
    user_code: str = Depends(get_current_user_code),
    service: PostService = Depends(get_posts_service),
) -> MessageResponse:
    service.like_post(post_id, user_code)
    return MessageResponse(message="Post liked successfully")


@router.post(
    "/{post_id}/dislike",
    response_model=MessageResponse,
    summary="게시글 좋아요 취소",
)
def dislike_post(
    post_id: str,
    user_code: str = Depends(get_current_user_code),
    service: PostService = Depends(get_posts_service),
) -> MessageResponse:
    service.dislike_post(post_id, user_code)
    return MessageResponse(message="Post disliked successfully")


@router.post(
    "/{post_id}/comments",
    response_model=CommentEnvelope,
    summary="댓글 작성",
)
def add_comment(
    post_id: str,
    body: CommentCreateRequest,
    user_code: str = Depends(get_current_user_code),
    service: PostService = Depends(get_posts_service),
) -> CommentEnvelope:
    comment = service.add_comment(post_id, user_code, body.text)
    return CommentEnvelope(
        message="Comment added successfully",
        comment=CommentResponse.from_domain(comment),
    )


@router.get(
    "/{post_id}/comments",
    response_model=CommentListResponse,
    summary="댓글 목록 조회 (작성 순)",
)
def list_comments(
    post_id: str,
    user_code: str = Depends(get_current_user_code),
    service: PostService = Depends(get_posts_service),
) -> CommentListResponse:
    comments = service.list_comments(post_id)
    return CommentListResponse(
        comments=[CommentResponse.from_domain(c) for c in comments]
    )


@router.post(
    "/{post_id}/bookmark",
    response_model=BookmarkResponse,
    summary="게시글 북마크 토글",
)
def toggle_bookmark(
    post_id: str,
    user_code: str = Depends(get_current_user_code),
    service: PostService = Depends(get_posts_service),
) -> BookmarkResponse:
    outcome = service.toggle_bookmark(post_id, user_code)
    return BookmarkResponse(message=outcome.message, bookmarked=outcome.bookmarked)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    summary="게시글 삭제 (작성자만)",
)
def delete_post(
    post_id: str,
    user_code: str = Depends(get_current_user_code),
    service: PostService = Depends(get_posts_service),
) -> MessageResponse:
    service.delete_post(post_id, user_code)
    return MessageResponse(message="Post deleted successfully")
