from __future__ import annotations


class PostServiceError(Exception):
    """Base exception for all post-service errors.

    ``status_code`` is the HTTP status the API layer renders for this error.
    """

    status_code: int = 500
    default_message: str = "post service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(PostServiceError):
    """Missing or blank required input (caption/media, comment text)."""

    status_code = 400
    default_message = "invalid input"


class UnsupportedMediaType(PostServiceError):
    """Attachment MIME type is not in the upload allow-list."""

    status_code = 400
    default_message = "Invalid file type. Only JPEG, PNG, and MP4 are allowed"


class UploadFailed(PostServiceError):
    """The remote object storage call failed or returned an unusable object."""

    status_code = 502
    default_message = "upload failed"


class NotFound(PostServiceError):
    """Post or user does not exist."""

    status_code = 404
    default_message = "post not found"


class Forbidden(PostServiceError):
    """Requesting user is not allowed to perform the operation."""

    status_code = 403
    default_message = "forbidden"


class AlreadyLiked(PostServiceError):
    status_code = 400
    default_message = "Post already liked"


class NotLiked(PostServiceError):
    status_code = 400
    default_message = "Post not liked yet"


class PersistenceError(PostServiceError):
    """Document store unavailable or write rejected."""

    status_code = 500
    default_message = "persistence failure"
