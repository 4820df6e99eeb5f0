from __future__ import annotations

import logging

from fastapi import Depends

from common.models.post import Media, MediaType

from ..config import MediaConfig, load_media_config
from ..exceptions import UnsupportedMediaType, UploadFailed
from .attachment import MediaAttachment
from .object_storage import (
    ImageLimit,
    ObjectStorageInterface,
    UploadOptions,
    get_object_storage,
)


logger = logging.getLogger(__name__)


ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset(
    {"image/jpeg", "image/png", "image/jpg", "video/mp4"}
)


class MediaUploader:
    """첨부 파일 검증 + 오브젝트 스토리지 업로드.

    - 허용 MIME 타입이 아니면 UnsupportedMediaType 을 발생시키고 업로드하지 않는다.
    - 이미지는 max_dimension 정사각형 안으로 축소(limit)하여 올리고, 영상은 그대로 올린다.
    - 결과 타입은 요청 타입이 아니라 스토리지가 판별한 종류를 따른다.
    - 성공/실패와 무관하게 attachment.release() 는 반드시 호출된다.
    """

    def __init__(
        self,
        storage: ObjectStorageInterface,
        *,
        max_dimension: int = 1080,
        folder: str = "posts",
    ) -> None:
        self._storage = storage
        self._limit = ImageLimit(width=max_dimension, height=max_dimension)
        self._folder = folder

    def upload(self, attachment: MediaAttachment) -> Media:
        try:
            content_type = attachment.content_type
            if content_type not in ALLOWED_CONTENT_TYPES:
                raise UnsupportedMediaType()

            options = UploadOptions(
                folder=self._folder,
                content_type=content_type,
                limit=self._limit if content_type.startswith("image/") else None,
            )

            try:
                stored = self._storage.upload(attachment, options)
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "media upload failed (content_type=%s size=%d)",
                    content_type,
                    attachment.size,
                )
                raise UploadFailed(f"Upload failed: {exc}") from exc

            media_type = MediaType.from_resolved(stored.resource_type)
            if media_type is None:
                # 스토리지가 image/video 로 보지 않은 오브젝트는 게시글에 연결하지 않는다.
                self.discard(stored.public_id)
                raise UploadFailed(
                    f"Upload failed: unexpected resource type {stored.resource_type!r}"
                )

            logger.info(
                "media uploaded (public_id=%s type=%s)",
                stored.public_id,
                media_type.value,
            )
            return Media(url=stored.url, type=media_type, public_id=stored.public_id)
        finally:
            attachment.release()

    def discard(self, public_id: str) -> bool:
        """업로드된 오브젝트를 best-effort 로 삭제한다. 실패는 기록만 한다."""

        try:
            self._storage.delete(public_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("failed to discard uploaded media %s: %s", public_id, exc)
            return False
        return True


def get_media_uploader(
    storage: ObjectStorageInterface = Depends(get_object_storage),
    config: MediaConfig = Depends(load_media_config),
) -> MediaUploader:
    """FastAPI DI용 MediaUploader 팩토리."""

    return MediaUploader(
        storage, max_dimension=config.max_dimension, folder=config.folder
    )
