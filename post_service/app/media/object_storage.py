from __future__ import annotations

import io
import logging
import mimetypes
import uuid
from dataclasses import dataclass
from typing import Protocol

from fastapi import Depends
from minio import Minio
from PIL import Image, ImageOps

from common.storage.client import get_minio_client, get_storage_config
from common.storage.config import StorageConfig

from .attachment import MediaAttachment


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImageLimit:
    """비율을 유지하며 width x height 안으로 줄인다. 원본보다 키우지 않는다."""

    width: int
    height: int


@dataclass(frozen=True, slots=True)
class UploadOptions:
    folder: str
    content_type: str
    limit: ImageLimit | None = None


@dataclass(frozen=True, slots=True)
class StoredObject:
    """업로드 결과.

    resource_type 은 스토리지에 실제로 저장된 오브젝트 기준(image/video/raw)이다.
    """

    url: str
    public_id: str
    resource_type: str


class ObjectStorageInterface(Protocol):
    """MediaUploader / PostStore 가 의존하는 오브젝트 스토리지 계약."""

    def upload(
        self, attachment: MediaAttachment, options: UploadOptions
    ) -> StoredObject:  # pragma: no cover - Protocol
        ...

    def delete(self, public_id: str) -> None:  # pragma: no cover - Protocol
        """오브젝트를 삭제한다. 실패 시 예외를 그대로 전파한다."""
        ...


def _resource_type_of(content_type: str | None) -> str:
    major = (content_type or "").split("/", 1)[0].strip().lower()
    if major in {"image", "video"}:
        return major
    return "raw"


def _extension_for(content_type: str, filename: str | None) -> str:
    if content_type == "image/jpg":
        return ".jpg"
    ext = mimetypes.guess_extension(content_type)
    if ext:
        return ".jpg" if ext == ".jpe" else ext
    if filename and "." in filename:
        return "." + filename.rsplit(".", 1)[1].lower()
    return ""


def _output_format(source_format: str | None) -> str:
    # MPF 세그먼트가 붙은 JPEG 는 MPO 로 열리지만 첫 프레임만 일반 JPEG 로 저장한다.
    if not source_format or source_format == "MPO":
        return "JPEG"
    return source_format


class MinioObjectStorage(ObjectStorageInterface):
    """MinIO(S3 호환) 버킷에 게시글 미디어를 저장한다."""

    def __init__(self, client: Minio, config: StorageConfig) -> None:
        self._client = client
        self._bucket = config.bucket
        self._public_base_url = config.public_base_url

    def upload(
        self, attachment: MediaAttachment, options: UploadOptions
    ) -> StoredObject:
        object_key = (
            f"{options.folder}/{uuid.uuid4().hex}"
            f"{_extension_for(options.content_type, attachment.filename)}"
        )

        try:
            if options.limit is not None:
                data, content_type = self._render_limited_image(
                    attachment, options.limit, options.content_type
                )
                self._client.put_object(
                    self._bucket,
                    object_key,
                    data=io.BytesIO(data),
                    length=len(data),
                    content_type=content_type,
                )
            else:
                with attachment.open() as stream:
                    self._client.put_object(
                        self._bucket,
                        object_key,
                        data=stream,
                        length=attachment.size,
                        content_type=options.content_type,
                    )

            stat = self._client.stat_object(self._bucket, object_key)
        except Exception:
            # put 도중 끊긴 경우에도 참조 없는 오브젝트가 남지 않도록 정리를 시도한다.
            self._remove_quietly(object_key)
            raise

        return StoredObject(
            url=f"{self._public_base_url}/{self._bucket}/{object_key}",
            public_id=object_key,
            resource_type=_resource_type_of(stat.content_type),
        )

    def delete(self, public_id: str) -> None:
        self._client.remove_object(self._bucket, public_id)

    @staticmethod
    def _render_limited_image(
        attachment: MediaAttachment, limit: ImageLimit, content_type: str
    ) -> tuple[bytes, str]:
        with attachment.open() as stream, Image.open(stream) as opened:
            image_format = _output_format(opened.format)
            # EXIF Orientation 을 픽셀에 반영한다. 재인코딩하면 태그가 사라진다.
            image = ImageOps.exif_transpose(opened)
            # thumbnail 은 비율을 유지하고, 이미 작은 이미지는 키우지 않는다.
            image.thumbnail((limit.width, limit.height))
            buffer = io.BytesIO()
            image.save(buffer, format=image_format)

        resolved_type = Image.MIME.get(image_format, content_type)
        return buffer.getvalue(), resolved_type

    def _remove_quietly(self, object_key: str) -> None:
        try:
            self._client.remove_object(self._bucket, object_key)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "failed to remove partial upload %s/%s: %s",
                self._bucket,
                object_key,
                exc,
            )


def get_object_storage(
    client: Minio = Depends(get_minio_client),
) -> ObjectStorageInterface:
    """FastAPI DI용 ObjectStorage 팩토리."""

    return MinioObjectStorage(client, get_storage_config())
