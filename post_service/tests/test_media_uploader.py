from __future__ import annotations

import io
from pathlib import Path

import pytest

from common.models.post import MediaType
from post_service.app.exceptions import UnsupportedMediaType, UploadFailed
from post_service.app.media.attachment import MediaAttachment
from post_service.app.media.object_storage import ImageLimit
from post_service.app.media.uploader import MediaUploader

from post_fakes import FakeObjectStorage


def _temp_attachment(tmp_path: Path, content_type: str, name: str = "upload.bin") -> MediaAttachment:
    path = tmp_path / name
    path.write_bytes(b"\x00" * 64)
    return MediaAttachment(content_type=content_type, size=64, path=str(path), filename=name)


@pytest.fixture
def storage() -> FakeObjectStorage:
    return FakeObjectStorage()


@pytest.fixture
def uploader(storage: FakeObjectStorage) -> MediaUploader:
    return MediaUploader(storage, max_dimension=1080)


def test_unsupported_type_is_rejected_without_upload_and_temp_file_is_removed(
    tmp_path: Path, storage: FakeObjectStorage, uploader: MediaUploader
) -> None:
    attachment = _temp_attachment(tmp_path, "application/pdf", "doc.pdf")

    with pytest.raises(UnsupportedMediaType):
        uploader.upload(attachment)

    assert storage.upload_calls == []
    assert storage.objects == {}
    assert attachment.released
    assert not (tmp_path / "doc.pdf").exists()


def test_image_upload_requests_limit_transform(
    tmp_path: Path, storage: FakeObjectStorage, uploader: MediaUploader
) -> None:
    attachment = _temp_attachment(tmp_path, "image/png", "photo.png")

    media = uploader.upload(attachment)

    assert media.type == MediaType.IMAGE
    assert media.public_id in storage.objects
    assert storage.upload_calls[0].limit == ImageLimit(width=1080, height=1080)
    assert storage.upload_calls[0].folder == "posts"
    # 업로드 시점에는 아직 살아 있고, 반환 후에는 정리되어 있어야 한다.
    assert storage.released_during_upload == [False]
    assert not (tmp_path / "photo.png").exists()


def test_video_upload_has_no_transform(
    tmp_path: Path, storage: FakeObjectStorage, uploader: MediaUploader
) -> None:
    media = uploader.upload(_temp_attachment(tmp_path, "video/mp4", "clip.mp4"))

    assert media.type == MediaType.VIDEO
    assert storage.upload_calls[0].limit is None


def test_content_type_is_normalized_before_allow_list_check(
    tmp_path: Path, storage: FakeObjectStorage, uploader: MediaUploader
) -> None:
    media = uploader.upload(_temp_attachment(tmp_path, " IMAGE/JPG ", "photo.jpg"))

    assert media.type == MediaType.IMAGE
    assert storage.upload_calls[0].content_type == "image/jpg"


def test_result_type_follows_storage_resolution(
    tmp_path: Path, storage: FakeObjectStorage, uploader: MediaUploader
) -> None:
    storage.resolved_type = "video"

    media = uploader.upload(_temp_attachment(tmp_path, "image/jpeg"))

    assert media.type == MediaType.VIDEO


def test_unusable_resolved_type_discards_remote_object(
    tmp_path: Path, storage: FakeObjectStorage, uploader: MediaUploader
) -> None:
    storage.resolved_type = "raw"
    attachment = _temp_attachment(tmp_path, "image/jpeg")

    with pytest.raises(UploadFailed):
        uploader.upload(attachment)

    assert storage.deleted == ["posts/object-1"]
    assert storage.objects == {}
    assert attachment.released


def test_storage_failure_is_wrapped_and_temp_file_is_removed(
    tmp_path: Path, storage: FakeObjectStorage, uploader: MediaUploader
) -> None:
    storage.upload_error = TimeoutError("read timed out")
    attachment = _temp_attachment(tmp_path, "video/mp4", "clip.mp4")

    with pytest.raises(UploadFailed, match="read timed out") as exc_info:
        uploader.upload(attachment)

    assert isinstance(exc_info.value.__cause__, TimeoutError)
    assert attachment.released
    assert not (tmp_path / "clip.mp4").exists()


def test_stream_attachment_is_closed_after_upload(
    storage: FakeObjectStorage, uploader: MediaUploader
) -> None:
    stream = io.BytesIO(b"fake-mp4")
    attachment = MediaAttachment(content_type="video/mp4", size=8, stream=stream)

    uploader.upload(attachment)

    assert stream.closed


def test_discard_reports_failure_without_raising(
    storage: FakeObjectStorage, uploader: MediaUploader
) -> None:
    storage.delete_error = ConnectionError("storage down")

    assert uploader.discard("posts/object-9") is False
    assert storage.deleted == ["posts/object-9"]
