from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass

from common.storage.config import StorageConfig, load_storage_config


POST_SERVICE_PORT = "POST_SERVICE_PORT"
POST_MEDIA_MAX_DIMENSION = "POST_MEDIA_MAX_DIMENSION"
POST_UPLOAD_TMP_DIR = "POST_UPLOAD_TMP_DIR"
POST_UPLOAD_MAX_BYTES = "POST_UPLOAD_MAX_BYTES"

DEFAULT_PORT = 8003
DEFAULT_MAX_DIMENSION = 1080
DEFAULT_UPLOAD_MAX_BYTES = 100 * 1024 * 1024


@dataclass(slots=True)
class MediaConfig:
    """업로드 관련 설정."""

    max_dimension: int = DEFAULT_MAX_DIMENSION
    upload_tmp_dir: str = ""
    upload_max_bytes: int = DEFAULT_UPLOAD_MAX_BYTES
    folder: str = "posts"


@dataclass(slots=True)
class AppConfig:
    """post-service 전체 설정 루트."""

    port: int
    media: MediaConfig
    storage: StorageConfig


def _read_positive_int(env_name: str, default: int) -> int:
    raw_value = os.getenv(env_name, "").strip()
    if not raw_value:
        return default
    try:
        value = int(raw_value)
    except ValueError as exc:  # noqa: TRY003
        raise RuntimeError(
            f"{env_name} must be an integer value, got: {raw_value!r}"
        ) from exc
    return value if value > 0 else default


def load_media_config() -> MediaConfig:
    return MediaConfig(
        max_dimension=_read_positive_int(POST_MEDIA_MAX_DIMENSION, DEFAULT_MAX_DIMENSION),
        upload_tmp_dir=os.getenv(POST_UPLOAD_TMP_DIR, "").strip()
        or tempfile.gettempdir(),
        upload_max_bytes=_read_positive_int(POST_UPLOAD_MAX_BYTES, DEFAULT_UPLOAD_MAX_BYTES),
    )


def load_config() -> AppConfig:
    """post-service 설정을 로드하여 AppConfig 로 반환한다."""

    return AppConfig(
        port=_read_positive_int(POST_SERVICE_PORT, DEFAULT_PORT),
        media=load_media_config(),
        storage=load_storage_config(),
    )
