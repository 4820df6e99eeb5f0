from __future__ import annotations

import os
from dataclasses import dataclass


MINIO_ENDPOINT_ENV = "MINIO_ENDPOINT"
MINIO_ACCESS_KEY_ENV = "MINIO_ACCESS_KEY"
MINIO_SECRET_KEY_ENV = "MINIO_SECRET_KEY"
MINIO_BUCKET_ENV = "MINIO_BUCKET"
MINIO_SECURE_ENV = "MINIO_SECURE"
MINIO_PUBLIC_BASE_URL_ENV = "MINIO_PUBLIC_BASE_URL"
MINIO_TIMEOUT_SECONDS_ENV = "MINIO_TIMEOUT_SECONDS"

DEFAULT_BUCKET = "posts"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(slots=True)
class StorageConfig:
    """오브젝트 스토리지(MinIO/S3 호환) 접속 설정."""

    endpoint: str
    access_key: str
    secret_key: str
    bucket: str
    secure: bool
    public_base_url: str
    timeout_seconds: float


def _parse_bool(raw_value: str) -> bool:
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_timeout(raw_value: str) -> float:
    if not raw_value.strip():
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw_value)
    except ValueError as exc:  # noqa: TRY003
        raise RuntimeError(
            f"{MINIO_TIMEOUT_SECONDS_ENV} must be a number, got: {raw_value!r}"
        ) from exc
    return value if value > 0 else DEFAULT_TIMEOUT_SECONDS


def load_storage_config() -> StorageConfig:
    """환경 변수에서 스토리지 설정을 읽는다.

    - MINIO_ENDPOINT 는 필수이며, 없으면 RuntimeError 를 발생시킨다.
    - MINIO_PUBLIC_BASE_URL 이 없으면 endpoint 와 secure 값으로 공개 URL 을 조립한다.
    """

    endpoint = os.getenv(MINIO_ENDPOINT_ENV, "").strip()
    if not endpoint:
        raise RuntimeError(
            f"{MINIO_ENDPOINT_ENV} environment variable is required for object storage",
        )

    secure = _parse_bool(os.getenv(MINIO_SECURE_ENV, "false"))
    scheme = "https" if secure else "http"
    public_base_url = os.getenv(MINIO_PUBLIC_BASE_URL_ENV, "").strip().rstrip("/")
    if not public_base_url:
        public_base_url = f"{scheme}://{endpoint}"

    return StorageConfig(
        endpoint=endpoint,
        access_key=os.getenv(MINIO_ACCESS_KEY_ENV, ""),
        secret_key=os.getenv(MINIO_SECRET_KEY_ENV, ""),
        bucket=os.getenv(MINIO_BUCKET_ENV, "").strip() or DEFAULT_BUCKET,
        secure=secure,
        public_base_url=public_base_url,
        timeout_seconds=_parse_timeout(os.getenv(MINIO_TIMEOUT_SECONDS_ENV, "")),
    )
