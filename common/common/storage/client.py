from __future__ import annotations

import logging
import threading
from typing import Optional

import urllib3
from minio import Minio

from .config import StorageConfig, load_storage_config


logger = logging.getLogger(__name__)


_client: Optional[Minio] = None
_config: Optional[StorageConfig] = None
_lock = threading.Lock()


def get_storage_config() -> StorageConfig:
    if _config is None:
        get_minio_client()
    assert _config is not None
    return _config


def get_minio_client() -> Minio:
    """전역 Minio 클라이언트 싱글톤을 반환한다.

    - 업로드/삭제 호출에 MINIO_TIMEOUT_SECONDS 데드라인이 걸리도록
      urllib3 PoolManager 를 직접 구성해 넘긴다.
    - 버킷이 없으면 한 번만 생성한다.
    """

    global _client, _config

    if _client is not None:
        return _client

    with _lock:
        if _client is not None:
            return _client

        config = load_storage_config()
        http_client = urllib3.PoolManager(
            timeout=urllib3.Timeout(
                connect=config.timeout_seconds,
                read=config.timeout_seconds,
            ),
            retries=urllib3.Retry(total=2, backoff_factor=0.2),
        )
        client = Minio(
            config.endpoint,
            access_key=config.access_key,
            secret_key=config.secret_key,
            secure=config.secure,
            http_client=http_client,
        )

        try:
            if not client.bucket_exists(config.bucket):
                client.make_bucket(config.bucket)
        except Exception as exc:  # noqa: BLE001
            raise RuntimeError(
                f"failed to prepare object storage bucket {config.bucket!r}: {exc}"
            ) from exc

        _client = client
        _config = config
        logger.info(
            "object storage ready (endpoint=%s bucket=%s)",
            config.endpoint,
            config.bucket,
        )
        return _client
