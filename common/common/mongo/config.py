from __future__ import annotations

import os


MONGO_URI_ENV = "MONGO_URI"
MONGO_DB_NAME_ENV = "MONGO_DB_NAME"
MONGO_TIMEOUT_MS_ENV = "MONGO_TIMEOUT_MS"

DEFAULT_MONGO_TIMEOUT_MS = 5000


def get_mongo_uri() -> str:
    """MongoDB 연결 URI 를 반환한다.

    환경 변수에서만 읽고, 설정되지 않은 경우 서비스가 곧바로 실패하도록
    RuntimeError 를 발생시킨다.
    """

    value = os.getenv(MONGO_URI_ENV)
    if not value:
        raise RuntimeError(
            f"{MONGO_URI_ENV} environment variable is required for MongoDB",
        )
    return value


def get_mongo_db_name() -> str | None:
    """사용할 기본 데이터베이스 이름. 비어 있으면 URI 의 기본 DB 를 사용한다."""

    value = os.getenv(MONGO_DB_NAME_ENV, "").strip()
    return value or None


def get_mongo_timeout_ms() -> int:
    """서버 선택/개별 연산에 적용할 데드라인(ms).

    도큐먼트 저장소 호출이 무기한 블로킹되지 않도록 클라이언트 생성 시
    serverSelectionTimeoutMS 와 timeoutMS 로 함께 넘긴다.
    """

    raw_value = os.getenv(MONGO_TIMEOUT_MS_ENV, "").strip()
    if not raw_value:
        return DEFAULT_MONGO_TIMEOUT_MS

    try:
        value = int(raw_value)
    except ValueError as exc:  # noqa: TRY003
        raise RuntimeError(
            f"{MONGO_TIMEOUT_MS_ENV} must be an integer value, got: {raw_value!r}"
        ) from exc

    if value <= 0:
        return DEFAULT_MONGO_TIMEOUT_MS
    return value
