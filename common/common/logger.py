from __future__ import annotations

import json
import logging
import os
import sys


DEFAULT_SERVICE_NAME = "post-service"

# extra 로 넘어오면 JSON 레코드에 그대로 실어 보내는 필드 목록
EXTRA_LOG_FIELDS: tuple[str, ...] = (
    "request_id",
    "span_id",
    "user_code",
    "post_id",
    "method",
    "path",
    "query_params",
    "status",
    "duration",
)


def _resolve_level(level: str | None) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    return getattr(logging, level.upper(), logging.INFO)


def setup_logger(
    name: str = DEFAULT_SERVICE_NAME, level: str | None = None
) -> logging.Logger:
    """서비스 전역 로거를 JSON 포맷으로 설정하고 반환한다.

    Args:
        name: 로거 이름. 환경변수 SERVICE_NAME 이 있으면 그 값을 우선한다.
        level: 로그 레벨 (None 이면 LOG_LEVEL 환경변수, 없으면 INFO)

    Returns:
        설정된 logging.Logger 인스턴스
    """

    log_level = _resolve_level(level)

    service_name = os.getenv("SERVICE_NAME", name)
    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)

    # 재호출 시 핸들러가 중복으로 붙지 않도록 비운다.
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JsonFormatter(service_name=service_name))
    logger.addHandler(handler)

    # 모듈 로거(logging.getLogger(__name__))도 같은 포맷으로 출력되도록 루트에도 연결한다.
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        root_logger.addHandler(handler)
        root_logger.setLevel(log_level)

    return logger


class JsonFormatter(logging.Formatter):
    """한 줄짜리 JSON 으로 로그 레코드를 직렬화한다.

    - datetime, level, logger, message 필드를 기본으로 포함한다.
    - EXTRA_LOG_FIELDS 에 해당하는 extra 값이 있으면 함께 기록한다.
    - 예외 정보가 있으면 exc_info 필드에 문자열로 추가한다.
    """

    def __init__(self, service_name: str | None = None) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_record: dict[str, object] = {
            "datetime": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in EXTRA_LOG_FIELDS:
            if hasattr(record, key):
                log_record[key] = getattr(record, key)

        service_name = getattr(record, "service_name", None) or self._service_name
        if service_name:
            log_record["service_name"] = service_name

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False, default=str)
