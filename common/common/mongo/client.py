from __future__ import annotations

import logging
import threading
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

from .config import get_mongo_db_name, get_mongo_timeout_ms, get_mongo_uri


logger = logging.getLogger(__name__)


_client: Optional[MongoClient] = None
_db: Optional[Database] = None
_lock = threading.Lock()


def get_client() -> MongoClient:
    """전역 MongoClient 싱글톤을 반환한다.

    - MONGO_URI 에서 URI 를 읽고 ping 으로 연결을 검증한다.
    - MONGO_TIMEOUT_MS 를 서버 선택/연산 데드라인으로 사용한다.
    - posts/users 컬렉션에 필요한 인덱스를 한 번만 생성한다.
    """

    global _client, _db

    if _client is not None:
        return _client

    with _lock:
        if _client is not None:
            return _client

        timeout_ms = get_mongo_timeout_ms()
        client: MongoClient = MongoClient(
            get_mongo_uri(),
            serverSelectionTimeoutMS=timeout_ms,
            timeoutMS=timeout_ms,
            tz_aware=True,
        )

        try:
            client.admin.command("ping")
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(f"failed to connect to MongoDB: {exc}") from exc

        db_name = get_mongo_db_name()
        try:
            db = client[db_name] if db_name else client.get_default_database()
        except Exception as exc:  # noqa: BLE001
            client.close()
            raise RuntimeError(
                "MongoDB database name must be specified via MONGO_DB_NAME or in MONGO_URI (mongodb://.../db_name)",
            ) from exc

        try:
            _ensure_indexes(db)
        except Exception as exc:  # noqa: BLE001
            logger.error("failed to ensure MongoDB indexes: %s", exc)
            client.close()
            raise

        _client = client
        _db = db
        logger.info("MongoDB connected and indexes ensured (db=%s)", db.name)
        return _client


def get_database() -> Database:
    """전역 기본 Database 객체를 반환한다."""

    if _db is None:
        get_client()
    assert _db is not None
    return _db


def close_client() -> None:
    """애플리케이션 종료 시 커넥션 풀을 정리한다."""

    global _client, _db

    with _lock:
        if _client is not None:
            _client.close()
        _client = None
        _db = None


def _ensure_indexes(db: Database) -> None:
    """필수 인덱스를 생성한다. 중복 생성은 MongoDB 가 무시하므로 idempotent 하다."""

    posts = db["posts"]

    # 전체 피드: created_at desc + _id desc
    posts.create_index(
        [("created_at", -1), ("_id", -1)],
        name="idx_created_at_id_desc",
    )

    # 작성자별 피드
    posts.create_index(
        [("author_id", 1), ("created_at", -1)],
        name="idx_author_created_at",
    )

    # 게시글 삭제 시 북마크 역참조 정리
    posts.create_index(
        [("bookmarked_by", 1)],
        name="idx_bookmarked_by",
    )

    users = db["users"]

    users.create_index(
        [("user_code", 1)],
        name="uniq_user_code",
        unique=True,
    )

    users.create_index(
        [("bookmarked_posts", 1)],
        name="idx_bookmarked_posts",
    )
