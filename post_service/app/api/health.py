from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

from common.mongo.client import get_database


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", summary="헬스 체크")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready", summary="도큐먼트 저장소 연결 확인")
def ready(db: Database = Depends(get_database)) -> JSONResponse:
    try:
        db.command("ping")
    except PyMongoError as exc:
        logger.warning("readiness check failed: %s", exc)
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return JSONResponse(content={"status": "ok"})
