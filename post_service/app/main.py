from __future__ import annotations

import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.logger import setup_logger
from common.middleware.request_trace import RequestTraceMiddleware
from common.mongo.client import close_client

from .api.health import router as health_router
from .api.v1 import api_router
from .exceptions import PostServiceError
from .services.posts_service import create_bookmark_executor


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework hook
    """북마크 쓰기 풀을 앱 수명에 묶고, 종료 시 풀과 Mongo 커넥션을 정리한다."""

    executor = create_bookmark_executor()
    app.state.bookmark_executor = executor
    try:
        yield
    finally:
        app.state.bookmark_executor = None
        executor.shutdown(wait=True)
        close_client()


def _error_body(message: str) -> dict[str, object]:
    return {"success": False, "message": message}


async def handle_post_service_error(
    request: Request, exc: PostServiceError
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request failed with %s: %s",
            type(exc).__name__,
            exc.message,
            extra={"path": request.url.path, "status": exc.status_code},
        )
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def summarize_validation_errors(errors: Sequence[Any]) -> str:
    """첫 번째 검증 오류를 "body.text: Input should be a valid string" 형태로 요약한다."""

    if not errors:
        return "invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422, content=_error_body(summarize_validation_errors(exc.errors()))
    )


def create_app() -> FastAPI:
    setup_logger(name="post-service")
    app = FastAPI(
        title="Post Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestTraceMiddleware)

    app.add_exception_handler(PostServiceError, handle_post_service_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)  # type: ignore[arg-type]

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def main() -> None:
    import uvicorn
    from dotenv import load_dotenv

    from .config import load_config

    load_dotenv()
    config = load_config()
    uvicorn.run(
        "post_service.app.main:app",
        host="0.0.0.0",
        port=config.port,
        reload=False,
        access_log=False,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    main()
