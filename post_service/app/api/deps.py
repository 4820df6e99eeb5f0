from __future__ import annotations

import logging
import os
import tempfile

from fastapi import Header, HTTPException, UploadFile

from ..config import MediaConfig
from ..exceptions import ValidationError
from ..media.attachment import MediaAttachment


logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE = 1024 * 1024


def get_current_user_code(
    x_user_code: str | None = Header(default=None, alias="X-User-Code"),
) -> str:
    """API Gateway 가 인증 후 넣어 주는 X-User-Code 헤더에서 요청 유저를 꺼낸다."""

    user_code = (x_user_code or "").strip()
    if not user_code:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_code


def spool_upload(upload: UploadFile, config: MediaConfig) -> MediaAttachment:
    """UploadFile 을 임시 파일로 내려받아 MediaAttachment 로 감싼다.

    임시 파일의 삭제 책임은 반환된 attachment(→ MediaUploader)로 넘어간다.
    제한 크기를 넘거나 복사에 실패하면 임시 파일을 지우고 예외를 올린다.
    """

    suffix = os.path.splitext(upload.filename or "")[1]
    fd, path = tempfile.mkstemp(
        prefix="post-upload-", suffix=suffix, dir=config.upload_tmp_dir
    )
    size = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = upload.file.read(_COPY_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > config.upload_max_bytes:
                    raise ValidationError(
                        f"File too large (max {config.upload_max_bytes} bytes)"
                    )
                out.write(chunk)
    except BaseException:
        os.unlink(path)
        raise
    finally:
        upload.file.close()

    logger.debug("spooled upload %s (%d bytes) to %s", upload.filename, size, path)
    return MediaAttachment(
        content_type=upload.content_type or "",
        size=size,
        path=path,
        filename=upload.filename,
    )
