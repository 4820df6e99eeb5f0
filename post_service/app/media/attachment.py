from __future__ import annotations

import contextlib
import logging
import os
from dataclasses import dataclass, field
from typing import BinaryIO, ContextManager


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MediaAttachment:
    """업로드 요청에 실려 온 첨부 파일 한 개.

    - path(임시 파일) 또는 stream 중 하나로 바이트를 제공한다.
    - release() 는 임시 파일 삭제/스트림 close 를 수행하며 여러 번 호출해도 안전하다.
    """

    content_type: str
    size: int
    path: str | None = None
    stream: BinaryIO | None = None
    filename: str | None = None
    _released: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.path is None and self.stream is None:
            raise ValueError("MediaAttachment requires either path or stream")
        self.content_type = (self.content_type or "").strip().lower()

    @property
    def released(self) -> bool:
        return self._released

    def open(self) -> ContextManager[BinaryIO]:
        """첨부 바이트를 읽을 수 있는 파일 객체를 컨텍스트로 연다.

        stream 으로 받은 경우 close 는 release() 가 담당하므로 여기서는 닫지 않는다.
        """

        if self._released:
            raise RuntimeError("attachment already released")
        if self.path is not None:
            return open(self.path, "rb")
        assert self.stream is not None
        self.stream.seek(0)
        return contextlib.nullcontext(self.stream)

    def release(self) -> None:
        if self._released:
            return
        self._released = True

        if self.stream is not None:
            try:
                self.stream.close()
            except OSError as exc:
                logger.warning("failed to close attachment stream: %s", exc)

        if self.path is not None:
            try:
                os.unlink(self.path)
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("failed to remove temp upload %s: %s", self.path, exc)
