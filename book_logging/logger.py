"""도서 카탈로그 전용 로거"""

import logging
import sys
from pathlib import Path
from typing import Any

from .formatters import ConsoleFormatter, JsonFormatter

ROOT_LOGGER = "books"


class BookLogger:
    """
    구조화 이벤트 로거

    - 콘솔: 사람이 읽기 쉬운 컬러 포맷
    - 파일: JSON Lines 포맷 (기계 분석용)

    Usage:
        logger = BookLogger("reconcile")
        logger.variant_lookup("0156013987", ["0156013987", "9780156013987"], "9780156013987")
        logger.record_merged("9780156013987", ["pageCount"])
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{ROOT_LOGGER}.{name}")

    @classmethod
    def configure(
        cls,
        level: str = "INFO",
        log_file: str | Path | None = None,
        console: bool = True,
    ) -> None:
        """
        전역 로깅 설정

        Args:
            level: 로깅 레벨 (DEBUG, INFO, WARNING, ERROR)
            log_file: JSON Lines 로그 파일 경로
            console: 콘솔 출력 여부
        """
        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(getattr(logging, level.upper()))

        for handler in list(root.handlers):
            handler.close()
        root.handlers.clear()

        if console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(ConsoleFormatter())
            root.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setFormatter(JsonFormatter())
            root.addHandler(file_handler)

    def _log(self, level: int, event: str, **kwargs: Any) -> None:
        """구조화된 로그 출력"""
        extra = {
            "component": self.name,
            "event": event,
            **kwargs,
        }
        self.logger.log(level, event, extra=extra)

    # === 식별자 ===

    def isbn_normalized(self, raw: str, canonical: str) -> None:
        """ISBN-10 → ISBN-13 등 정규 키 변환"""
        self._log(logging.DEBUG, "isbn_normalized", raw=raw, canonical=canonical)

    def variant_lookup(
        self, raw: str, variants: list[str], matched_key: str | None
    ) -> None:
        """변형 ISBN 조회 결과"""
        self._log(
            logging.DEBUG,
            "variant_lookup",
            isbn=raw,
            variants=variants,
            matched_key=matched_key,
            found=matched_key is not None,
        )

    # === 레코드 변경 ===

    def record_created(self, key: str, source: str | None = None) -> None:
        self._log(logging.INFO, "record_created", key=key, source=source)

    def record_merged(self, key: str, fields: list[str]) -> None:
        """기존 레코드에 필드 병합"""
        self._log(logging.INFO, "record_merged", key=key, fields=fields)

    def record_migrated(self, old_key: str, new_key: str) -> None:
        """비정규 키에 저장된 레코드를 정규 키로 이동"""
        self._log(logging.INFO, "record_migrated", old_key=old_key, new_key=new_key)

    def record_deleted(self, isbn: str, keys: list[str]) -> None:
        level = logging.INFO if keys else logging.WARNING
        self._log(level, "record_deleted", isbn=isbn, keys=keys)

    def dedupe_complete(self, before: int, after: int) -> None:
        self._log(
            logging.INFO, "dedupe_complete",
            before=before, after=after, removed=before - after,
        )

    def import_complete(self, imported: int, updated: int, skipped: int) -> None:
        self._log(
            logging.INFO, "import_complete",
            imported=imported, updated=updated, skipped=skipped,
        )

    # === 외부 조회 ===

    def http_request(
        self,
        method: str,
        url: str,
        status: int,
        elapsed_ms: float,
        size: int = 0,
    ) -> None:
        """
        HTTP 요청/응답 로깅

        Args:
            method: HTTP 메서드
            url: 요청 URL
            status: 응답 상태 코드
            elapsed_ms: 응답 시간 (밀리초)
            size: 응답 크기 (바이트)
        """
        self._log(
            logging.DEBUG,
            "http_request",
            method=method,
            url=url,
            status=status,
            elapsed_ms=round(elapsed_ms, 1),
            size=size,
        )

    def http_error(self, method: str, url: str, error: str, elapsed_ms: float = 0) -> None:
        """HTTP 요청 실패 로깅"""
        self._log(
            logging.ERROR,
            "http_error",
            method=method,
            url=url,
            error=error,
            elapsed_ms=round(elapsed_ms, 1),
        )

    def lookup_complete(
        self, isbn: str, found: bool, provider: str = "", title: str = ""
    ) -> None:
        """외부 서지 조회 완료 로깅"""
        level = logging.INFO if found else logging.WARNING
        self._log(
            level,
            "lookup_complete",
            isbn=isbn,
            found=found,
            provider=provider,
            title=title,
        )

    # === 에러/디버그 ===

    def error(self, event: str, error: str, context: dict[str, Any] | None = None) -> None:
        """에러 로깅"""
        self._log(logging.ERROR, event, error=error, **(context or {}))

    def warning(self, event: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, event, **kwargs)

    def debug(self, debug_msg: str, **kwargs: Any) -> None:
        """디버그 메시지 로깅"""
        self._log(logging.DEBUG, "debug", debug_msg=debug_msg, **kwargs)
