"""로그 포매터"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

# LogRecord 기본 속성 (extra 필드가 아닌 것)
_SKIP_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
}


class ConsoleFormatter(logging.Formatter):
    """
    콘솔용 사람이 읽기 쉬운 포맷

    출력 예시:
    2024-01-15 10:30:45 [INFO] [reconcile] 병합: 9780156013987 ← pageCount
    2024-01-15 10:30:45 [DEBUG] [lookup] HTTP GET https://... (245ms, 4.5KB)
    """

    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",   # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")

        level_color = self.COLORS.get(record.levelno, "")
        component = getattr(record, "component", "")
        event = getattr(record, "event", "")

        prefix = f"{self.DIM}{timestamp}{self.RESET} [{level_color}{record.levelname}{self.RESET}]"
        if component:
            prefix += f" [{self.BOLD}{component}{self.RESET}]"

        if not event:
            return f"{prefix} {record.getMessage()}"
        return f"{prefix} {self._format_event(record, event)}"

    def _format_event(self, record: logging.LogRecord, event: str) -> str:
        """이벤트 타입별 메시지 포맷팅"""

        if event == "http_request":
            method = getattr(record, "method", "GET")
            url = getattr(record, "url", "")
            status = getattr(record, "status", 0)
            elapsed_ms = getattr(record, "elapsed_ms", 0)
            size = getattr(record, "size", 0)

            if len(url) > 80:
                url = url[:77] + "..."
            return f"HTTP {method} {url}\n  → {status} ({elapsed_ms:.0f}ms, {self._format_size(size)})"

        elif event == "http_error":
            method = getattr(record, "method", "GET")
            url = getattr(record, "url", "")
            error = getattr(record, "error", "")
            return f"HTTP {method} 실패: {url}\n  → {error}"

        elif event == "isbn_normalized":
            return f"정규화: {getattr(record, 'raw', '')} → {getattr(record, 'canonical', '')}"

        elif event == "variant_lookup":
            isbn = getattr(record, "isbn", "")
            variants = getattr(record, "variants", [])
            matched_key = getattr(record, "matched_key", None)
            if matched_key:
                return f"조회: {isbn} → {matched_key} (변형 {', '.join(variants)})"
            return f"조회 실패: {isbn} (변형 {', '.join(variants)})"

        elif event == "record_created":
            source = getattr(record, "source", None)
            source_str = f" ({source})" if source else ""
            return f"생성: {getattr(record, 'key', '')}{source_str}"

        elif event == "record_merged":
            fields = getattr(record, "fields", [])
            return f"병합: {getattr(record, 'key', '')} ← {', '.join(fields) or '-'}"

        elif event == "record_migrated":
            return f"키 이동: {getattr(record, 'old_key', '')} → {getattr(record, 'new_key', '')}"

        elif event == "record_deleted":
            keys = getattr(record, "keys", [])
            if keys:
                return f"삭제: {', '.join(keys)}"
            return f"삭제 대상 없음: {getattr(record, 'isbn', '')}"

        elif event == "dedupe_complete":
            before = getattr(record, "before", 0)
            after = getattr(record, "after", 0)
            return f"중복 정리: {before} → {after} ({before - after}건 제거)"

        elif event == "import_complete":
            return (
                f"가져오기: 신규 {getattr(record, 'imported', 0)}, "
                f"갱신 {getattr(record, 'updated', 0)}, "
                f"건너뜀 {getattr(record, 'skipped', 0)}"
            )

        elif event == "lookup_complete":
            isbn = getattr(record, "isbn", "")
            if getattr(record, "found", False):
                provider = getattr(record, "provider", "")
                title = getattr(record, "title", "")
                return f"외부 조회 완료: {isbn} → \"{title}\" ({provider})"
            return f"외부 조회 결과 없음: {isbn}"

        elif event == "debug":
            return getattr(record, "debug_msg", "")

        else:
            error = getattr(record, "error", "")
            if error:
                return f"{event}: {error}"
            return event

    def _format_size(self, size: int) -> str:
        """바이트 크기를 읽기 쉬운 형식으로"""
        if size < 1024:
            return f"{size}B"
        elif size < 1024 * 1024:
            return f"{size / 1024:.1f}KB"
        else:
            return f"{size / (1024 * 1024):.1f}MB"


class JsonFormatter(logging.Formatter):
    """
    JSON Lines 포맷 (기계 분석용)

    출력 예시:
    {"ts":"2024-01-15T10:30:45.123+00:00","level":"INFO","component":"reconcile","event":"record_merged",...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }

        for key, value in record.__dict__.items():
            if key in _SKIP_ATTRS or key.startswith("_"):
                continue
            if isinstance(value, (str, int, float, bool, type(None), list, dict)):
                log_entry[key] = value
            else:
                log_entry[key] = str(value)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)
