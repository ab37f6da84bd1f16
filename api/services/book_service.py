"""도서 카탈로그 서비스 레이어

저장소/조회 프로바이더를 하나의 명시적 객체로 묶습니다.
프로세스(또는 CLI 실행)당 한 번 생성하여 API 라우트와 CLI에 전달합니다.
"""

import base64
import binascii
import re
import threading
from datetime import datetime, timezone
from typing import Any

from book_logging import BookLogger
from catalog import reconcile
from catalog.errors import BookNotFoundError, InvalidCoverError, InvalidISBNError
from catalog.isbn import is_sentinel, validate
from catalog.search import collect_stats, search_books
from models.book import ImportSummary, ValidationResult, sentinel_book
from providers.lookup import BookLookup
from stores.base import RecordStore

logger = BookLogger("service")

MAX_COVER_BYTES = 5 * 1024 * 1024
COVER_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<payload>.+)$", re.DOTALL)


def _parse_timestamp(value: Any) -> datetime | None:
    """ISO-8601 문자열 → aware datetime (해석 불가면 None)"""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _is_newer(incoming: Any, existing: Any) -> bool:
    """가져오기 레코드가 기존보다 최신인지 (타임스탬프가 없는 쪽은 오래된 것으로 취급)"""
    incoming_ts = _parse_timestamp(incoming)
    existing_ts = _parse_timestamp(existing)
    if incoming_ts is None:
        return incoming is None
    if existing_ts is None:
        return True
    return incoming_ts > existing_ts


class BookService:
    """
    도서 조회/캐시/수동 보완 서비스

    모든 읽기-수정-쓰기 작업은 인스턴스 잠금 아래에서 실행되어
    같은 저장소에 대한 동시 병합이 서로 덮어쓰지 않도록 합니다.

    Usage:
        service = BookService(MemoryStore(), BookLookup())
        service.search_by_isbn("978-0-15-601398-7")
        service.update_field("0156013987", "pageCount", 96)
    """

    def __init__(
        self,
        store: RecordStore,
        lookup: BookLookup | None = None,
        strict: bool = False,
    ):
        self.store = store
        self.lookup = lookup
        self.strict = strict
        self._lock = threading.RLock()

    # === 검증 ===

    def validate(self, raw: str) -> ValidationResult:
        return validate(raw, strict=self.strict)

    def _require_valid(self, raw: str) -> str:
        result = self.validate(raw)
        if not result.valid:
            raise InvalidISBNError(raw, result)
        return result.isbn

    # === 조회 ===

    def get_book(self, raw: str) -> dict[str, Any]:
        """저장소에서 변형 ISBN으로 조회 (없으면 BookNotFoundError)"""
        isbn = self._require_valid(raw)
        match = reconcile.find_by_any_variant(self.store, isbn)
        if match is None:
            raise BookNotFoundError(isbn)
        return match.record

    def search_by_isbn(self, raw: str) -> dict[str, Any]:
        """
        ISBN 검색: 로컬 캐시 → 예약 ISBN → 외부 프로바이더

        외부에서 찾은 도서는 출처(source)를 붙여 병합 저장합니다.

        Returns:
            {"source": "cache" | "easter_egg" | 프로바이더명, "book": 레코드}

        Raises:
            InvalidISBNError, BookNotFoundError, ProviderError
        """
        isbn = self._require_valid(raw)

        match = reconcile.find_by_any_variant(self.store, isbn)
        if match is not None:
            return {"source": "cache", "book": match.record}

        if is_sentinel(isbn):
            return {"source": "easter_egg", "book": sentinel_book(isbn)}

        if self.lookup is None:
            raise BookNotFoundError(isbn)

        result = self.lookup.lookup(isbn)
        if result is None:
            raise BookNotFoundError(isbn)

        with self._lock:
            record = reconcile.upsert(
                self.store, isbn, {**result.fields, "source": result.provider}
            )
        return {"source": result.provider, "book": record}

    def search_books(self, query: str | None = None, limit: int = 10, offset: int = 0) -> list[dict]:
        return search_books(self.store, query, limit=limit, offset=offset)

    def stats(self) -> dict[str, Any]:
        return collect_stats(self.store)

    # === 생성/수정/삭제 ===

    def create_book(self, raw: str, fields: dict[str, Any]) -> dict[str, Any]:
        """수동 입력 또는 외부 데이터로 레코드 생성 (이미 있으면 병합)"""
        isbn = self._require_valid(raw)
        with self._lock:
            return reconcile.upsert(self.store, isbn, fields)

    def update_book(self, raw: str, fields: dict[str, Any]) -> dict[str, Any]:
        """기존 레코드에 필드 병합 (없으면 BookNotFoundError)"""
        isbn = self._require_valid(raw)
        with self._lock:
            if reconcile.find_by_any_variant(self.store, isbn) is None:
                raise BookNotFoundError(isbn)
            return reconcile.upsert(self.store, isbn, fields)

    def update_field(self, raw: str, field: str, value: Any) -> dict[str, Any]:
        """필드 하나 수정"""
        isbn = self._require_valid(raw)
        with self._lock:
            record = reconcile.update_field(self.store, isbn, field, value)
        if record is None:
            raise BookNotFoundError(isbn)
        return record

    def delete_book(self, raw: str) -> None:
        """모든 변형 키 삭제 (하나도 없으면 BookNotFoundError)"""
        isbn = self._require_valid(raw)
        with self._lock:
            deleted = reconcile.delete_by_any_variant(self.store, isbn)
        if not deleted:
            raise BookNotFoundError(isbn)

    def set_cover(self, raw: str, cover_data: str) -> dict[str, Any]:
        """
        표지 이미지 저장 (data URL → imageLinks.thumbnail)

        허용 형식: JPEG, PNG, WebP. 최대 5MB.

        Raises:
            InvalidCoverError, InvalidISBNError, BookNotFoundError
        """
        isbn = self._require_valid(raw)

        match = _DATA_URL.match(cover_data or "")
        if not match:
            raise InvalidCoverError("표지 데이터는 base64 data URL이어야 합니다")
        if match.group("mime") not in COVER_MIME_TYPES:
            raise InvalidCoverError("지원하지 않는 이미지 형식입니다 (JPG, PNG, WebP만 가능)")
        try:
            size = len(base64.b64decode(match.group("payload"), validate=True))
        except (binascii.Error, ValueError) as e:
            raise InvalidCoverError(f"base64 디코딩 실패: {e}") from e
        if size > MAX_COVER_BYTES:
            raise InvalidCoverError("이미지가 너무 큽니다 (최대 5MB)")

        with self._lock:
            existing = reconcile.find_by_any_variant(self.store, isbn)
            if existing is None:
                raise BookNotFoundError(isbn)
            image_links = {**(existing.record.get("imageLinks") or {}), "thumbnail": cover_data}
            return reconcile.upsert(self.store, isbn, {"imageLinks": image_links})

    # === 동기화/정리 ===

    def export_books(self) -> dict[str, Any]:
        """전체 레코드 내보내기 ({정규 키: 레코드})"""
        books = dict(self.store.items())
        return {
            "exportDate": reconcile.utc_now(),
            "bookCount": len(books),
            "books": books,
        }

    def import_books(self, books: dict[str, Any]) -> ImportSummary:
        """
        다른 저장소(브라우저 등)에서 내보낸 레코드 가져오기

        - 잘못된 ISBN 키는 건너뜀
        - 기존 레코드보다 updatedAt이 최신인 경우에만 병합
        - 새 레코드는 원래 createdAt 유지
        """
        summary = ImportSummary()
        with self._lock:
            for key, record in books.items():
                result = self.validate(key)
                if not result.valid or not isinstance(record, dict):
                    logger.warning("import_invalid_key", key=key)
                    summary.invalid_keys.append(key)
                    summary.skipped += 1
                    continue

                existing = reconcile.find_by_any_variant(self.store, result.isbn)
                if existing is not None and not _is_newer(
                    record.get(reconcile.UPDATED_FIELD),
                    existing.record.get(reconcile.UPDATED_FIELD),
                ):
                    summary.skipped += 1
                    continue

                fields = {
                    name: value for name, value in record.items()
                    if name not in (reconcile.CREATED_FIELD, reconcile.UPDATED_FIELD)
                }
                reconcile.upsert(
                    self.store,
                    result.isbn,
                    fields,
                    created_at=record.get(reconcile.CREATED_FIELD),
                )
                if existing is None:
                    summary.imported += 1
                else:
                    summary.updated += 1

            summary.total = self.store.count()

        logger.import_complete(summary.imported, summary.updated, summary.skipped)
        return summary

    def dedupe(self) -> int:
        """동치 ISBN 중복 레코드 정리"""
        with self._lock:
            return reconcile.dedupe(self.store)
