from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ISBNError(str, Enum):
    """ISBN 검증 실패 사유"""

    INVALID_LENGTH = "InvalidLength"
    INVALID_PREFIX = "InvalidPrefix"
    INVALID_FORMAT = "InvalidFormat"
    INVALID_CHECKSUM = "InvalidChecksum"


ERROR_MESSAGES = {
    ISBNError.INVALID_LENGTH: "ISBN은 10자리 또는 13자리여야 합니다",
    ISBNError.INVALID_PREFIX: "ISBN-13은 978 또는 979로 시작해야 합니다",
    ISBNError.INVALID_FORMAT: "ISBN 형식이 올바르지 않습니다",
    ISBNError.INVALID_CHECKSUM: "ISBN 체크 디지트가 일치하지 않습니다",
}


@dataclass(frozen=True)
class ValidationResult:
    """ISBN 검증 결과 (예외 대신 값으로 반환)"""

    valid: bool
    isbn: str | None = None  # 정리된 ISBN (valid일 때만)
    error: ISBNError | None = None

    @property
    def message(self) -> str:
        """사람이 읽을 수 있는 오류 메시지"""
        if self.error is None:
            return ""
        return ERROR_MESSAGES[self.error]

    def to_dict(self) -> dict:
        if self.valid:
            return {"valid": True, "isbn": self.isbn}
        return {"valid": False, "error": self.error.value, "message": self.message}


@dataclass(frozen=True)
class VariantMatch:
    """변형 ISBN 조회 결과: 레코드와 실제로 일치한 저장 키"""

    record: dict[str, Any]
    matched_key: str


@dataclass
class LookupResult:
    """외부 서지 정보 조회 결과"""

    isbn: str
    fields: dict[str, Any]  # Google Books volumeInfo 형태의 필드
    provider: str


@dataclass
class ImportSummary:
    """동기화 가져오기 결과 집계"""

    imported: int = 0
    updated: int = 0
    skipped: int = 0
    total: int = 0
    invalid_keys: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "imported": self.imported,
            "updated": self.updated,
            "skipped": self.skipped,
            "total": self.total,
            "invalid_keys": list(self.invalid_keys),
        }


def format_book_data(record: dict[str, Any]) -> dict:
    """
    저장된 레코드를 화면 표시용 volumeInfo 형태로 변환

    누락된 필드는 기본값으로 채웁니다. 저장 레코드 자체는 변경하지 않습니다.
    """
    return {
        "volumeInfo": {
            "title": record.get("title") or "제목 미상",
            "authors": record.get("authors") or [],
            "publisher": record.get("publisher"),
            "publishedDate": record.get("publishedDate"),
            "pageCount": record.get("pageCount"),
            "categories": record.get("categories") or ["미분류"],
            "language": record.get("language") or "unknown",
            "description": record.get("description"),
            "industryIdentifiers": record.get("industryIdentifiers") or [],
            "imageLinks": record.get("imageLinks"),
        }
    }


def sentinel_book(isbn: str) -> dict:
    """예약 ISBN(6666666666666) 전용 이스터에그 도서"""
    return {
        "isbn": isbn,
        "title": "666: Le Livre Maudit",
        "authors": ["666", "Démon 666", "Satan 666"],
        "publisher": "666 Éditions Infernales",
        "publishedDate": "666",
        "pageCount": 666,
        "categories": ["666", "Diabolique", "Maudit"],
        "language": "demon",
        "description": "666개의 장, 666명의 악마, 666일의 저주가 담긴 책.",
        "industryIdentifiers": [{"type": "ISBN_666", "identifier": isbn}],
        "imageLinks": None,
        "source": "easter_egg",
    }
