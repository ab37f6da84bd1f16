"""ISBN 식별자 모듈 - 정리, 검증, ISBN-10/13 변환, 변형 목록

모든 함수는 부수효과가 없는 순수 함수입니다.
저장 키는 항상 ISBN-13 (예약 ISBN은 그대로) 입니다.

사용 예:
    normalize("0-15-601398-7")   # → "9780156013987"
    variants("9780156013987")    # → ["9780156013987", "0156013983"]
"""

import re

from models.book import ISBNError, ValidationResult

# 정규화/검증/변환을 모두 건너뛰는 예약 ISBN
SENTINEL_ISBN = "6666666666666"

ISBN13_PREFIXES = ("978", "979")
ASCII_DIGITS = "0123456789"

_ISBN10_PATTERN = re.compile(r"^[0-9]{9}[0-9X]$")
_ISBN13_PATTERN = re.compile(r"^[0-9]{13}$")
_SEPARATORS = re.compile(r"[-\s]")


def clean(raw: str) -> str:
    """ISBN에서 하이픈/공백 제거 (자릿수 검사 없음)"""
    return _SEPARATORS.sub("", raw)


def is_sentinel(raw: str) -> bool:
    """예약 ISBN 여부"""
    return clean(raw) == SENTINEL_ISBN


def _digit(ch: str) -> int:
    # ASCII 숫자가 아닌 문자는 0으로 취급 (검증되지 않은 입력에서도 예외 없음)
    return int(ch) if ch in ASCII_DIGITS else 0


def isbn13_check_digit(partial: str) -> str:
    """
    ISBN-13 (EAN-13) 체크 디지트 계산

    Args:
        partial: 앞 12자리

    Returns:
        체크 디지트 한 글자
    """
    total = sum(_digit(ch) * (1 if i % 2 == 0 else 3) for i, ch in enumerate(partial[:12]))
    return str((10 - total % 10) % 10)


def isbn10_check_digit(partial: str) -> str:
    """
    ISBN-10 체크 문자 계산 (가중치 10..2, mod 11)

    Args:
        partial: 앞 9자리

    Returns:
        "0"-"9" 또는 "X"
    """
    total = sum(_digit(ch) * (10 - i) for i, ch in enumerate(partial[:9]))
    check = 11 - total % 11
    if check == 10:
        return "X"
    if check == 11:
        return "0"
    return str(check)


def has_valid_checksum(isbn: str) -> bool:
    """체크 디지트가 수학적으로 맞는지 확인 (정리된 10/13자리 입력 기준)"""
    if len(isbn) == 13:
        return isbn13_check_digit(isbn[:12]) == isbn[12]
    if len(isbn) == 10:
        return isbn10_check_digit(isbn[:9]) == isbn[9]
    return False


def validate(raw: str, strict: bool = False) -> ValidationResult:
    """
    ISBN 검증

    순서: 예약 ISBN → 길이 → 문자 구성 → ISBN-13 접두사 → (strict) 체크 디지트.
    잘못된 입력은 예외가 아니라 ValidationResult(valid=False)로 반환합니다.

    Args:
        raw: 사용자 입력 ISBN
        strict: True면 체크 디지트까지 검증

    Returns:
        ValidationResult
    """
    isbn = clean(raw)

    if isbn == SENTINEL_ISBN:
        return ValidationResult(valid=True, isbn=isbn)

    if len(isbn) not in (10, 13):
        return ValidationResult(valid=False, error=ISBNError.INVALID_LENGTH)

    pattern = _ISBN10_PATTERN if len(isbn) == 10 else _ISBN13_PATTERN
    if not pattern.match(isbn):
        return ValidationResult(valid=False, error=ISBNError.INVALID_FORMAT)

    if len(isbn) == 13 and not isbn.startswith(ISBN13_PREFIXES):
        return ValidationResult(valid=False, error=ISBNError.INVALID_PREFIX)

    if strict and not has_valid_checksum(isbn):
        return ValidationResult(valid=False, error=ISBNError.INVALID_CHECKSUM)

    return ValidationResult(valid=True, isbn=isbn)


def to_isbn13(isbn10: str) -> str:
    """ISBN-10 → ISBN-13 ("978" 접두사 + 앞 9자리 + 새 체크 디지트)"""
    partial = "978" + isbn10[:9]
    return partial + isbn13_check_digit(partial)


def to_isbn10(isbn13: str) -> str | None:
    """
    ISBN-13 → ISBN-10

    978로 시작하는 13자리만 변환 가능. 979 코드는 ISBN-10이 존재하지 않으므로 None.
    """
    if len(isbn13) != 13 or not isbn13.startswith("978"):
        return None
    partial = isbn13[3:12]
    return partial + isbn10_check_digit(partial)


def normalize(raw: str) -> str:
    """
    저장용 정규 키 계산

    - 예약 ISBN: 그대로
    - 13자리: 그대로
    - 10자리: ISBN-13으로 변환
    - 그 외 (검증을 거치지 않은 비정상 길이): 정리된 문자열 그대로
    """
    isbn = clean(raw)
    if isbn == SENTINEL_ISBN or len(isbn) != 10:
        return isbn
    return to_isbn13(isbn)


def variants(raw: str) -> list[str]:
    """
    동일 도서를 가리킬 수 있는 ISBN 변형 목록 (조회용)

    첫 번째 원소는 항상 정리된 입력이며, 중복은 없습니다.
    """
    isbn = clean(raw)
    found = [isbn]

    if isbn == SENTINEL_ISBN:
        return found

    if len(isbn) == 13 and isbn.startswith("978"):
        isbn10 = to_isbn10(isbn)
        if isbn10 and isbn10 not in found:
            found.append(isbn10)
    elif len(isbn) == 10:
        isbn13 = to_isbn13(isbn)
        if isbn13 != isbn:
            found.append(isbn13)

    return found


def format_isbn(raw: str) -> str:
    """
    표시용 하이픈 포맷

    예: 9780156013987 → 978-0-15-601398-7, 0156013983 → 0-15-601398-3
    그룹 경계는 등록 그룹 표를 참조하지 않는 고정 위치입니다.
    """
    isbn = re.sub(r"[^0-9X]", "", raw)
    if len(isbn) == 13:
        return f"{isbn[:3]}-{isbn[3:4]}-{isbn[4:6]}-{isbn[6:12]}-{isbn[12:]}"
    if len(isbn) == 10:
        return f"{isbn[:1]}-{isbn[1:3]}-{isbn[3:9]}-{isbn[9:]}"
    return isbn
