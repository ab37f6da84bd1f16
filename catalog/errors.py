"""카탈로그 예외 계층

ISBN 검증 실패 자체는 예외가 아닙니다 (ValidationResult 반환).
아래 예외는 서비스/저장소 계층에서 호출자에게 전달할 때만 사용합니다.
"""

from models.book import ValidationResult


class CatalogError(Exception):
    """카탈로그 예외 기본 클래스"""


class InvalidISBNError(CatalogError):
    """서비스 호출에 잘못된 ISBN이 전달됨"""

    def __init__(self, raw: str, result: ValidationResult):
        self.raw = raw
        self.result = result
        super().__init__(f"{raw}: {result.message}")


class BookNotFoundError(CatalogError):
    """어떤 변형 ISBN으로도 레코드를 찾을 수 없음"""

    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"ISBN {isbn} 도서를 찾을 수 없습니다")


class InvalidCoverError(CatalogError):
    """표지 이미지 데이터가 잘못됨"""


class StoreError(CatalogError):
    """레코드 저장소 입출력 실패"""


class ProviderError(CatalogError):
    """모든 외부 조회 프로바이더가 실패함"""
