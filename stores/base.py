"""레코드 저장소 추상 클래스

정규 키(ISBN-13 또는 예약 ISBN)로 레코드를 get/set/delete 합니다.
동시 쓰기 직렬화는 저장소 구현 또는 호출자(BookService)의 책임입니다.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterator


class RecordStore(ABC):
    """도서 레코드 키-값 저장소"""

    name: str = "base"

    @abstractmethod
    def get(self, key: str) -> dict[str, Any] | None:
        """키로 레코드 조회 (없으면 None)"""

    @abstractmethod
    def set(self, key: str, record: dict[str, Any]) -> None:
        """키에 레코드 저장 (덮어쓰기)"""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """레코드 삭제. 존재했으면 True"""

    @abstractmethod
    def keys(self) -> set[str]:
        """저장된 모든 키"""

    def items(self) -> Iterator[tuple[str, dict[str, Any]]]:
        for key in sorted(self.keys()):
            record = self.get(key)
            if record is not None:
                yield key, record

    def count(self) -> int:
        return len(self.keys())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
