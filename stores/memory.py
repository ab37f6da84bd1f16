"""메모리 저장소 (테스트 및 임시 실행용)"""

from __future__ import annotations

import copy
from typing import Any

from stores.base import RecordStore


class MemoryStore(RecordStore):
    """dict 기반 저장소. 반환/저장 시 깊은 복사로 외부 변경을 차단"""

    name = "memory"

    def __init__(self, data: dict[str, dict[str, Any]] | None = None):
        self._data: dict[str, dict[str, Any]] = copy.deepcopy(data) if data else {}

    def get(self, key: str) -> dict[str, Any] | None:
        record = self._data.get(key)
        return copy.deepcopy(record) if record is not None else None

    def set(self, key: str, record: dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(record)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> set[str]:
        return set(self._data)
