"""JSON 파일 저장소

파일 형식: {"<정규 키>": {레코드}, ...} 단일 JSON 객체.
생성 시 전체를 읽고, 변경 시마다 임시 파일에 쓴 뒤 교체합니다.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from book_logging import BookLogger
from catalog.errors import StoreError
from stores.base import RecordStore

logger = BookLogger("store")


class JsonFileStore(RecordStore):
    """플랫 JSON 파일 기반 저장소"""

    name = "json"

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._data: dict[str, dict[str, Any]] = self._load()

    def _load(self) -> dict[str, dict[str, Any]]:
        """파일 로드. 없거나 손상된 파일은 빈 저장소로 시작"""
        if not self.path.exists():
            logger.debug(f"새 저장소 파일: {self.path}")
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("store_load_failed", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("store_load_failed", path=str(self.path), error="최상위가 객체가 아님")
            return {}
        logger.debug(f"저장소 로드: {len(data)}권", path=str(self.path))
        return data

    def _save(self, data: dict[str, dict[str, Any]]) -> None:
        """원자적 저장 (임시 파일 → replace). 성공한 경우에만 메모리 상태 교체"""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StoreError(f"저장소 파일 저장 실패 ({self.path}): {e}") from e
        self._data = data

    def get(self, key: str) -> dict[str, Any] | None:
        record = self._data.get(key)
        return copy.deepcopy(record) if record is not None else None

    def set(self, key: str, record: dict[str, Any]) -> None:
        self._save({**self._data, key: copy.deepcopy(record)})

    def delete(self, key: str) -> bool:
        if key not in self._data:
            return False
        self._save({k: v for k, v in self._data.items() if k != key})
        return True

    def keys(self) -> set[str]:
        return set(self._data)


def migrate_json_to_store(path: str | Path, store: RecordStore) -> int:
    """
    기존 JSON 파일의 레코드를 다른 저장소로 이관

    이미 존재하는 키는 덮어쓰지 않습니다.

    Args:
        path: 원본 JSON 파일 경로
        store: 대상 저장소

    Returns:
        새로 옮긴 레코드 수
    """
    source = JsonFileStore(path)
    existing = store.keys()
    migrated = 0
    for key, record in source.items():
        if key in existing:
            continue
        store.set(key, record)
        migrated += 1
    logger.debug(f"JSON 이관 완료: {migrated}권", path=str(path))
    return migrated
