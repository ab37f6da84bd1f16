"""레코드 조정 모듈 - 변형 ISBN 조회, 병합 저장, 변형 삭제, 중복 정리

모든 함수는 저장소(RecordStore)를 인자로 받습니다.
한 번의 호출은 저장소에 대한 읽기-수정-쓰기 한 묶음이며,
같은 키에 대한 동시 호출은 호출자가 직렬화해야 합니다 (BookService 참조).
"""

from datetime import datetime, timezone
from typing import Any

from book_logging import BookLogger
from catalog.isbn import clean, normalize, variants
from models.book import VariantMatch
from stores.base import RecordStore

logger = BookLogger("reconcile")

IDENTIFIER_FIELD = "isbn"
CREATED_FIELD = "createdAt"
UPDATED_FIELD = "updatedAt"
SOURCE_FIELD = "source"


def utc_now() -> str:
    """ISO-8601 UTC 타임스탬프"""
    return datetime.now(timezone.utc).isoformat()


def find_by_any_variant(store: RecordStore, raw: str) -> VariantMatch | None:
    """
    모든 변형 ISBN으로 레코드 조회

    variants(raw) 순서대로 저장소를 조회하여 첫 번째로 찾은 레코드와
    그 레코드가 저장된 정확한 키를 반환합니다.

    Args:
        store: 레코드 저장소
        raw: 사용자 입력 ISBN

    Returns:
        VariantMatch 또는 None
    """
    candidates = variants(raw)
    for key in candidates:
        record = store.get(key)
        if record is not None:
            logger.variant_lookup(raw, candidates, key)
            return VariantMatch(record=record, matched_key=key)
    logger.variant_lookup(raw, candidates, None)
    return None


def upsert(
    store: RecordStore,
    raw: str,
    incoming: dict[str, Any],
    now: str | None = None,
    created_at: str | None = None,
) -> dict[str, Any]:
    """
    병합 저장 (merge-on-write)

    - 기존 레코드가 있으면: 기존 필드 위에 incoming 필드를 덮어씀 (필드별 last-write-wins).
      incoming에 없는 필드는 보존, createdAt은 기존 값 유지.
    - 없으면: incoming 필드로 새 레코드 생성.
    - isbn(정규 키)과 updatedAt은 항상 새로 설정.
    - 기존 레코드가 정규 키가 아닌 키(예: ISBN-10)에 있었다면 정규 키로 옮기고 이전 키는 삭제.

    Args:
        store: 레코드 저장소
        raw: 사용자 입력 ISBN (검증을 거쳤다고 가정)
        incoming: 새로 들어온 필드
        now: 타임스탬프 (None이면 현재 시각)
        created_at: 새 레코드의 createdAt (동기화 가져오기용, 기존 레코드에는 무시)

    Returns:
        저장된 최종 레코드
    """
    timestamp = now or utc_now()
    match = find_by_any_variant(store, raw)
    canonical = normalize(raw)
    if canonical != clean(raw):
        logger.isbn_normalized(raw, canonical)

    if match is not None:
        existing = match.record
        if match.matched_key != canonical:
            # 정규 키에도 레코드가 남아 있으면 그 필드도 잃지 않도록 합침
            existing = {**(store.get(canonical) or {}), **existing}
        final = {
            **existing,
            **incoming,
            IDENTIFIER_FIELD: canonical,
            CREATED_FIELD: existing.get(CREATED_FIELD) or timestamp,
            UPDATED_FIELD: timestamp,
        }
        logger.record_merged(canonical, sorted(incoming))
    else:
        final = {
            **incoming,
            IDENTIFIER_FIELD: canonical,
            CREATED_FIELD: created_at or timestamp,
            UPDATED_FIELD: timestamp,
        }
        final.setdefault(SOURCE_FIELD, "unknown")
        logger.record_created(canonical, final[SOURCE_FIELD])

    store.set(canonical, final)

    if match is not None and match.matched_key != canonical:
        store.delete(match.matched_key)
        logger.record_migrated(match.matched_key, canonical)

    return final


def update_field(
    store: RecordStore,
    raw: str,
    field: str,
    value: Any,
    now: str | None = None,
) -> dict[str, Any] | None:
    """
    기존 레코드의 필드 하나 수정 (수동 보완 입력용)

    레코드가 비정규 키에 있었다면 정규 키로 옮겨집니다.

    Returns:
        수정된 레코드, 어떤 변형으로도 찾지 못하면 None
    """
    if find_by_any_variant(store, raw) is None:
        return None
    return upsert(store, raw, {field: value}, now=now)


def delete_by_any_variant(store: RecordStore, raw: str) -> bool:
    """
    모든 변형 ISBN 키의 레코드 삭제

    Returns:
        하나라도 삭제되었으면 True
    """
    removed = [key for key in variants(raw) if store.delete(key)]
    logger.record_deleted(raw, removed)
    return bool(removed)


def dedupe(store: RecordStore, now: str | None = None) -> int:
    """
    동치 ISBN(ISBN-10/13)으로 중복 저장된 레코드를 정규 키 하나로 합침

    정규 키 레코드의 필드가 우선하고, 빠진 필드만 다른 레코드에서 채웁니다.
    createdAt은 가장 이른 값을 유지합니다.

    Returns:
        줄어든 레코드 수
    """
    timestamp = now or utc_now()
    before = store.count()

    groups: dict[str, list[str]] = {}
    for key in sorted(store.keys()):
        groups.setdefault(normalize(key), []).append(key)

    for canonical, keys in groups.items():
        if keys == [canonical]:
            continue

        merged: dict[str, Any] = {}
        for key in sorted(keys, key=lambda k: k != canonical):
            record = store.get(key)
            if record is None:
                continue
            for name, value in record.items():
                merged.setdefault(name, value)
            created = record.get(CREATED_FIELD)
            if created and created < (merged.get(CREATED_FIELD) or created):
                merged[CREATED_FIELD] = created

        merged[IDENTIFIER_FIELD] = canonical
        merged[UPDATED_FIELD] = timestamp
        store.set(canonical, merged)

        for key in keys:
            if key != canonical:
                store.delete(key)
                logger.record_migrated(key, canonical)

    after = store.count()
    logger.dedupe_complete(before, after)
    return before - after
