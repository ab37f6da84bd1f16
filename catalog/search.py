"""로컬 저장소 검색 및 통계"""

from collections import Counter
from typing import Any

from catalog.reconcile import CREATED_FIELD, SOURCE_FIELD, UPDATED_FIELD
from stores.base import RecordStore


def _text(value: Any) -> str:
    """문자열/리스트 필드를 소문자 검색 텍스트로"""
    if not value:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value).lower()
    return str(value).lower()


def relevance_score(record: dict[str, Any], term: str) -> int:
    """
    검색 관련도 점수

    제목 포함 +10, 제목 시작 +5, 저자 포함 +8, 저자 시작 +3.
    출판사/설명에서만 일치하면 0점 (결과에는 포함).
    """
    title = _text(record.get("title"))
    authors = _text(record.get("authors"))

    score = 0
    if term in title:
        score += 10
    if title.startswith(term):
        score += 5
    if term in authors:
        score += 8
    if authors.startswith(term):
        score += 3
    return score


def _matches(record: dict[str, Any], term: str) -> bool:
    return any(
        term in _text(record.get(name))
        for name in ("title", "authors", "publisher", "description")
    )


def search_books(
    store: RecordStore,
    query: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """
    제목/저자/출판사/설명으로 검색

    검색어가 없으면 최근 추가된 순으로 반환합니다.
    검색어가 있으면 관련도 점수 내림차순 (동점이면 최근 추가 순).

    Args:
        store: 레코드 저장소
        query: 검색어 (대소문자 무시)
        limit: 최대 결과 수
        offset: 시작 위치

    Returns:
        {"isbn": 키, ...레코드, "score": 점수} 리스트 (검색어가 있을 때만 score 포함)
    """
    term = (query or "").strip().lower()
    records = [{"isbn": key, **record} for key, record in store.items()]
    records.sort(key=lambda r: r.get(CREATED_FIELD) or "", reverse=True)

    if not term:
        return records[offset:offset + limit]

    results = []
    for record in records:
        if _matches(record, term):
            results.append({**record, "score": relevance_score(record, term)})
    # sort는 안정 정렬이므로 동점은 최근 추가 순을 유지
    results.sort(key=lambda r: r["score"], reverse=True)
    return results[offset:offset + limit]


def collect_stats(store: RecordStore) -> dict[str, Any]:
    """저장소 통계: 전체 권수, 출처별 권수, 표지 보유 수, 마지막 갱신 시각"""
    total = 0
    sources: Counter[str] = Counter()
    with_cover = 0
    last_updated = None

    for _, record in store.items():
        total += 1
        sources[record.get(SOURCE_FIELD) or "unknown"] += 1
        if (record.get("imageLinks") or {}).get("thumbnail"):
            with_cover += 1
        updated = record.get(UPDATED_FIELD)
        if updated and (last_updated is None or updated > last_updated):
            last_updated = updated

    return {
        "total_books": total,
        "sources": dict(sources),
        "with_cover": with_cover,
        "last_updated": last_updated,
    }
