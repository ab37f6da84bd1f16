"""Supabase(PostgreSQL) 저장소

테이블 스키마:
    CREATE TABLE IF NOT EXISTS books (
        isbn TEXT PRIMARY KEY,
        data JSONB NOT NULL
    );
"""

from __future__ import annotations

from typing import Any

from supabase import Client, create_client

from catalog.errors import StoreError
from stores.base import RecordStore

PAGE_SIZE = 1000


class SupabaseStore(RecordStore):
    """books(isbn, data) 테이블 기반 저장소"""

    name = "supabase"

    def __init__(self, client: Client, table: str = "books"):
        self.client = client
        self.table = table

    @classmethod
    def from_credentials(cls, url: str, key: str, table: str = "books") -> "SupabaseStore":
        """URL/키로 클라이언트를 생성하여 저장소 구성"""
        return cls(create_client(url, key), table=table)

    def get(self, key: str) -> dict[str, Any] | None:
        try:
            result = (
                self.client.table(self.table)
                .select("data")
                .eq("isbn", key)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise StoreError(f"레코드 조회 실패 ({key}): {e}") from e
        if not result.data:
            return None
        return result.data[0]["data"]

    def set(self, key: str, record: dict[str, Any]) -> None:
        try:
            self.client.table(self.table).upsert({"isbn": key, "data": record}).execute()
        except Exception as e:
            raise StoreError(f"레코드 저장 실패 ({key}): {e}") from e

    def delete(self, key: str) -> bool:
        try:
            result = self.client.table(self.table).delete().eq("isbn", key).execute()
        except Exception as e:
            raise StoreError(f"레코드 삭제 실패 ({key}): {e}") from e
        return bool(result.data)

    def keys(self) -> set[str]:
        found: set[str] = set()
        offset = 0
        while True:
            try:
                result = (
                    self.client.table(self.table)
                    .select("isbn")
                    .range(offset, offset + PAGE_SIZE - 1)
                    .execute()
                )
            except Exception as e:
                raise StoreError(f"키 목록 조회 실패: {e}") from e
            rows = result.data or []
            found.update(row["isbn"] for row in rows)
            if len(rows) < PAGE_SIZE:
                return found
            offset += PAGE_SIZE
