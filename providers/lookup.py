"""외부 서지 정보 조회 모듈 - ISBN으로 도서 메타데이터 검색

확장 가능한 구조:
- BookProvider: 추상 기본 클래스
- GoogleBooksProvider: Google Books API (키 선택)
- OpenLibraryProvider: Open Library API (무료, 키 불필요)

사용 예:
    lookup = BookLookup()
    result = lookup.lookup("9780156013987")
"""

import json
import os
import time
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from typing import Any

from book_logging import BookLogger
from catalog.errors import ProviderError
from models.book import LookupResult

# 저장 레코드에 옮겨 담을 volumeInfo 필드
VOLUME_FIELDS = (
    "title",
    "subtitle",
    "authors",
    "publisher",
    "publishedDate",
    "description",
    "pageCount",
    "categories",
    "language",
    "imageLinks",
    "industryIdentifiers",
)


class BookProvider(ABC):
    """서지 정보 프로바이더 추상 클래스"""

    name: str = "base"
    timeout: int = 10
    user_agent: str = "BookShelf/1.0"

    def __init__(self, timeout: int | None = None):
        if timeout is not None:
            self.timeout = timeout
        self.logger = BookLogger(f"lookup.{self.name}")

    @abstractmethod
    def fetch(self, isbn: str) -> LookupResult | None:
        """
        ISBN으로 도서 정보 조회

        Args:
            isbn: 정리된 ISBN-10/13

        Returns:
            LookupResult 또는 None (결과 없음)

        Raises:
            네트워크/파싱 오류는 그대로 전파 (BookLookup이 처리)
        """

    def _api_get(self, url: str) -> dict | None:
        """JSON API GET 요청"""
        start = time.perf_counter()
        req = urllib.request.Request(url)
        req.add_header("User-Agent", self.user_agent)
        req.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                content = resp.read()
                status = getattr(resp, "status", 200)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.logger.http_error("GET", url, str(e), elapsed_ms)
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        self.logger.http_request("GET", url, status, elapsed_ms, size=len(content))
        return json.loads(content.decode("utf-8"))


class GoogleBooksProvider(BookProvider):
    """Google Books API 프로바이더"""

    name = "google_books"
    base_url = "https://www.googleapis.com/books/v1/volumes"

    def __init__(self, api_key: str | None = None, timeout: int | None = None):
        super().__init__(timeout)
        self.api_key = api_key if api_key is not None else os.environ.get("GOOGLE_BOOKS_API_KEY", "")

    def _build_url(self, isbn: str) -> str:
        url = f"{self.base_url}?q=isbn:{urllib.parse.quote(isbn)}"
        if self.api_key:
            url += f"&key={self.api_key}"
        return url

    def fetch(self, isbn: str) -> LookupResult | None:
        data = self._api_get(self._build_url(isbn))
        if not data or not data.get("items"):
            return None

        info = data["items"][0].get("volumeInfo", {})
        fields = {name: info[name] for name in VOLUME_FIELDS if info.get(name) is not None}
        if not fields:
            return None
        return LookupResult(isbn=isbn, fields=fields, provider=self.name)


class OpenLibraryProvider(BookProvider):
    """Open Library API 프로바이더 (무료, API 키 불필요)"""

    name = "open_library"
    base_url = "https://openlibrary.org/api/books"

    def fetch(self, isbn: str) -> LookupResult | None:
        bibkey = f"ISBN:{isbn}"
        query = urllib.parse.urlencode({"bibkeys": bibkey, "format": "json", "jscmd": "data"})
        data = self._api_get(f"{self.base_url}?{query}")
        if not data or bibkey not in data:
            return None

        fields = self._to_volume_fields(data[bibkey])
        if not fields:
            return None
        return LookupResult(isbn=isbn, fields=fields, provider=self.name)

    @staticmethod
    def _to_volume_fields(doc: dict[str, Any]) -> dict[str, Any]:
        """Open Library 응답을 Google Books volumeInfo 필드명으로 변환"""
        fields: dict[str, Any] = {}
        if doc.get("title"):
            fields["title"] = doc["title"]
        if doc.get("subtitle"):
            fields["subtitle"] = doc["subtitle"]
        authors = [a.get("name") for a in doc.get("authors", []) if a.get("name")]
        if authors:
            fields["authors"] = authors
        publishers = [p.get("name") for p in doc.get("publishers", []) if p.get("name")]
        if publishers:
            fields["publisher"] = publishers[0]
        if doc.get("publish_date"):
            fields["publishedDate"] = doc["publish_date"]
        if doc.get("number_of_pages"):
            fields["pageCount"] = doc["number_of_pages"]
        subjects = [s.get("name") for s in doc.get("subjects", []) if s.get("name")]
        if subjects:
            fields["categories"] = subjects[:5]
        cover = doc.get("cover") or {}
        if cover:
            fields["imageLinks"] = {
                "thumbnail": cover.get("medium") or cover.get("small") or cover.get("large"),
            }
        return fields


class BookLookup:
    """
    서지 조회 통합 클래스

    여러 프로바이더를 순차적으로 시도.
    기본 순서: Google Books → Open Library
    """

    def __init__(self, providers: list[BookProvider] | None = None):
        self.logger = BookLogger("lookup")
        if providers is not None:
            self.providers = providers
        else:
            self.providers = [GoogleBooksProvider(), OpenLibraryProvider()]

    def lookup(self, isbn: str) -> LookupResult | None:
        """
        ISBN 조회

        프로바이더 오류는 기록 후 다음 프로바이더로 넘어갑니다.
        모든 프로바이더가 오류로 끝난 경우에만 ProviderError를 발생시킵니다.

        Args:
            isbn: 정리된 ISBN

        Returns:
            LookupResult 또는 None (어느 프로바이더에도 없음)
        """
        errors: list[str] = []
        for provider in self.providers:
            try:
                result = provider.fetch(isbn)
            except Exception as e:
                self.logger.error("provider_failed", str(e), {"provider": provider.name, "isbn": isbn})
                errors.append(f"{provider.name}: {e}")
                continue
            if result:
                self.logger.lookup_complete(
                    isbn, True, provider=result.provider, title=result.fields.get("title", "")
                )
                return result

        if self.providers and len(errors) == len(self.providers):
            raise ProviderError("모든 조회 서비스가 실패했습니다. " + "; ".join(errors))

        self.logger.lookup_complete(isbn, False)
        return None

