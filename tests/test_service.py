"""BookService 테스트"""

import base64
import threading
from unittest.mock import MagicMock

import pytest

from api.services.book_service import MAX_COVER_BYTES, BookService, _is_newer
from catalog.errors import (
    BookNotFoundError,
    InvalidCoverError,
    InvalidISBNError,
    ProviderError,
)
from models.book import ISBNError, LookupResult
from stores.memory import MemoryStore

from conftest import FIXED_NOW, LATER

PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()


def make_lookup(fields=None, provider="google_books", error=None):
    lookup = MagicMock()
    if error:
        lookup.lookup.side_effect = error
    elif fields is None:
        lookup.lookup.return_value = None
    else:
        lookup.lookup.side_effect = lambda isbn: LookupResult(isbn=isbn, fields=fields, provider=provider)
    return lookup


class TestValidation:
    """검증 테스트"""

    def test_invalid_isbn_raises(self, service):
        with pytest.raises(InvalidISBNError) as exc_info:
            service.get_book("12345")
        assert exc_info.value.result.error == ISBNError.INVALID_LENGTH

    def test_fullwidth_isbn_does_not_create_second_record(self, service, store):
        """전각 숫자 ISBN은 거부되어 중복 레코드가 생기지 않음"""
        service.create_book("0156013983", {"title": "Le Petit Prince"})

        with pytest.raises(InvalidISBNError):
            service.create_book("０１５６０１３９８３", {"pageCount": 96})

        assert store.keys() == {"9780156013987"}

    def test_strict_service_rejects_bad_checksum(self, store):
        """strict 모드 서비스"""
        service = BookService(store, strict=True)
        with pytest.raises(InvalidISBNError) as exc_info:
            service.create_book("0156013987", {"title": "x"})
        assert exc_info.value.result.error == ISBNError.INVALID_CHECKSUM


class TestSearchByIsbn:
    """search_by_isbn 테스트"""

    def test_cache_hit_skips_lookup(self, store):
        """캐시 적중 시 외부 조회 없음"""
        store.set("9780156013987", {"title": "cached"})
        lookup = make_lookup({"title": "remote"})
        service = BookService(store, lookup)

        result = service.search_by_isbn("0156013987")

        assert result["source"] == "cache"
        assert result["book"]["title"] == "cached"
        lookup.lookup.assert_not_called()

    def test_remote_result_saved_with_source(self, store):
        """외부 조회 결과는 출처와 함께 저장"""
        service = BookService(store, make_lookup({"title": "Le Petit Prince"}, provider="open_library"))

        result = service.search_by_isbn("978-0-15-601398-7")

        assert result["source"] == "open_library"
        saved = store.get("9780156013987")
        assert saved["title"] == "Le Petit Prince"
        assert saved["source"] == "open_library"
        assert result["book"] == saved

    def test_isbn10_lookup_saved_under_isbn13(self, store):
        service = BookService(store, make_lookup({"title": "x"}))

        service.search_by_isbn("0156013987")

        assert store.keys() == {"9780156013987"}

    def test_sentinel(self, store):
        """예약 ISBN은 외부 조회 없이 이스터에그"""
        lookup = make_lookup({"title": "remote"})
        service = BookService(store, lookup)

        result = service.search_by_isbn("6666666666666")

        assert result["source"] == "easter_egg"
        assert result["book"]["pageCount"] == 666
        lookup.lookup.assert_not_called()
        assert store.keys() == set()

    def test_not_found(self, store):
        with pytest.raises(BookNotFoundError):
            BookService(store, make_lookup(None)).search_by_isbn("9780156013987")

    def test_no_lookup_configured(self, service):
        with pytest.raises(BookNotFoundError):
            service.search_by_isbn("9780156013987")

    def test_provider_error_propagates(self, store):
        service = BookService(store, make_lookup(error=ProviderError("down")))
        with pytest.raises(ProviderError):
            service.search_by_isbn("9780156013987")


class TestCrud:
    """생성/수정/삭제 테스트"""

    def test_create_then_merge_by_isbn10(self, service, store):
        """ISBN-13 생성 후 ISBN-10 생성 요청은 병합"""
        service.create_book("9780156013987", {"title": "Le Petit Prince"})
        book = service.create_book("0156013987", {"pageCount": 96})

        assert store.keys() == {"9780156013987"}
        assert book["title"] == "Le Petit Prince"
        assert book["pageCount"] == 96

    def test_get_book(self, service):
        service.create_book("9780156013987", {"title": "A"})
        assert service.get_book("0-15-601398-7")["title"] == "A"

    def test_get_missing(self, service):
        with pytest.raises(BookNotFoundError):
            service.get_book("9780156013987")

    def test_update_book(self, service):
        service.create_book("9780156013987", {"title": "A", "publisher": "P"})
        book = service.update_book("9780156013987", {"title": "B"})
        assert book["title"] == "B"
        assert book["publisher"] == "P"

    def test_update_missing(self, service, store):
        """없는 도서 수정은 생성하지 않음"""
        with pytest.raises(BookNotFoundError):
            service.update_book("9780156013987", {"title": "B"})
        assert store.keys() == set()

    def test_update_field(self, service):
        service.create_book("9780156013987", {"title": "A"})
        assert service.update_field("0156013987", "language", "fr")["language"] == "fr"

    def test_update_field_missing(self, service):
        with pytest.raises(BookNotFoundError):
            service.update_field("9780156013987", "title", "x")

    def test_delete(self, service, store):
        service.create_book("9780156013987", {"title": "A"})
        service.delete_book("0156013987")
        assert store.keys() == set()

    def test_delete_missing(self, service):
        with pytest.raises(BookNotFoundError):
            service.delete_book("9780156013987")


class TestSetCover:
    """표지 저장 테스트"""

    def test_sets_thumbnail(self, service):
        service.create_book("9780156013987", {"imageLinks": {"smallThumbnail": "s.jpg"}})

        book = service.set_cover("9780156013987", PNG_DATA_URL)

        assert book["imageLinks"] == {"smallThumbnail": "s.jpg", "thumbnail": PNG_DATA_URL}

    @pytest.mark.parametrize(
        "data",
        [
            "not a data url",
            "data:image/gif;base64,R0lGOD",
            "data:image/png;base64,@@@@",
        ],
    )
    def test_invalid_cover(self, service, data):
        service.create_book("9780156013987", {})
        with pytest.raises(InvalidCoverError):
            service.set_cover("9780156013987", data)

    def test_too_large(self, service):
        service.create_book("9780156013987", {})
        payload = base64.b64encode(b"\0" * (MAX_COVER_BYTES + 1)).decode()
        with pytest.raises(InvalidCoverError):
            service.set_cover("9780156013987", f"data:image/jpeg;base64,{payload}")

    def test_missing_book(self, service):
        with pytest.raises(BookNotFoundError):
            service.set_cover("9780156013987", PNG_DATA_URL)

    def test_invalid_isbn_checked_before_payload(self, service):
        """ISBN과 표지가 모두 잘못되면 ISBN 오류가 우선"""
        with pytest.raises(InvalidISBNError):
            service.set_cover("12345", "not a data url")


class TestImportExport:
    """동기화 가져오기/내보내기 테스트"""

    def test_export(self, service):
        service.create_book("9780156013987", {"title": "A"})
        export = service.export_books()
        assert export["bookCount"] == 1
        assert set(export["books"]) == {"9780156013987"}
        assert "exportDate" in export

    def test_import_new_keeps_created_at(self, service, store):
        summary = service.import_books({
            "0156013983": {"title": "A", "createdAt": FIXED_NOW, "updatedAt": FIXED_NOW},
        })

        assert summary.imported == 1
        assert store.get("9780156013987")["createdAt"] == FIXED_NOW

    def test_import_newer_wins(self, store):
        store.set("9780156013987", {"title": "old", "createdAt": FIXED_NOW, "updatedAt": FIXED_NOW})
        service = BookService(store)

        summary = service.import_books({
            "9780156013987": {"title": "new", "updatedAt": LATER},
        })

        assert summary.updated == 1
        record = store.get("9780156013987")
        assert record["title"] == "new"
        assert record["createdAt"] == FIXED_NOW

    def test_import_older_skipped(self, store):
        store.set("9780156013987", {"title": "current", "updatedAt": LATER})
        service = BookService(store)

        summary = service.import_books({
            "9780156013987": {"title": "stale", "updatedAt": FIXED_NOW},
        })

        assert summary.skipped == 1
        assert store.get("9780156013987")["title"] == "current"

    def test_import_invalid_keys(self, service):
        summary = service.import_books({"abc": {"title": "x"}, "9780156013987": "not a dict"})

        assert summary.skipped == 2
        assert summary.invalid_keys == ["abc", "9780156013987"]
        assert summary.total == 0

    def test_export_import_round_trip(self, service):
        """내보낸 데이터를 새 저장소로 가져오면 동일"""
        service.create_book("9780156013987", {"title": "A"})
        service.create_book("9780306406157", {"title": "B"})
        export = service.export_books()

        target = BookService(MemoryStore())
        summary = target.import_books(export["books"])

        assert summary.imported == 2
        assert target.export_books()["books"]["9780156013987"]["title"] == "A"


class TestIsNewer:
    """_is_newer 테스트"""

    def test_missing_incoming_treated_as_newer(self):
        assert _is_newer(None, FIXED_NOW) is True

    def test_unparseable_incoming_not_newer(self):
        assert _is_newer("yesterday", FIXED_NOW) is False

    def test_missing_existing(self):
        assert _is_newer(FIXED_NOW, None) is True

    def test_zulu_suffix(self):
        assert _is_newer("2024-06-01T12:00:00Z", FIXED_NOW) is True


class TestConcurrency:
    """동시 병합 테스트"""

    def test_concurrent_field_updates_all_kept(self, service, store):
        """서로 다른 필드를 동시에 수정해도 모두 보존"""
        service.create_book("9780156013987", {"title": "A"})

        def write(i):
            service.update_field("0156013987", f"field{i}", i)

        threads = [threading.Thread(target=write, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        record = store.get("9780156013987")
        assert all(record[f"field{i}"] == i for i in range(20))


class TestDedupe:
    def test_dedupe(self, store):
        store.set("0156013983", {"title": "ten"})
        store.set("9780156013987", {"title": "thirteen"})

        assert BookService(store).dedupe() == 1
        assert store.keys() == {"9780156013987"}
