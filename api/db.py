"""저장소/서비스 생성 (프로세스당 한 번)"""

from api.services.book_service import BookService
from config import Settings
from providers.lookup import BookLookup, GoogleBooksProvider, OpenLibraryProvider
from stores import JsonFileStore, MemoryStore, RecordStore


def create_store(settings: Settings) -> RecordStore:
    """
    설정에 맞는 레코드 저장소 생성

    Raises:
        ValueError: supabase 백엔드인데 URL/키가 없는 경우
    """
    if settings.store_backend == "memory":
        return MemoryStore()

    if settings.store_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError("SUPABASE_URL, SUPABASE_KEY 환경 변수가 필요합니다")
        from stores.supabase_store import SupabaseStore

        return SupabaseStore.from_credentials(
            settings.supabase_url, settings.supabase_key, table=settings.supabase_table
        )

    return JsonFileStore(settings.books_file)


def build_service(settings: Settings) -> BookService:
    """설정으로 저장소/프로바이더/서비스 구성"""
    lookup = BookLookup(providers=[
        GoogleBooksProvider(api_key=settings.google_books_api_key or "", timeout=settings.lookup_timeout),
        OpenLibraryProvider(timeout=settings.lookup_timeout),
    ])
    return BookService(create_store(settings), lookup, strict=settings.strict_checksum)
