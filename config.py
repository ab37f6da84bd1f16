"""설정 관리"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

STORE_BACKENDS = ("memory", "json", "supabase")


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """애플리케이션 설정"""

    # 저장소
    store_backend: str = "json"
    books_file: str = "data/books.json"
    supabase_url: str | None = None
    supabase_key: str | None = None
    supabase_table: str = "books"

    # 외부 조회
    google_books_api_key: str | None = None
    lookup_timeout: int = 10

    # 검증
    strict_checksum: bool = False

    # 로깅
    log_level: str = "INFO"
    log_file: str | None = None

    # API
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])

    @classmethod
    def from_env(cls, load_files: bool = True) -> "Settings":
        """
        환경 변수에서 설정 로드

        .env.local, .env 순으로 읽으며 이미 설정된 환경 변수는 덮어쓰지 않습니다.
        """
        if load_files:
            load_dotenv(".env.local")
            load_dotenv(".env")

        settings = cls(
            store_backend=os.getenv("STORE_BACKEND", "json").lower(),
            books_file=os.getenv("BOOKS_FILE", "data/books.json"),
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_key=os.getenv("SUPABASE_KEY"),
            supabase_table=os.getenv("SUPABASE_TABLE", "books"),
            google_books_api_key=os.getenv("GOOGLE_BOOKS_API_KEY"),
            lookup_timeout=int(os.getenv("LOOKUP_TIMEOUT", "10")),
            strict_checksum=_env_bool("STRICT_CHECKSUM"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE") or None,
            cors_origins=_env_list("CORS_ORIGINS", ["http://localhost:3000"]),
        )
        if settings.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"STORE_BACKEND는 {', '.join(STORE_BACKENDS)} 중 하나여야 합니다: {settings.store_backend}"
            )
        return settings
