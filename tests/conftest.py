"""공통 테스트 fixtures"""

import json

import pytest
from unittest.mock import MagicMock

from api.services.book_service import BookService
from stores.memory import MemoryStore

FIXED_NOW = "2024-05-01T12:00:00+00:00"
LATER = "2024-06-01T12:00:00+00:00"


@pytest.fixture
def store():
    """빈 메모리 저장소"""
    return MemoryStore()


@pytest.fixture
def service(store):
    """외부 조회 없는 서비스"""
    return BookService(store)


@pytest.fixture
def mock_urlopen():
    """urllib.request.urlopen 모킹을 위한 헬퍼"""
    def _create_mock(payload: dict):
        mock_response = MagicMock()
        mock_response.read.return_value = json.dumps(payload).encode("utf-8")
        mock_response.status = 200
        mock_response.__enter__ = MagicMock(return_value=mock_response)
        mock_response.__exit__ = MagicMock(return_value=False)
        return mock_response
    return _create_mock


@pytest.fixture
def no_env_files(monkeypatch):
    """설정 테스트용: 관련 환경 변수 제거"""
    for name in (
        "STORE_BACKEND", "BOOKS_FILE", "SUPABASE_URL", "SUPABASE_KEY", "SUPABASE_TABLE",
        "GOOGLE_BOOKS_API_KEY", "LOOKUP_TIMEOUT", "STRICT_CHECKSUM", "LOG_LEVEL",
        "LOG_FILE", "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
