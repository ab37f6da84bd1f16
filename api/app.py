"""FastAPI 앱 진입점

실행:
    uvicorn api.app:app --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.db import build_service
from api.routes.books import router as books_router
from api.services.book_service import BookService
from book_logging import BookLogger
from catalog.errors import (
    BookNotFoundError,
    InvalidCoverError,
    InvalidISBNError,
    ProviderError,
    StoreError,
)
from config import Settings

logger = BookLogger("api")


def create_app(service: BookService | None = None, settings: Settings | None = None) -> FastAPI:
    """
    앱 팩토리

    Args:
        service: 주입할 서비스 (테스트용). None이면 설정으로 생성
        settings: 설정. None이면 환경 변수에서 로드
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="ISBN Book Catalog API",
        description="ISBN으로 도서를 조회하고 로컬에 저장/보완하는 API",
        version="2.0.0",
    )
    app.state.settings = settings
    app.state.service = service or build_service(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidISBNError)
    async def invalid_isbn_handler(request: Request, exc: InvalidISBNError):
        return JSONResponse(
            status_code=400,
            content={"detail": exc.result.message, "error": exc.result.error.value},
        )

    @app.exception_handler(BookNotFoundError)
    async def not_found_handler(request: Request, exc: BookNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidCoverError)
    async def invalid_cover_handler(request: Request, exc: InvalidCoverError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ProviderError)
    async def provider_error_handler(request: Request, exc: ProviderError):
        logger.error("provider_error", str(exc), {"path": request.url.path})
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error("store_error", str(exc), {"path": request.url.path})
        return JSONResponse(status_code=503, content={"detail": "데이터베이스 연결 실패"})

    app.include_router(books_router, prefix="/api")

    @app.get("/")
    async def root():
        return {"status": "ok", "service": "isbn-book-catalog"}

    return app


def _default_app() -> FastAPI:
    settings = Settings.from_env()
    BookLogger.configure(level=settings.log_level, log_file=settings.log_file, console=True)
    return create_app(settings=settings)


app = _default_app()
