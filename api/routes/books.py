"""도서 API 라우트"""

import asyncio
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from api.services.book_service import BookService
from catalog.errors import StoreError
from models.book import format_book_data

router = APIRouter()

API_VERSION = "2.0.0"


class BookCreate(BaseModel):
    """도서 생성 요청 (isbn 외 필드는 자유 형식)"""

    model_config = ConfigDict(extra="allow")

    isbn: str


class CoverRequest(BaseModel):
    coverData: str


class ImportRequest(BaseModel):
    books: dict[str, Any]


def get_service(request: Request) -> BookService:
    return request.app.state.service


@router.get("/health")
def health(service: BookService = Depends(get_service)):
    """저장소 연결 상태"""
    try:
        count = service.store.count()
    except StoreError as e:
        return JSONResponse(
            status_code=500,
            content={"status": "ERROR", "database": "disconnected", "error": str(e)},
        )
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
        "database": "connected",
        "booksCount": count,
    }


@router.get("/validate/{isbn}")
def validate_isbn(isbn: str, service: BookService = Depends(get_service)):
    """ISBN 검증 결과 ({valid, isbn} 또는 {valid, error, message})"""
    return service.validate(isbn).to_dict()


@router.get("/books")
def list_books(
    q: str | None = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: BookService = Depends(get_service),
):
    """
    도서 검색

    Query params:
        q: 검색어 (제목/저자/출판사/설명). 없으면 최근 추가 순
        limit: 페이지 크기 (기본 10)
        offset: 시작 위치
    """
    return service.search_books(q, limit=limit, offset=offset)


@router.get("/books/{isbn}")
def get_book(isbn: str, service: BookService = Depends(get_service)):
    """ISBN-10/13 어느 쪽으로든 저장된 도서 조회"""
    return service.get_book(isbn)


@router.post("/books", status_code=201)
def create_book(req: BookCreate, service: BookService = Depends(get_service)):
    """도서 생성. 같은 도서(동치 ISBN 포함)가 있으면 병합"""
    fields = req.model_dump(exclude={"isbn"})
    return service.create_book(req.isbn, fields)


@router.put("/books/{isbn}")
def update_book(
    isbn: str,
    fields: dict[str, Any] = Body(...),
    service: BookService = Depends(get_service),
):
    """기존 도서에 필드 병합 (보내지 않은 필드는 유지)"""
    return service.update_book(isbn, fields)


@router.delete("/books/{isbn}", status_code=204)
def delete_book(isbn: str, service: BookService = Depends(get_service)):
    """모든 변형 ISBN 키 삭제"""
    service.delete_book(isbn)
    return Response(status_code=204)


@router.post("/books/{isbn}/cover")
def upload_cover(isbn: str, req: CoverRequest, service: BookService = Depends(get_service)):
    """표지 이미지 (data URL) 저장"""
    book = service.set_cover(isbn, req.coverData)
    return {"success": True, "book": book}


@router.get("/external/{isbn}")
@router.get("/external/google/{isbn}")
async def lookup_external(isbn: str, service: BookService = Depends(get_service)):
    """
    ISBN 외부 조회

    1. 로컬 저장소 확인 (변형 ISBN 포함)
    2. 없으면 외부 프로바이더 조회 → 병합 저장 → 반환
    """
    result = await asyncio.to_thread(service.search_by_isbn, isbn)
    return {
        "success": True,
        "source": result["source"],
        "book": result["book"],
        "items": [format_book_data(result["book"])],
    }


@router.get("/stats")
def stats(service: BookService = Depends(get_service)):
    return service.stats()


@router.post("/sync/import")
def import_books(req: ImportRequest, service: BookService = Depends(get_service)):
    """다른 클라이언트에서 내보낸 레코드 가져오기"""
    summary = service.import_books(req.books)
    return {"success": True, **summary.to_dict()}


@router.get("/sync/export")
def export_books(service: BookService = Depends(get_service)):
    return {"success": True, **service.export_books()}


@router.post("/maintenance/dedupe")
def dedupe(service: BookService = Depends(get_service)):
    """동치 ISBN 중복 정리"""
    removed = service.dedupe()
    return {"removed": removed, "total": service.store.count()}
