#!/usr/bin/env python3
"""
ISBN Book Catalog - 도서 조회/캐시/수동 보완 CLI
ISBN으로 도서를 조회하고 로컬 저장소에 저장하며, 누락된 정보를 직접 채웁니다.
"""

import argparse
import json
import sys
from typing import Any

import pandas as pd

from api.db import build_service
from api.services.book_service import BookService
from book_logging import BookLogger
from catalog.errors import CatalogError
from catalog.isbn import format_isbn
from config import Settings
from stores import migrate_json_to_store

logger = BookLogger("main")

# CSV 내보내기 열 순서
CSV_COLUMNS = [
    "isbn",
    "title",
    "authors",
    "publisher",
    "publishedDate",
    "pageCount",
    "categories",
    "language",
    "source",
    "createdAt",
    "updatedAt",
]


def parse_value(text: str) -> Any:
    """CLI 필드 값 해석: JSON으로 읽히면 JSON 값, 아니면 문자열"""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def parse_fields(pairs: list[str]) -> dict[str, Any]:
    """["title=어린 왕자", "pageCount=96"] → dict"""
    fields = {}
    for pair in pairs:
        if "=" not in pair:
            raise argparse.ArgumentTypeError(f"필드는 name=value 형식이어야 합니다: {pair}")
        name, value = pair.split("=", 1)
        fields[name.strip()] = parse_value(value)
    return fields


def print_book(book: dict[str, Any], source: str | None = None) -> None:
    """도서 정보 출력"""
    print(f"\n{'=' * 60}")
    print(f"ISBN: {format_isbn(book.get('isbn', ''))}")
    if source:
        print(f"출처: {source}")
    print(f"{'=' * 60}")

    title = book.get("title") or "제목 미상"
    authors = book.get("authors") or []
    if isinstance(authors, str):
        authors = [authors]
    print(f"제목: {title}")
    print(f"저자: {', '.join(authors) if authors else '-'}")
    for label, name in (
        ("출판사", "publisher"),
        ("출판일", "publishedDate"),
        ("쪽수", "pageCount"),
        ("언어", "language"),
    ):
        if book.get(name) is not None:
            print(f"{label}: {book[name]}")
    if book.get("categories"):
        print(f"분류: {', '.join(map(str, book['categories']))}")
    print(f"\n{'-' * 60}")
    print(f"생성: {book.get('createdAt', '-')} | 갱신: {book.get('updatedAt', '-')}")


def print_search_results(results: list[dict[str, Any]], query: str | None) -> None:
    """검색 결과 출력"""
    print(f"\n{'=' * 60}")
    print(f"검색 결과: {query or '(최근 추가)'}")
    print(f"{'=' * 60}")

    if not results:
        print("검색 결과가 없습니다.")
        return

    for r in results:
        authors = r.get("authors") or []
        if isinstance(authors, str):
            authors = [authors]
        score = f" (점수 {r['score']})" if "score" in r else ""
        print(f"\n[{r['isbn']}] {r.get('title') or '제목 미상'}{score}")
        print(f"  저자: {', '.join(authors) if authors else '-'}")


def save_export(export: dict[str, Any], output: str, format: str) -> None:
    """내보내기 저장"""
    if format == "csv":
        rows = []
        for key, book in export["books"].items():
            row = {column: book.get(column) for column in CSV_COLUMNS}
            row["isbn"] = key
            for column in ("authors", "categories"):
                if isinstance(row[column], list):
                    row[column] = "; ".join(map(str, row[column]))
            rows.append(row)
        df = pd.DataFrame(rows, columns=CSV_COLUMNS)
        df.to_csv(output, index=False, encoding="utf-8-sig")

    elif format == "json":
        with open(output, "w", encoding="utf-8") as f:
            json.dump(export, f, ensure_ascii=False, indent=2)

    print(f"\n{export['bookCount']}권을 {output}에 저장했습니다.")


def run(args: argparse.Namespace, service: BookService) -> int:
    """하위 명령 실행. 종료 코드 반환"""
    if args.command == "validate":
        result = service.validate(args.isbn)
        if result.valid:
            print(f"유효: {format_isbn(result.isbn)}")
            return 0
        print(f"무효: {result.message} ({result.error.value})")
        return 1

    if args.command == "lookup":
        found = service.search_by_isbn(args.isbn)
        print_book(found["book"], found["source"])
        return 0

    if args.command == "add":
        book = service.create_book(args.isbn, parse_fields(args.fields))
        print_book(book)
        return 0

    if args.command == "edit":
        book = service.update_field(args.isbn, args.field, parse_value(args.value))
        print_book(book)
        return 0

    if args.command == "delete":
        service.delete_book(args.isbn)
        print(f"삭제했습니다: {args.isbn}")
        return 0

    if args.command == "search":
        results = service.search_books(args.query, limit=args.limit, offset=args.offset)
        print_search_results(results, args.query)
        return 0

    if args.command == "stats":
        stats = service.stats()
        print(f"전체: {stats['total_books']}권 | 표지: {stats['with_cover']}권")
        for source, count in sorted(stats["sources"].items()):
            print(f"  {source:15} {count:5}권")
        print(f"마지막 갱신: {stats['last_updated'] or '-'}")
        return 0

    if args.command == "export":
        save_export(service.export_books(), args.output, args.format)
        return 0

    if args.command == "import":
        with open(args.file, encoding="utf-8") as f:
            data = json.load(f)
        books = data.get("books", data) if isinstance(data, dict) else {}
        summary = service.import_books(books)
        print(
            f"가져오기 완료: 신규 {summary.imported}, 갱신 {summary.updated}, "
            f"건너뜀 {summary.skipped} (전체 {summary.total}권)"
        )
        return 0

    if args.command == "dedupe":
        removed = service.dedupe()
        print(f"중복 {removed}건을 정리했습니다.")
        return 0

    if args.command == "migrate":
        migrated = migrate_json_to_store(args.file, service.store)
        print(f"{migrated}권을 이관했습니다.")
        return 0

    raise ValueError(f"알 수 없는 명령: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ISBN으로 도서를 조회하고 로컬 저장소에 저장/보완합니다.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
  python main.py lookup 978-0-15-601398-7
  python main.py add 0156013987 title="Le Petit Prince" pageCount=96
  python main.py edit 9780156013987 publisher "Harcourt"
  python main.py search "petit prince"
  python main.py export -o books.csv -f csv
  python main.py --store supabase migrate books.json
        """,
    )

    parser.add_argument(
        "--store",
        type=str,
        choices=["memory", "json", "supabase"],
        default=None,
        help="저장소 백엔드 (기본: STORE_BACKEND 환경 변수)",
    )
    parser.add_argument(
        "--books-file", type=str, default=None, help="JSON 저장소 파일 경로"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="로깅 레벨 (기본: LOG_LEVEL 환경 변수 또는 INFO)",
    )
    parser.add_argument(
        "--log-file", type=str, default=None, help="로그 파일 경로 (JSON Lines 포맷)"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("validate", help="ISBN 검증")
    p.add_argument("isbn")

    p = sub.add_parser("lookup", help="캐시 → 외부 API 순으로 조회 후 저장")
    p.add_argument("isbn")

    p = sub.add_parser("add", help="도서 추가 (있으면 병합)")
    p.add_argument("isbn")
    p.add_argument("fields", nargs="*", help="name=value 형식 필드")

    p = sub.add_parser("edit", help="필드 하나 수정")
    p.add_argument("isbn")
    p.add_argument("field")
    p.add_argument("value")

    p = sub.add_parser("delete", help="도서 삭제 (모든 변형 ISBN)")
    p.add_argument("isbn")

    p = sub.add_parser("search", help="제목/저자/출판사 검색")
    p.add_argument("query", nargs="?", default=None)
    p.add_argument("--limit", type=int, default=10)
    p.add_argument("--offset", type=int, default=0)

    sub.add_parser("stats", help="저장소 통계")

    p = sub.add_parser("export", help="전체 내보내기")
    p.add_argument("--output", "-o", type=str, required=True, help="출력 파일 경로")
    p.add_argument(
        "--format", "-f", type=str, choices=["csv", "json"], default="json",
        help="출력 형식 (기본: json)",
    )

    p = sub.add_parser("import", help="내보낸 JSON 가져오기")
    p.add_argument("file")

    sub.add_parser("dedupe", help="동치 ISBN 중복 정리")

    p = sub.add_parser("migrate", help="기존 JSON 파일을 현재 저장소로 이관 (기존 키 유지)")
    p.add_argument("file")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        parser.error(str(e))
    if args.store:
        settings.store_backend = args.store
    if args.books_file:
        settings.books_file = args.books_file

    BookLogger.configure(
        level=args.log_level or settings.log_level,
        log_file=args.log_file or settings.log_file,
        console=True,
    )

    try:
        service = build_service(settings)
        return run(args, service)
    except (argparse.ArgumentTypeError, ValueError) as e:
        parser.error(str(e))
    except CatalogError as e:
        logger.error("command_failed", str(e), {"command": args.command})
        print(f"오류: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
