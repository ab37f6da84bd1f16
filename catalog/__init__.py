from .isbn import (
    SENTINEL_ISBN,
    clean,
    format_isbn,
    is_sentinel,
    normalize,
    to_isbn10,
    to_isbn13,
    validate,
    variants,
)
from .reconcile import (
    delete_by_any_variant,
    dedupe,
    find_by_any_variant,
    update_field,
    upsert,
)
from .search import collect_stats, search_books

__all__ = [
    "SENTINEL_ISBN",
    "clean",
    "format_isbn",
    "is_sentinel",
    "normalize",
    "to_isbn10",
    "to_isbn13",
    "validate",
    "variants",
    "delete_by_any_variant",
    "dedupe",
    "find_by_any_variant",
    "update_field",
    "upsert",
    "collect_stats",
    "search_books",
]
