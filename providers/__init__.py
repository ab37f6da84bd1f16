from .lookup import (
    BookLookup,
    BookProvider,
    GoogleBooksProvider,
    OpenLibraryProvider,
)

__all__ = [
    "BookLookup",
    "BookProvider",
    "GoogleBooksProvider",
    "OpenLibraryProvider",
]
