"""도서 카탈로그 로깅 모듈"""

from .logger import BookLogger
from .formatters import ConsoleFormatter, JsonFormatter

__all__ = [
    "BookLogger",
    "ConsoleFormatter",
    "JsonFormatter",
]
