"""
Search Module
搜索 API 客户端
"""
from .base import BaseSearchClient
from .cleaning import DEFAULT_DATE_WINDOW, clean_news_content, normalize_date_window, widen_date_window
from .google_search import GoogleSearchClient

__all__ = [
    "BaseSearchClient",
    "DEFAULT_DATE_WINDOW",
    "GoogleSearchClient",
    "clean_news_content",
    "normalize_date_window",
    "widen_date_window",
]
