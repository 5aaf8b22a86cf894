"""
Utils Module
通用工具函数
"""
from .logger import console, setup_logger, set_package_level
from .exceptions import (
    NewsCoreError,
    ConfigurationError,
    SearchApiError,
    AllQueriesFailedError,
    QueryGenerationError,
    JudgeUnavailableError,
    LLMError,
    describe_failures,
)

__all__ = [
    "console",
    "setup_logger",
    "set_package_level",
    "NewsCoreError",
    "ConfigurationError",
    "SearchApiError",
    "AllQueriesFailedError",
    "QueryGenerationError",
    "JudgeUnavailableError",
    "LLMError",
    "describe_failures",
]
