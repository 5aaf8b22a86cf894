"""
Custom Exceptions
新闻检索核心的异常类型
"""
from typing import Any, Dict, List, Optional


class NewsCoreError(Exception):
    """新闻检索核心基础异常类"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(NewsCoreError):
    """配置错误"""
    pass


class SearchApiError(NewsCoreError):
    """搜索 API 单页请求失败 (非 2xx 或响应体格式错误)"""

    def __init__(
        self,
        message: str,
        status: Optional[Any] = None,
        payload: Optional[Any] = None,
        **kwargs,
    ):
        super().__init__(message, kwargs)
        self.status = status
        self.payload = payload


class AllQueriesFailedError(NewsCoreError):
    """查询计划中的所有变体均失败"""

    def __init__(
        self,
        message: str,
        topic: Optional[str] = None,
        failures: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(message, kwargs)
        self.topic = topic
        self.failures: Dict[str, str] = dict(failures or {})


class QueryGenerationError(NewsCoreError):
    """AI 查询生成失败 (尽力而为，调用方会忽略该变体)"""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


class JudgeUnavailableError(NewsCoreError):
    """AI 评审调用失败或响应不可解析"""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


class LLMError(NewsCoreError):
    """LLM 调用错误"""

    def __init__(self, message: str, provider: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.provider = provider


def describe_failures(errors: List[BaseException]) -> str:
    """将一组异常压缩成单行描述"""
    parts = []
    for error in errors:
        text = str(error).strip() or error.__class__.__name__
        parts.append(f"{error.__class__.__name__}: {text}")
    return "; ".join(parts)
