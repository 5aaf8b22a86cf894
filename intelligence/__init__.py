"""
Intelligence Module
智能层 - 查询生成与新闻评审所用的 LLM 抽象
"""
from .llm import (
    BaseLLM,
    GeminiLLM,
    LLMResponse,
    OpenAILLM,
    get_llm,
)

__all__ = [
    "BaseLLM",
    "GeminiLLM",
    "LLMResponse",
    "OpenAILLM",
    "get_llm",
]
