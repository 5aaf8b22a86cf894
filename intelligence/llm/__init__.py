"""
LLM Module
文本生成协作方 (Gemini / OpenAI) 的统一接口
"""
from .base import BaseLLM, LLMResponse
from .gemini_llm import GeminiLLM
from .openai_llm import OpenAILLM
from .factory import DEFAULT_MODELS, PROVIDERS, get_llm

__all__ = [
    "BaseLLM",
    "LLMResponse",
    "GeminiLLM",
    "OpenAILLM",
    "DEFAULT_MODELS",
    "PROVIDERS",
    "get_llm",
]
