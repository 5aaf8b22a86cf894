"""
LLM Factory
按 LLMSettings 创建供应商实例
"""
from typing import Dict, Optional, Type
import logging

from config import LLMSettings, get_llm_settings
from utils.exceptions import ConfigurationError

from .base import BaseLLM
from .gemini_llm import DEFAULT_GEMINI_MODEL, GeminiLLM
from .openai_llm import DEFAULT_OPENAI_MODEL, OpenAILLM


logger = logging.getLogger(__name__)


PROVIDERS: Dict[str, Type[BaseLLM]] = {
    "gemini": GeminiLLM,
    "openai": OpenAILLM,
}

DEFAULT_MODELS = {
    "gemini": DEFAULT_GEMINI_MODEL,
    "openai": DEFAULT_OPENAI_MODEL,
}


def get_llm(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    settings: Optional[LLMSettings] = None,
    **kwargs,
) -> BaseLLM:
    """
    创建 LLM 实例

    Args:
        provider: gemini / openai (默认取配置)
        model: 模型名称 (默认取配置，再退回供应商默认模型)
        settings: LLM 配置 (默认读取全局配置)
        **kwargs: 覆盖 temperature / max_tokens / timeout 等参数

    Raises:
        ConfigurationError: 不支持的供应商

    Example:
        llm = get_llm()
        llm = get_llm(provider="openai", model="gpt-4o")
    """
    settings = settings or get_llm_settings()
    name = (provider or settings.provider or "").strip().lower()
    llm_cls = PROVIDERS.get(name)
    if llm_cls is None:
        raise ConfigurationError(
            f"Unsupported LLM provider: {name}",
            details={"supported": sorted(PROVIDERS)},
        )

    kwargs.setdefault("temperature", settings.temperature)
    kwargs.setdefault("max_tokens", settings.max_tokens)
    kwargs.setdefault("timeout", settings.timeout)
    if name == "gemini":
        kwargs.setdefault("api_key", settings.gemini_api_key)
    else:
        kwargs.setdefault("api_key", settings.openai_api_key)
        kwargs.setdefault("base_url", settings.openai_base_url)

    model_name = model or settings.model_name or DEFAULT_MODELS[name]
    logger.debug(f"Creating {name} LLM with model {model_name}")
    return llm_cls(model=model_name, **kwargs)
