"""
OpenAI LLM
GPT 系列及 OpenAI 兼容接口 (通过 base_url 接入)
"""
from typing import Optional
import logging

from .base import BaseLLM, LLMResponse


logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


class OpenAILLM(BaseLLM):
    """OpenAI chat completions, async client created lazily."""

    def __init__(
        self,
        model: str = DEFAULT_OPENAI_MODEL,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
        timeout: float = 60.0,
        **kwargs,
    ):
        super().__init__(model, temperature, max_tokens, timeout, **kwargs)
        self.api_key = api_key
        self.base_url = base_url
        self._client = None

    @property
    def provider(self) -> str:
        return "openai"

    def _async_client(self):
        if self._client is None:
            from openai import AsyncOpenAI

            # 重试策略由调用方决定
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def acomplete(self, prompt: str, **kwargs) -> LLMResponse:
        response = await self._async_client().chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=kwargs.get("temperature", self.temperature),
            max_tokens=kwargs.get("max_tokens", self.max_tokens),
        )
        return LLMResponse(content=response.choices[0].message.content or "", model=response.model)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
