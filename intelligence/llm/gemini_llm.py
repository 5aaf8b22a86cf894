"""
Google Gemini LLM
默认供应商：AI 查询生成 + KEEP/SKIP 新闻评审
"""
from typing import Any, Dict, Optional
import logging

from utils.exceptions import LLMError

from .base import BaseLLM, LLMResponse


logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class GeminiLLM(BaseLLM):
    """
    Gemini (google-generativeai) 实现

    被安全策略拦截、没有文本的响应视为调用失败
    """

    def __init__(
        self,
        model: str = DEFAULT_GEMINI_MODEL,
        api_key: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 2048,
        timeout: float = 60.0,
        top_k: Optional[int] = 40,
        **kwargs,
    ):
        super().__init__(model, temperature, max_tokens, timeout, **kwargs)
        self.api_key = api_key
        self.top_k = top_k

    @property
    def provider(self) -> str:
        return "gemini"

    def _model(self, **kwargs):
        import google.generativeai as genai

        genai.configure(api_key=self.api_key)
        config: Dict[str, Any] = {
            "temperature": kwargs.get("temperature", self.temperature),
            "max_output_tokens": kwargs.get("max_tokens", self.max_tokens),
        }
        if self.top_k:
            config["top_k"] = self.top_k
        return genai.GenerativeModel(model_name=self.model, generation_config=config)

    @staticmethod
    def _text_of(response: Any) -> str:
        try:
            return response.text or ""
        except ValueError as e:
            # .text raises when the candidate was blocked or carries no parts
            candidates = getattr(response, "candidates", None) or []
            reason = candidates[0].finish_reason.name if candidates else "unknown"
            raise LLMError(f"Gemini returned no text (finish_reason={reason})", provider="gemini") from e

    async def acomplete(self, prompt: str, **kwargs) -> LLMResponse:
        response = await self._model(**kwargs).generate_content_async(
            prompt,
            request_options={"timeout": self.timeout},
        )
        return LLMResponse(content=self._text_of(response), model=self.model)
