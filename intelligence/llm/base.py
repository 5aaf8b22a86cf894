"""
Base LLM
文本生成协作方抽象 - 单条提示进，单条纯文本出 (不假设任何结构化输出)
"""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from utils.exceptions import LLMError


@dataclass
class LLMResponse:
    """供应商响应 (content 为纯文本)"""
    content: str
    model: str


class BaseLLM(ABC):
    """
    LLM 供应商基类

    子类只需实现 provider / acomplete；
    流程代码统一调用 agenerate，它负责超时与异常归一。
    """

    def __init__(
        self,
        model: str,
        temperature: float = 0.3,
        max_tokens: int = 2048,
        timeout: float = 60.0,
        **kwargs,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.extra_config = kwargs

    @property
    @abstractmethod
    def provider(self) -> str:
        pass

    @abstractmethod
    async def acomplete(self, prompt: str, **kwargs) -> LLMResponse:
        """
        发送单条用户提示并返回完整响应

        Args:
            prompt: 提示文本
            **kwargs: temperature / max_tokens 覆盖值
        """
        pass

    async def agenerate(
        self,
        prompt: str,
        *,
        timeout: Optional[float] = None,
        **kwargs,
    ) -> str:
        """
        单条提示 -> 单条文本，带显式超时

        Raises:
            LLMError: 超时或供应商调用失败
        """
        limit = timeout if timeout is not None else self.timeout
        try:
            response = await asyncio.wait_for(self.acomplete(prompt, **kwargs), timeout=limit)
        except asyncio.TimeoutError as e:
            raise LLMError(f"{self.provider} call timed out after {limit}s", provider=self.provider) from e
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"{self.provider} call failed: {e}", provider=self.provider) from e
        return str(response.content or "")

    async def aclose(self) -> None:
        """释放底层客户端 (默认无资源)"""
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model}, provider={self.provider})"
