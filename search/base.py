"""
Base Search Client
搜索客户端抽象基类
"""
from abc import ABC, abstractmethod
from typing import List
import logging

from models import NewsItem


logger = logging.getLogger(__name__)


class BaseSearchClient(ABC):
    """
    搜索客户端抽象基类
    每次 fetch_page 调用对应一次分页查询，翻页由调用方控制
    """

    def __init__(self):
        self._client = None

    @property
    @abstractmethod
    def name(self) -> str:
        """返回客户端名称"""
        pass

    @abstractmethod
    async def fetch_page(
        self,
        query: str,
        date_window: str,
        page_start_index: int = 1,
        max_results: int = 10,
    ) -> List[NewsItem]:
        """
        执行单页查询

        Args:
            query: 查询字符串
            date_window: 日期窗口 (d<N> / w<N>)
            page_start_index: 结果起始序号 (从 1 开始)
            max_results: 本页最大结果数

        Returns:
            清洗后的新闻条目列表 (无结果时为空列表)
        """
        pass

    async def __aenter__(self):
        """异步上下文管理器入口"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()

    async def close(self):
        """清理资源"""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _log_search(self, query: str, count: int):
        """记录搜索日志"""
        logger.info(f"[{self.name}] Search '{query}' returned {count} results")
