"""
Google Custom Search Client
Programmable Search Engine JSON API 分页查询
API 文档: https://developers.google.com/custom-search/v1/reference/rest/v1/cse/list
"""
import asyncio
import json
from typing import Any, Dict, List, Optional
import logging

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import SearchSettings, get_settings
from models import NewsItem, link_domain
from utils.exceptions import SearchApiError

from .base import BaseSearchClient
from .cleaning import clean_news_content, normalize_date_window


logger = logging.getLogger(__name__)


class GoogleSearchClient(BaseSearchClient):
    """
    Google Custom Search 客户端

    特性:
    - 单次调用 = 单页请求，翻页由调用方通过 page_start_index 控制
    - 网络错误 / 非 2xx / 响应体异常时指数退避重试 (有上限)
    - 每次请求都有显式超时
    """

    FIELDS = "items(title,link,snippet,pagemap/metatags/publishedTime,pagemap/metatags/og_site_name)"

    # 视为可重试的失败
    RETRYABLE_ERRORS = (SearchApiError, httpx.HTTPError, asyncio.TimeoutError)

    def __init__(
        self,
        settings: Optional[SearchSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__()
        self._search_settings = settings or get_settings().search
        self._client = client
        self._owns_client = client is None

    @property
    def name(self) -> str:
        return "Google Search"

    @property
    def settings(self) -> SearchSettings:
        return self._search_settings

    async def _get_client(self) -> httpx.AsyncClient:
        """获取或创建 HTTP 客户端"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._search_settings.request_timeout),
            )
            self._owns_client = True
        return self._client

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def fetch_page(
        self,
        query: str,
        date_window: str,
        page_start_index: int = 1,
        max_results: int = 10,
    ) -> List[NewsItem]:
        """
        查询单页结果

        Args:
            query: 查询字符串
            date_window: 日期窗口，无法识别时回退为默认值
            page_start_index: 结果起始序号 (从 1 开始)
            max_results: 本页最大结果数 (API 上限 10)

        Returns:
            新闻条目列表

        Raises:
            SearchApiError: 重试耗尽后仍为非 2xx 或响应体异常
        """
        window = normalize_date_window(date_window)
        start = max(1, int(page_start_index))
        num = max(1, min(int(max_results), int(self._search_settings.page_size)))

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, int(self._search_settings.max_attempts))),
            wait=wait_exponential(
                multiplier=self._search_settings.backoff_multiplier,
                max=self._search_settings.backoff_max,
            ),
            retry=retry_if_exception_type(self.RETRYABLE_ERRORS),
            before_sleep=self._log_retry,
            reraise=True,
        )

        items: List[NewsItem] = []
        async for attempt in retrying:
            with attempt:
                items = await asyncio.wait_for(
                    self._request_page(query, window, start, num),
                    timeout=self._search_settings.request_timeout,
                )

        self._log_search(query, len(items))
        return items

    def _build_params(self, query: str, date_window: str, start: int, num: int) -> Dict[str, str]:
        return {
            "key": self._search_settings.api_key or "",
            "cx": self._search_settings.engine_id or "",
            "q": query,
            "num": str(num),
            "dateRestrict": date_window,
            "fields": self.FIELDS,
            # 首页按时间排序保证新鲜度，后续页按相关度
            "sort": "date" if start == 1 else "relevance",
            "start": str(start),
        }

    async def _request_page(self, query: str, date_window: str, start: int, num: int) -> List[NewsItem]:
        client = await self._get_client()
        response = await client.get(
            self._search_settings.api_url,
            params=self._build_params(query, date_window, start, num),
        )
        return self.parse_response(response.status_code, response.text)

    @classmethod
    def parse_response(cls, status_code: int, body: str) -> List[NewsItem]:
        """将 API 响应转换为新闻条目，失败时抛出 SearchApiError"""
        payload = cls._decode(body)

        if not 200 <= int(status_code) < 300:
            message = f"Search API returned HTTP {status_code}"
            if isinstance(payload, dict) and isinstance(payload.get("error"), dict) and payload["error"].get("message"):
                message = f"{message}: {payload['error']['message']}"
            raise SearchApiError(message, status=status_code, payload=payload if payload is not None else body[:500])

        if not isinstance(payload, dict):
            raise SearchApiError("Malformed search response body", status=status_code, payload=str(body)[:500])

        error = payload.get("error")
        if error:
            if isinstance(error, dict):
                raise SearchApiError(
                    f"Search API error: {error.get('message', 'unknown error')}",
                    status=error.get("status") or error.get("code") or status_code,
                    payload=error,
                )
            raise SearchApiError(f"Search API error: {error}", status=status_code, payload=error)

        hits = payload.get("items")
        if hits is None:
            return []
        if not isinstance(hits, list):
            raise SearchApiError("Malformed search response: 'items' is not a list", status=status_code, payload=hits)

        items = []
        for index, hit in enumerate(hits):
            try:
                item = cls._convert_hit(hit)
            except (TypeError, ValueError) as e:
                logger.debug(f"Skipping malformed search hit #{index}: {e}")
                continue
            if item:
                items.append(item)
        return items

    @staticmethod
    def _decode(body: str) -> Any:
        try:
            return json.loads(body) if body else None
        except ValueError:
            return None

    @staticmethod
    def _first_metatags(hit: Dict[str, Any]) -> Dict[str, Any]:
        pagemap = hit.get("pagemap")
        if not isinstance(pagemap, dict):
            return {}
        metatags = pagemap.get("metatags")
        if not isinstance(metatags, list) or not metatags or not isinstance(metatags[0], dict):
            return {}
        return metatags[0]

    @staticmethod
    def _meta_text(meta: Dict[str, Any], key: str) -> Optional[str]:
        value = meta.get(key)
        if value is None or isinstance(value, (dict, list)):
            return None
        return str(value).strip() or None

    @classmethod
    def _convert_hit(cls, hit: Any) -> Optional[NewsItem]:
        """转换单条搜索结果 (字段类型异常时回退为缺省值)"""
        if not isinstance(hit, dict):
            return None
        link = hit.get("link")
        if not isinstance(link, str) or not link.strip():
            return None
        link = link.strip()

        meta = cls._first_metatags(hit)
        snippet = hit.get("snippet")
        return NewsItem(
            title=hit.get("title") or "",
            link=link,
            snippet=clean_news_content(snippet if isinstance(snippet, str) else ""),
            published_time=cls._meta_text(meta, "publishedTime"),
            source=cls._meta_text(meta, "og_site_name") or link_domain(link) or None,
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"[{self.name}] Attempt {retry_state.attempt_number} failed, retrying: {error}"
        )
