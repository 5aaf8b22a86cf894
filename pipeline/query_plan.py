"""Query planning: deterministic topic variants plus one optional AI-generated query."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from intelligence.llm import BaseLLM
from models import QueryLabel, QueryPlan
from utils.exceptions import LLMError, QueryGenerationError


logger = logging.getLogger(__name__)

# Ordered: the first matching keyword group wins.
_CATEGORY_EXPANSIONS = (
    (("tech",), " technology OR innovation OR digital"),
    (("world", "global"), " international OR global"),
    (("business", "finance"), " market OR economic OR industry"),
    (("science",), " research OR discovery"),
    (("health",), " medical OR healthcare"),
)

AI_QUERY_MAX_CHARS = 200
AI_QUERY_TEMPERATURE = 0.3
AI_QUERY_MAX_TOKENS = 100

AI_QUERY_PROMPT = """You are a search optimization expert. Create a Google search query for the topic "{topic}" that will find recent news articles.
The generated query should:
1. Be broad enough to catch a variety of news on this topic
2. Focus primarily on recent news articles
3. Include relevant synonyms and related terms
4. Avoid overuse of restrictive operators
5. Be no more than 150 characters
6. Be in English regardless of the topic language

Only return the search query string itself, without any explanations or additional text."""


def build_standard_query(topic: str) -> str:
    query = f"{topic} news OR updates OR recent OR latest"
    lowered = topic.lower()
    for keywords, expansion in _CATEGORY_EXPANSIONS:
        if any(keyword in lowered for keyword in keywords):
            query += expansion
            break
    return f"{query} -spam"


def build_specific_query(topic: str) -> str:
    return f"{topic} news article"


def build_broad_query(topic: str) -> str:
    return f"latest {topic} developments"


def build_recent_query(topic: str) -> str:
    return f"{topic} this week important"


def build_simple_query(topic: str) -> str:
    return f"{topic} news"


def deterministic_variants(topic: str) -> Dict[str, str]:
    """Template variants; a pure function of the topic string."""
    return {
        QueryLabel.STANDARD: build_standard_query(topic),
        QueryLabel.SPECIFIC: build_specific_query(topic),
        QueryLabel.BROAD: build_broad_query(topic),
        QueryLabel.RECENT: build_recent_query(topic),
        QueryLabel.SIMPLE: build_simple_query(topic),
    }


class QueryCache:
    """AI-generated queries keyed by topic string.

    Entries live as long as the cache object; there is no eviction. The
    owner (usually one coordinator per scheduler run) decides the lifetime.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}

    def get(self, topic: str) -> Optional[str]:
        return self._entries.get(topic)

    def put(self, topic: str, query: str) -> None:
        self._entries[topic] = query

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, topic: object) -> bool:
        return topic in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class QueryPlanGenerator:
    """Build the per-topic QueryPlan."""

    def __init__(
        self,
        llm: Optional[BaseLLM] = None,
        cache: Optional[QueryCache] = None,
        *,
        timeout: float = 20.0,
        max_chars: int = AI_QUERY_MAX_CHARS,
    ) -> None:
        self._llm = llm
        self._cache = cache if cache is not None else QueryCache()
        self._timeout = float(timeout)
        self._max_chars = int(max_chars)

    @property
    def cache(self) -> QueryCache:
        return self._cache

    async def build_plan(self, topic: str, use_ai_query: bool = True) -> QueryPlan:
        topic_text = str(topic or "").strip()
        if not topic_text:
            raise ValueError("topic is required")

        queries: Dict[str, str] = {}
        if use_ai_query and self._llm is not None:
            try:
                queries[QueryLabel.AI_GENERATED] = await self.generate_ai_query(topic_text)
            except QueryGenerationError as e:
                logger.warning(f"AI query omitted for '{topic_text}': {e}")

        queries.update(deterministic_variants(topic_text))
        return QueryPlan(topic=topic_text, queries=queries)

    async def generate_ai_query(self, topic: str) -> str:
        """Ask the LLM for one search query; cached per topic on success.

        Raises:
            QueryGenerationError: call failed, timed out, or returned an implausible query
        """
        cached = self._cache.get(topic)
        if cached:
            return cached
        if self._llm is None:
            raise QueryGenerationError("no LLM configured")

        try:
            raw = await self._llm.agenerate(
                AI_QUERY_PROMPT.format(topic=topic),
                timeout=self._timeout,
                temperature=AI_QUERY_TEMPERATURE,
                max_tokens=AI_QUERY_MAX_TOKENS,
            )
        except LLMError as e:
            raise QueryGenerationError(str(e), provider=e.provider) from e

        query = str(raw or "").strip()
        if not query:
            raise QueryGenerationError("empty query returned", provider=self._llm.provider)
        if len(query) >= self._max_chars:
            raise QueryGenerationError(
                f"query too long ({len(query)} chars)",
                provider=self._llm.provider,
            )

        self._cache.put(topic, query)
        return query

