"""
Data Models / Schemas
定义检索-筛选流程的统一数据结构
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QueryLabel:
    """查询变体标签"""
    AI_GENERATED = "ai_generated"
    STANDARD = "standard"
    SPECIFIC = "specific"
    BROAD = "broad"
    RECENT = "recent"
    SIMPLE = "simple"


def link_domain(link: str) -> str:
    """Host of ``link`` without a leading ``www.``."""
    host = (urlparse(str(link or "")).hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host


class NewsItem(BaseModel):
    """候选新闻条目 (搜索结果片段，创建后不可变)"""

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="", description="标题")
    link: str = Field(..., description="规范链接 (唯一键)")
    snippet: str = Field(default="", description="摘要片段")
    published_time: Optional[str] = Field(default=None, description="来源提供的发布时间 (未校验)")
    source: Optional[str] = Field(default=None, description="发布方 / 站点名")

    @field_validator("link", mode="before")
    @classmethod
    def _non_empty_link(cls, value: Any) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("link is required")
        return text

    @field_validator("title", "snippet", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return str(value or "").strip()

    @property
    def domain(self) -> str:
        return link_domain(self.link)

    @property
    def display_source(self) -> str:
        return self.source or self.domain


@dataclass(frozen=True)
class QueryPlan:
    """Ordered label -> query string mapping for one topic fetch.

    Insertion order carries no priority; every entry is issued concurrently.
    """

    topic: str
    queries: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.queries)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self.queries.items()))

    def __contains__(self, label: object) -> bool:
        return label in self.queries

    @property
    def labels(self) -> List[str]:
        return list(self.queries.keys())

    def get(self, label: str) -> Optional[str]:
        return self.queries.get(label)

    def model_dump(self) -> Dict[str, Any]:
        return {"topic": self.topic, "queries": dict(self.queries)}


@dataclass(frozen=True)
class JudgmentOutcome:
    items: List[NewsItem]

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class Selected(JudgmentOutcome):
    """Judgment succeeded; items are in the judge's chosen order."""


@dataclass(frozen=True)
class FallbackSelected(JudgmentOutcome):
    """Judgment could not be trusted; items come from a deterministic fallback."""

    reason: str = ""

    @property
    def is_fallback(self) -> bool:
        return True


# 用户可见状态文案
STATUS_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "noRecentNews": "No recent news found for",
        "errorRetrieving": "Error retrieving news for",
    },
    "fr": {
        "noRecentNews": "Aucune actualité récente trouvée pour",
        "errorRetrieving": "Erreur lors de la récupération des actualités pour",
    },
    "de": {
        "noRecentNews": "Keine aktuellen Nachrichten gefunden für",
        "errorRetrieving": "Fehler beim Abrufen von Nachrichten für",
    },
    "es": {
        "noRecentNews": "No se encontraron noticias recientes para",
        "errorRetrieving": "Error al recuperar noticias para",
    },
    "it": {
        "noRecentNews": "Nessuna notizia recente trovata per",
        "errorRetrieving": "Errore nel recuperare notizie per",
    },
    "pt": {
        "noRecentNews": "Nenhuma notícia recente encontrada para",
        "errorRetrieving": "Erro ao recuperar notícias para",
    },
    "zh": {
        "noRecentNews": "未找到相关的最新新闻：",
        "errorRetrieving": "获取新闻时出错：",
    },
}


def translate(key: str, language: str) -> str:
    table = STATUS_TRANSLATIONS.get(language) or STATUS_TRANSLATIONS["en"]
    return table.get(key) or STATUS_TRANSLATIONS["en"].get(key) or key


class TopicOutcome(BaseModel):
    """Per-topic result surfaced to the caller."""

    topic: str
    items: List[NewsItem] = Field(default_factory=list)
    error: Optional[str] = None
    fallback_reason: Optional[str] = None
    candidate_count: int = 0

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def is_empty(self) -> bool:
        return not self.failed and not self.items

    def describe(self, language: str = "en") -> str:
        if self.failed:
            return f"{translate('errorRetrieving', language)} {self.topic}. {self.error}"
        if not self.items:
            return f"{translate('noRecentNews', language)} {self.topic}."
        return f"{self.topic}: {len(self.items)} items"


class RunReport(BaseModel):
    """Outcomes for every topic processed in one run."""

    outcomes: List[TopicOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> List[str]:
        return [outcome.topic for outcome in self.outcomes if outcome.items]

    @property
    def empty(self) -> List[str]:
        return [outcome.topic for outcome in self.outcomes if outcome.is_empty]

    @property
    def failed(self) -> List[str]:
        return [outcome.topic for outcome in self.outcomes if outcome.failed]

    @property
    def any_items(self) -> bool:
        return bool(self.succeeded)

    @property
    def all_failed(self) -> bool:
        return bool(self.outcomes) and all(outcome.failed for outcome in self.outcomes)

    @property
    def error_summary(self) -> str:
        return "\n".join(
            f"{outcome.topic}: {outcome.error}" for outcome in self.outcomes if outcome.failed
        )
