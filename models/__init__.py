"""
Models Module
数据模型定义
"""
from .schemas import (
    FallbackSelected,
    JudgmentOutcome,
    NewsItem,
    QueryLabel,
    QueryPlan,
    RunReport,
    Selected,
    TopicOutcome,
    link_domain,
    translate,
)

__all__ = [
    "FallbackSelected",
    "JudgmentOutcome",
    "NewsItem",
    "QueryLabel",
    "QueryPlan",
    "RunReport",
    "Selected",
    "TopicOutcome",
    "link_domain",
    "translate",
]
