"""
Pipeline Module
检索-筛选流程: 查询计划 -> 并发检索 -> 候选评审 -> 主题结果
"""
from .coordinator import PipelineCoordinator
from .judge import AIJudge, HeuristicJudge, NewsJudge, build_judge, format_news_for_judge, parse_keep_indices
from .query_plan import QueryCache, QueryPlanGenerator, deterministic_variants
from .retriever import BranchResult, FanOutRetriever, dedupe_by_link
from .scoring import QUALITY_NEWS_SOURCES, ScoredItem, score_breakdown, score_item

__all__ = [
    "AIJudge",
    "BranchResult",
    "FanOutRetriever",
    "HeuristicJudge",
    "NewsJudge",
    "PipelineCoordinator",
    "QUALITY_NEWS_SOURCES",
    "QueryCache",
    "QueryPlanGenerator",
    "ScoredItem",
    "build_judge",
    "dedupe_by_link",
    "deterministic_variants",
    "format_news_for_judge",
    "parse_keep_indices",
    "score_breakdown",
    "score_item",
]
