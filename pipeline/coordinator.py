"""Per-topic pipeline: plan -> retrieve -> judge -> TopicOutcome."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from config import Settings, get_settings
from intelligence.llm import BaseLLM, get_llm
from models import NewsItem, QueryPlan, RunReport, TopicOutcome
from search import BaseSearchClient, GoogleSearchClient, normalize_date_window, widen_date_window
from utils.exceptions import ConfigurationError

from .judge import Broaden, NewsJudge, build_judge
from .query_plan import QueryCache, QueryPlanGenerator
from .retriever import FanOutRetriever


logger = logging.getLogger(__name__)


class PipelineCoordinator:
    """Run the retrieval-and-selection core for one topic at a time.

    ``run`` never raises: anything thrown by planning, retrieval or judgment
    becomes ``TopicOutcome.error``.
    """

    def __init__(
        self,
        planner: QueryPlanGenerator,
        retriever: FanOutRetriever,
        judge: NewsJudge,
        *,
        limit: int = 8,
        max_total: int = 30,
        date_window: str = "d3",
        use_ai_query: bool = True,
        topic_timeout: Optional[float] = None,
        topics: Optional[List[str]] = None,
    ) -> None:
        self.planner = planner
        self.retriever = retriever
        self.judge = judge
        self.limit = int(limit)
        self.max_total = int(max_total)
        self.date_window = normalize_date_window(date_window)
        self.use_ai_query = use_ai_query
        self.topic_timeout = topic_timeout
        self.topics = list(topics or [])
        self._owned: List[object] = []

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        search_client: Optional[BaseSearchClient] = None,
        llm: Optional[BaseLLM] = None,
        cache: Optional[QueryCache] = None,
    ) -> "PipelineCoordinator":
        """
        Wire a coordinator from configuration.

        An LLM is created only when credentials exist and an AI feature is
        enabled. The returned coordinator closes what it created in ``aclose``.

        Raises:
            ConfigurationError: no search client given and no search credentials configured
        """
        settings = settings or get_settings()
        owned: List[object] = []

        if search_client is None:
            if not settings.search_configured():
                raise ConfigurationError(
                    "Google Search API key and engine ID are required",
                    details={"env": ["GOOGLE_SEARCH_API_KEY", "GOOGLE_SEARCH_ENGINE_ID"]},
                )
            search_client = GoogleSearchClient(settings.search)
            owned.append(search_client)

        news = settings.news
        wants_llm = news.use_ai_for_queries or news.use_ai_judge
        if llm is None and wants_llm and settings.llm_configured():
            llm = get_llm(settings=settings.llm)
            owned.append(llm)

        planner = QueryPlanGenerator(
            llm if news.use_ai_for_queries else None,
            cache,
            timeout=news.query_timeout,
        )
        coordinator = cls(
            planner,
            FanOutRetriever.from_settings(search_client, settings.search),
            build_judge(settings, llm),
            limit=news.results_per_topic,
            max_total=news.max_search_results,
            date_window=news.date_range,
            use_ai_query=news.use_ai_for_queries,
            topic_timeout=news.topic_timeout,
            topics=news.topics,
        )
        coordinator._owned = owned
        logger.info(
            f"Pipeline ready: judge={coordinator.judge.name}, "
            f"ai_queries={llm is not None and news.use_ai_for_queries}, "
            f"window={coordinator.date_window}"
        )
        return coordinator

    async def run(self, topic: str) -> TopicOutcome:
        candidates: List[NewsItem] = []
        try:
            plan = await self.planner.build_plan(topic, use_ai_query=self.use_ai_query)
            candidates = await self.retriever.retrieve(
                plan,
                self.date_window,
                self.max_total,
                deadline=self.topic_timeout,
            )
            outcome = await self.judge.judge(
                candidates,
                plan.topic,
                self.limit,
                broaden=self._broadener(plan),
            )
        except Exception as e:
            logger.error(f"[{topic}] Topic failed: {e}")
            return TopicOutcome(
                topic=str(topic or ""),
                items=[],
                error=str(e) or type(e).__name__,
                candidate_count=len(candidates),
            )

        reason = getattr(outcome, "reason", None) if outcome.is_fallback else None
        if reason:
            logger.info(f"[{plan.topic}] Fallback selection: {reason}")
        return TopicOutcome(
            topic=plan.topic,
            items=list(outcome.items),
            fallback_reason=reason,
            candidate_count=len(candidates),
        )

    def _broadener(self, plan: QueryPlan) -> Broaden:
        wider = widen_date_window(self.date_window)

        async def broaden() -> List[NewsItem]:
            logger.info(f"[{plan.topic}] Broadening date window {self.date_window} -> {wider}")
            return await self.retriever.retrieve(plan, wider, self.max_total, deadline=self.topic_timeout)

        return broaden

    async def run_topics(self, topics: Optional[Iterable[str]] = None) -> RunReport:
        """Run every topic independently; one topic's failure never stops the others."""
        selected = list(topics) if topics is not None else list(self.topics)
        outcomes = []
        for topic in selected:
            outcomes.append(await self.run(topic))

        report = RunReport(outcomes=outcomes)
        logger.info(
            f"Run finished: {len(report.succeeded)} with news, "
            f"{len(report.empty)} empty, {len(report.failed)} failed"
        )
        return report

    async def aclose(self) -> None:
        for resource in self._owned:
            if isinstance(resource, BaseSearchClient):
                await resource.close()
            elif isinstance(resource, BaseLLM):
                await resource.aclose()
        self._owned = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
