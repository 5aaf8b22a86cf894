"""Concurrent fan-out of a QueryPlan over the search client, with link dedup."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import math
from typing import Dict, List, Optional, Set

from config import SearchSettings
from models import NewsItem, QueryPlan
from search import BaseSearchClient
from utils.exceptions import AllQueriesFailedError, describe_failures


logger = logging.getLogger(__name__)


@dataclass
class BranchResult:
    label: str
    items: List[NewsItem] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def dedupe_by_link(items: List[NewsItem]) -> List[NewsItem]:
    """Keep the first occurrence of every link, preserving order."""
    unique: List[NewsItem] = []
    seen: Set[str] = set()
    for item in items:
        if item.link in seen:
            continue
        seen.add(item.link)
        unique.append(item)
    return unique


class FanOutRetriever:
    """Issue every plan variant concurrently and merge the results.

    Each variant pages through the search client until it reaches its share
    of ``max_total`` or the page cap. A failing variant contributes zero
    items; only a plan where every variant fails raises.
    """

    def __init__(
        self,
        client: BaseSearchClient,
        *,
        page_size: int = 10,
        max_pages: int = 3,
        page_delay: float = 0.2,
    ) -> None:
        self._client = client
        self._page_size = max(1, int(page_size))
        self._max_pages = max(1, int(max_pages))
        self._page_delay = max(0.0, float(page_delay))
        # Branches still running after a deadline; kept referenced until they finish.
        self._inflight: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, client: BaseSearchClient, settings: SearchSettings) -> "FanOutRetriever":
        return cls(
            client,
            page_size=settings.page_size,
            max_pages=settings.max_pages,
            page_delay=settings.page_delay,
        )

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    async def retrieve(
        self,
        plan: QueryPlan,
        date_window: str,
        max_total: int,
        *,
        deadline: Optional[float] = None,
    ) -> List[NewsItem]:
        """
        Fetch all variants of ``plan`` and return deduplicated candidates.

        Args:
            plan: query variants to issue
            date_window: d<N>/w<N> recency code
            max_total: candidate budget shared across variants
            deadline: optional seconds to wait for branches; later results are discarded

        Raises:
            AllQueriesFailedError: every variant failed and nothing was retrieved
        """
        if len(plan) == 0:
            return []

        budget = max(1, math.ceil(max(1, int(max_total)) / len(plan)))
        tasks = [
            asyncio.create_task(self._run_branch(label, query, date_window, budget))
            for label, query in plan
        ]
        labels = {task: label for task, label in zip(tasks, plan.labels)}

        merged: List[NewsItem] = []
        seen: Set[str] = set()
        failures: Dict[str, str] = {}
        settled: Set[str] = set()

        try:
            for next_done in asyncio.as_completed(tasks, timeout=deadline):
                result = await next_done
                settled.add(result.label)
                if result.failed:
                    failures[result.label] = describe_failures([result.error])
                    continue
                for item in result.items:
                    if item.link in seen:
                        continue
                    seen.add(item.link)
                    merged.append(item)
        except asyncio.TimeoutError:
            for task in tasks:
                if task.done():
                    continue
                self._inflight.add(task)
                task.add_done_callback(self._inflight.discard)
                failures.setdefault(labels[task], "deadline exceeded")
            logger.warning(
                f"[{plan.topic}] Retrieval deadline of {deadline}s hit; "
                f"{len(tasks) - len(settled)} branch(es) still in flight, late results discarded"
            )

        logger.info(
            f"[{plan.topic}] {len(plan)} variants, {len(failures)} failed, {len(merged)} unique candidates"
        )

        if len(failures) == len(plan) and not merged:
            raise AllQueriesFailedError(
                f"Failed to fetch news for {plan.topic}. All queries failed.",
                topic=plan.topic,
                failures=failures,
            )
        return merged

    async def _run_branch(self, label: str, query: str, date_window: str, budget: int) -> BranchResult:
        try:
            items = await self._fetch_variant(query, date_window, budget)
        except Exception as e:
            logger.warning(f"Variant '{label}' failed: {e}")
            return BranchResult(label=label, error=e)
        return BranchResult(label=label, items=items)

    async def _fetch_variant(self, query: str, date_window: str, budget: int) -> List[NewsItem]:
        collected: List[NewsItem] = []
        seen: Set[str] = set()

        for page in range(self._max_pages):
            if len(collected) >= budget:
                break
            if page > 0:
                await asyncio.sleep(self._page_delay)

            start = page * self._page_size + 1
            try:
                results = await self._client.fetch_page(query, date_window, start, self._page_size)
            except Exception as e:
                if not collected:
                    raise
                logger.warning(f"Page {page + 1} failed for '{query}', keeping {len(collected)} items: {e}")
                break

            if not results:
                break
            for item in results:
                if item.link not in seen:
                    seen.add(item.link)
                    collected.append(item)

        return collected
