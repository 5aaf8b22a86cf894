"""
Unit tests for the concurrent fan-out retriever.
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Tuple

import pytest

from models import NewsItem, QueryPlan
from pipeline.query_plan import deterministic_variants
from pipeline.retriever import FanOutRetriever, dedupe_by_link
from search import BaseSearchClient
from utils.exceptions import AllQueriesFailedError, SearchApiError


def _item(slug: str, title: str = "") -> NewsItem:
    return NewsItem(
        title=title or f"Title {slug}",
        link=f"https://example.com/news/{slug}",
        snippet=f"Snippet for {slug}",
    )


class _FakeSearchClient(BaseSearchClient):
    """
    Serves pages per query string.

    ``pages[query]`` is a list of page payloads; a payload that is an
    Exception is raised for that page.
    """

    def __init__(self, pages: Dict[str, list], delays: Dict[str, float] = None):
        super().__init__()
        self.pages = pages
        self.delays = delays or {}
        self.calls: List[Tuple[str, str, int, int]] = []

    @property
    def name(self) -> str:
        return "fake"

    async def fetch_page(self, query, date_window, page_start_index=1, max_results=10):
        self.calls.append((query, date_window, page_start_index, max_results))
        if self.delays.get(query):
            await asyncio.sleep(self.delays[query])
        payloads = self.pages.get(query, [])
        page = (page_start_index - 1) // 10
        if page >= len(payloads):
            return []
        payload = payloads[page]
        if isinstance(payload, Exception):
            raise payload
        return list(payload)


def _plan(topic: str = "Technology") -> QueryPlan:
    return QueryPlan(topic=topic, queries=deterministic_variants(topic))


def _retriever(client: BaseSearchClient, **kwargs) -> FanOutRetriever:
    kwargs.setdefault("page_delay", 0)
    return FanOutRetriever(client, **kwargs)


@pytest.mark.asyncio
async def test_partial_failure_keeps_surviving_variant() -> None:
    plan = _plan()
    queries = plan.queries
    standard_items = [_item(f"s{i}") for i in range(4)]
    client = _FakeSearchClient(
        {
            queries["standard"]: [standard_items],
            queries["specific"]: [SearchApiError("HTTP 500", status=500)],
            queries["broad"]: [RuntimeError("connection reset")],
            queries["recent"]: [[]],
            queries["simple"]: [[]],
        }
    )

    items = await _retriever(client).retrieve(plan, "d3", 30)

    assert items == standard_items


@pytest.mark.asyncio
async def test_all_variants_failing_raises() -> None:
    plan = _plan()
    client = _FakeSearchClient({query: [SearchApiError("HTTP 403", status=403)] for _, query in plan})

    with pytest.raises(AllQueriesFailedError) as excinfo:
        await _retriever(client).retrieve(plan, "d3", 30)

    assert excinfo.value.topic == "Technology"
    assert set(excinfo.value.failures) == set(plan.labels)


@pytest.mark.asyncio
async def test_all_variants_empty_is_not_an_error() -> None:
    plan = _plan()
    client = _FakeSearchClient({})

    assert await _retriever(client).retrieve(plan, "d3", 30) == []


@pytest.mark.asyncio
async def test_merge_dedups_by_link_first_wins() -> None:
    plan = QueryPlan(topic="AI", queries={"standard": "q1", "simple": "q2"})
    client = _FakeSearchClient(
        {
            "q1": [[_item("a", "From q1"), _item("b")]],
            "q2": [[_item("a", "From q2"), _item("c")]],
        },
        delays={"q2": 0.01},
    )

    items = await _retriever(client).retrieve(plan, "d3", 10)

    links = [item.link for item in items]
    assert len(links) == len(set(links)) == 3
    assert items[0].title == "From q1"


@pytest.mark.asyncio
async def test_paging_stops_at_per_variant_budget() -> None:
    plan = QueryPlan(topic="AI", queries={"a": "qa", "b": "qb"})
    client = _FakeSearchClient(
        {
            "qa": [[_item(f"a{p}-{i}") for i in range(10)] for p in range(3)],
            "qb": [[_item(f"b{p}-{i}") for i in range(10)] for p in range(3)],
        }
    )

    # budget per variant = ceil(30 / 2) = 15 -> two pages each
    items = await _retriever(client, page_size=10, max_pages=3).retrieve(plan, "w1", 30)

    starts = sorted(call[2] for call in client.calls if call[0] == "qa")
    assert starts == [1, 11]
    assert len(items) == 40
    assert all(call[1] == "w1" for call in client.calls)


class _StampingSearchClient(_FakeSearchClient):
    """Records the loop time of every page request."""

    def __init__(self, pages: Dict[str, list]):
        super().__init__(pages)
        self.stamps: Dict[str, List[float]] = {}

    async def fetch_page(self, query, date_window, page_start_index=1, max_results=10):
        self.stamps.setdefault(query, []).append(asyncio.get_running_loop().time())
        return await super().fetch_page(query, date_window, page_start_index, max_results)


@pytest.mark.asyncio
async def test_page_delay_applies_between_pages_of_one_variant_only() -> None:
    plan = QueryPlan(topic="AI", queries={"a": "qa", "b": "qb", "c": "qc"})
    client = _StampingSearchClient(
        {
            "qa": [[_item(f"a{p}-{i}") for i in range(10)] for p in range(3)],
            "qb": [[_item(f"b-{i}") for i in range(10)]],
            "qc": [[_item(f"c-{i}") for i in range(10)]],
        }
    )
    delay = 0.1

    started = asyncio.get_running_loop().time()
    await _retriever(client, page_delay=delay, max_pages=3).retrieve(plan, "d3", 90)

    # every variant issues its first page immediately
    for query in ("qa", "qb", "qc"):
        assert client.stamps[query][0] - started < delay / 2

    # one pause before each extra page of the same variant
    qa = client.stamps["qa"]
    assert len(qa) == 3
    assert all(later - earlier >= delay * 0.9 for earlier, later in zip(qa, qa[1:]))
    assert len(client.stamps["qb"]) == 2
    assert client.stamps["qb"][1] - client.stamps["qb"][0] >= delay * 0.9


@pytest.mark.asyncio
async def test_paging_hard_cap() -> None:
    plan = QueryPlan(topic="AI", queries={"a": "qa"})
    client = _FakeSearchClient({"qa": [[_item(f"{p}-{i}") for i in range(10)] for p in range(5)]})

    items = await _retriever(client, max_pages=3).retrieve(plan, "d3", 100)

    assert len(client.calls) == 3
    assert len(items) == 30


@pytest.mark.asyncio
async def test_later_page_failure_keeps_earlier_pages() -> None:
    plan = QueryPlan(topic="AI", queries={"a": "qa"})
    client = _FakeSearchClient(
        {"qa": [[_item(f"p0-{i}") for i in range(10)], SearchApiError("HTTP 500", status=500)]}
    )

    items = await _retriever(client).retrieve(plan, "d3", 30)

    assert len(items) == 10


@pytest.mark.asyncio
async def test_deadline_discards_late_branches() -> None:
    plan = QueryPlan(topic="AI", queries={"fast": "qf", "slow": "qs"})
    client = _FakeSearchClient(
        {"qf": [[_item("fast")]], "qs": [[_item("slow")]]},
        delays={"qs": 0.5},
    )
    retriever = _retriever(client)

    items = await retriever.retrieve(plan, "d3", 10, deadline=0.1)

    assert [item.link for item in items] == ["https://example.com/news/fast"]
    assert retriever.inflight == 1
    await asyncio.sleep(0.6)
    assert retriever.inflight == 0


@pytest.mark.asyncio
async def test_empty_plan_returns_nothing() -> None:
    client = _FakeSearchClient({})
    assert await _retriever(client).retrieve(QueryPlan(topic="AI"), "d3", 10) == []
    assert client.calls == []


def test_dedupe_by_link_preserves_order() -> None:
    items = [_item("a"), _item("b"), _item("a"), _item("c")]
    assert [item.link[-1] for item in dedupe_by_link(items)] == ["a", "b", "c"]
