"""
Unit tests for the Google Custom Search client (no network).
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from config import SearchSettings
from search import GoogleSearchClient
from utils.exceptions import SearchApiError


def _settings(**overrides) -> SearchSettings:
    values = {
        "api_key": "test-key",
        "engine_id": "test-cx",
        "max_attempts": 3,
        "backoff_multiplier": 0,
        "backoff_max": 0,
        "page_delay": 0,
    }
    values.update(overrides)
    return SearchSettings(**values)


def _client(handler, **overrides) -> GoogleSearchClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleSearchClient(_settings(**overrides), client=http)


def _hit(n: int, **extra) -> dict:
    hit = {
        "title": f"Story {n}",
        "link": f"https://www.reuters.com/world/story-{n}",
        "snippet": f"Snippet {n} with details",
    }
    hit.update(extra)
    return hit


@pytest.mark.asyncio
async def test_first_page_sorted_by_date_with_projection() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(dict(request.url.params))
        return httpx.Response(200, json={"items": [_hit(1)]})

    client = _client(handler)
    items = await client.fetch_page("ai news", "bogus", 1, 25)

    assert len(items) == 1
    params = seen[0]
    assert params["q"] == "ai news"
    assert params["sort"] == "date"
    assert params["start"] == "1"
    assert params["num"] == "10"
    assert params["dateRestrict"] == "d3"
    assert params["key"] == "test-key"
    assert params["cx"] == "test-cx"
    assert params["fields"] == GoogleSearchClient.FIELDS


@pytest.mark.asyncio
async def test_later_pages_sorted_by_relevance() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(dict(request.url.params))
        return httpx.Response(200, json={"items": []})

    client = _client(handler)
    await client.fetch_page("ai news", "w2", 11, 5)

    assert seen[0]["sort"] == "relevance"
    assert seen[0]["start"] == "11"
    assert seen[0]["num"] == "5"
    assert seen[0]["dateRestrict"] == "w2"


@pytest.mark.asyncio
async def test_success_without_items_is_empty_list() -> None:
    client = _client(lambda request: httpx.Response(200, json={"kind": "customsearch#search"}))
    assert await client.fetch_page("quiet topic", "d1") == []


@pytest.mark.asyncio
async def test_non_2xx_raises_after_bounded_retries() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(403, json={"error": {"message": "Daily limit exceeded", "status": "PERMISSION_DENIED"}})

    client = _client(handler, max_attempts=3)
    with pytest.raises(SearchApiError) as excinfo:
        await client.fetch_page("ai news", "d3")

    assert calls["n"] == 3
    assert excinfo.value.status == 403
    assert "Daily limit exceeded" in str(excinfo.value)


@pytest.mark.asyncio
async def test_transient_failure_is_retried() -> None:
    responses = [
        httpx.Response(500, text="upstream error"),
        httpx.Response(200, json={"items": [_hit(1), _hit(2)]}),
    ]

    client = _client(lambda request: responses.pop(0))
    items = await client.fetch_page("ai news", "d3")

    assert [item.title for item in items] == ["Story 1", "Story 2"]


@pytest.mark.asyncio
async def test_network_error_is_retried() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"items": [_hit(7)]})

    client = _client(handler)
    items = await client.fetch_page("ai news", "d3")

    assert calls["n"] == 2
    assert items[0].link.endswith("story-7")


@pytest.mark.asyncio
async def test_malformed_body_raises() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>not json</html>"), max_attempts=1)
    with pytest.raises(SearchApiError):
        await client.fetch_page("ai news", "d3")


def test_parse_response_error_object_in_2xx_body() -> None:
    with pytest.raises(SearchApiError) as excinfo:
        GoogleSearchClient.parse_response(200, '{"error": {"message": "bad cx", "status": "INVALID_ARGUMENT"}}')
    assert excinfo.value.status == "INVALID_ARGUMENT"


def test_parse_response_cleans_snippet_and_reads_metatags() -> None:
    body = {
        "items": [
            _hit(
                1,
                snippet="Markets rallied   today. Contact press@example.com or see https://example.com/x for more.",
                pagemap={"metatags": [{"publishedTime": "2026-10-18T09:00:00Z", "og_site_name": "Reuters"}]},
            ),
            _hit(2, link="https://www.bbc.com/news/articles/abc"),
            {"title": "no link", "snippet": "dropped"},
        ]
    }
    items = GoogleSearchClient.parse_response(200, json.dumps(body))

    assert len(items) == 2
    first, second = items
    assert first.snippet == "Markets rallied today. Contact or see for more."
    assert first.published_time == "2026-10-18T09:00:00Z"
    assert first.source == "Reuters"
    assert second.source == "bbc.com"
    assert second.published_time is None


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open() -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    client = GoogleSearchClient(_settings(), client=http)

    await client.close()

    assert not http.is_closed
    await http.aclose()


def test_parse_response_tolerates_malformed_hit_fields() -> None:
    body = {
        "items": [
            _hit(1, pagemap="oops"),
            _hit(2, pagemap={"metatags": {"publishedTime": "2026-10-18"}}),
            _hit(3, pagemap={"metatags": [{"publishedTime": 123, "og_site_name": ["Reuters"]}]}),
            _hit(4, pagemap={"metatags": ["not-a-dict"]}),
            _hit(5, link=["https://www.reuters.com/world/story-5"]),
            _hit(6, snippet={"text": "nested"}),
        ]
    }
    items = GoogleSearchClient.parse_response(200, json.dumps(body))

    assert [item.title for item in items] == ["Story 1", "Story 2", "Story 3", "Story 4", "Story 6"]
    assert items[0].source == "reuters.com"
    assert items[1].published_time is None
    assert items[2].published_time == "123"
    assert items[2].source == "reuters.com"
    assert items[4].snippet == ""


@pytest.mark.asyncio
async def test_bad_hit_does_not_discard_rest_of_page() -> None:
    body = {"items": [_hit(1, pagemap=[1, 2]), {"link": 42}, _hit(2)]}
    client = _client(lambda request: httpx.Response(200, json=body), max_attempts=1)

    items = await client.fetch_page("ai news", "d3")

    assert [item.link for item in items] == [
        "https://www.reuters.com/world/story-1",
        "https://www.reuters.com/world/story-2",
    ]


def test_parse_response_items_not_a_list_raises() -> None:
    with pytest.raises(SearchApiError):
        GoogleSearchClient.parse_response(200, json.dumps({"items": {"title": "x"}}))


@pytest.mark.asyncio
async def test_slow_page_times_out_after_bounded_attempts() -> None:
    calls = {"n": 0}

    async def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        await asyncio.sleep(1.0)
        return httpx.Response(200, json={"items": [_hit(1)]})

    client = _client(handler, request_timeout=0.05, max_attempts=2)
    with pytest.raises(asyncio.TimeoutError):
        await client.fetch_page("ai news", "d3")

    assert calls["n"] == 2
