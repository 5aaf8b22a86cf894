from __future__ import annotations

import pytest
from pydantic import ValidationError

from config import QualitySettings, ScoringWeights, Settings, SearchSettings, LLMSettings
from models import NewsItem, QueryPlan, RunReport, TopicOutcome, link_domain
from search import clean_news_content, normalize_date_window, widen_date_window
from utils.exceptions import AllQueriesFailedError, SearchApiError, describe_failures


def test_news_item_requires_link_and_is_immutable() -> None:
    with pytest.raises(ValidationError):
        NewsItem(title="No link", link="   ")

    item = NewsItem(title="  Spaced  ", link="https://www.apnews.com/article/x")
    assert item.title == "Spaced"
    assert item.domain == "apnews.com"
    assert item.display_source == "apnews.com"
    with pytest.raises(ValidationError):
        item.title = "changed"


def test_link_domain_strips_www_only() -> None:
    assert link_domain("https://www.bbc.co.uk/news") == "bbc.co.uk"
    assert link_domain("https://edition.cnn.com/x") == "edition.cnn.com"
    assert link_domain("not a url") == ""


def test_query_plan_preserves_insertion_order() -> None:
    plan = QueryPlan(topic="AI", queries={"b": "q2", "a": "q1"})

    assert plan.labels == ["b", "a"]
    assert list(plan) == [("b", "q2"), ("a", "q1")]
    assert plan.model_dump() == {"topic": "AI", "queries": {"b": "q2", "a": "q1"}}


@pytest.mark.parametrize(
    "language, empty, failed",
    [
        ("en", "No recent news found for AI.", "Error retrieving news for AI. boom"),
        ("fr", "Aucune actualité récente trouvée pour AI.", "Erreur lors de la récupération des actualités pour AI. boom"),
        ("xx", "No recent news found for AI.", "Error retrieving news for AI. boom"),
    ],
)
def test_topic_outcome_describe(language: str, empty: str, failed: str) -> None:
    assert TopicOutcome(topic="AI").describe(language) == empty
    assert TopicOutcome(topic="AI", error="boom").describe(language) == failed


def test_empty_and_failed_are_distinct() -> None:
    empty = TopicOutcome(topic="A")
    failed = TopicOutcome(topic="B", error="all queries failed")

    assert empty.is_empty and not empty.failed
    assert failed.failed and not failed.is_empty

    report = RunReport(outcomes=[empty, failed])
    assert report.empty == ["A"]
    assert report.failed == ["B"]
    assert not report.any_items
    assert not report.all_failed
    assert RunReport(outcomes=[failed]).all_failed


def test_clean_news_content() -> None:
    text = "Read at https://example.com/a?b=1  or mail   tips@example.org\n\nfor   details"
    assert clean_news_content(text) == "Read at or mail for details"
    assert clean_news_content("") == ""


@pytest.mark.parametrize(
    "value, expected",
    [("d3", "d3"), ("W2", "w2"), ("d", "d3"), ("m1", "d3"), ("", "d3"), (None, "d3")],
)
def test_normalize_date_window(value, expected) -> None:
    assert normalize_date_window(value) == expected


def test_widen_date_window() -> None:
    assert widen_date_window("d3") == "d6"
    assert widen_date_window("w1") == "w2"
    assert widen_date_window("d0") == "d2"
    assert widen_date_window("junk") == "d6"


def test_strict_quality_filtering_raises_threshold() -> None:
    assert QualitySettings(quality_threshold=3).effective_threshold == 3
    assert QualitySettings(quality_threshold=3, strict_quality_filtering=True).effective_threshold == 4


def test_scoring_weights_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SCORING_QUALITY_DOMAIN", "5")
    monkeypatch.setenv("SCORING_HOMEPAGE", "-6")

    weights = ScoringWeights()

    assert weights.quality_domain == 5
    assert weights.homepage == -6
    assert weights.base == 5


def test_collaborator_configuration_flags() -> None:
    settings = Settings(
        search=SearchSettings(api_key="k", engine_id="cx"),
        llm=LLMSettings(provider="openai", openai_api_key=None, gemini_api_key="g"),
    )

    assert settings.search_configured()
    assert not settings.llm_configured()


def test_exception_messages() -> None:
    error = AllQueriesFailedError("all failed", topic="AI", failures={"standard": "HTTP 500"})
    assert error.failures == {"standard": "HTTP 500"}
    assert str(error) == "all failed"

    assert describe_failures([SearchApiError("HTTP 403", status=403), TimeoutError()]) == (
        "SearchApiError: HTTP 403; TimeoutError: TimeoutError"
    )
