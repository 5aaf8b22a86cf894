"""
Tests for CLI argument handling.
"""

from __future__ import annotations

import main
from config import NewsSettings, Settings


def _args(*argv: str):
    return main.build_parser().parse_args(["run", *argv])


def test_zero_limit_is_applied(monkeypatch) -> None:
    monkeypatch.setattr(main, "get_settings", lambda: Settings(news=NewsSettings(results_per_topic=8)))

    settings = main._settings_from_args(_args("--limit", "0"))

    assert settings.news.results_per_topic == 0


def test_omitted_flags_keep_configured_values(monkeypatch) -> None:
    base = Settings(news=NewsSettings(results_per_topic=5, date_range="w1", use_ai_judge=True))
    monkeypatch.setattr(main, "get_settings", lambda: base)

    settings = main._settings_from_args(_args("--judge", "heuristic", "--no-ai-queries"))

    assert settings.news.results_per_topic == 5
    assert settings.news.date_range == "w1"
    assert settings.news.use_ai_judge is False
    assert settings.news.use_ai_for_queries is False
    assert base.news.use_ai_judge is True
