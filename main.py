"""CLI entrypoint for the news retrieval-and-selection core."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from rich.table import Table

from config import Settings, get_settings
from intelligence.llm import get_llm
from models import RunReport
from pipeline import PipelineCoordinator, QueryPlanGenerator
from utils import ConfigurationError, console, set_package_level, setup_logger


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = get_settings().model_copy(deep=True)
    news = settings.news
    if getattr(args, "limit", None) is not None:
        news.results_per_topic = int(args.limit)
    if getattr(args, "date_range", None):
        news.date_range = args.date_range
    if getattr(args, "judge", None):
        news.use_ai_judge = args.judge == "ai"
    if getattr(args, "no_ai_queries", False):
        news.use_ai_for_queries = False
    if getattr(args, "language", None):
        news.language = args.language
    return settings


def _print_report(report: RunReport, language: str) -> None:
    for outcome in report.outcomes:
        console.print()
        if not outcome.items:
            style = "red" if outcome.failed else "yellow"
            console.print(f"[{style}]{outcome.describe(language)}[/{style}]")
            continue

        title = f"📰 {outcome.topic} ({len(outcome.items)}/{outcome.candidate_count})"
        if outcome.fallback_reason:
            title += f" [fallback: {outcome.fallback_reason}]"
        table = Table(title=title, show_header=True)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Source", style="magenta")
        table.add_column("Published", style="green")
        table.add_column("URL", overflow="fold")
        for index, item in enumerate(outcome.items, start=1):
            table.add_row(str(index), item.title, item.display_source, item.published_time or "-", item.link)
        console.print(table)


async def _run(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    topics: List[str] = list(args.topic or []) or list(settings.news.topics)

    try:
        coordinator = PipelineCoordinator.from_settings(settings)
    except ConfigurationError as e:
        console.print(f"[red]❌ {e}[/red]")
        return 2

    async with coordinator:
        report = await coordinator.run_topics(topics)

    if args.json:
        print(json.dumps(report.model_dump(mode="json"), ensure_ascii=False, indent=2))
    else:
        _print_report(report, settings.news.language)
    return 1 if report.all_failed else 0


async def _plan(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    use_ai = settings.news.use_ai_for_queries and settings.llm_configured()
    llm = get_llm(settings=settings.llm) if use_ai else None
    planner = QueryPlanGenerator(llm, timeout=settings.news.query_timeout)

    try:
        for topic in args.topic:
            plan = await planner.build_plan(topic, use_ai_query=use_ai)
            if args.json:
                print(json.dumps(plan.model_dump(), ensure_ascii=False, indent=2))
                continue
            table = Table(title=f"🔎 Query plan: {plan.topic}", show_header=True)
            table.add_column("Label", style="cyan")
            table.add_column("Query")
            for label, query in plan:
                table.add_row(label, query)
            console.print(table)
    finally:
        if llm is not None:
            await llm.aclose()
    return 0


def _check(args: argparse.Namespace) -> int:
    settings = _settings_from_args(args)
    table = Table(title="🔧 Configuration", show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    table.add_column("Detail", style="dim")

    table.add_row(
        "Google Search",
        "✅" if settings.search_configured() else "⚠️ missing",
        "GOOGLE_SEARCH_API_KEY / GOOGLE_SEARCH_ENGINE_ID",
    )
    table.add_row(
        "LLM",
        "✅" if settings.llm_configured() else "⚠️ missing",
        f"provider={settings.llm.provider}",
    )
    judge = "ai" if settings.news.use_ai_judge and settings.llm_configured() else "heuristic"
    table.add_row("Judge", judge, f"threshold={settings.quality.effective_threshold:g}")
    table.add_row("Date window", settings.news.date_range, f"limit={settings.news.results_per_topic}")
    table.add_row("Topics", str(len(settings.news.topics)), ", ".join(settings.news.topics))
    console.print(table)
    return 0 if settings.search_configured() else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="News retrieval and selection CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="warnings only")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="retrieve and select news for topics")
    run.add_argument("--topic", action="append", help="topic (repeatable); defaults to NEWS_TOPICS")
    run.add_argument("--limit", type=int, help="items kept per topic")
    run.add_argument("--date-range", help="d<N> days or w<N> weeks")
    run.add_argument("--judge", choices=["ai", "heuristic"])
    run.add_argument("--no-ai-queries", action="store_true")
    run.add_argument("--language", help="ISO 639-1 code for status lines and judge replies")
    run.add_argument("--json", action="store_true")

    plan = sub.add_parser("plan", help="print the query plan for a topic")
    plan.add_argument("--topic", action="append", required=True)
    plan.add_argument("--no-ai-queries", action="store_true")
    plan.add_argument("--json", action="store_true")

    sub.add_parser("check", help="report configuration status")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    setup_logger(level=level)
    set_package_level(level)

    if args.command == "run":
        return asyncio.run(_run(args))
    if args.command == "plan":
        return asyncio.run(_plan(args))
    return _check(args)


if __name__ == "__main__":
    sys.exit(main())
