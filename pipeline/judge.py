"""Candidate judges: heuristic scoring and an AI KEEP/SKIP editor with deterministic fallback."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import re
from typing import Awaitable, Callable, List, Optional, Sequence

from config import QualitySettings, ScoringWeights, Settings
from intelligence.llm import BaseLLM
from models import FallbackSelected, JudgmentOutcome, NewsItem, Selected
from utils.exceptions import JudgeUnavailableError, LLMError

from .retriever import dedupe_by_link
from .scoring import ScoredItem, rejection_reason, score_breakdown


logger = logging.getLogger(__name__)

Broaden = Callable[[], Awaitable[List[NewsItem]]]

NO_SUBSTANTIVE_CONTENT = "no substantive content"

RELAXED_THRESHOLD_STEP = 1
RELAXED_THRESHOLD_FLOOR = 1
RELAXED_SNIPPET_STEP = 20
RELAXED_SNIPPET_FLOOR = 30

_KEEP_LINE_RE = re.compile(r"ITEM_(\d+):\s*KEEP", re.IGNORECASE)

AI_JUDGE_TEMPERATURE = 0.1

AI_JUDGE_PROMPT = """You are a professional news editor evaluating news articles for a daily briefing about "{topic}".{language_instruction}

Please evaluate each news item and decide whether to KEEP or SKIP it based on these criteria:

KEEP if the news item:
- Contains specific, factual information relevant to {topic}
- Reports on recent developments, announcements, or events
- Includes concrete details (numbers, dates, names, quotes)
- Comes from a recognizable news source
- Provides substantive information beyond headlines

SKIP if the news item:
- Is too vague or lacks specific details
- Appears to be promotional content or advertisements
- Is outdated or not recent
- Duplicates information from other items
- Contains mainly opinion without factual basis

NEWS ITEMS TO EVALUATE:
{news_text}

INSTRUCTIONS:
1. For each news item, respond with either "KEEP" or "SKIP" followed by the item number
2. Select maximum {limit} items to KEEP
3. Format your response exactly as shown below:

ITEM_1: KEEP
ITEM_2: SKIP
ITEM_3: KEEP
...

Focus on selecting the most newsworthy and informative items for the daily briefing."""


class NewsJudge(ABC):
    """Decide which deduplicated candidates are worth keeping."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def judge(
        self,
        candidates: Sequence[NewsItem],
        topic: str,
        limit: int,
        *,
        broaden: Optional[Broaden] = None,
    ) -> JudgmentOutcome:
        """
        Select at most ``limit`` items from ``candidates``.

        Args:
            candidates: link-unique items in merge order
            topic: the topic being judged
            limit: maximum items in the outcome
            broaden: optional coroutine factory fetching a wider candidate set

        Returns:
            Selected or FallbackSelected
        """
        pass


class HeuristicJudge(NewsJudge):
    """Score every candidate, filter, sort by score and truncate."""

    def __init__(
        self,
        quality: Optional[QualitySettings] = None,
        weights: Optional[ScoringWeights] = None,
    ) -> None:
        self.quality = quality or QualitySettings()
        self.weights = weights or ScoringWeights()

    @property
    def name(self) -> str:
        return "heuristic"

    def score(self, candidates: Sequence[NewsItem], topic: str, min_snippet_length: int) -> List[ScoredItem]:
        return [
            score_breakdown(
                item,
                topic,
                weights=self.weights,
                preferred_domains=self.quality.preferred_domains,
                excluded_domains=self.quality.excluded_domains,
                min_snippet_length=min_snippet_length,
            )
            for item in candidates
        ]

    def select(
        self,
        candidates: Sequence[NewsItem],
        topic: str,
        limit: int,
        *,
        threshold: Optional[float] = None,
        min_snippet_length: Optional[int] = None,
    ) -> List[NewsItem]:
        """Filter and rank without any retry."""
        if limit <= 0:
            return []
        threshold = self.quality.effective_threshold if threshold is None else threshold
        min_length = self.quality.min_content_length if min_snippet_length is None else min_snippet_length

        kept: List[ScoredItem] = []
        for scored in self.score(candidates, topic, min_length):
            reason = rejection_reason(
                scored,
                threshold=threshold,
                min_snippet_length=min_length,
                excluded_domains=self.quality.excluded_domains,
                description_chars=self.weights.generic_snippet_chars,
            )
            if reason:
                logger.debug(f"Filtered {scored.item.link} ({scored.score:g}): {reason}")
                continue
            kept.append(scored)

        # sorted() is stable, so ties keep merge order
        kept = sorted(kept, key=lambda scored: scored.score, reverse=True)
        return [scored.item for scored in kept[:limit]]

    async def judge(
        self,
        candidates: Sequence[NewsItem],
        topic: str,
        limit: int,
        *,
        broaden: Optional[Broaden] = None,
    ) -> JudgmentOutcome:
        if limit <= 0:
            return Selected(items=[])

        selected = self.select(candidates, topic, limit)
        if selected:
            logger.info(f"[{topic}] Heuristic judge kept {len(selected)}/{len(candidates)}")
            return Selected(items=selected)

        if broaden is None:
            return FallbackSelected(items=[], reason=NO_SUBSTANTIVE_CONTENT)

        logger.info(f"[{topic}] Nothing passed the filters, retrying with a broadened search")
        try:
            extra = await broaden()
        except Exception as e:
            logger.warning(f"[{topic}] Broadened retry failed: {e}")
            return FallbackSelected(items=[], reason=NO_SUBSTANTIVE_CONTENT)

        pool = dedupe_by_link(list(candidates) + list(extra))
        relaxed = self.select(
            pool,
            topic,
            limit,
            threshold=max(RELAXED_THRESHOLD_FLOOR, self.quality.effective_threshold - RELAXED_THRESHOLD_STEP),
            min_snippet_length=max(RELAXED_SNIPPET_FLOOR, self.quality.min_content_length - RELAXED_SNIPPET_STEP),
        )
        if not relaxed:
            return FallbackSelected(items=[], reason=NO_SUBSTANTIVE_CONTENT)

        logger.info(f"[{topic}] Broadened retry kept {len(relaxed)}/{len(pool)}")
        return Selected(items=relaxed)


def format_news_for_judge(items: Sequence[NewsItem]) -> str:
    blocks = []
    for index, item in enumerate(items, start=1):
        blocks.append(
            f"ITEM_{index}:\n"
            f"Title: {item.title}\n"
            f"Source: {item.display_source}\n"
            f"Published: {item.published_time or 'Unknown'}\n"
            f"Content: {item.snippet}\n"
            f"URL: {item.link}\n"
            "---"
        )
    return "\n\n".join(blocks)


def parse_keep_indices(response: str, count: int) -> List[int]:
    """
    Scan response lines for ``ITEM_<n>: KEEP``.

    Returns zero-based indices in the order the model listed them, each at
    most once; indices outside ``[0, count)`` are dropped.
    """
    indices: List[int] = []
    for line in str(response or "").splitlines():
        match = _KEEP_LINE_RE.search(line)
        if not match:
            continue
        index = int(match.group(1)) - 1
        if 0 <= index < count and index not in indices:
            indices.append(index)
    return indices


class AIJudge(NewsJudge):
    """Ask an LLM editor to mark each candidate KEEP or SKIP.

    Any failure (call error, timeout, zero parsed keeps, parse error)
    falls back to the first ``limit`` candidates.
    """

    def __init__(
        self,
        llm: BaseLLM,
        *,
        prompt_template: str = "",
        language: str = "en",
        timeout: float = 60.0,
        temperature: float = AI_JUDGE_TEMPERATURE,
    ) -> None:
        self.llm = llm
        self.prompt_template = prompt_template or ""
        self.language = language or "en"
        self.timeout = float(timeout)
        self.temperature = temperature

    @property
    def name(self) -> str:
        return "ai"

    def build_prompt(self, candidates: Sequence[NewsItem], topic: str, limit: int) -> str:
        news_text = format_news_for_judge(candidates)
        if self.prompt_template.strip():
            return self.prompt_template.replace("{{NEWS_TEXT}}", news_text).replace("{{TOPIC}}", topic)

        language_instruction = ""
        if self.language != "en":
            language_instruction = (
                f' Respond entirely in the language with ISO 639-1 code "{self.language}".'
            )
        return AI_JUDGE_PROMPT.format(
            topic=topic,
            language_instruction=language_instruction,
            news_text=news_text,
            limit=limit,
        )

    async def judge(
        self,
        candidates: Sequence[NewsItem],
        topic: str,
        limit: int,
        *,
        broaden: Optional[Broaden] = None,
    ) -> JudgmentOutcome:
        candidates = list(candidates)
        if limit <= 0 or not candidates:
            return Selected(items=[])

        try:
            return Selected(items=await self._evaluate(candidates, topic, limit))
        except Exception as e:
            logger.warning(f"[{topic}] AI judge fell back to first {limit} candidates: {e}")
            return FallbackSelected(items=candidates[:limit], reason=str(e) or type(e).__name__)

    async def _evaluate(self, candidates: List[NewsItem], topic: str, limit: int) -> List[NewsItem]:
        prompt = self.build_prompt(candidates, topic, limit)
        try:
            response = await self.llm.agenerate(prompt, timeout=self.timeout, temperature=self.temperature)
        except LLMError as e:
            raise JudgeUnavailableError(str(e), provider=e.provider) from e

        indices = parse_keep_indices(response, len(candidates))
        if not indices:
            raise JudgeUnavailableError("judge response contained no KEEP lines", provider=self.llm.provider)

        logger.info(f"[{topic}] AI judge kept {min(len(indices), limit)}/{len(candidates)}")
        return [candidates[index] for index in indices[:limit]]


def build_judge(settings: Settings, llm: Optional[BaseLLM] = None) -> NewsJudge:
    """AI judge when enabled and an LLM is available, heuristic otherwise."""
    if settings.news.use_ai_judge and llm is not None:
        return AIJudge(
            llm,
            prompt_template=settings.news.ai_judge_prompt,
            language=settings.news.language,
            timeout=settings.news.judge_timeout,
        )
    return HeuristicJudge(settings.quality, settings.scoring)
