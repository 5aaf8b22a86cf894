"""Heuristic quality scoring and filtering for candidate news items."""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from config import ScoringWeights
from models import NewsItem, link_domain


QUALITY_NEWS_SOURCES = (
    # Major global news organizations
    "nytimes.com", "bbc.com", "bbc.co.uk", "reuters.com", "apnews.com", "economist.com",
    "wsj.com", "ft.com", "bloomberg.com", "theguardian.com", "npr.org",
    "washingtonpost.com", "aljazeera.com", "time.com", "latimes.com",
    # Tech
    "wired.com", "techcrunch.com", "arstechnica.com", "theverge.com", "cnet.com",
    "zdnet.com", "engadget.com", "venturebeat.com",
    # Science
    "nature.com", "scientificamerican.com", "science.org", "newscientist.com",
    "pnas.org", "sciencedaily.com", "livescience.com", "popsci.com",
    # Business and finance
    "cnbc.com", "forbes.com", "fortune.com", "marketwatch.com", "businessinsider.com",
    "hbr.org", "barrons.com", "morningstar.com", "fastcompany.com",
    # Analysis
    "theatlantic.com", "newyorker.com", "politico.com", "foreignpolicy.com",
    "foreignaffairs.com", "project-syndicate.org", "brookings.edu", "axios.com",
    # Public and international
    "france24.com", "dw.com", "abc.net.au", "cbc.ca", "japantimes.co.jp",
    "independent.co.uk", "thehindu.com", "straitstimes.com", "scmp.com",
)

_ARTICLE_PATH_RE = re.compile(
    r"/(?:article|articles|story|stories)/"
    r"|/(?:19|20)\d{2}/(?:0?[1-9]|1[0-2])/"
    r"|(?:/|-)\d{5,}(?:/|\.html?|$)",
    re.IGNORECASE,
)
_LISTING_PATH_RE = re.compile(
    r"/(?:category|categories|tag|tags|topic|topics|section|sections|archive|archives)(?:/|$)",
    re.IGNORECASE,
)
_HOMEPAGE_PATHS = {"", "index.html", "index.htm", "index.php", "home"}

_FIGURE_RE = re.compile(
    r"\d+(?:\.\d+)?\s?%|\d+(?:\.\d+)?\s+percent\b|[$€£¥]\s?\d|\d+(?:\.\d+)?\s+(?:million|billion)\b",
    re.IGNORECASE,
)
_MONTH_DAY_RE = re.compile(
    r"\b(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)\.?\s+\d{1,2}\b"
)
_QUOTE_RE = re.compile(r"[\"“][^\"“”]{10,}[\"”]")
_REPORTING_RE = re.compile(
    r"\b(?:reported|announced|revealed|confirmed|disclosed|unveiled|stated|according to)\b",
    re.IGNORECASE,
)
_GENERIC_DESCRIPTION_RE = re.compile(
    r"\b(?:welcome to|your (?:source|destination|home) for|find the latest|get the latest"
    r"|all the latest|stay up to date|browse|learn more|read more)\b",
    re.IGNORECASE,
)
_SITE_DESCRIPTION_RE = re.compile(r"\b(?:is a website|is the official|official site of)\b", re.IGNORECASE)
_CLICKBAIT_TITLE_RE = re.compile(
    r"you won'?t believe|shocking|this one trick|blow your mind|what happens next"
    r"|\bhere'?s why\b|\bgoes viral\b|\bmust[- ]see\b",
    re.IGNORECASE,
)
_OFFICIAL_TITLE_RE = re.compile(r"\bofficial (?:web)?site\b|\bhome ?page\b", re.IGNORECASE)
_LIST_ARTICLE_TITLE_RE = re.compile(
    r"^\s*(?:the\s+)?(?:top|best)\s+\d+\b|\bbest of\b|^\s*\d+\s+(?:best|top|ways|things|reasons)\b",
    re.IGNORECASE,
)


@dataclass
class ScoredItem:
    item: NewsItem
    score: float
    reasons: List[str] = field(default_factory=list)


def normalize_domains(domains: Optional[Iterable[str]]) -> Tuple[str, ...]:
    normalized = []
    for raw in list(domains or []):
        value = str(raw or "").strip().lower()
        if value.startswith("www."):
            value = value[4:]
        if value:
            normalized.append(value)
    return tuple(normalized)


def domain_matches(domain: str, candidates: Sequence[str]) -> bool:
    """True if ``domain`` equals or is a subdomain of any candidate."""
    value = str(domain or "").lower()
    if not value:
        return False
    return any(value == entry or value.endswith("." + entry) for entry in candidates)


def _path(link: str) -> str:
    return urlparse(link).path or ""


def is_homepage(link: str) -> bool:
    parsed = urlparse(link)
    return parsed.path.strip("/").lower() in _HOMEPAGE_PATHS and not parsed.query


def is_listing_page(link: str) -> bool:
    return bool(_LISTING_PATH_RE.search(_path(link)))


def is_list_article(title: str) -> bool:
    return bool(_LIST_ARTICLE_TITLE_RE.search(title or ""))


def is_site_description(snippet: str, max_chars: int = 120) -> bool:
    text = snippet or ""
    return len(text) < max_chars and bool(_SITE_DESCRIPTION_RE.search(text))


def score_breakdown(
    item: NewsItem,
    topic: str,
    *,
    weights: Optional[ScoringWeights] = None,
    preferred_domains: Sequence[str] = (),
    excluded_domains: Sequence[str] = (),
    min_snippet_length: int = 80,
    quality_sources: Sequence[str] = QUALITY_NEWS_SOURCES,
) -> ScoredItem:
    """Score one item in [min_score, max_score] and record which rules fired."""
    w = weights or ScoringWeights()
    domain = link_domain(item.link)
    path = _path(item.link)
    snippet = item.snippet or ""
    title = item.title or ""
    score = w.base
    reasons: List[str] = []

    def _apply(delta: float, reason: str) -> None:
        nonlocal score
        score += delta
        reasons.append(f"{reason}={delta:+g}")

    if domain_matches(domain, quality_sources):
        _apply(w.quality_domain, "domain.quality")

    if _ARTICLE_PATH_RE.search(path):
        _apply(w.article_path, "url.article_shape")
    if is_homepage(item.link):
        _apply(w.homepage, "url.homepage")
    elif not path.endswith("/"):
        _apply(w.deep_path, "url.deep_path")
    if _LISTING_PATH_RE.search(path):
        _apply(w.listing_path, "url.listing")

    if len(snippet) > w.long_snippet_chars:
        _apply(w.long_snippet, "snippet.long")
    topic_key = str(topic or "").strip().lower()
    if topic_key and topic_key in title.lower():
        _apply(w.topic_in_title, "title.topic")
    if _FIGURE_RE.search(snippet):
        _apply(w.figures, "snippet.figures")
    if _MONTH_DAY_RE.search(snippet):
        _apply(w.dated, "snippet.date")
    if _QUOTE_RE.search(snippet):
        _apply(w.quotation, "snippet.quote")
    if _REPORTING_RE.search(snippet):
        _apply(w.reporting_verb, "snippet.reporting")
    if len(snippet) < w.generic_snippet_chars and _GENERIC_DESCRIPTION_RE.search(snippet):
        _apply(w.generic_description, "snippet.generic")
    if _SITE_DESCRIPTION_RE.search(snippet):
        _apply(w.site_description, "snippet.site_description")
    if _CLICKBAIT_TITLE_RE.search(title):
        _apply(w.clickbait_title, "title.clickbait")
    if _OFFICIAL_TITLE_RE.search(title):
        _apply(w.official_site_title, "title.official_site")
    if len(snippet) < min_snippet_length:
        _apply(w.short_snippet, "snippet.short")

    if domain_matches(domain, normalize_domains(preferred_domains)):
        _apply(w.preferred_domain, "domain.preferred")
    if domain_matches(domain, normalize_domains(excluded_domains)):
        _apply(w.excluded_domain, "domain.excluded")

    clamped = max(w.min_score, min(w.max_score, score))
    return ScoredItem(item=item, score=clamped, reasons=reasons)


def score_item(item: NewsItem, topic: str, **kwargs) -> float:
    return score_breakdown(item, topic, **kwargs).score


def rejection_reason(
    scored: ScoredItem,
    *,
    threshold: float,
    min_snippet_length: int,
    excluded_domains: Sequence[str] = (),
    description_chars: int = 120,
) -> Optional[str]:
    """Why a scored item is filtered out, or None if it passes."""
    item = scored.item
    if not item.title or not item.snippet:
        return "missing title or snippet"
    if domain_matches(item.domain, normalize_domains(excluded_domains)):
        return "excluded domain"
    if len(item.snippet) < min_snippet_length:
        return "snippet too short"
    if is_list_article(item.title):
        return "list article"
    if is_homepage(item.link) or is_listing_page(item.link):
        return "homepage or listing url"
    if is_site_description(item.snippet, description_chars):
        return "website description"
    if scored.score < threshold:
        return "below threshold"
    return None
