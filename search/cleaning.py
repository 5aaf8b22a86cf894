"""Pure text transforms applied to raw search hits."""

from __future__ import annotations

import re


_URL_RE = re.compile(r"https?://\S+")
_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
_WHITESPACE_RE = re.compile(r"\s+")
_DATE_WINDOW_RE = re.compile(r"^[dw]\d+$")

DEFAULT_DATE_WINDOW = "d3"


def clean_news_content(text: str) -> str:
    """Strip embedded URLs and email addresses, then collapse whitespace."""
    if not text:
        return ""
    value = _URL_RE.sub("", str(text))
    value = _EMAIL_RE.sub("", value)
    return _WHITESPACE_RE.sub(" ", value).strip()


def normalize_date_window(value: str, default: str = DEFAULT_DATE_WINDOW) -> str:
    """Return ``value`` if it is a ``d<N>``/``w<N>`` code, else ``default``."""
    token = str(value or "").strip().lower()
    if _DATE_WINDOW_RE.match(token):
        return token
    return default


def widen_date_window(value: str) -> str:
    """Double the span of a date window code (``d3`` -> ``d6``, ``w1`` -> ``w2``)."""
    token = normalize_date_window(value)
    unit, amount = token[0], int(token[1:])
    return f"{unit}{max(1, amount) * 2}"
