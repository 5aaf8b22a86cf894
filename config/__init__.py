"""
Configuration Management Module
统一配置管理，实现API配置解耦
"""
from .settings import (
    GOOGLE_API_URL,
    LLMSettings,
    NewsSettings,
    QualitySettings,
    ScoringWeights,
    SearchSettings,
    Settings,
    get_settings,
    get_llm_settings,
)

__all__ = [
    "GOOGLE_API_URL",
    "LLMSettings",
    "NewsSettings",
    "QualitySettings",
    "ScoringWeights",
    "SearchSettings",
    "Settings",
    "get_settings",
    "get_llm_settings",
]
