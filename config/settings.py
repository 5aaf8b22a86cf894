"""
Settings Configuration
使用 Pydantic 进行配置验证和管理
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


GOOGLE_API_URL = "https://www.googleapis.com/customsearch/v1"


class SearchSettings(BaseSettings):
    """Google Custom Search API 配置"""
    api_key: Optional[str] = Field(default=None, description="Google Search API Key")
    engine_id: Optional[str] = Field(default=None, description="Programmable Search Engine ID (cx)")
    api_url: str = Field(default=GOOGLE_API_URL, description="搜索接口地址")
    page_size: int = Field(default=10, description="每页结果数 (API 上限 10)")
    max_pages: int = Field(default=3, description="每个查询变体最多翻页数")
    page_delay: float = Field(default=0.2, description="同一变体翻页间隔(秒)")
    request_timeout: float = Field(default=15.0, description="单页请求超时时间(秒)")
    max_attempts: int = Field(default=3, description="单页最大尝试次数")
    backoff_multiplier: float = Field(default=0.5, description="指数退避基数(秒)")
    backoff_max: float = Field(default=4.0, description="指数退避上限(秒)")

    class Config:
        env_prefix = "GOOGLE_SEARCH_"


class LLMSettings(BaseSettings):
    """LLM 配置 (查询生成 / AI 评审)"""
    provider: str = Field(default="gemini", description="LLM提供商: gemini, openai")
    model_name: Optional[str] = Field(default=None, description="模型名称(不填则使用默认)")
    temperature: float = Field(default=0.3, description="生成温度")
    max_tokens: int = Field(default=2048, description="最大生成token数")
    timeout: float = Field(default=60.0, description="客户端超时时间(秒)")

    # API Keys
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API Key")
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API Key")
    openai_base_url: Optional[str] = Field(default=None, description="OpenAI 兼容接口地址")

    class Config:
        env_prefix = "LLM_"


class NewsSettings(BaseSettings):
    """新闻检索流程配置"""
    topics: List[str] = Field(default_factory=lambda: ["Technology", "World News"], description="主题列表")
    results_per_topic: int = Field(default=8, description="每个主题最终保留条数")
    max_search_results: int = Field(default=30, description="每个主题检索候选总预算")
    date_range: str = Field(default="d3", description="日期窗口 (d<N> 天 / w<N> 周)")
    use_ai_for_queries: bool = Field(default=True, description="是否生成 AI 查询变体")
    use_ai_judge: bool = Field(default=True, description="是否使用 AI 评审")
    ai_judge_prompt: str = Field(default="", description="自定义评审模板 ({{NEWS_TEXT}} / {{TOPIC}})")
    language: str = Field(default="en", description="ISO 639-1 语言代码")
    query_timeout: float = Field(default=20.0, description="AI 查询生成超时(秒)")
    judge_timeout: float = Field(default=60.0, description="AI 评审超时(秒)")
    topic_timeout: float = Field(default=90.0, description="单主题检索总预算(秒)")

    class Config:
        env_prefix = "NEWS_"


class QualitySettings(BaseSettings):
    """启发式质量过滤配置"""
    quality_threshold: float = Field(default=3, description="最低质量分 (1-10)")
    strict_quality_filtering: bool = Field(default=False, description="严格模式: 阈值 +1")
    min_content_length: int = Field(default=80, description="摘要最短长度")
    preferred_domains: List[str] = Field(
        default_factory=lambda: ["nytimes.com", "bbc.com", "reuters.com", "apnews.com"],
        description="优先域名",
    )
    excluded_domains: List[str] = Field(
        default_factory=lambda: ["pinterest.com", "facebook.com", "instagram.com"],
        description="排除域名",
    )

    class Config:
        env_prefix = "QUALITY_"

    @property
    def effective_threshold(self) -> float:
        if self.strict_quality_filtering:
            return self.quality_threshold + 1
        return self.quality_threshold


class ScoringWeights(BaseSettings):
    """启发式评分权重 (经验值，均可通过环境变量覆盖)"""
    base: float = 5.0
    quality_domain: float = 3.0
    article_path: float = 2.0
    deep_path: float = 1.0
    homepage: float = -4.0
    listing_path: float = -3.0
    long_snippet: float = 1.0
    topic_in_title: float = 1.0
    figures: float = 2.0
    dated: float = 1.5
    quotation: float = 1.5
    reporting_verb: float = 1.0
    generic_description: float = -3.0
    site_description: float = -4.0
    clickbait_title: float = -2.0
    official_site_title: float = -3.0
    short_snippet: float = -3.0
    preferred_domain: float = 2.0
    excluded_domain: float = -4.0
    min_score: float = 1.0
    max_score: float = 10.0
    long_snippet_chars: int = 200
    generic_snippet_chars: int = 120

    class Config:
        env_prefix = "SCORING_"


class Settings(BaseSettings):
    """主配置类 - 聚合所有子配置"""

    search: SearchSettings = Field(default_factory=SearchSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    news: NewsSettings = Field(default_factory=NewsSettings)
    quality: QualitySettings = Field(default_factory=QualitySettings)
    scoring: ScoringWeights = Field(default_factory=ScoringWeights)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """从指定的 .env 文件加载配置"""
        if env_path is None:
            # 默认查找 config/.env
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            search=SearchSettings(),
            llm=LLMSettings(),
            news=NewsSettings(),
            quality=QualitySettings(),
            scoring=ScoringWeights(),
        )

    def search_configured(self) -> bool:
        return bool(self.search.api_key and self.search.engine_id)

    def llm_configured(self) -> bool:
        keys = {
            "gemini": self.llm.gemini_api_key,
            "openai": self.llm.openai_api_key,
        }
        return bool(keys.get(self.llm.provider))


@lru_cache()
def get_settings() -> Settings:
    """获取全局配置单例"""
    return Settings.load_from_env_file()


# 便捷访问
def get_llm_settings() -> LLMSettings:
    return get_settings().llm
