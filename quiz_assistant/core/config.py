from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CORPUS_BASE_URL = (
    "https://raw.githubusercontent.com/gianca-oss/quiz-enhanced/main/data/processed-v3/"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Completion service (OpenAI, vision-capable chat model)
    openai_api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    llm_model: str = Field("gpt-4o-mini", alias="LLM_MODEL")
    llm_timeout: float = Field(120.0, alias="LLM_TIMEOUT")  # seconds per call

    extract_max_tokens: int = Field(3000, alias="EXTRACT_MAX_TOKENS")
    topic_max_tokens: int = Field(100, alias="TOPIC_MAX_TOKENS")
    analysis_max_tokens: int = Field(4000, alias="ANALYSIS_MAX_TOKENS")
    analysis_temperature: float = Field(0.05, alias="ANALYSIS_TEMPERATURE")

    # Corpus object store
    corpus_base_url: str = Field(DEFAULT_CORPUS_BASE_URL, alias="CORPUS_BASE_URL")
    corpus_timeout: float = Field(30.0, alias="CORPUS_TIMEOUT")
    corpus_max_shards: int = Field(50, alias="CORPUS_MAX_SHARDS")
    corpus_max_consecutive_misses: int = Field(2, alias="CORPUS_MAX_CONSECUTIVE_MISSES")

    # Retrieval
    context_top_k: int = Field(30, alias="CONTEXT_TOP_K")

    # HTTP / logging
    cors_origins: str = Field("*", alias="CORS_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    app_host: str = Field("0.0.0.0", alias="APP_HOST")
    app_port: int = Field(8000, alias="APP_PORT")

    @property
    def cors_origin_list(self) -> List[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
