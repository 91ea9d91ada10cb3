from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_allow_origins: str = Field(default="*", alias="CORS_ALLOW_ORIGINS")

    llm_api_url: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        alias="LLM_API_URL",
    )
    llm_api_key: str = Field(default="", alias="LLM_API_KEY")
    llm_model: str = Field(default="meta-llama/llama-3.1-70b-instruct", alias="LLM_MODEL")
    llm_fallback_model: str = Field(default="", alias="LLM_FALLBACK_MODEL")
    llm_temperature: float = Field(default=0.7, alias="LLM_TEMPERATURE")
    llm_timeout_seconds: float = Field(default=60.0, alias="LLM_TIMEOUT_SECONDS")
    llm_max_tokens: int = Field(default=2000, alias="LLM_MAX_TOKENS")
    llm_max_tokens_ceiling: int = Field(default=8000, alias="LLM_MAX_TOKENS_CEILING")
    llm_token_budget_growth: float = Field(default=1.5, alias="LLM_TOKEN_BUDGET_GROWTH")
    llm_max_attempts: int = Field(default=3, alias="LLM_MAX_ATTEMPTS")

    quiz_max_questions: int = Field(default=20, alias="QUIZ_MAX_QUESTIONS")
    session_store_max_sessions: int = Field(default=10000, alias="SESSION_STORE_MAX_SESSIONS")
    session_default_timer_seconds: int = Field(default=30, alias="SESSION_DEFAULT_TIMER_SECONDS")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
