"""Settings for the SayItLoud feed backend with observability configuration."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sayitloud.domain.feed.ranking import InterleavePolicy
from sayitloud.domain.feed.scoring import ScoringWeights


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


class Settings(BaseSettings):
    redis_url: str = _env_field("redis://localhost:6379/0", "REDIS_URL")
    secret_key: str = _env_field(..., "SECRET_KEY", "JWT_SECRET")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_enabled: bool = _env_field(True, "OBS_ENABLED")
    obs_metrics_public: bool = _env_field(False, "OBS_METRICS_PUBLIC")
    obs_admin_token: Optional[str] = _env_field(None, "OBS_ADMIN_TOKEN")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
    service_name: str = _env_field("sayitloud-api", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
    cors_allow_origins: Any = _env_field((), "CORS_ALLOW_ORIGINS")

    # Feed candidate selection and paging
    feed_candidate_window_days: int = _env_field(7, "FEED_CANDIDATE_WINDOW_DAYS")
    trending_window_days: int = _env_field(7, "TRENDING_WINDOW_DAYS")
    feed_default_limit: int = _env_field(10, "FEED_DEFAULT_LIMIT")
    feed_max_limit: int = _env_field(50, "FEED_MAX_LIMIT")

    # Nested overrides, e.g. FEED_WEIGHTS__LIKE=3 or FEED_INTERLEAVE__NEW_BATCH=3
    feed_weights: ScoringWeights = Field(default_factory=ScoringWeights)
    feed_interleave: InterleavePolicy = Field(default_factory=InterleavePolicy)

    # Environment helpers
    def is_dev(self) -> bool:
        return self.environment.lower() in ("dev", "development", "test")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("obs_log_level", mode="before")
    def _normalise_level(cls, value):  # type: ignore[override]
        if value in (None, ""):
            return "INFO"
        return str(value).strip().upper()

    @field_validator("cors_allow_origins", mode="before")
    def _split_cors(cls, value):  # type: ignore[override]
        if value in (None, ""):
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        if isinstance(value, (list, tuple, set)):
            return tuple(str(item).strip() for item in value if str(item).strip())
        return ()

    @field_validator("feed_default_limit", "feed_max_limit", "feed_candidate_window_days", "trending_window_days")
    def _positive(cls, value: int) -> int:  # type: ignore[override]
        if value < 1:
            raise ValueError("must be positive")
        return value


settings = Settings()


__all__ = ["Settings", "settings"]
