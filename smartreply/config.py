"""Application settings and pipeline configuration."""

import os
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from smartreply.llm.models import resolve_model


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Smart-reply configuration. All values come from environment variables."""

    # Anthropic
    anthropic_api_key: str = Field(default="")
    reply_model: str = Field(default="haiku")
    analysis_model: str = Field(default="haiku")

    # Context analysis
    ai_analysis_enabled: bool = Field(default=True)

    # Database
    database_path: Path = Field(default=Path("data/smartreply.db"))

    # Pipeline
    max_messages: int = Field(default=30)
    context_window_size: int = Field(default=4000)
    generation_timeout_ms: int = Field(default=60_000)
    cache_expiration_ms: int = Field(default=300_000)
    temperature: float = Field(default=0.7)
    max_tokens: int = Field(default=150)
    max_retries: int = Field(default=3)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    @property
    def ai_analysis_available(self) -> bool:
        """True when the AI analyzer can actually be reached."""
        return self.ai_analysis_enabled and bool(self.anthropic_api_key.strip())


settings = Settings()


# -- Pipeline configuration ---------------------------------------------------


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


class PipelineConfig(BaseModel):
    """Validated knobs for one pipeline run.

    Accepts snake_case or camelCase keys (``max_messages`` / ``maxMessages``).
    The two millisecond knobs also accept their unsuffixed camelCase names,
    ``generationTimeout`` and ``cacheExpiration``.
    Out-of-range numbers are clamped rather than rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    max_messages: int = 30
    context_window_size: int = 4000
    generation_timeout_ms: int = Field(
        default=60_000,
        validation_alias=AliasChoices(
            "generation_timeout_ms", "generationTimeoutMs", "generationTimeout"
        ),
    )
    cache_expiration_ms: int = Field(
        default=300_000,
        validation_alias=AliasChoices(
            "cache_expiration_ms", "cacheExpirationMs", "cacheExpiration"
        ),
    )
    parallel_execution: bool = True
    model: str = Field(default_factory=lambda: resolve_model("haiku"))
    temperature: float = 0.7
    max_tokens: int = 150

    @field_validator("max_messages")
    @classmethod
    def _clamp_max_messages(cls, v: int) -> int:
        return int(_clamp(v, 1, 100))

    @field_validator("context_window_size")
    @classmethod
    def _clamp_context_window(cls, v: int) -> int:
        return int(_clamp(v, 1000, 8000))

    @field_validator("generation_timeout_ms")
    @classmethod
    def _clamp_timeout(cls, v: int) -> int:
        return int(_clamp(v, 10_000, 120_000))

    @field_validator("temperature")
    @classmethod
    def _clamp_temperature(cls, v: float) -> float:
        return float(_clamp(v, 0.0, 2.0))

    @field_validator("max_tokens")
    @classmethod
    def _clamp_max_tokens(cls, v: int) -> int:
        return int(_clamp(v, 50, 500))

    @field_validator("cache_expiration_ms")
    @classmethod
    def _non_negative_expiration(cls, v: int) -> int:
        return max(0, v)

    @field_validator("model")
    @classmethod
    def _resolve_model(cls, v: str) -> str:
        return resolve_model(v)

    @classmethod
    def from_settings(cls, s: Settings) -> "PipelineConfig":
        """Build a config from environment settings."""
        return validate_config(
            {
                "max_messages": s.max_messages,
                "context_window_size": s.context_window_size,
                "generation_timeout_ms": s.generation_timeout_ms,
                "cache_expiration_ms": s.cache_expiration_ms,
                "model": s.reply_model,
                "temperature": s.temperature,
                "max_tokens": s.max_tokens,
            }
        )

    def updated(self, **changes: Any) -> "PipelineConfig":
        """Return a new config with *changes* applied and re-validated."""
        merged = {**self.model_dump(), **changes}
        return validate_config(merged)


def validate_config(overrides: dict[str, Any] | None = None) -> PipelineConfig:
    """Fill defaults and clamp every numeric knob into its allowed range.

    Keys that are missing or ``None`` take the default; explicit zeros are
    kept and clamped.
    """
    cleaned = {k: v for k, v in (overrides or {}).items() if v is not None}
    return PipelineConfig.model_validate(cleaned)
