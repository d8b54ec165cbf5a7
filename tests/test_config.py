"""Tests for Settings and PipelineConfig."""

from pathlib import Path

import pytest

from smartreply.config import PipelineConfig, Settings, validate_config
from smartreply.llm.models import MODEL_MAP


class TestDefaults:
    def test_default_models(self):
        s = Settings()
        assert s.reply_model == "haiku"
        assert s.analysis_model == "haiku"

    def test_default_database_path(self):
        s = Settings()
        assert s.database_path == Path("data/smartreply.db")

    def test_default_pipeline_knobs(self):
        s = Settings()
        assert s.max_messages == 30
        assert s.cache_expiration_ms == 300_000
        assert s.max_retries == 3

    def test_ai_analysis_needs_api_key(self):
        assert Settings(anthropic_api_key="").ai_analysis_available is False
        assert Settings(anthropic_api_key="sk-test").ai_analysis_available is True

    def test_ai_analysis_can_be_disabled(self):
        s = Settings(anthropic_api_key="sk-test", ai_analysis_enabled=False)
        assert s.ai_analysis_available is False


class TestExtraForbidden:
    def test_unknown_env_var_raises(self):
        with pytest.raises(ValueError, match="extra_forbidden"):
            Settings(**{"nonexistent_field": "value"})


class TestValidateConfig:
    def test_defaults(self):
        config = validate_config()
        assert config.max_messages == 30
        assert config.context_window_size == 4000
        assert config.generation_timeout_ms == 60_000
        assert config.cache_expiration_ms == 300_000
        assert config.parallel_execution is True
        assert config.temperature == 0.7
        assert config.max_tokens == 150
        assert config.model == MODEL_MAP["haiku"]

    def test_clamps_max_messages(self):
        assert validate_config({"max_messages": 500}).max_messages == 100
        assert validate_config({"max_messages": 0}).max_messages == 1

    def test_clamps_temperature(self):
        assert validate_config({"temperature": -1}).temperature == 0
        assert validate_config({"temperature": 5}).temperature == 2.0

    def test_explicit_zero_temperature_is_kept(self):
        assert validate_config({"temperature": 0}).temperature == 0

    def test_clamps_context_window_and_tokens(self):
        config = validate_config({"context_window_size": 50, "max_tokens": 10_000})
        assert config.context_window_size == 1000
        assert config.max_tokens == 500

    def test_clamps_timeout(self):
        assert validate_config({"generation_timeout_ms": 1}).generation_timeout_ms == 10_000
        assert validate_config({"generation_timeout_ms": 10**6}).generation_timeout_ms == 120_000

    def test_accepts_camel_case_keys(self):
        config = validate_config({"maxMessages": 500, "contextWindowSize": 2000})
        assert config.max_messages == 100
        assert config.context_window_size == 2000

    def test_accepts_unsuffixed_millisecond_keys(self):
        config = validate_config({"generationTimeout": 5000, "cacheExpiration": 60_000})
        assert config.generation_timeout_ms == 10_000
        assert config.cache_expiration_ms == 60_000

    def test_accepts_suffixed_millisecond_keys(self):
        config = validate_config({"generationTimeoutMs": 90_000, "cacheExpirationMs": 1000})
        assert config.generation_timeout_ms == 90_000
        assert config.cache_expiration_ms == 1000

    def test_updated_keeps_millisecond_knobs(self):
        config = validate_config({"cacheExpiration": 60_000}).updated(max_tokens=200)
        assert config.cache_expiration_ms == 60_000
        assert config.max_tokens == 200

    def test_parallel_execution_is_accepted(self):
        assert validate_config({"parallelExecution": False}).parallel_execution is False

    def test_none_values_take_defaults(self):
        assert validate_config({"max_tokens": None}).max_tokens == 150

    def test_resolves_friendly_model_name(self):
        assert validate_config({"model": "sonnet"}).model == MODEL_MAP["sonnet"]

    def test_updated_revalidates(self):
        config = PipelineConfig().updated(max_messages=1000)
        assert config.max_messages == 100

    def test_from_settings(self):
        s = Settings(max_messages=10, temperature=0.2, reply_model="opus")
        config = PipelineConfig.from_settings(s)
        assert config.max_messages == 10
        assert config.temperature == 0.2
        assert config.model == MODEL_MAP["opus"]
