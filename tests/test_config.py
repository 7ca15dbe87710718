"""Tests for Settings.from_env and AgentConfig."""

from __future__ import annotations

import pytest

from calculus.config import AgentConfig, Settings
from calculus.exceptions import ConfigurationError

REQUIRED_ENV = {
    "OPENAI_API_KEY": "sk-test",
    "OPENAI_BASE_URL": "https://openrouter.ai/api/v1",
    "BRIGHTDATA_API_KEY": "bd-test",
    "BRIGHTDATA_UNLOCKER_ZONE": "unlocker",
}


class TestFromEnv:
    def test_defaults(self):
        settings = Settings.from_env(REQUIRED_ENV)
        assert settings.openai_api_key == "sk-test"
        assert settings.brightdata_zone == "unlocker"
        assert settings.model == "anthropic/claude-sonnet-4"
        assert settings.temperature == 0.5
        assert settings.top_p is None
        assert settings.reasoning_effort is None
        assert settings.max_rounds == 25
        assert settings.tool_timeout == 30.0
        assert settings.parallel_tools is False
        assert settings.log_level == "WARNING"
        assert settings.referer == "https://thesobercoder.in"
        assert settings.title == "Calculus"

    def test_all_missing_reported_together(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_env({})
        assert exc_info.value.variables == list(REQUIRED_ENV)
        for name in REQUIRED_ENV:
            assert name in str(exc_info.value)

    def test_blank_counts_as_missing(self):
        env = {**REQUIRED_ENV, "BRIGHTDATA_API_KEY": "   "}
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_env(env)
        assert exc_info.value.variables == ["BRIGHTDATA_API_KEY"]

    def test_optional_overrides(self):
        settings = Settings.from_env({
            **REQUIRED_ENV,
            "CALCULUS_MODEL": "openai/gpt-4o",
            "CALCULUS_TEMPERATURE": "0.1",
            "CALCULUS_TOP_P": "0.9",
            "CALCULUS_REASONING_EFFORT": "high",
            "CALCULUS_MAX_ROUNDS": "5",
            "CALCULUS_PARALLEL_TOOLS": "true",
            "CALCULUS_LOG_LEVEL": "debug",
        })
        assert settings.model == "openai/gpt-4o"
        assert settings.temperature == 0.1
        assert settings.top_p == 0.9
        assert settings.reasoning_effort == "high"
        assert settings.max_rounds == 5
        assert settings.parallel_tools is True
        assert settings.log_level == "DEBUG"

    def test_invalid_values_name_env_vars(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_env({
                **REQUIRED_ENV,
                "CALCULUS_MAX_ROUNDS": "0",
                "CALCULUS_TEMPERATURE": "warm",
            })
        assert exc_info.value.variables == ["CALCULUS_MAX_ROUNDS", "CALCULUS_TEMPERATURE"]

    def test_reads_os_environ(self, monkeypatch):
        for name, value in REQUIRED_ENV.items():
            monkeypatch.setenv(name, value)
        assert Settings.from_env().openai_base_url == "https://openrouter.ai/api/v1"


class TestAgentConfig:
    def test_defaults(self):
        config = AgentConfig()
        assert config.max_rounds == 25
        assert config.parallel_tools is False
        assert config.system_prompt is None

    def test_rejects_zero_rounds(self):
        with pytest.raises(ValueError):
            AgentConfig(max_rounds=0)

    def test_derived_from_settings(self):
        settings = Settings.from_env({**REQUIRED_ENV, "CALCULUS_MAX_ROUNDS": "7"})
        config = settings.agent_config()
        assert config.max_rounds == 7
        assert config.parallel_tools is False
