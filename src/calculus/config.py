"""Configuration for Calculus.

Settings are read once from the environment at start-up. Every missing
required variable is reported in a single ConfigurationError, so the
process fails before the REPL starts rather than at first use.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from calculus.exceptions import ConfigurationError

# env var -> Settings field
_REQUIRED: dict[str, str] = {
    "OPENAI_API_KEY": "openai_api_key",
    "OPENAI_BASE_URL": "openai_base_url",
    "BRIGHTDATA_API_KEY": "brightdata_api_key",
    "BRIGHTDATA_UNLOCKER_ZONE": "brightdata_zone",
}

_OPTIONAL: dict[str, str] = {
    "CALCULUS_MODEL": "model",
    "CALCULUS_TEMPERATURE": "temperature",
    "CALCULUS_TOP_P": "top_p",
    "CALCULUS_REASONING_EFFORT": "reasoning_effort",
    "CALCULUS_MAX_ROUNDS": "max_rounds",
    "CALCULUS_TOOL_TIMEOUT": "tool_timeout",
    "CALCULUS_PARALLEL_TOOLS": "parallel_tools",
    "CALCULUS_LOG_LEVEL": "log_level",
}

_FIELD_TO_ENV = {field: env for env, field in {**_REQUIRED, **_OPTIONAL}.items()}


class AgentConfig(BaseModel):
    """Agent loop settings.

    Attributes:
        max_rounds: Tool-calling rounds allowed per user turn before the
            turn is aborted with ToolLoopExceededError.
        parallel_tools: Dispatch the calls of one round concurrently.
            Results are still recorded in the model's call order.
        system_prompt: Override for the default system prompt.
    """

    max_rounds: int = Field(default=25, ge=1)
    parallel_tools: bool = False
    system_prompt: Optional[str] = None


class Settings(BaseModel):
    """Process-wide settings."""

    openai_api_key: str = Field(min_length=1)
    openai_base_url: str = Field(min_length=1)
    brightdata_api_key: str = Field(min_length=1)
    brightdata_zone: str = Field(min_length=1)

    model: str = "anthropic/claude-sonnet-4"
    temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    top_p: Optional[float] = Field(default=None, gt=0.0, le=1.0)
    reasoning_effort: Optional[Literal["low", "medium", "high"]] = None
    max_rounds: int = Field(default=25, ge=1)
    tool_timeout: float = Field(default=30.0, gt=0.0)
    parallel_tools: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    referer: str = "https://thesobercoder.in"
    title: str = "Calculus"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            ConfigurationError: If required variables are missing or any
                value fails validation.
        """
        env = os.environ if environ is None else environ

        missing = [name for name in _REQUIRED if not env.get(name, "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                variables=missing,
            )

        values: dict[str, object] = {
            field: env[name].strip() for name, field in _REQUIRED.items()
        }
        for name, field in _OPTIONAL.items():
            raw = env.get(name, "").strip()
            if raw:
                values[field] = raw.upper() if field == "log_level" else raw

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            bad = sorted({
                _FIELD_TO_ENV.get(str(err["loc"][0]), str(err["loc"][0]))
                for err in exc.errors()
                if err.get("loc")
            })
            raise ConfigurationError(
                f"Invalid environment variables: {', '.join(bad)}",
                variables=bad,
            ) from exc

    def agent_config(self) -> AgentConfig:
        return AgentConfig(
            max_rounds=self.max_rounds,
            parallel_tools=self.parallel_tools,
        )
