"""Runtime settings assembled from defaults and environment variables."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from repo_unifier.collection.collector import DEFAULT_IGNORE_PATTERNS, DEFAULT_MAX_SIZE_KB
from repo_unifier.models import OutputFormat

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_SESSION_DIR = "./data/sessions"
DEFAULT_DOWNLOAD_DIR = "./downloads"
DEFAULT_LOG_LEVEL = "WARNING"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_PROVIDERS = frozenset({"auto", "anthropic", "openai"})

# Settings field -> environment variable
ENV_VARS = {
    "ignore_patterns": "UNIFIER_IGNORE",
    "max_size_kb": "UNIFIER_MAX_SIZE_KB",
    "output_format": "UNIFIER_OUTPUT_FORMAT",
    "model": "UNIFIER_MODEL",
    "llm_provider": "UNIFIER_LLM_PROVIDER",
    "session_dir": "UNIFIER_SESSION_DIR",
    "download_dir": "UNIFIER_DOWNLOAD_DIR",
    "log_level": "LOG_LEVEL",
}


class ConfigError(Exception):
    """Raised when a configuration value is invalid."""

    def __init__(self, variable: str, message: str) -> None:
        super().__init__(f"Invalid {variable}: {message}")
        self.variable = variable
        self.message = message


class Settings(BaseModel):
    model_config = ConfigDict(frozen=False)

    ignore_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    max_size_kb: int = DEFAULT_MAX_SIZE_KB
    output_format: OutputFormat = OutputFormat.MARKDOWN
    model: str = DEFAULT_MODEL
    llm_provider: str = "auto"
    session_dir: str = DEFAULT_SESSION_DIR
    download_dir: str = DEFAULT_DOWNLOAD_DIR
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("max_size_kb")
    @classmethod
    def _positive_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive number of kilobytes")
        return value

    @field_validator("llm_provider")
    @classmethod
    def _known_provider(cls, value: str) -> str:
        value = value.lower()
        if value not in _PROVIDERS:
            raise ValueError(f"must be one of {', '.join(sorted(_PROVIDERS))}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(sorted(_LOG_LEVELS))}")
        return value


def _split_patterns(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``env`` (``os.environ`` when None).

    Unset or empty variables keep their defaults.

    Raises:
        ConfigError: If a variable holds an invalid value. The error names
            the variable.
    """
    if env is None:
        env = os.environ

    values: dict[str, object] = {}
    for field, variable in ENV_VARS.items():
        raw = env.get(variable, "").strip()
        if not raw:
            continue
        values[field] = _split_patterns(raw) if field == "ignore_patterns" else raw

    try:
        return Settings(**values)
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else ""
        variable = ENV_VARS.get(field, field)
        raise ConfigError(variable, error["msg"]) from e
