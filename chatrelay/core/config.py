"""Configuration management for the chat relay service."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

_REPO_ROOT = Path(__file__).resolve().parents[2]
_PACKAGE_DIR = Path(__file__).resolve().parents[1]
# Repo root .env first, then the package directory, then the working directory.
_ENV_FILE_CANDIDATES: tuple[str, ...] = (
    str(_REPO_ROOT / ".env"),
    str(_PACKAGE_DIR / ".env"),
    ".env",
)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. When you have access to tools, "
    "use them to provide accurate, current information."
)


class AgentSettings(BaseSettings):
    """Centralised configuration derived from environment variables."""

    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = Field(
        "",
        description="Log file path; None or empty string keeps output on stdout only",
    )

    agent_host: str = Field("0.0.0.0", description="FastAPI bind host")
    agent_port: int = Field(4000, description="Web client port")

    ollama_model: str = Field("llama3.1:8b", description="Ollama model to use")
    ollama_url: AnyHttpUrl = Field(
        "http://localhost:11434", description="Address of the Ollama server"
    )
    ollama_api_key: SecretStr = Field(
        SecretStr("ollama"), description="Placeholder key required by the OpenAI-compatible API"
    )
    ollama_timeout_seconds: float = Field(
        120.0, gt=0, description="Upper bound for a single model call"
    )
    ollama_stream: bool = Field(False, description="Stream model responses and assemble them")

    system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, description="Seed message of every transcript")
    transcript_scope: Literal["shared", "connection"] = Field(
        "shared",
        description="shared: one transcript for every client; connection: one per connection",
    )

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_CANDIDATES,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> AgentSettings:
    """Return a cached AgentSettings instance.

    Raises ``ConfigurationError`` when the environment holds values that do not
    validate, e.g. an unknown ``TRANSCRIPT_SCOPE`` or a malformed ``OLLAMA_URL``.
    """

    try:
        return AgentSettings()  # type: ignore[call-arg]
    except ValidationError as exc:
        fields = ", ".join(str(error["loc"][0]) for error in exc.errors() if error.get("loc"))
        raise ConfigurationError(f"Invalid settings: {fields or exc}") from exc


def resolved_env_file() -> str | None:
    """Return the first readable .env file from the candidate list."""

    for candidate in _ENV_FILE_CANDIDATES:
        path = Path(candidate).expanduser()
        if path.is_file():
            return str(path)
    return None


def env_file_candidates() -> tuple[str, ...]:
    """Expose configured env file search order for diagnostics."""

    return _ENV_FILE_CANDIDATES
