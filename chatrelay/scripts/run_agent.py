"""Run the chat relay locally.

Command line flags override the matching environment variables for this
process only; anything not given falls back to ``.env`` / the environment and
then to the documented defaults.
"""

from __future__ import annotations

import argparse
import os
from typing import Sequence

# flag dest -> settings environment variable
_FLAG_ENV = {
    "host": "AGENT_HOST",
    "port": "AGENT_PORT",
    "model": "OLLAMA_MODEL",
    "ollama_url": "OLLAMA_URL",
    "transcript_scope": "TRANSCRIPT_SCOPE",
    "log_level": "LOG_LEVEL",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatrelay-server",
        description="WebSocket chat relay for a local Ollama model.",
    )
    parser.add_argument("--host", help="bind host (default 0.0.0.0)")
    parser.add_argument("--port", type=int, help="web client port (default 4000)")
    parser.add_argument("--model", help="Ollama model to use (default llama3.1:8b)")
    parser.add_argument(
        "--ollama-url", help="address of the Ollama server (default http://localhost:11434)"
    )
    parser.add_argument(
        "--transcript-scope",
        choices=("shared", "connection"),
        help="one transcript for all clients, or one per connection (default shared)",
    )
    parser.add_argument("--log-level", choices=("DEBUG", "INFO", "WARNING", "ERROR"))
    return parser


def apply_overrides(args: argparse.Namespace) -> None:
    for dest, env_name in _FLAG_ENV.items():
        value = getattr(args, dest, None)
        if value is not None:
            os.environ[env_name] = str(value)


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    apply_overrides(args)

    # Imported late so settings are read after the overrides are in place.
    import uvicorn

    from chatrelay.core.config import get_settings
    from chatrelay.core.exceptions import ConfigurationError

    get_settings.cache_clear()
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        raise SystemExit(f"chatrelay-server: {exc}") from exc

    reload_enabled = settings.app_env == "development"
    if reload_enabled:
        uvicorn.run(
            "chatrelay.llm.main:app",
            host=settings.agent_host,
            port=settings.agent_port,
            reload=True,
        )
    else:
        from chatrelay.llm.main import app

        uvicorn.run(
            app,
            host=settings.agent_host,
            port=settings.agent_port,
            reload=False,
        )


if __name__ == "__main__":
    main()
