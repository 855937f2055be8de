"""FastMCP tool registry: schema export and text-only dispatch."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Mapping

from fastmcp.exceptions import NotFoundError
from fastmcp.tools.tool import ToolResult
from pydantic import ValidationError

from ..core.logging_config import get_logger
from ..core.types import ToolInvocationResult
from .registry import mcp

# Import tool modules so decorators run at import time.
from . import tools  # noqa: F401

logger = get_logger(__name__)

_TOOLS_SCHEMA: list[dict[str, Any]] | None = None


async def get_tools_schema() -> list[dict[str, Any]]:
    """Expose cached MCP tool schema for the LLM client, loading it on first use."""

    if _TOOLS_SCHEMA is None:
        return await refresh_tools_schema()
    return _TOOLS_SCHEMA


async def refresh_tools_schema() -> list[dict[str, Any]]:
    """Regenerate and cache tool schema."""

    global _TOOLS_SCHEMA
    tools = await mcp.get_tools()
    schema: list[dict[str, Any]] = []

    for tool in tools.values():
        if not getattr(tool, "enabled", True):
            continue

        mcp_tool = tool.to_mcp_tool()
        parameters = mcp_tool.inputSchema or {"type": "object", "properties": {}}
        schema.append(
            {
                "type": "function",
                "function": {
                    "name": mcp_tool.name,
                    "description": mcp_tool.description or "",
                    "parameters": parameters,
                },
            }
        )

    _TOOLS_SCHEMA = schema
    logger.info("mcp_tools_schema_loaded", count=len(_TOOLS_SCHEMA))
    return _TOOLS_SCHEMA


async def call_tool(name: str, arguments: Mapping[str, Any] | Any) -> str:
    """Execute a tool by name and return its text result.

    Never raises: unknown tools, bad arguments and tool failures all come back
    as text so the model can react to them.
    """

    started = time.perf_counter()
    ok = False
    if not isinstance(arguments, Mapping):
        result = f"Error: arguments for {name} must be an object"
    else:
        try:
            result = await _run_tool(name, dict(arguments))
            ok = True
        except NotFoundError:
            result = f"Unknown tool: {name}"
        except ValidationError as exc:
            result = _describe_validation_error(exc)
        except Exception as exc:  # tool failures must not end the turn
            cause = exc.__cause__
            if isinstance(cause, ValidationError):
                result = _describe_validation_error(cause)
            else:
                logger.exception("mcp_tool_failed", tool=name)
                result = f"Error: {name} failed: {exc}"

    invocation = ToolInvocationResult(
        name=name,
        arguments=arguments if isinstance(arguments, Mapping) else {},
        result=result,
        latency_ms=round((time.perf_counter() - started) * 1000, 2),
        timestamp=datetime.now(tz=timezone.utc),
        ok=ok,
    )
    logger.info(
        "mcp_tool_call",
        tool=invocation.name,
        ok=invocation.ok,
        latency_ms=invocation.latency_ms,
        result_summary=invocation.result[:200],
    )
    logger.debug("mcp_tool_arguments", tool=invocation.name, arguments=invocation.arguments)
    return invocation.result


async def _run_tool(name: str, arguments: dict[str, Any]) -> str:
    tools = await mcp.get_tools()
    tool = tools.get(name)
    if tool is None or not getattr(tool, "enabled", True):
        raise NotFoundError(f"Unknown tool: {name}")
    return _serialize_tool_result(await tool.run(arguments))


# pydantic reports "missing"; validate_call-based validation reports "missing_argument".
_MISSING_ERROR_TYPES = ("missing", "missing_argument")


def _describe_validation_error(exc: ValidationError) -> str:
    problems: list[str] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        if error.get("type") in _MISSING_ERROR_TYPES:
            problems.append(f"{field} parameter is required")
        else:
            problems.append(f"{field} parameter is invalid: {error.get('msg', 'bad value')}")
    return "Error: " + "; ".join(problems)


def _serialize_tool_result(tool_result: ToolResult) -> str:
    """Flatten a FastMCP ToolResult into the text handed back to the model."""

    texts: list[str] = []
    for block in tool_result.content:
        text = getattr(block, "text", None)
        if text is not None:
            texts.append(text)
        elif hasattr(block, "model_dump_json"):  # pragma: no cover - non-text blocks
            texts.append(block.model_dump_json())
        else:  # pragma: no cover
            texts.append(str(block))
    return "\n".join(texts)
