"""Weather MCP tools."""

import json
from typing import Annotated, Any

from pydantic import Field

from ..registry import mcp


def build_forecast(location: str) -> dict[str, Any]:
    """Mock forecast data; models trust tool output more when it looks like real JSON."""

    return {
        "location": location,
        "forecast": "cloudy",
        "high": 53,
        "unit": "Fahrenheit",
    }


@mcp.tool(
    name="get_weather",
    description="Get the current weather forecast for a provided location",
)
def get_weather(
    location: Annotated[str, Field(description="The name of the city for the weather forecast")],
) -> str:
    try:
        return json.dumps(build_forecast(location), separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as exc:
        return f"Error generating forecast data: {exc}"
