import json

import pytest
from pydantic import ValidationError

from chatrelay.mcp.server import (
    _describe_validation_error,
    call_tool,
    get_tools_schema,
    refresh_tools_schema,
)


@pytest.mark.asyncio
async def test_tools_schema_describes_get_weather():
    schema = await refresh_tools_schema()

    assert [tool["function"]["name"] for tool in schema] == ["get_weather"]
    weather = schema[0]
    assert weather["type"] == "function"
    assert weather["function"]["description"] == (
        "Get the current weather forecast for a provided location"
    )
    parameters = weather["function"]["parameters"]
    assert parameters["type"] == "object"
    assert parameters["required"] == ["location"]
    assert parameters["properties"]["location"]["type"] == "string"
    assert "city" in parameters["properties"]["location"]["description"]

    assert await get_tools_schema() is schema


@pytest.mark.asyncio
async def test_get_weather_returns_compact_forecast():
    result = await call_tool("get_weather", {"location": "Paris"})

    assert result == '{"forecast":"cloudy","high":53,"location":"Paris","unit":"Fahrenheit"}'
    assert json.loads(result)["location"] == "Paris"


@pytest.mark.asyncio
async def test_unknown_tool_becomes_text():
    result = await call_tool("launch_rocket", {"target": "moon"})

    assert result == "Unknown tool: launch_rocket"


@pytest.mark.asyncio
@pytest.mark.parametrize("arguments", [{}, {"location": 42}, {"location": None}])
async def test_bad_weather_arguments_become_text(arguments):
    result = await call_tool("get_weather", arguments)

    assert result.startswith("Error:")
    assert "location" in result


@pytest.mark.asyncio
async def test_missing_location_reads_as_required():
    assert await call_tool("get_weather", {}) == "Error: location parameter is required"


@pytest.mark.asyncio
async def test_non_mapping_arguments_become_text():
    result = await call_tool("get_weather", ["Paris"])

    assert result == "Error: arguments for get_weather must be an object"


@pytest.mark.asyncio
async def test_empty_location_still_gets_a_forecast():
    result = await call_tool("get_weather", {"location": ""})

    assert json.loads(result) == {"forecast": "cloudy", "high": 53, "location": "", "unit": "Fahrenheit"}


@pytest.mark.parametrize("error_type", ["missing", "missing_argument"])
def test_missing_argument_errors_read_as_required(error_type):
    exc = ValidationError.from_exception_data(
        "get_weather",
        [{"type": error_type, "loc": ("location",), "input": {}}],
    )

    assert _describe_validation_error(exc) == "Error: location parameter is required"


def test_type_errors_name_the_parameter():
    exc = ValidationError.from_exception_data(
        "get_weather",
        [{"type": "string_type", "loc": ("location",), "input": 42}],
    )

    assert _describe_validation_error(exc) == (
        "Error: location parameter is invalid: Input should be a valid string"
    )
