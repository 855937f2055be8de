import json
from types import SimpleNamespace

import httpx
import openai
import pytest
from openai.types.chat import ChatCompletion, ChatCompletionChunk

from chatrelay.core.config import AgentSettings
from chatrelay.core.exceptions import ExternalServiceError, ModelResponseError
from chatrelay.llm.schemas.chat import ChatMessage
from chatrelay.llm.services.ollama_client import OllamaClient


def _client_with(create, **overrides) -> OllamaClient:
    client = OllamaClient(settings=AgentSettings(_env_file=None, **overrides))
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return client


def _completion(message: dict) -> ChatCompletion:
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-1",
            "object": "chat.completion",
            "created": 1700000000,
            "model": "llama3.1:8b",
            "choices": [{"index": 0, "finish_reason": "stop", "message": {"role": "assistant", **message}}],
        }
    )


def _chunk(delta: dict) -> ChatCompletionChunk:
    return ChatCompletionChunk.model_validate(
        {
            "id": "chatcmpl-1",
            "object": "chat.completion.chunk",
            "created": 1700000000,
            "model": "llama3.1:8b",
            "choices": [{"index": 0, "finish_reason": None, "delta": delta}],
        }
    )


def test_base_url_gets_v1_suffix():
    client = OllamaClient(settings=AgentSettings(_env_file=None, ollama_url="http://gpu-box:11434"))

    assert str(client._client.base_url).rstrip("/") == "http://gpu-box:11434/v1"


@pytest.mark.asyncio
async def test_chat_sends_transcript_and_parses_tool_calls():
    captured = {}

    async def fake_create(**kwargs):
        captured.update(kwargs)
        return _completion(
            {
                "content": "  ",
                "tool_calls": [
                    {
                        "id": "call-1",
                        "type": "function",
                        "function": {"name": "get_weather", "arguments": json.dumps({"location": "Oslo"})},
                    }
                ],
            }
        )

    client = _client_with(fake_create)
    tools = [{"type": "function", "function": {"name": "get_weather"}}]
    message = await client.chat([ChatMessage(role="user", content="weather in Oslo?")], tools=tools)

    assert captured["model"] == "llama3.1:8b"
    assert captured["stream"] is False
    assert captured["tools"] == tools
    assert captured["messages"] == [{"role": "user", "content": "weather in Oslo?"}]

    assert message.role == "assistant"
    assert message.content == ""
    assert message.tool_calls[0].id == "call-1"
    assert message.tool_calls[0].function.name == "get_weather"
    assert message.tool_calls[0].function.arguments == {"location": "Oslo"}


@pytest.mark.asyncio
async def test_chat_omits_tools_when_none_given():
    captured = {}

    async def fake_create(**kwargs):
        captured.update(kwargs)
        return _completion({"content": " Hello there. "})

    message = await _client_with(fake_create).chat([ChatMessage(role="user", content="hi")])

    assert "tools" not in captured
    assert message.content == "Hello there."
    assert message.tool_calls is None


@pytest.mark.asyncio
async def test_stream_chunks_are_assembled_before_returning():
    async def fake_create(**kwargs):
        assert kwargs["stream"] is True

        async def stream():
            yield _chunk({"role": "assistant", "content": "Let me "})
            yield _chunk({"content": "check."})
            yield _chunk(
                {"tool_calls": [{"index": 0, "id": "call-9", "function": {"name": "get_weather", "arguments": '{"loca'}}]}
            )
            yield _chunk({"tool_calls": [{"index": 0, "function": {"arguments": 'tion": "Rome"}'}}]})

        return stream()

    client = _client_with(fake_create, ollama_stream=True)
    message = await client.chat([ChatMessage(role="user", content="weather now in Rome")])

    assert message.content == "Let me check."
    assert len(message.tool_calls) == 1
    assert message.tool_calls[0].id == "call-9"
    assert message.tool_calls[0].function.arguments == {"location": "Rome"}


@pytest.mark.asyncio
async def test_missing_tool_call_ids_are_filled_by_position():
    async def fake_create(**kwargs):
        async def stream():
            yield _chunk({"tool_calls": [{"index": 0, "function": {"name": "get_weather", "arguments": "{}"}}]})
            yield _chunk({"tool_calls": [{"index": 1, "function": {"name": "get_time", "arguments": ""}}]})

        return stream()

    message = await _client_with(fake_create, ollama_stream=True).chat(
        [ChatMessage(role="user", content="time and weather now")]
    )

    assert [call.id for call in message.tool_calls] == ["call_0", "call_1"]
    assert message.tool_calls[1].function.arguments == {}


@pytest.mark.asyncio
async def test_connection_failure_maps_to_external_service_error():
    async def fake_create(**kwargs):
        raise openai.APIConnectionError(
            request=httpx.Request("POST", "http://localhost:11434/v1/chat/completions")
        )

    with pytest.raises(ExternalServiceError) as excinfo:
        await _client_with(fake_create).chat([ChatMessage(role="user", content="hi")])

    assert not isinstance(excinfo.value, ModelResponseError)


@pytest.mark.asyncio
async def test_undecodable_tool_arguments_are_a_malformed_response():
    async def fake_create(**kwargs):
        return _completion(
            {
                "content": None,
                "tool_calls": [
                    {"id": "call-1", "type": "function", "function": {"name": "get_weather", "arguments": "{oops"}}
                ],
            }
        )

    with pytest.raises(ModelResponseError):
        await _client_with(fake_create).chat([ChatMessage(role="user", content="weather now")])


@pytest.mark.asyncio
async def test_empty_choices_are_a_malformed_response():
    async def fake_create(**kwargs):
        return SimpleNamespace(choices=[])

    with pytest.raises(ModelResponseError):
        await _client_with(fake_create).chat([ChatMessage(role="user", content="hi")])
