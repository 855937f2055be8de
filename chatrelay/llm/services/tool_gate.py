"""Decide whether a user message should be answered with tools available."""

from __future__ import annotations

from typing import Protocol

# Phrases that signal a need for live or current information.
CURRENT_INFO_KEYWORDS: tuple[str, ...] = (
    "current weather", "weather today", "weather now", "weather in",
    "today's weather", "what's the weather", "how's the weather",
    "temperature in", "temperature at", "temp in",
    "current news", "latest news", "today's news",
    "current time", "what time is it",
    "current date", "what date is it",
    "stock price", "current stock",
    "live", "now", "currently", "today",
    "real-time", "up-to-date",
)


def needs_tools(text: str, keywords: tuple[str, ...] = CURRENT_INFO_KEYWORDS) -> bool:
    """Return True if the lower-cased text contains any of the keywords.

    This is a coarse substring filter, not intent classification. It keeps tools
    off turns that clearly do not need them, since models differ in how eagerly
    they call tools.
    """

    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in keywords)


class ToolGate(Protocol):
    def requires_tools(self, text: str) -> bool: ...


class KeywordToolGate:
    """Default gate backed by :func:`needs_tools`."""

    def __init__(self, keywords: tuple[str, ...] = CURRENT_INFO_KEYWORDS) -> None:
        self._keywords = tuple(keyword.lower() for keyword in keywords)

    def requires_tools(self, text: str) -> bool:
        return needs_tools(text, self._keywords)
