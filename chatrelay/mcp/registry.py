"""Shared FastMCP instance that every tool module registers against."""

from fastmcp import FastMCP

mcp = FastMCP("chatrelay-tools")
