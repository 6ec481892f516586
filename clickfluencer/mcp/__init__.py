"""MCP server exposing a Clickfluencer runtime as tools."""
