"""MCP server for Chapter Master."""
