"""MCP server exposing the infographic editor as tools."""
