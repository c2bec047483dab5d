"""MCP server for DocVault."""

from docvault.server.mcp_server import create_mcp_server

__all__ = ["create_mcp_server"]
