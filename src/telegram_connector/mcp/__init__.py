"""MCP surface: tool contracts, the dispatcher, and the stdio server."""
