"""MCP tool and prompt registration for research-mcp.

Each module exposes a ``register_*`` function that attaches its tools to a
FastMCP server. ``research_mcp.server.create_server`` calls them.
"""
