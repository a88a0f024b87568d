"""Run the MCP server over stdio."""

import click

from research_mcp.config import ServerConfig
from research_mcp.server import create_server


@click.command("serve")
@click.pass_obj
def serve_cmd(config: ServerConfig) -> None:
    """Start the MCP server on stdio."""
    create_server(config).run()
