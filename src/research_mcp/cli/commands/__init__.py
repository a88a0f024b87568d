"""CLI commands."""

from research_mcp.cli.commands.checkpoints import checkpoints_group
from research_mcp.cli.commands.run import run_cmd
from research_mcp.cli.commands.serve import serve_cmd

__all__ = [
    "checkpoints_group",
    "run_cmd",
    "serve_cmd",
]
