"""research-mcp command line interface.

Usage:
    research-mcp serve
    research-mcp run "topic" --depth quick
    research-mcp checkpoints list
"""

import click

from research_mcp import __version__
from research_mcp.cli.commands import checkpoints_group, run_cmd, serve_cmd
from research_mcp.config import ServerConfig, set_config


@click.group()
@click.version_option(__version__, prog_name="research-mcp")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a research-mcp TOML config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_file: str | None) -> None:
    """Deep research MCP server and tools."""
    config = ServerConfig.from_env(config_file)
    config.setup_logging()
    set_config(config)
    ctx.obj = config


cli.add_command(serve_cmd)
cli.add_command(run_cmd)
cli.add_command(checkpoints_group)

__all__ = ["cli"]
