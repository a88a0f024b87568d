"""Run the deep research pipeline from the terminal."""

import asyncio
from typing import Optional

import click

from research_mcp.cli.output import emit_error
from research_mcp.config import ServerConfig
from research_mcp.core.errors.llm import ProviderNotConfiguredError
from research_mcp.core.errors.storage import InvalidSessionIdError
from research_mcp.core.research.checkpoint import validate_session_id
from research_mcp.core.research.models import ResearchDepth
from research_mcp.core.research.workflows import DeepResearchWorkflow, WorkflowResult
from research_mcp.core.responses import ErrorCode, ErrorType
from research_mcp.server import build_resources


async def _echo_progress(step: int, total: int, label: str) -> None:
    click.echo(f"[{step}/{total}] {label}", err=True)


async def _run_research(
    config: ServerConfig,
    topic: str,
    depth: ResearchDepth,
    session_id: Optional[str],
) -> Optional[WorkflowResult]:
    resources = build_resources(config)
    services = resources.research_services()
    if services is None:
        await resources.close()
        return None

    await services.completion.initialize()
    try:
        workflow = DeepResearchWorkflow(services)
        return await workflow.run(topic, depth=depth, session_id=session_id, on_progress=_echo_progress)
    finally:
        await resources.close()


@click.command("run")
@click.argument("topic")
@click.option(
    "--depth",
    type=click.Choice([d.value for d in ResearchDepth], case_sensitive=False),
    default=ResearchDepth.STANDARD.value,
    show_default=True,
    help="Research depth.",
)
@click.option("--session-id", default=None, help="Resume an interrupted session.")
@click.pass_obj
def run_cmd(config: ServerConfig, topic: str, depth: str, session_id: Optional[str]) -> None:
    """Research TOPIC and print the markdown report."""
    if session_id is not None:
        try:
            validate_session_id(session_id)
        except InvalidSessionIdError as exc:
            emit_error(str(exc), code=ErrorCode.INVALID_FORMAT, error_type=ErrorType.VALIDATION)
            return

    try:
        result = asyncio.run(_run_research(config, topic, ResearchDepth(depth.lower()), session_id))
    except ProviderNotConfiguredError as exc:
        emit_error(str(exc), code=ErrorCode.AI_NO_PROVIDER, error_type=ErrorType.FEATURE_FLAG)
        return
    if result is None:
        emit_error(
            "No LLM provider configured",
            code=ErrorCode.AI_NO_PROVIDER,
            error_type=ErrorType.FEATURE_FLAG,
            remediation="Set LLM_PROVIDER and LLM_API_KEY",
        )
        return
    if not result.success:
        emit_error(result.content, code=ErrorCode.INTERNAL_ERROR, error_type=ErrorType.INTERNAL)
        return
    click.echo(result.content)
