"""CLI entrypoint for agent-loop — typer app with `run` and `tools` commands."""

import asyncio
import sys
import uuid
from datetime import datetime
from pathlib import Path

import structlog
import typer

from agent_loop.cli.output.transcript import JsonTranscriptSink
from agent_loop.config.domain.config import AppConfig
from agent_loop.config.infrastructure.observer import StructlogConfigObserver
from agent_loop.config.infrastructure.yaml_loader import YamlConfigLoader
from agent_loop.conversation.domain.turn import ChatMessage
from agent_loop.core.errors import AgentLoopError
from agent_loop.generation.infrastructure.litellm import LiteLLMGenerationModelFactory
from agent_loop.generation.infrastructure.observer import StructlogGenerationObserver
from agent_loop.loop.application.engine import IterationEngine
from agent_loop.loop.domain.progress import ProgressSink
from agent_loop.loop.domain.result import AgenticResult
from agent_loop.loop.domain.transcript import TranscriptSink
from agent_loop.loop.infrastructure.observer import StructlogLoopObserver
from agent_loop.loop.infrastructure.progress import (
    CompositeProgressSink,
    RichProgressSink,
    StructlogProgressSink,
)
from agent_loop.tools.application.toolbox import Toolbox
from agent_loop.tools.domain.schema import FunctionDeclaration
from agent_loop.tools.infrastructure.mcp_stdio import McpConnectionPool
from agent_loop.tools.infrastructure.observer import StructlogConnectorObserver

app = typer.Typer(add_completion=False)


def _configure_structlog(log_format: str) -> None:
    """Configure structlog based on the requested format."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")
        raise typer.Exit(code=1)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _load_config(config_path: Path) -> AppConfig:
    loader = YamlConfigLoader(observer=StructlogConfigObserver())
    try:
        return loader.load(path=config_path)
    except AgentLoopError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1) from exc


def _output_stem(config_name: str) -> str:
    """Build the output file stem: {config_name}_{YYYYMMDD}_{short_run_id}."""
    date_str = datetime.now().strftime("%Y%m%d")
    short_id = uuid.uuid4().hex[:8]
    return f"{config_name}_{date_str}_{short_id}"


def _record_transcript(sink: TranscriptSink, result: AgenticResult) -> None:
    """Persist the run; a failed write is reported but never hides the answer."""
    try:
        sink.record(result)
    except OSError as exc:
        structlog.get_logger().error("transcript.write_failed", reason=str(exc))


async def _run_loop(
    config: AppConfig, message: str, progress_sink: ProgressSink
) -> AgenticResult:
    connector_observer = StructlogConnectorObserver()
    async with McpConnectionPool(
        observer=connector_observer,
        connect_timeout_seconds=config.loop.connect_timeout_seconds,
    ) as pool:
        engine = IterationEngine(
            model_factory=LiteLLMGenerationModelFactory(
                observer=StructlogGenerationObserver()
            ),
            pool=pool,
            observer=StructlogLoopObserver(),
            connector_observer=connector_observer,
        )
        return await engine.run(
            messages=[ChatMessage(role="user", content=message)],
            config=config.loop,
            provider_configs=config.providers,
            progress_sink=progress_sink,
            search=config.document_search,
        )


async def _discover_tools(config: AppConfig) -> list[FunctionDeclaration]:
    connector_observer = StructlogConnectorObserver()
    async with McpConnectionPool(
        observer=connector_observer,
        connect_timeout_seconds=config.loop.connect_timeout_seconds,
    ) as pool:
        toolbox = await Toolbox.assemble(
            pool=pool,
            provider_configs=config.providers,
            observer=connector_observer,
            call_timeout_seconds=config.loop.tool_call_timeout_seconds,
        )
        return toolbox.declarations


@app.command()
def run(
    config_path: Path = typer.Option(
        ..., "--config", "-c", help="Path to agent-loop config YAML"
    ),
    message: str = typer.Option(
        ..., "--message", "-m", help="User message that starts the conversation"
    ),
    output_dir: Path = typer.Option(
        Path("./transcripts"),
        "--output-dir",
        "-o",
        help="Directory for transcript files",
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Do not render progress to the terminal"
    ),
) -> None:
    """Run the agentic loop for one message and print the final answer."""
    try:
        _configure_structlog(log_format=log_format)
        config = _load_config(config_path=config_path)

        sinks: list[ProgressSink] = [StructlogProgressSink()]
        if not quiet and log_format != "json":
            sinks.append(RichProgressSink())

        result = asyncio.run(
            _run_loop(
                config=config,
                message=message,
                progress_sink=CompositeProgressSink(sinks=sinks),
            )
        )

        transcript = JsonTranscriptSink(
            output_dir=output_dir,
            stem=_output_stem(config_name=config.name),
            config_name=config.name,
            model_id=config.loop.model_id,
        )
        _record_transcript(sink=transcript, result=result)

        typer.echo(result.final_response)
        typer.echo(
            f"\n{result.total_iterations} iteration(s), "
            f"{len(result.all_tool_calls)} tool call(s). "
            f"Transcript: {transcript.json_path}",
            err=True,
        )

    except KeyboardInterrupt:
        typer.echo("Run interrupted.", err=True)
        sys.exit(1)
    except AgentLoopError as exc:
        typer.echo(str(exc), err=True)
        sys.exit(1)


@app.command()
def tools(
    config_path: Path = typer.Option(
        ..., "--config", "-c", help="Path to agent-loop config YAML"
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
) -> None:
    """Connect to every enabled provider and list the tools offered to the model."""
    _configure_structlog(log_format=log_format)
    config = _load_config(config_path=config_path)

    declarations = asyncio.run(_discover_tools(config=config))
    if not declarations:
        typer.echo("No tools available.")
        return
    for declaration in declarations:
        params = ", ".join(declaration.parameters.properties)
        typer.echo(f"{declaration.name}({params})")
        typer.echo(f"    {declaration.description}")


if __name__ == "__main__":
    app()
