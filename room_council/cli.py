"""Click CLI: config loading, provider wiring, one-off runs and the HTTP server."""

import asyncio
import logging
import sys
from pathlib import Path

import click
import uvicorn
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import REQUIRED_MODELS, AppConfig, ModelConfig, load_config
from room_council.healthcheck import ProviderStatus, check_pipeline
from room_council.models import PipelineResult
from room_council.output import print_final_output, print_stage_summary, save_to_file
from room_council.pipeline import CouncilPipeline
from room_council.providers.anthropic import AnthropicProvider
from room_council.providers.base import AIProvider, ProviderError
from room_council.providers.openai_provider import OpenAIProvider
from room_council.server import create_app

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _build_provider(model_cfg: ModelConfig) -> AIProvider:
    """Instantiate the provider class named by the model entry's sdk."""
    if model_cfg.sdk not in PROVIDER_CLASSES:
        raise ProviderError(model_cfg.name, f"Unknown sdk '{model_cfg.sdk}'")
    return PROVIDER_CLASSES[model_cfg.sdk](model_cfg)


def _build_pipeline(config: AppConfig) -> CouncilPipeline:
    return CouncilPipeline(
        agent_provider=_build_provider(config.agent_model),
        lead_provider=_build_provider(config.lead_model),
        prompts=config.prompts,
    )


def _missing_keys(config: AppConfig) -> list[str]:
    """Describe each required model entry whose API key env var is unset."""
    return [
        f"{entry} ({config.models[entry].api_key_env})"
        for entry in REQUIRED_MODELS
        if entry not in config.available_providers
    ]


def _load_or_exit() -> AppConfig:
    load_dotenv()
    try:
        config = load_config()
    except (FileNotFoundError, ValueError, KeyError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    missing = _missing_keys(config)
    if missing:
        console.print(f"[bold red]Missing API key for:[/bold red] {', '.join(missing)}. Set it in .env.")
        sys.exit(1)
    return config


def _pipeline_or_exit(config: AppConfig) -> CouncilPipeline:
    try:
        return _build_pipeline(config)
    except ProviderError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}. Check API keys in .env.")
        sys.exit(1)


def _print_health(statuses: list[ProviderStatus]) -> list[str]:
    """Print one line per model entry. Returns the failed entry names."""
    failed: list[str] = []
    for status in statuses:
        if status.ok:
            console.print(f"  [green]OK  [/green] {status.entry} ({status.model}) {status.latency_sec:.1f}s")
        else:
            short_err = status.error.splitlines()[0][:120] if status.error else "unknown error"
            console.print(f"  [red]FAIL[/red] {status.entry} ({status.model}): {short_err}")
            failed.append(status.entry)
    if "agent" in failed:
        console.print("  [yellow]Every insight and critique would fall back.[/yellow]")
    elif "lead" in failed:
        console.print("  [yellow]The final synthesis would fall back.[/yellow]")
    return failed


async def _run_query(pipeline: CouncilPipeline, query: str) -> PipelineResult:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Running insight, critique and synthesis stages...", total=None)
        return await pipeline.run(query)


@click.group()
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(verbose: bool) -> None:
    """Room Council -- multi-agent insight, critique and room synthesis."""
    _setup_logging(verbose)


@main.command()
@click.argument("query")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--no-save", is_flag=True, default=False, help="Print only, do not write a transcript")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the API connectivity check at startup")
def ask(query: str, output_path: str | None, no_save: bool, skip_health_check: bool) -> None:
    """Run the pipeline once for QUERY and print the result.

    \b
    Examples:
      room-council ask "How can I design a minimalist yet cozy living room?"
      room-council ask "What makes a great reading nook?" --no-save
    """
    if not query.strip():
        console.print("[bold red]Error:[/bold red] QUERY must not be empty.")
        sys.exit(1)

    config = _load_or_exit()
    pipeline = _pipeline_or_exit(config)

    if not skip_health_check:
        console.print("\n[bold]Checking providers...[/bold]")
        failed = _print_health(asyncio.run(check_pipeline(pipeline)))
        if failed and not click.confirm("Continue anyway? Output will be degraded.", default=False):
            sys.exit(0)

    console.print(f"\n[bold cyan]Room Council[/bold cyan] - {len(pipeline.roles)} agents")
    console.print(f"Query: [italic]{query[:80]}{'...' if len(query) > 80 else ''}[/italic]\n")

    result = asyncio.run(_run_query(pipeline, query))

    print_stage_summary("Insights", result.insights)
    print_stage_summary("Critiques", result.critiques)
    print_final_output(result)

    if not no_save:
        output_dir = Path(output_path) if output_path else config.defaults.output_dir
        saved_path = save_to_file(result, output_dir)
        console.print(f"\n[dim]Saved to: {saved_path}[/dim]")


@main.command()
@click.option("--host", default=None, help="Bind address (default: from config)")
@click.option("--port", default=None, type=int, help="Port (default: PORT env or config)")
def serve(host: str | None, port: int | None) -> None:
    """Serve POST /api/multi-agent over HTTP."""
    config = _load_or_exit()
    app = create_app(_pipeline_or_exit(config), config.server)

    effective_host = host or config.server.host
    effective_port = port or config.server.port
    logger.info("Serving on http://%s:%d", effective_host, effective_port)
    uvicorn.run(app, host=effective_host, port=effective_port, log_config=None)


@main.command()
def check() -> None:
    """Ping the agent and lead providers."""
    config = _load_or_exit()
    pipeline = _pipeline_or_exit(config)

    console.print("\n[bold]Checking providers...[/bold]")
    failed = _print_health(asyncio.run(check_pipeline(pipeline)))
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
