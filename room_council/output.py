"""Rich console output and markdown file save for pipeline results."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from room_council.models import AgentResponse, PipelineResult

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _response_preview(response: AgentResponse, words: int = 50) -> str:
    """Return first N words of a response."""
    all_words = response.content.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def print_stage_summary(title: str, responses: list[AgentResponse]) -> None:
    """Print one panel per agent for a finished stage."""
    console.print(Rule(f"[bold cyan]{title}[/bold cyan]"))
    for resp in responses:
        console.print(
            Panel(
                _response_preview(resp),
                title=f"[bold]Agent {resp.role}[/bold]",
                subtitle=None if resp.ok else "[red]fallback[/red]",
                border_style="dim" if resp.ok else "red",
            )
        )


def print_final_output(result: PipelineResult) -> None:
    """Print the synthesis as Rich markdown."""
    console.print(Rule("[bold green]Final Output[/bold green]"))
    status = "degraded" if result.degraded else "clean"
    console.print(
        Text(
            f"Duration: {result.total_duration_sec:.1f}s | "
            f"Agents: {len(result.insights)} | "
            f"Run: {status}",
            style="dim",
        )
    )
    console.print(Markdown(result.final_output))


def save_to_file(result: PipelineResult, output_dir: Path, slug_override: str | None = None) -> Path:
    """Save the full run as a markdown transcript.

    Args:
        result: The completed PipelineResult.
        output_dir: Directory to save the file in.
        slug_override: If provided, use this as the filename stem instead of
            deriving one from the query.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = slug_override if slug_override is not None else _slug(result.query)
    filepath = output_dir / f"{timestamp}_{slug}.md"

    lines: list[str] = [
        f"# Room Council: {result.query[:80]}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Agents:** {', '.join(r.role for r in result.insights)}",
        f"**Duration:** {result.total_duration_sec:.1f}s",
        f"**Degraded:** {'yes' if result.degraded else 'no'}",
        "",
        "---",
        "",
    ]

    for heading, responses in (("Insights", result.insights), ("Critiques", result.critiques)):
        lines.append(f"## {heading}")
        lines.append("")
        for resp in responses:
            marker = "" if resp.ok else " (fallback)"
            lines.append(f"### Agent {resp.role}{marker}")
            lines.append("")
            lines.append(resp.content)
            lines.append("")

    lines += [
        "## Final Output",
        "",
        result.final_output,
        "",
    ]

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Transcript saved to: %s", filepath)
    return filepath
