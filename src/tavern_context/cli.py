"""CLI interface for tavern-context.

Requires the 'cli' extra: pip install tavern-context[cli]
"""

from __future__ import annotations

import sys
from pathlib import Path

try:
    import typer
    from rich.console import Console
    from rich.table import Table
except ImportError:
    print(
        "CLI dependencies not installed. Install with: pip install tavern-context[cli]",
        file=sys.stderr,
    )
    sys.exit(1)

from tavern_context import __version__
from tavern_context.budget import get_recommended_context_allocation
from tavern_context.exceptions import CapacityConfigError
from tavern_context.models import ContextLevel, Provider
from tavern_context.monitor import get_context_status
from tavern_context.registry import (
    DEFAULT_RESPONSE_RESERVE,
    ModelCapacityRegistry,
    get_default_registry,
    get_model_capacity,
    get_safe_input_limit,
)
from tavern_context.tokens import (
    chars_per_token,
    estimate_tokens,
    format_token_count,
    quick_estimate_tokens,
)

app = typer.Typer(
    name="tavern-context",
    help="Context budget management for roleplay chat requests.",
    add_completion=False,
)
console = Console()

_LEVEL_STYLES = {
    ContextLevel.OK: "green",
    ContextLevel.WARNING: "yellow",
    ContextLevel.CRITICAL: "red",
}

CapacityFileOption = typer.Option(
    None, "--capacity-file", "-c", help="JSON file with model capacity overrides"
)


def _load_registry(capacity_file: Path | None) -> ModelCapacityRegistry:
    if capacity_file is None:
        return get_default_registry()
    try:
        return ModelCapacityRegistry.from_json_file(capacity_file)
    except CapacityConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
) -> None:
    if version:
        console.print(f"tavern-context {__version__}")
        raise typer.Exit()


@app.command()
def info() -> None:
    """Show information about the tavern-context installation."""
    registry = get_default_registry()
    table = Table(title="tavern-context info")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Version", __version__)
    table.add_row("Python", sys.version.split()[0])

    try:
        import pydantic

        table.add_row("pydantic", pydantic.VERSION)
    except ImportError:
        table.add_row("pydantic", "[red]not installed[/red]")

    known = [p for p in Provider if p is not Provider.UNKNOWN]
    table.add_row("Providers", str(len(known)))
    table.add_row("Known models", str(sum(len(registry.known_models(p)) for p in known)))
    table.add_row("Fallback context", format_token_count(registry.global_default))
    console.print(table)


@app.command()
def models(
    provider: str = typer.Argument(..., help="Provider name, e.g. anthropic"),
    capacity_file: Path | None = CapacityFileOption,
) -> None:
    """List the models with known context windows for a provider."""
    registry = _load_registry(capacity_file)
    known = registry.known_models(provider)
    if not known:
        console.print(f"[yellow]No models registered for {Provider.parse(provider).value}[/yellow]")
        return

    table = Table(title=f"{Provider.parse(provider).value} models")
    table.add_column("Model", style="cyan")
    table.add_column("Context", justify="right", style="green")
    for name, limit in sorted(known.items()):
        table.add_row(name, format_token_count(limit))
    console.print(table)


@app.command()
def limits(
    provider: str = typer.Argument(..., help="Provider name, e.g. anthropic"),
    model: str = typer.Argument(..., help="Model name"),
    reserve: int = typer.Option(
        DEFAULT_RESPONSE_RESERVE, "--reserve", "-r", min=0, help="Response reserve in tokens"
    ),
    capacity_file: Path | None = CapacityFileOption,
) -> None:
    """Show the context window and safe input limit for a model."""
    registry = _load_registry(capacity_file)
    capacity = get_model_capacity(provider, model, registry=registry)
    safe = get_safe_input_limit(provider, model, reserve, registry=registry)

    table = Table(title=f"{capacity.provider.value}/{capacity.model}")
    table.add_column("Metric", style="cyan")
    table.add_column("Tokens", justify="right", style="green")
    table.add_row("Context window", str(capacity.total_tokens))
    table.add_row("Response reserve", str(reserve))
    table.add_row("Safe input limit", str(safe))
    table.add_row("Extended context", "yes" if capacity.extended else "no")
    console.print(table)


@app.command()
def budget(
    provider: str = typer.Argument(..., help="Provider name, e.g. anthropic"),
    model: str = typer.Argument(..., help="Model name"),
    capacity_file: Path | None = CapacityFileOption,
) -> None:
    """Show the recommended per-category token budget for a model."""
    registry = _load_registry(capacity_file)
    allocation = get_recommended_context_allocation(provider, model, registry=registry)
    total = allocation.total_limit
    table = Table(title=f"Budget for {allocation.provider.value}/{allocation.model}")
    table.add_column("Category", style="cyan")
    table.add_column("Tokens", justify="right", style="green")
    table.add_column("Share", justify="right")
    rows = [
        ("System prompt", allocation.system_prompt),
        ("Memories", allocation.memories),
        ("Conversation summary", allocation.conversation_summary),
        ("Recent messages", allocation.recent_messages),
        ("Response reserve", allocation.response_reserve),
    ]
    for label, tokens in rows:
        table.add_row(label, str(tokens), f"{tokens / total:.1%}")
    table.add_row("Total", str(total), "100.0%", style="bold")
    console.print(table)


@app.command()
def estimate(
    path: Path = typer.Argument(..., help="Text file to estimate"),  # noqa: B008
    provider: str = typer.Option("unknown", "--provider", "-p", help="Provider ratio to use"),
) -> None:
    """Estimate the token cost of a text file."""
    if not path.is_file():
        console.print(f"[red]Error: {path} does not exist[/red]")
        raise typer.Exit(code=1)

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        console.print(f"[red]Error: {path} is not valid UTF-8 text[/red]")
        raise typer.Exit(code=1) from e
    except OSError as e:
        console.print(f"[red]Error reading {path}: {e}[/red]")
        raise typer.Exit(code=1) from e

    tokens = estimate_tokens(content, provider)
    console.print(
        f"  File: {path.name} ({len(content)} chars, {tokens} tokens, "
        f"{format_token_count(tokens)} at {chars_per_token(provider)} chars/token)"
    )
    console.print(f"[dim]  Quick estimate: {quick_estimate_tokens(content)} tokens[/dim]")


@app.command()
def status(
    used: int = typer.Argument(..., min=0, help="Tokens in use"),
    total: int = typer.Argument(..., help="Context window size"),
) -> None:
    """Classify context usage and show the UI status message."""
    result = get_context_status(used, total)
    style = _LEVEL_STYLES[result.level]
    console.print(f"[{style}]{result.level.value.upper()}[/{style}] {result.percent_used}%")
    console.print(f"  Remaining: {result.remaining_tokens} tokens")
    console.print(f"  {result.message}")


if __name__ == "__main__":
    app()
