"""Main CLI interface using Typer."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from repolingo.core.exceptions import RepoLingoError
from repolingo.core.models import TranslationStatus
from repolingo.core.pipeline import TranslationPipeline, PipelineConfig
from repolingo.masking.engine import MarkdownMaskingEngine
from repolingo.utils.config_loader import load_config
from repolingo.utils.engine_checker import get_all_engines_status
from repolingo.utils.logger import setup_logger

app = typer.Typer(
    name="repolingo",
    help="RepoLingo: Markdown-safe translation of pull request text",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

STATUS_COLORS = {
    TranslationStatus.OK: "green",
    TranslationStatus.MOCKED: "yellow",
    TranslationStatus.FAILED: "red",
}


def _read_input(source: str) -> str:
    """Read Markdown from a file path, or from stdin when ``source`` is '-'."""
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        err_console.print(f"[red]Error: Input file not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _build_pipeline(config_file: Optional[Path], engine: Optional[str], timeout: Optional[float]) -> TranslationPipeline:
    config = load_config(str(config_file) if config_file else None)
    if engine is not None:
        config.setdefault("translation", {})["engine"] = engine
    if timeout is not None:
        config.setdefault("translation", {})["timeout"] = timeout

    log_cfg = config.get("logging") or {}
    setup_logger(level=log_cfg.get("level") or "WARNING", log_file=log_cfg.get("file"))

    return TranslationPipeline(PipelineConfig.from_config(config))


@app.command()
def translate(
    source: str = typer.Argument(..., help="Markdown file to translate, or '-' for stdin"),
    target_lang: str = typer.Option(..., "-t", "--target", help="Target language"),
    source_lang: Optional[str] = typer.Option(None, "-s", "--source", help="Source language (detected when omitted)"),
    engine: Optional[str] = typer.Option(None, "-e", "--engine", help="Translation engine (lingo/libre/openai)"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds per engine call"),
    config_file: Optional[Path] = typer.Option(None, "-c", "--config", help="YAML config file"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write the translation to this file"),
    as_json: bool = typer.Option(False, "--json", help="Print the full outcome as JSON"),
):
    """Translate a Markdown document, leaving code untouched."""
    text = _read_input(source)

    try:
        pipeline = _build_pipeline(config_file, engine, timeout)
    except RepoLingoError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    async def run():
        async with pipeline:
            return await pipeline.translate(text, target_lang, source_lang)

    outcome = asyncio.run(run())

    if as_json:
        console.print_json(json.dumps(outcome.to_dict(), ensure_ascii=False))
    elif output:
        output.write_text(outcome.text, encoding="utf-8")
        err_console.print(f"Saved to {output}")
    else:
        # Plain write keeps rich from reinterpreting Markdown brackets
        sys.stdout.write(outcome.text)
        if not outcome.text.endswith("\n"):
            sys.stdout.write("\n")

    color = STATUS_COLORS[outcome.status]
    err_console.print(
        f"[{color}]{outcome.status.value}[/{color}] {outcome.source_lang} → {outcome.target_lang}"
        + (f" ({outcome.error})" if outcome.error else "")
    )
    if outcome.status is TranslationStatus.FAILED:
        raise typer.Exit(2)


@app.command()
def detect(
    source: str = typer.Argument(..., help="Markdown file, or '-' for stdin"),
    engine: Optional[str] = typer.Option(None, "-e", "--engine", help="Translation engine"),
    config_file: Optional[Path] = typer.Option(None, "-c", "--config", help="YAML config file"),
):
    """Detect the language of a document."""
    text = _read_input(source)
    try:
        pipeline = _build_pipeline(config_file, engine, None)
    except RepoLingoError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    async def run():
        async with pipeline:
            return await pipeline.detector.detect(text)

    console.print(asyncio.run(run()))


@app.command()
def mask(
    source: str = typer.Argument(..., help="Markdown file, or '-' for stdin"),
):
    """Show the masked text and protected spans sent to the engine."""
    text = _read_input(source)
    masked = MarkdownMaskingEngine().protect(text)

    if masked.parse_failed:
        err_console.print("[yellow]Markdown could not be parsed; nothing was protected[/yellow]")

    sys.stdout.write(masked.masked_text)
    if not masked.masked_text.endswith("\n"):
        sys.stdout.write("\n")

    table = Table(title=f"{masked.span_count} protected spans")
    table.add_column("Placeholder", style="cyan")
    table.add_column("Kind")
    table.add_column("Lang")
    table.add_column("Content", overflow="fold")
    for pid, span in masked.spans.items():
        preview = span.original_content if len(span.original_content) <= 60 else span.original_content[:57] + "..."
        table.add_row(pid.token, span.kind.value, escape(span.info), escape(preview))
    err_console.print(table)


@app.command()
def engines():
    """List translation engines and whether they are configured."""
    load_config()
    console.print("\n[bold]Translation Engines[/bold]\n")
    for name, status in get_all_engines_status().items():
        if status["available"]:
            console.print(f"[green]✓ Available[/green] {name}")
        else:
            console.print(f"[yellow]✗ Not configured[/yellow] {name} [dim]({status['error']})[/dim]")
    console.print("\n[dim]Without a configured engine, translations are returned as mock echoes.[/dim]")


def cli():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    cli()
