# src/translines/cli.py
"""
translines Command Line Interface (CLI).

This module implements the user-facing terminal interface using `typer` and `rich`.

Features
--------
- **Clean stdout**: only translated lines go to stdout, one per input line, in
  input order, printed after every line has been resolved. Spinners, warnings
  and summaries go to stderr.
- **Run Reports**: `--report` saves every outcome (text or error) to JSON.
- **Replay**: re-print a saved report without calling the remote service.

Usage
-----
    # Translate stdin to stdout
    $ translines translate < simplified.txt > traditional.txt

    # Tune throttling and keep a report
    $ translines translate -i simplified.txt --workers 10 --rate 50 --report run.json

    # Re-emit a previous run
    $ translines replay run.json
"""

from __future__ import annotations

import dataclasses
import json
import time
import traceback
from collections.abc import Iterable, Iterator
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from translines.core.contracts.work import Outcome
from translines.core.errors import (
    CollectorError,
    DuplicatePositionError,
    MissingCredentialError,
    PositionOutOfRangeError,
)
from translines.core.settings import PipelineConfig, Settings, load_settings
from translines.pipelines.ordered_translation import PipelineResult, run_pipeline
from translines.translate.base import Translator
from translines.translate.google import GoogleTranslator

# Ensure env vars (like GOOGLE_API_KEY) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="translines: translate text line by line, concurrently, in order.",
    rich_markup_mode="markdown",
)
# Diagnostics go to stderr so stdout carries translations only.
console = Console(stderr=True)

EXIT_FATAL = 1
EXIT_INTERRUPTED = 130


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def build_translator(
    settings: Settings,
    source: str | None = None,
    target: str | None = None,
) -> Translator:
    """Construct the remote translator, applying language overrides.

    Raises
    ------
    MissingCredentialError
        If no API key is configured.
    """
    translator = GoogleTranslator.from_settings(settings)
    overrides: dict[str, str] = {}
    if source:
        overrides["source_language"] = source
    if target:
        overrides["target_language"] = target
    return dataclasses.replace(translator, **overrides) if overrides else translator


def _read_lines(input_path: Path | None) -> Iterator[str]:
    """Yield input lines lazily from a file or stdin."""
    if input_path is None:
        yield from typer.get_text_stream("stdin")
        return
    with open(input_path, encoding="utf-8") as f:
        yield from f


def _emit(texts: Iterable[str]) -> None:
    for text in texts:
        typer.echo(text)


def _save_report(result: PipelineResult, report_path: Path, source: Path | None) -> None:
    """Serialize a run so it can be inspected or replayed later."""
    report_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "meta": {
            "source": str(source) if source else "<stdin>",
            "timestamp": datetime.now().strftime("%Y%m%d_%H%M%S"),
            "total": result["total"],
            "failed": len(result["failures"]),
            "truncated": result["truncated"],
            "elapsed_seconds": round(result["elapsed_seconds"], 3),
        },
        "outcomes": [
            {"position": o.position, "text": o.text, "error": o.error}
            for o in result["outcomes"]
        ],
    }
    with open(report_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)


def _load_report(report_path: Path) -> list[Outcome]:
    with open(report_path, encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)
    outcomes = [
        Outcome(position=int(o["position"]), text=str(o.get("text", "")), error=o.get("error"))
        for o in data.get("outcomes", [])
    ]
    outcomes.sort(key=lambda o: o.position)

    # A replayed run must be as complete as a live one: exactly 0..n-1.
    for expected, outcome in enumerate(outcomes):
        if outcome.position < 0 or outcome.position > expected:
            raise PositionOutOfRangeError(outcome.position, len(outcomes))
        if outcome.position < expected:
            raise DuplicatePositionError(outcome.position)
    return outcomes


def _print_summary(result: PipelineResult, duration: float) -> None:
    failed = len(result["failures"])
    total = result["total"]
    if failed:
        console.print(
            f"[bold yellow]⚠ {failed} of {total} lines failed[/bold yellow] (took {duration:.1f}s)"
        )
        for outcome in result["failures"]:
            console.print(f"  [dim]line {outcome.position + 1}: {outcome.error}[/dim]")
    else:
        console.print(f"[bold green]✅ Translated {total} lines[/bold green] (took {duration:.1f}s)")
    if result["truncated"]:
        console.print("[yellow]Input was truncated by max-items.[/yellow]")


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def translate(
    input_path: Annotated[
        Path | None,
        typer.Option(
            "--input",
            "-i",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Read lines from this file instead of stdin.",
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-w", min=1, help="Concurrent requests (default 20)."),
    ] = None,
    rate: Annotated[
        float | None,
        typer.Option("--rate", "-r", min=0.001, help="Max requests per second (default 100)."),
    ] = None,
    burst: Annotated[
        int | None,
        typer.Option("--burst", min=1, help="Token bucket size (default 1)."),
    ] = None,
    max_items: Annotated[
        int | None,
        typer.Option("--max-items", min=0, help="Stop reading after this many lines."),
    ] = None,
    source: Annotated[
        str | None,
        typer.Option("--source", help="Source language code (default zh-CN)."),
    ] = None,
    target: Annotated[
        str | None,
        typer.Option("--target", help="Target language code (default zh-TW)."),
    ] = None,
    error_marker: Annotated[
        str | None,
        typer.Option("--error-marker", help="Text printed for lines that failed."),
    ] = None,
    report: Annotated[
        Path | None,
        typer.Option("--report", help="Write a JSON record of every outcome to this path."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show full error tracebacks for debugging."),
    ] = False,
) -> None:
    """
    Translate every input line and print the results in input order.

    Per-line failures do not stop the run: the line is printed as the error
    marker (empty by default) and reported on stderr.
    """
    settings = load_settings()

    # 1. Fatal startup checks happen before any input is read.
    try:
        translator = build_translator(settings, source=source, target=target)
    except MissingCredentialError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=EXIT_FATAL) from e

    config = PipelineConfig(
        rate_limit=rate if rate is not None else settings.rate_limit,
        burst=burst if burst is not None else settings.burst,
        workers=workers if workers is not None else settings.workers,
        max_items=max_items if max_items is not None else settings.max_items,
        abort_grace_seconds=settings.abort_grace,
    )
    marker = error_marker if error_marker is not None else settings.error_marker

    start_time = time.time()

    # 2. Pipeline execution (with spinner on stderr)
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(
                f"[cyan]Translating with {config.workers} workers "
                f"at {config.rate_limit:g} req/s...",
                total=None,
            )
            result = run_pipeline(
                _read_lines(input_path),
                translator,
                config=config,
                error_marker=marker,
            )
    except KeyboardInterrupt as e:
        console.print(
            "\n[bold yellow]Interrupted; no output was written.[/bold yellow] "
            "[dim]Requests still in flight were abandoned.[/dim]"
        )
        raise typer.Exit(code=EXIT_INTERRUPTED) from e
    except Exception as e:
        console.print(f"\n[bold red]❌ Pipeline Error:[/bold red] {e}")
        if verbose:
            traceback.print_exc()
        raise typer.Exit(code=EXIT_FATAL) from e

    # 3. Output only after every line is resolved
    _emit(result["texts"])
    _print_summary(result, time.time() - start_time)

    if report is not None:
        try:
            _save_report(result, report, input_path)
            console.print(f"[dim]Run report saved to: {report}[/dim]")
        except OSError as e:
            console.print(f"[dim yellow]Warning: Could not save run report: {e}[/dim yellow]")


@app.command()  # type: ignore[misc]
def replay(
    report_file: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Path to a JSON report written by `translate --report`.",
        ),
    ],
    error_marker: Annotated[
        str,
        typer.Option("--error-marker", help="Text printed for lines that failed."),
    ] = "",
) -> None:
    """
    Re-print the output of a past run without calling the translation service.
    """
    console.print(
        Panel.fit(
            f"[bold magenta]translines replay[/bold magenta]\nLoading: [u]{report_file.name}[/u]",
            border_style="magenta",
        )
    )

    try:
        outcomes = _load_report(report_file)
    except (OSError, ValueError, KeyError, TypeError, CollectorError) as e:
        console.print(f"\n[bold red]❌ Replay Error:[/bold red] {e}")
        raise typer.Exit(code=EXIT_FATAL) from e

    _emit(o.text if o.ok else error_marker for o in outcomes)


if __name__ == "__main__":
    app()
