"""JourneyForge CLI - parse generated text and manage journeys.

Usage:
    journeyforge parse phases ./suggestions.txt
    journeyforge parse rubric ./rubric.md --no-fallback --min-confidence 0.8
    journeyforge init water-project --subject Science --grade "middle school" --weeks 8
    journeyforge apply-phases water-project ./suggestions.txt
    journeyforge show water-project
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from journeyforge.app.config import JourneyForgeConfig, ParsingConfig, get_config, reload_config
from journeyforge.app.session import JourneySession
from journeyforge.core.exceptions import JourneyForgeError
from journeyforge.core.models.extraction import ExtractionResult
from journeyforge.core.models.journey import SeedContext
from journeyforge.phases.extraction.engine import ExtractionEngine
from journeyforge.utils.logging import get_logger, log_error, setup_logging

logger = get_logger("app.cli")

app = typer.Typer(
    name="journeyforge",
    help="JourneyForge - structured project journeys from generated text",
    add_completion=False,
)

console = Console()


class ParseKind(str, Enum):
    PHASES = "phases"
    ACTIVITIES = "activities"
    RESOURCES = "resources"
    RUBRIC = "rubric"
    IDEATION = "ideation"


_state: dict[str, JourneyForgeConfig] = {}


def _config() -> JourneyForgeConfig:
    return _state.get("config") or get_config()


def _fail(operation: str, error: Exception, **context: object) -> typer.Exit:
    log_error(logger, operation, error, context or None)
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    return typer.Exit(1)


def _read_text(file: Path) -> str:
    if not file.exists():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)
    return file.read_text(encoding="utf-8")


def _result_panel(kind: str, result: ExtractionResult) -> Panel:
    style = "yellow" if result.is_degraded else "green"
    lines = [
        f"[bold]Kind:[/bold] {kind}",
        f"[bold]Format:[/bold] {result.format.value}",
        f"[bold]Confidence:[/bold] {result.confidence:.2f}",
        f"[bold]Items:[/bold] {result.item_count}",
    ]
    lines += [f"[yellow]! {warning}[/yellow]" for warning in result.warnings]
    return Panel("\n".join(lines), title="Extraction Result", border_style=style)


@app.callback()
def main(
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to a JSON or YAML config file")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR")
    ] = None,
) -> None:
    """Load configuration and set up logging for every command."""
    cfg = reload_config(config) if config else get_config()
    if log_level:
        cfg.log_level = log_level.upper()
    setup_logging(
        level=cfg.log_level,
        log_dir=cfg.logs_dir,
        console_output=True,
        file_output=cfg.log_to_file,
    )
    _state["config"] = cfg


@app.command("parse")
def parse_command(
    kind: Annotated[ParseKind, typer.Argument(help="What to extract")],
    file: Annotated[Path, typer.Argument(help="Text file holding generated suggestions")],
    no_fallback: Annotated[
        bool, typer.Option("--no-fallback", help="Return nothing instead of heuristic guesses")
    ] = False,
    min_confidence: Annotated[
        float | None, typer.Option("--min-confidence", help="Skip strategies scoring below this")
    ] = None,
    preserve_markdown: Annotated[
        bool, typer.Option("--preserve-markdown", help="Match against the text as written")
    ] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the raw result as JSON")] = False,
) -> None:
    """Extract structured records from a block of generated text."""
    text = _read_text(file)
    base = _config().parsing
    try:
        parsing = ParsingConfig(
            enable_fallback=base.enable_fallback and not no_fallback,
            min_confidence=base.min_confidence if min_confidence is None else min_confidence,
            max_retries=base.max_retries,
            preserve_markdown=base.preserve_markdown or preserve_markdown,
        )
    except ValueError as e:
        raise _fail("parse", e, kind=kind.value)
    result = ExtractionEngine(parsing).parse(kind.value, text)

    if as_json:
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    console.print(_result_panel(kind.value, result))
    console.print_json(data=result.model_dump(mode="json")["data"])


@app.command("init")
def init_command(
    project_id: Annotated[str, typer.Argument(help="Identifier for the new journey")],
    subject: Annotated[str, typer.Option("--subject", "-s", help="Subject area")] = "",
    grade: Annotated[str, typer.Option("--grade", "-g", help="Grade level text")] = "middle",
    weeks: Annotated[int, typer.Option("--weeks", "-w", min=1, help="Project length")] = 4,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing journey")] = False,
) -> None:
    """Create a new journey with the default phases."""
    cfg = _config()
    try:
        seed = SeedContext(subject=subject, grade_level=grade, duration_weeks=weeks)
        session = JourneySession.start(cfg, seed, project_id=project_id)
        if session.store.exists(project_id) and not force:
            console.print(f"[red]Error:[/red] Journey '{project_id}' already exists (use --force)")
            raise typer.Exit(1)
        session.save()
    except (JourneyForgeError, ValueError) as e:
        raise _fail("init", e, project=project_id)

    state = session.state
    console.print(Panel(
        f"[bold]Project:[/bold] {state.project_id}\n"
        f"[bold]Subject:[/bold] {state.subject or '-'}\n"
        f"[bold]Grade band:[/bold] {state.grade_level.value}\n"
        f"[bold]Duration:[/bold] {state.project_duration_weeks} weeks\n"
        f"[bold]Phases:[/bold] " + ", ".join(f"{p.name} ({p.duration})" for p in state.phases),
        title="Journey Created",
        border_style="green",
    ))


@app.command("show")
def show_command(
    project_id: Annotated[str, typer.Argument(help="Journey to display")],
) -> None:
    """Show phases, progress and iteration history of a journey."""
    try:
        session = JourneySession.open(_config(), project_id)
    except (JourneyForgeError, ValueError) as e:
        raise _fail("show", e, project=project_id)

    state = session.state
    workflow = session.workflow

    table = Table(title=f"Journey {state.project_id}")
    table.add_column("#", justify="right")
    table.add_column("Phase")
    table.add_column("Duration")
    table.add_column("Obj", justify="right")
    table.add_column("Act", justify="right")
    table.add_column("Del", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Status")

    for index, phase in enumerate(state.phases):
        marker = "▶ " if index == state.current_phase_index else ""
        if workflow.is_phase_complete(phase):
            status = "[green]complete[/green]"
        elif phase.completed:
            status = "[cyan]marked complete[/cyan]"
        else:
            status = "in progress"
        table.add_row(
            str(index),
            f"{marker}{phase.name}",
            phase.duration,
            str(len(phase.objectives)),
            str(len(phase.activities)),
            str(len(phase.deliverables)),
            f"{workflow.phase_progress(index)}%",
            status,
        )
    console.print(table)

    summary = session.iteration_log().summary()
    console.print(Panel(
        f"[bold]Overall progress:[/bold] {workflow.overall_progress()}%\n"
        f"[bold]Iterations:[/bold] {summary['total_iterations']}\n"
        f"[bold]Most revisited:[/bold] {summary['most_revisited_phase'] or '-'}",
        title="Summary",
        border_style="cyan",
    ))


@app.command("apply-phases")
def apply_phases_command(
    project_id: Annotated[str, typer.Argument(help="Journey to update")],
    file: Annotated[Path, typer.Argument(help="Text file holding phase suggestions")],
    force: Annotated[
        bool, typer.Option("--force", help="Apply even low-confidence suggestions")
    ] = False,
) -> None:
    """Parse phase suggestions and merge them into a stored journey."""
    text = _read_text(file)
    try:
        session = JourneySession.open(_config(), project_id)
        result, applied = session.apply_phase_text(text, force=force)
        if applied:
            session.save()
    except (JourneyForgeError, ValueError) as e:
        raise _fail("apply-phases", e, project=project_id)

    console.print(_result_panel("phases", result))
    if applied:
        console.print(f"[green]Applied {result.item_count} phase suggestion(s) to {project_id}[/green]")
    else:
        console.print(
            "[yellow]Suggestions not applied: confidence below the auto-apply threshold "
            "(re-run with --force to apply)[/yellow]"
        )


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
