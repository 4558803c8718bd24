from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from .config import DEFAULT_CONFIG_NAME, Config, DuplicateKeyPolicy, ParserOptions, load_config
from .loader import load_record, load_records
from .parser import MalformedRecord, render_record
from .validation import IssueSeverity, RecordIssue, lint_workspace

console = Console()
app = typer.Typer(help="Parse and check front-matter content records.")


class OutputFormat(str, Enum):
    JSON = "json"
    TEXT = "text"


ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file."),
]


@app.command()
def show(
    path: Annotated[Path, typer.Argument(help="Content file to parse.")],
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Print the record as JSON or as normalized front matter."),
    ] = OutputFormat.JSON,
    delimiter: Annotated[
        str,
        typer.Option("--delimiter", help="Marker line around the metadata block."),
    ] = "---",
    strict_keys: Annotated[
        bool,
        typer.Option("--strict-keys", help="Fail on duplicate metadata keys instead of keeping the last."),
    ] = False,
) -> None:
    """Parse a single file and print the resulting record."""
    try:
        options = ParserOptions(
            delimiter=delimiter,
            duplicate_keys=DuplicateKeyPolicy.ERROR if strict_keys else DuplicateKeyPolicy.OVERWRITE,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        record = load_record(path, options=options)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"File not found: {path}") from exc
    except MalformedRecord as exc:
        console.print(f"[bold red]Malformed record[/]: {exc}", highlight=False)
        raise typer.Exit(code=1) from exc

    if output_format is OutputFormat.JSON:
        console.print_json(data=record.model_dump(mode="json"))
    else:
        console.print(render_record(record, options=options), markup=False, highlight=False, soft_wrap=True, end="")


@app.command()
def lint(
    config_path: ConfigPathOption = DEFAULT_CONFIG_NAME,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors."),
    ] = False,
) -> None:
    """Parse every content file and check its metadata."""
    config = _load(config_path)
    report = lint_workspace(config)

    if not report.issues:
        console.print(f"[bold green]Lint clean[/]: {report.record_count} record(s), no issues detected.")
        raise typer.Exit()

    for issue in sorted(report.issues, key=_lint_sort_key):
        style = "red" if issue.severity is IssueSeverity.ERROR else "yellow"
        location = issue.source_path
        if issue.line is not None:
            location = f"{location}:{issue.line}"
        if issue.pointer:
            location = f"{location} :: {issue.pointer}"
        console.print(f"[bold {style}]{issue.severity.name}[/] {location} - {issue.message}", highlight=False)

    console.print(
        f"[bold blue]Summary[/]: {report.error_count} error(s), {report.warning_count} warning(s) "
        f"across {report.record_count} record(s)."
    )

    exit_code = 0
    if report.error_count > 0 or (strict and report.warning_count > 0):
        exit_code = 1
    raise typer.Exit(code=exit_code)


@app.command("list")
def list_records(
    config_path: ConfigPathOption = DEFAULT_CONFIG_NAME,
) -> None:
    """List the records in the content directory with their kind and title."""
    config = _load(config_path)
    try:
        result = load_records(config)
    except MalformedRecord as exc:
        console.print(f"[bold red]Malformed record[/]: {exc}", highlight=False)
        raise typer.Exit(code=1) from exc

    for record in result.records:
        title = record.title or "(untitled)"
        console.print(f"{record.kind.value:<12} {record.source} - {title}", markup=False, highlight=False)

    console.print(
        f"[bold green]Records[/]: {len(result.records)} loaded, {len(result.failures)} skipped."
    )


def _lint_sort_key(issue: RecordIssue) -> tuple[int, str, str]:
    severity_order = 0 if issue.severity is IssueSeverity.ERROR else 1
    pointer = issue.pointer or ""
    return (severity_order, issue.source_path, pointer)


def _load(path: str) -> Config:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
