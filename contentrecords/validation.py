"""Schema validation helpers and lint diagnostics for content records."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from functools import lru_cache
from importlib import resources
from typing import Any, Iterable, Optional

from jsonschema import Draft202012Validator

from .config import Config
from .loader import iter_content_files, load_record
from .parser import MalformedRecord
from .records import ContentRecord, RecordKind

SCHEMA_PACKAGE = "contentrecords.schemas"
SCHEMA_NAMES = {
    RecordKind.PUBLICATION: "publication.schema.json",
    RecordKind.ARTICLE: "article.schema.json",
}


class RecordValidationError(ValueError):
    """Raised when record metadata fails schema validation."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class IssueSeverity(Enum):
    """Severity level for lint issues."""

    ERROR = auto()
    WARNING = auto()


@dataclass(slots=True)
class RecordIssue:
    """Represents a lint finding for a record."""

    source_path: str
    message: str
    severity: IssueSeverity
    pointer: str | None = None
    line: int | None = None


@dataclass(slots=True)
class LintReport:
    """Aggregate lint results for a set of records."""

    issues: list[RecordIssue] = field(default_factory=list)
    record_count: int = 0

    def add(self, issue: RecordIssue) -> None:
        self.issues.append(issue)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity is IssueSeverity.WARNING)


def validate_record(record: ContentRecord) -> None:
    """Validate record metadata against the schema for its kind."""
    validator = _get_validator(record.kind)
    if validator is None:
        return
    data = record.model_dump(mode="json")["metadata"]
    errors = sorted(validator.iter_errors(data), key=lambda err: [str(elem) for elem in err.path])
    if errors:
        first = errors[0]
        pointer = "/".join(str(elem) for elem in first.path)
        message = f"{_display_source(record)}: {first.message}"
        if pointer:
            message += f" (at metadata/{pointer})"
        raise RecordValidationError(message, path=pointer or None)


def lint_record(record: ContentRecord) -> list[RecordIssue]:
    """Run lint checks against a single record."""
    issues: list[RecordIssue] = []
    source = _display_source(record)

    try:
        validate_record(record)
    except RecordValidationError as exc:
        issues.append(
            RecordIssue(
                source_path=source,
                message=str(exc),
                severity=IssueSeverity.ERROR,
                pointer=f"metadata.{exc.path}" if exc.path else "metadata",
            )
        )

    if record.title is None or not record.title.strip():
        issues.append(
            RecordIssue(
                source_path=source,
                message="Record has no title.",
                severity=IssueSeverity.WARNING,
                pointer="metadata.title",
            )
        )

    if record.kind is RecordKind.ARTICLE and not record.body.strip():
        issues.append(
            RecordIssue(
                source_path=source,
                message="Article body is empty.",
                severity=IssueSeverity.WARNING,
                pointer="body",
            )
        )

    return issues


def lint_records(records: Iterable[ContentRecord]) -> LintReport:
    report = LintReport()
    for record in records:
        report.record_count += 1
        for issue in lint_record(record):
            report.add(issue)
    return report


def lint_workspace(config: Config) -> LintReport:
    """Parse and lint every record in the configured content directory.

    Parse failures are reported as errors rather than aborting the run.
    """
    report = LintReport()
    root = config.content_dir
    if not root.exists():
        return report

    for path in iter_content_files(root, config.suffixes):
        report.record_count += 1
        try:
            record = load_record(path, options=config.parser)
        except MalformedRecord as exc:
            report.add(
                RecordIssue(
                    source_path=str(path),
                    message=exc.reason,
                    severity=IssueSeverity.ERROR,
                    line=exc.line,
                )
            )
            continue
        for issue in lint_record(record):
            report.add(issue)
    return report


def _display_source(record: ContentRecord) -> str:
    return record.source or "<text>"


@lru_cache(maxsize=None)
def _get_validator(kind: RecordKind) -> Optional[Draft202012Validator]:
    name = SCHEMA_NAMES.get(kind)
    if name is None:
        return None
    return Draft202012Validator(_load_schema(name))


def _load_schema(name: str) -> dict[str, Any]:
    with resources.files(SCHEMA_PACKAGE).joinpath(name).open("r", encoding="utf-8") as handle:
        return json.load(handle)
