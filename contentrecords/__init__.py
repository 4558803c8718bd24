"""Front-matter content record parsing and validation."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as load_pkg_version
from pathlib import Path
import tomllib

from .config import DuplicateKeyPolicy, ParserOptions
from .loader import LoadResult, load_record, load_records
from .parser import MalformedRecord, parse_record, render_record
from .records import ContentRecord, RecordKind

__all__ = [
    "__version__",
    "ContentRecord",
    "DuplicateKeyPolicy",
    "LoadResult",
    "MalformedRecord",
    "ParserOptions",
    "RecordKind",
    "load_record",
    "load_records",
    "parse_record",
    "render_record",
]


def _version_from_pyproject(pyproject: Path) -> str:
    """Fall back to the checkout's pyproject.toml when no distribution is installed."""
    if not pyproject.is_file():
        return "0.0.0"
    with pyproject.open("rb") as handle:
        project = tomllib.load(handle).get("project", {})
    return str(project.get("version", "0.0.0"))


try:
    __version__ = load_pkg_version("contentrecords")
except PackageNotFoundError:
    __version__ = _version_from_pyproject(Path(__file__).resolve().parents[1] / "pyproject.toml")
