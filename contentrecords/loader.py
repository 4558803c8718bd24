"""Load content records from files in the workspace."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from .config import Config, ParserOptions
from .parser import MalformedRecord, parse_record
from .records import ContentRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadResult:
    """Records read from a content directory plus files that failed to parse."""

    records: list[ContentRecord] = field(default_factory=list)
    failures: list[MalformedRecord] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.records) + len(self.failures)


def load_record(path: str | Path, *, options: Optional[ParserOptions] = None) -> ContentRecord:
    """Read a UTF-8 file and parse it into a content record."""
    source_path = Path(path)
    text = source_path.read_text(encoding="utf-8")
    return parse_record(text, source=str(source_path), options=options)


def load_records(config: Config) -> LoadResult:
    """Parse every supported file below the configured content directory.

    Malformed files abort the load unless ``config.skip_invalid`` is set, in
    which case they are logged and collected in ``LoadResult.failures``.
    """
    result = LoadResult()
    root = config.content_dir
    if not root.exists():
        logger.debug("Content directory %s does not exist", root)
        return result

    for path in iter_content_files(root, config.suffixes):
        try:
            record = load_record(path, options=config.parser)
        except MalformedRecord as exc:
            if not config.skip_invalid:
                raise
            logger.warning("Skipping malformed record: %s", exc)
            result.failures.append(exc)
            continue
        result.records.append(record)
    return result


def iter_content_files(root: Path, suffixes: Iterable[str]) -> Iterable[Path]:
    allowed = {suffix.lower() for suffix in suffixes}
    directories = sorted(p for p in root.rglob("*") if p.is_dir())
    directories.insert(0, root)

    for directory in directories:
        for path in sorted(directory.iterdir()):
            if path.is_file() and path.suffix.lower() in allowed:
                yield path
