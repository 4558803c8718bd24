import logging
from pathlib import Path

import pytest

from contentrecords.config import Config
from contentrecords.loader import iter_content_files, load_record, load_records
from contentrecords.parser import MalformedRecord
from contentrecords.records import RecordKind

FIXTURE_DIR = Path(__file__).parent / "fixtures" / "content"


def _write(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")


def test_loads_publication_fixture() -> None:
    path = FIXTURE_DIR / "publications" / "shape-analysis.md"
    record = load_record(path)

    assert record.kind is RecordKind.PUBLICATION
    assert record.title == "Shape Analysis for Array-Based Computation"
    assert record.metadata["authors"] == ("Ada Lovelace", "Charles Babbage")
    assert record.metadata["year"] == 2019
    assert record.body == ""
    assert record.source == str(path)


def test_loads_article_fixture() -> None:
    record = load_record(FIXTURE_DIR / "posts" / "keyword-arguments.md")

    assert record.kind is RecordKind.ARTICLE
    assert record.metadata["author"] == "Grace Hopper"
    assert record.body.startswith("Function calls now accept keyword arguments.")


def test_load_records_walks_nested_directories(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "top.md", "---\ntitle: Top\n---\nTop body")
    _write(content / "posts" / "first.md", "---\ntitle: First\n---\nFirst body")
    _write(content / "notes" / "second.markdown", "Plain notes")
    _write(content / "notes" / "ignore.txt", "Plain text")

    result = load_records(Config(content_dir=content))

    sources = [Path(record.source).name for record in result.records]
    assert sources == ["top.md", "second.markdown", "first.md"]
    assert result.failures == []
    assert result.file_count == 3


def test_load_records_returns_empty_when_directory_missing(tmp_path: Path) -> None:
    result = load_records(Config(content_dir=tmp_path / "missing"))

    assert result.records == []
    assert result.failures == []


def test_malformed_file_aborts_load_by_default(tmp_path: Path) -> None:
    content = tmp_path / "content"
    _write(content / "good.md", "---\ntitle: Good\n---\n")
    _write(content / "bad.md", "---\ntitle: Bad\n")

    with pytest.raises(MalformedRecord) as excinfo:
        load_records(Config(content_dir=content))

    assert excinfo.value.file is not None
    assert excinfo.value.file.endswith("bad.md")


def test_malformed_file_skipped_when_configured(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    content = tmp_path / "content"
    _write(content / "good.md", "---\ntitle: Good\n---\n")
    _write(content / "bad.md", "---\ntitle: Bad\n")

    with caplog.at_level(logging.WARNING, logger="contentrecords.loader"):
        result = load_records(Config(content_dir=content, skip_invalid=True))

    assert [record.title for record in result.records] == ["Good"]
    assert len(result.failures) == 1
    assert "bad.md" in caplog.text


def test_iter_content_files_honours_suffixes(tmp_path: Path) -> None:
    _write(tmp_path / "a.md", "")
    _write(tmp_path / "b.HTML", "")
    _write(tmp_path / "c.rst", "")

    names = [path.name for path in iter_content_files(tmp_path, [".md", ".html"])]

    assert names == ["a.md", "b.HTML"]
