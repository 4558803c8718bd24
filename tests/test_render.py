import pytest

from contentrecords.config import ParserOptions
from contentrecords.parser import parse_record, render_record
from contentrecords.records import ContentRecord

ROUND_TRIP_CASES = [
    "---\ntitle: X\n---\nBody text",
    "---\ntype: article\nauthors:\n- A. Author\n- B. Author\nyear: 2021\n---\n",
    "---\nlayout: post\ndate: 2020-01-05\n---\n\n\nLeading blank lines survive.\n",
    "---\ntitle: 'Ünïcode: “quoted”'\nsummary: |\n  Two\n  lines\n---\nBody\n---\nmore",
    "---\n---\n---\nBody that opens with the delimiter",
]


@pytest.mark.parametrize("text", ROUND_TRIP_CASES)
def test_reparsing_rendered_text_is_stable(text: str) -> None:
    record = parse_record(text)

    assert parse_record(render_record(record)) == record


def test_plain_body_renders_unchanged() -> None:
    record = parse_record("Just body, no marker")

    assert render_record(record) == "Just body, no marker"


def test_renders_metadata_in_insertion_order() -> None:
    record = ContentRecord(metadata={"title": "X", "authors": ["A", "B"]}, body="Body")

    assert render_record(record) == "---\ntitle: X\nauthors:\n- A\n- B\n---\nBody"


def test_body_starting_with_blank_line_gets_separator() -> None:
    record = ContentRecord(metadata={"title": "X"}, body="\nBody")
    text = render_record(record)

    assert text == "---\ntitle: X\n---\n\n\nBody"
    assert parse_record(text).body == "\nBody"


def test_renders_with_custom_delimiter() -> None:
    options = ParserOptions(delimiter="+++")
    record = ContentRecord(metadata={"title": "X"}, body="Body")
    text = render_record(record, options=options)

    assert text.startswith("+++\n")
    assert parse_record(text, options=options) == record
