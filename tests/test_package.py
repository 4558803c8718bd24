import contentrecords


def test_version_matches_project_metadata() -> None:
    assert contentrecords.__version__ == "0.1.0"


def test_public_api_parses_text() -> None:
    record = contentrecords.parse_record("---\ntitle: X\n---\nBody text")

    assert isinstance(record, contentrecords.ContentRecord)
    assert record.kind is contentrecords.RecordKind.GENERIC
