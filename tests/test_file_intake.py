import pytest

from skillvector.errors import FileValidationError
from skillvector.schemas.ingestion import DataType
from skillvector.services.file_intake import (
    parse_data_type,
    scan_static_data,
    validate_file_content,
    validate_file_type,
)
from skillvector.services.file_parsers import parse_csv, parse_json


def test_declared_type_must_match_extension():
    assert validate_file_type("csv", "people.csv") is DataType.CSV
    assert validate_file_type("text", "bio.MD") is DataType.TEXT
    assert validate_file_type(DataType.JSON, "dump.json") is DataType.JSON
    with pytest.raises(FileValidationError):
        validate_file_type("json", "people.csv")
    with pytest.raises(FileValidationError):
        validate_file_type("text", "noext")


def test_unknown_declared_type():
    with pytest.raises(FileValidationError):
        parse_data_type("xml")


def test_content_checks():
    validate_file_content(DataType.CSV, "name,role\nAda,Engineer\n")
    validate_file_content(DataType.JSON, '[{"name": "Ada"}]')
    validate_file_content(DataType.TEXT, "Ada is an engineer.")
    with pytest.raises(FileValidationError):
        validate_file_content(DataType.CSV, "just one column\nvalue")
    with pytest.raises(FileValidationError):
        validate_file_content(DataType.JSON, "{not json")
    with pytest.raises(FileValidationError):
        validate_file_content(DataType.TEXT, "   \n  ")


def test_parse_csv_skips_empty_lines_and_trims():
    content = "name, role ,skills\n Ada , Engineer ,\"Python, Algorithms\"\n\n,,\nGrace,Admiral,COBOL\n"
    rows = parse_csv(content)
    assert len(rows) == 2
    assert rows[0] == {"name": "Ada", "role": "Engineer", "skills": "Python, Algorithms"}
    assert rows[1]["name"] == "Grace"


def test_parse_json_shapes():
    assert parse_json('{"name": "Ada"}') == [{"name": "Ada"}]
    assert parse_json('[{"name": "Ada"}, 3, {"name": "Grace"}]') == [{"name": "Ada"}, {"name": "Grace"}]
    assert parse_json('{"people": [{"name": "Ada"}]}') == [{"name": "Ada"}]
    with pytest.raises(FileValidationError):
        parse_json('"a string"')


def test_scan_static_data(tmp_path):
    (tmp_path / "csv").mkdir()
    (tmp_path / "csv" / "people.csv").write_text("name,role\nAda,Engineer\n", encoding="utf-8")
    (tmp_path / "csv" / "notes.txt").write_text("ignored", encoding="utf-8")
    (tmp_path / "text").mkdir()
    (tmp_path / "text" / "bio.md").write_text("Ada is an engineer.", encoding="utf-8")

    files = scan_static_data(tmp_path)

    assert [(f.name, f.data_type) for f in files] == [
        ("people.csv", DataType.CSV),
        ("bio.md", DataType.TEXT),
    ]
    assert files[1].content == "Ada is an engineer."


def test_scan_missing_root_is_empty(tmp_path):
    assert scan_static_data(tmp_path / "nope") == []
