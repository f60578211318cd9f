"""Upload validation (declared type vs extension vs content) and the static seed-data scanner."""

import json
from pathlib import Path
from typing import Dict, List, Tuple, Union

from skillvector.errors import FileValidationError
from skillvector.schemas.ingestion import DataType, SourceFile
from skillvector.utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_EXTENSIONS: Dict[DataType, Tuple[str, ...]] = {
    DataType.CSV: (".csv",),
    DataType.JSON: (".json",),
    DataType.TEXT: (".txt", ".md", ".text"),
}


def parse_data_type(declared: str) -> DataType:
    try:
        return DataType((declared or "").strip().lower())
    except ValueError:
        raise FileValidationError(
            f"Invalid file type '{declared}'. Must be one of: csv, json, text"
        ) from None


def validate_file_type(declared: Union[str, DataType], file_name: str) -> DataType:
    """The file's extension must belong to the declared type."""
    data_type = declared if isinstance(declared, DataType) else parse_data_type(declared)
    extension = Path(file_name or "").suffix.lower()
    allowed = ALLOWED_EXTENSIONS[data_type]
    if extension not in allowed:
        raise FileValidationError(
            f"File '{file_name}' does not match declared type '{data_type.value}' "
            f"(expected {', '.join(allowed)})"
        )
    return data_type


def validate_file_content(data_type: DataType, content: str) -> None:
    """csv: header line has a comma; json: parses; text: non-empty."""
    if not (content or "").strip():
        raise FileValidationError("File is empty")
    if data_type is DataType.CSV:
        lines = content.lstrip("\ufeff").strip().splitlines()
        if not lines or "," not in lines[0]:
            raise FileValidationError("CSV header row must contain comma-separated columns")
    elif data_type is DataType.JSON:
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            raise FileValidationError(f"Invalid JSON: {e}") from e


def scan_static_data(root: Union[str, Path]) -> List[SourceFile]:
    """
    Collect seed files from root/csv, root/json and root/text, sorted by name.
    Missing subfolders are skipped.
    """
    base = Path(root)
    found: List[SourceFile] = []
    for data_type in DataType:
        folder = base / data_type.value
        if not folder.is_dir():
            logger.debug("No %s seed folder at %s", data_type.value, folder)
            continue
        for path in sorted(folder.iterdir()):
            if not path.is_file() or path.suffix.lower() not in ALLOWED_EXTENSIONS[data_type]:
                continue
            found.append(
                SourceFile(
                    name=path.name,
                    data_type=data_type,
                    content=path.read_text(encoding="utf-8"),
                    path=str(path),
                )
            )
    logger.info("Found %s seed file(s) under %s", len(found), base)
    return found
