"""Parse tabular and structured uploads into raw records."""

import csv
import io
import json
from typing import Any, Dict, List

from skillvector.errors import FileValidationError


def parse_csv(content: str) -> List[Dict[str, Any]]:
    """Header row + data rows; empty lines skipped, cells trimmed."""
    reader = csv.DictReader(io.StringIO((content or "").lstrip("\ufeff")), skipinitialspace=True)
    records: List[Dict[str, Any]] = []
    for row in reader:
        cleaned = {
            (key or "").strip(): (value.strip() if isinstance(value, str) else value)
            for key, value in row.items()
            if key is not None
        }
        if not any(v for v in cleaned.values()):
            continue
        records.append(cleaned)
    return records


def parse_json(content: str) -> List[Dict[str, Any]]:
    """Accepts one object, an array of objects, or an object wrapping a `people` array."""
    try:
        data = json.loads(content or "")
    except json.JSONDecodeError as e:
        raise FileValidationError(f"Invalid JSON: {e}") from e
    if isinstance(data, dict):
        for key in ("people", "persons", "profiles", "data"):
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            return [data]
    if not isinstance(data, list):
        raise FileValidationError("JSON must be an object or an array of objects")
    return [item for item in data if isinstance(item, dict)]
