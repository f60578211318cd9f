"""Utility exports."""

from .helpers import extract_emails, format_number, parse_llm_json, strip_code_fence, to_number
from .logger import get_logger, set_package_level

__all__ = [
    "get_logger",
    "set_package_level",
    "extract_emails",
    "parse_llm_json",
    "strip_code_fence",
    "to_number",
    "format_number",
]
