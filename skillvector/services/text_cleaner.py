"""Clean and normalize uploaded free text before profile extraction."""

import re
import unicodedata

from skillvector.config import TEXT_EXTRACTION_MAX_CHARS

_ENTITIES = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
}


def strip_markup(text: str) -> str:
    """Drop HTML tags (keeping block breaks) and markdown emphasis/heading marks."""
    text = re.sub(r"<(script|style)[^>]*>[\s\S]*?</\1>", " ", text, flags=re.IGNORECASE)
    text = re.sub(r"<(?:br|p|div|li|tr|h[1-6])[^>]*>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", " ", text)
    for entity, char in _ENTITIES.items():
        text = text.replace(entity, char)
    # Markdown: headings, bold/italic, bullet markers
    text = re.sub(r"^\s{0,3}#{1,6}\s*", "", text, flags=re.MULTILINE)
    text = re.sub(r"(\*\*|__)(.+?)\1", r"\2", text)
    text = re.sub(r"^\s*[-*+]\s+", "", text, flags=re.MULTILINE)
    return text


def clean_text(raw: str, max_chars: int = TEXT_EXTRACTION_MAX_CHARS) -> str:
    """
    Readable plain text for extraction: markup removed, whitespace collapsed,
    paragraph breaks kept, truncated to max_chars.
    """
    if not raw or not raw.strip():
        return ""
    text = strip_markup(unicodedata.normalize("NFC", raw).replace("\r\n", "\n"))
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = text.strip()
    if len(text) > max_chars:
        text = text[:max_chars]
    return text
