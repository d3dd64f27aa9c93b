"""Text sanitization for untrusted news fields."""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
_HTML_TAGS = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Clean a free-text field before scoring or display.

    Strips HTML tags and control characters, collapses whitespace (newlines
    and tabs included) and truncates to max_length.

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation

    Returns:
        Sanitized text or None if input was None
    """
    if text is None:
        return None

    text = _HTML_TAGS.sub(" ", str(text))
    text = _CONTROL_CHARS.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()

    if len(text) > max_length:
        text = text[:max_length].rstrip() + "..."

    return text
