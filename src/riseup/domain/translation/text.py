"""Validation and normalization rules for text submitted for translation."""

import re

MAX_TEXT_LENGTH = 10_000

# Repeated characters, script injection and URI schemes that only show up
# in abusive submissions
_ABUSE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(.)\1{50,}", re.DOTALL),
    re.compile(r"<script\b[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:", re.IGNORECASE),
)

_TABS_AND_CARRIAGE_RETURNS = re.compile(r"[\t\r]+")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")

# Arabic block, which covers Persian letters
_PERSIAN_SCRIPT = re.compile(r"[\u0600-\u06FF]")
_LETTERS = re.compile(r"[^\W\d_]", re.UNICODE)


def contains_abuse_pattern(text: str) -> bool:
    return any(pattern.search(text) for pattern in _ABUSE_PATTERNS)


def sanitize_text(text: str) -> str:
    """Normalize whitespace and drop control characters.

    NUL bytes are removed, tabs and carriage returns become single spaces,
    every other control character except the newline is removed, and the
    result is trimmed.
    """
    text = text.replace("\x00", "")
    text = _TABS_AND_CARRIAGE_RETURNS.sub(" ", text)
    text = _CONTROL_CHARS.sub("", text)
    return text.strip()


def persian_script_ratio(text: str) -> float:
    """Share of letters in ``text`` written in Persian/Arabic script."""
    letters = _LETTERS.findall(text)
    if not letters:
        return 0.0
    persian = sum(1 for ch in letters if _PERSIAN_SCRIPT.match(ch))
    return persian / len(letters)
