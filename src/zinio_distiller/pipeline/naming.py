"""Filename helpers for output directories and files."""

import re

SEPARATORS = str.maketrans({"/": " - ", ":": " - "})
# Letters, digits, whitespace and a few punctuation marks are kept.
INVALID_CHARS = re.compile(r"[^\w\s'!&,.@-]|_")
WHITESPACE = re.compile(r"\s+")


def sanitize_filename(name: str) -> str:
    """Turn a magazine or issue title into a safe file or directory name.

    Path separators and colons become " - ", any other character that is
    not a letter, digit, whitespace or one of ' ! & , . @ - becomes a space,
    and whitespace runs collapse to a single space.

    Args:
        name: Display title

    Returns:
        Sanitized name, trimmed

    Examples:
        >>> sanitize_filename("Wired: March/April 2024")
        'Wired - March - April 2024'
        >>> sanitize_filename("  Café   Society #12 ")
        'Café Society 12'
    """
    s = name.translate(SEPARATORS)
    s = INVALID_CHARS.sub(" ", s)
    s = WHITESPACE.sub(" ", s)
    return s.strip()
