"""Display helpers for course names."""

import re
from typing import Iterable

STOP_WORDS = re.compile(r"\b(and|or|the|of|in|on|at|to|for|with|by)\b", re.IGNORECASE)
WORD_SEPARATORS = re.compile(r"[\s\-_]+")
WHITESPACE = re.compile(r"\s+")

EXCEL_SHEET_NAME_LIMIT = 31
INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def course_abbreviation(course_name: str, max_letters: int = 4) -> str:
    """Initials of the significant words of a course name, e.g. 'Data Foundations' -> 'DF'."""
    words = [word for word in WORD_SEPARATORS.split(STOP_WORDS.sub("", course_name or "")) if word]
    return "".join(word[0].upper() for word in words[:max_letters])


def unique_sheet_name(base: str, used: Iterable[str], limit: int = EXCEL_SHEET_NAME_LIMIT) -> str:
    """Excel-safe sheet name that does not collide with `used`."""
    used = set(used)
    base = (INVALID_SHEET_CHARS.sub("", base or "") or "Sheet")[:limit]
    name = base
    counter = 1
    while name in used:
        suffix = str(counter)
        name = f"{base[:limit - len(suffix)]}{suffix}"
        counter += 1
    return name


def channel_slug(course_name: str) -> str:
    """Slack channel style slug: lower-case with runs of whitespace as hyphens."""
    return WHITESPACE.sub("-", (course_name or "").strip().lower())
