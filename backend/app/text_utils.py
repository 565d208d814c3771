# app/text_utils.py
import re
from typing import Any

# Any run of line-break characters (\r\n, \n, \r, and the unicode separators)
_LINE_BREAKS = re.compile(r"[\r\n\u2028\u2029\x0b\x0c\x85]+")

# Header cells only need quoting when they would break the row apart
_NEEDS_QUOTING = re.compile(r'[",\r\n\u2028\u2029\x0b\x0c\x85]')


def collapse_line_breaks(s: str) -> str:
    """Replace every line-break sequence with a single space."""
    return _LINE_BREAKS.sub(" ", s)


def text_cell(value: Any) -> str:
    """
    CSV cell for free text (titles, URIs, modifiers).
    None -> empty cell; otherwise wrapped in quotes, quotes doubled,
    line breaks collapsed so the row stays on one physical line.
    """
    if value is None:
        return ""
    s = collapse_line_breaks(str(value))
    return '"' + s.replace('"', '""') + '"'


def plain_cell(value: Any) -> str:
    """
    CSV cell for numbers and flags. Booleans render JSON-style so the export
    matches what the search API returned.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def header_cell(name: str) -> str:
    if _NEEDS_QUOTING.search(name):
        return text_cell(name)
    return name
