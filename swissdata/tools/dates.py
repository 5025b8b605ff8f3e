"""Dotted ``DD.MM.YYYY`` dates as used throughout the FSO text tables."""

from __future__ import annotations

import re
from datetime import date

_DOTTED_RE = re.compile(r"([0-9]{2})\.([0-9]{2})\.([0-9]{4})")


def parse_dotted_date(raw: str) -> date:
    """Parse ``DD.MM.YYYY`` strictly.

    Two-digit day and month and four-digit year are required, so that
    :func:`format_dotted_date` gives back the exact input.

    Raises:
        ValueError: On any other shape or an impossible calendar date.
    """
    match = _DOTTED_RE.fullmatch(raw)
    if match is None:
        msg = f"expected date as DD.MM.YYYY, got {raw!r}"
        raise ValueError(msg)
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        msg = f"invalid calendar date {raw!r}: {exc}"
        raise ValueError(msg) from exc


def format_dotted_date(value: date) -> str:
    """Render a date as ``DD.MM.YYYY`` (zero padded, year included)."""
    return f"{value.day:02d}.{value.month:02d}.{value.year:04d}"
