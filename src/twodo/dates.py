#!/usr/bin/env python3
"""
Expand symbolic date aliases (today, tm, next week, ...) into calendar dates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class AliasExpansion:
    """
    Outcome of expanding a due expression.

    Attributes
    ----------
    value : str
        Expanded date (YYYY-MM-DD), or the exact original input.
    expanded : bool
        True when the input was a recognized alias.
    """

    value: str
    expanded: bool


def _today(now: datetime) -> date:
    """Return the calendar day of ``now``."""
    return now.date()


def _tomorrow(now: datetime) -> date:
    """Return the day after ``now``."""
    return now.date() + timedelta(days=1)


def _next_monday(now: datetime) -> date:
    """Return the next Monday strictly after ``now`` (a Monday maps a week ahead)."""
    today = now.date()
    return today + timedelta(days=7 - today.weekday())


def _first_of_next_month(now: datetime) -> date:
    """Return the first day of the month after ``now``."""
    today = now.date()
    if today.month == 12:
        return date(today.year + 1, 1, 1)
    return date(today.year, today.month + 1, 1)


FULL_ALIASES = ("today", "tomorrow", "next week", "next month")
SHORT_ALIASES = ("t", "tm", "nw", "nm")
ALT_ALIASES = ("tod", "tom", "week", "month")

DATE_ALIASES: Dict[str, Callable[[datetime], date]] = {
    "today": _today,
    "tomorrow": _tomorrow,
    "next week": _next_monday,
    "next month": _first_of_next_month,
    "t": _today,
    "tm": _tomorrow,
    "nw": _next_monday,
    "nm": _first_of_next_month,
    "tod": _today,
    "tom": _tomorrow,
    "week": _next_monday,
    "month": _first_of_next_month,
}


def _normalize_alias(text: str) -> str:
    """Normalize alias text for lookup."""
    return text.strip().lower()


def expand(text: str, now: Optional[datetime] = None) -> AliasExpansion:
    """
    Expand a date alias relative to the current moment.

    Parameters
    ----------
    text : str
        Raw due expression.
    now : Optional[datetime], optional
        Override for the current time (default: local now).

    Returns
    -------
    AliasExpansion
        Expanded date, or the untouched input when it is not an alias.

    Examples
    --------
    >>> monday = datetime(2024, 6, 10, 8, 30)
    >>> expand("nw", now=monday)
    AliasExpansion(value='2024-06-17', expanded=True)
    >>> expand(" TM ", now=monday).value
    '2024-06-11'
    >>> expand("Dec 25", now=monday)
    AliasExpansion(value='Dec 25', expanded=False)
    """
    resolver = DATE_ALIASES.get(_normalize_alias(text))
    if resolver is None:
        return AliasExpansion(value=text, expanded=False)
    current = now or datetime.now()
    return AliasExpansion(
        value=resolver(current).strftime(DATE_FORMAT),
        expanded=True,
    )


def expand_date_alias(text: str, now: Optional[datetime] = None) -> str:
    """
    Return the expanded date string for an alias, or the input unchanged.

    Examples
    --------
    >>> expand_date_alias("month", now=datetime(2024, 12, 5))
    '2025-01-01'
    >>> expand_date_alias("2024-12-25")
    '2024-12-25'
    """
    return expand(text, now=now).value


def is_date_alias(text: str) -> bool:
    """
    Return True when the text is a recognized date alias.

    Examples
    --------
    >>> is_date_alias("Next Week")
    True
    >>> is_date_alias("friday")
    False
    """
    return _normalize_alias(text) in DATE_ALIASES


def get_all_aliases() -> List[str]:
    """
    Return every alias token, full forms first.

    Examples
    --------
    >>> get_all_aliases()[:4]
    ['today', 'tomorrow', 'next week', 'next month']
    >>> len(get_all_aliases())
    12
    """
    return [*FULL_ALIASES, *SHORT_ALIASES, *ALT_ALIASES]


ALIAS_EXAMPLES = (
    ('twodo due today', "Today"),
    ('twodo due t', "Today (short)"),
    ('twodo due tm', "Tomorrow (short)"),
    ('twodo due nw', "Next Monday"),
    ('twodo due nm --offset -30', "First of next month, alert 30 minutes early"),
)


def get_alias_help_lines() -> List[str]:
    """
    Build help text listing the date aliases.

    Returns
    -------
    List[str]
        Lines describing each alias group followed by examples.
    """
    lines = [
        "Available date aliases:",
        f"  Full forms:    {', '.join(FULL_ALIASES)}",
        f"  Short forms:   {', '.join(SHORT_ALIASES)}",
        f"  Alt forms:     {', '.join(ALT_ALIASES)}",
        "",
        "Examples:",
    ]
    width = max(len(command) for command, _ in ALIAS_EXAMPLES)
    for command, description in ALIAS_EXAMPLES:
        lines.append(f"  {command:<{width}}  # {description}")
    return lines


def format_date_for_display(
    value: Union[date, datetime, str],
    fmt: str = DATE_FORMAT,
) -> str:
    """
    Format a date-like value, leaving unparseable strings untouched.

    Parameters
    ----------
    value : Union[date, datetime, str]
        Date, datetime, or ISO 8601 string.
    fmt : str, optional
        strftime format (default: YYYY-MM-DD).

    Returns
    -------
    str
        Formatted date, or the original string when parsing fails.

    Examples
    --------
    >>> format_date_for_display("2024-12-25T10:15:00")
    '2024-12-25'
    >>> format_date_for_display(date(2024, 1, 2), "%d/%m")
    '02/01'
    >>> format_date_for_display("someday")
    'someday'
    """
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt)
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return value
    return parsed.strftime(fmt)
