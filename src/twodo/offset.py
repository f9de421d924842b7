#!/usr/bin/env python3
"""
Alert offsets that keep a task's real due time embedded in its content.

The remote store only knows a single due time. When an alert offset is
requested the store receives the adjusted time, and the real time travels
inside the task text as a ``[realtime:...]`` tag.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

REAL_TIME_PATTERN = re.compile(r"\[realtime:([^\]]+)\]")
ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
REAL_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
DUE_FORMAT = "%Y-%m-%d %H:%M"
DEFAULT_ANCHOR_HOUR = 9


@dataclass(frozen=True)
class OffsetResult:
    """
    Outcome of applying an alert offset.

    Attributes
    ----------
    adjusted_due : str
        Due string for the remote store (YYYY-MM-DD HH:MM), or the original
        due expression when nothing was applied.
    content : str
        Task content carrying the real-time tag.
    real_time : str
        Real time (YYYY-MM-DDTHH:MM:SS), or the original due expression when
        nothing was applied.
    applied : bool
        False when the due expression could not be parsed.
    """

    adjusted_due: str
    content: str
    real_time: str
    applied: bool = True


def _localize(value: datetime) -> datetime:
    """
    Convert aware datetimes to naive local wall-clock time.

    Raises
    ------
    OverflowError
        If the conversion leaves the supported date range.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _anchor(day: datetime) -> datetime:
    """Move a datetime to the default anchor hour."""
    return day.replace(hour=DEFAULT_ANCHOR_HOUR, minute=0, second=0, microsecond=0)


def parse_real_time(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp into local wall-clock time.

    Raises
    ------
    ValueError
        If the value is not ISO 8601.

    Examples
    --------
    >>> parse_real_time("2024-12-20T14:00:00")
    datetime.datetime(2024, 12, 20, 14, 0)
    >>> parse_real_time("2024-12-20")
    datetime.datetime(2024, 12, 20, 0, 0)
    """
    return _localize(datetime.fromisoformat(value.strip()))


def resolve_real_time(due_expression: str, now: Optional[datetime] = None) -> datetime:
    """
    Resolve a due expression to the real (pre-offset) datetime.

    Parameters
    ----------
    due_expression : str
        Due expression, already alias-expanded.
    now : Optional[datetime], optional
        Override for the current time (default: local now).

    Returns
    -------
    datetime
        Real due datetime. Expressions without a recognizable date fall back
        to today at 09:00.

    Raises
    ------
    ValueError
        If the expression looks like ISO 8601 but does not parse.

    Examples
    --------
    >>> now = datetime(2024, 6, 10, 17, 42)
    >>> resolve_real_time("tomorrow", now=now)
    datetime.datetime(2024, 6, 11, 9, 0)
    >>> resolve_real_time("2024-12-20T14:00:00", now=now)
    datetime.datetime(2024, 12, 20, 14, 0)
    >>> resolve_real_time("after lunch", now=now)
    datetime.datetime(2024, 6, 10, 9, 0)
    """
    current = now or datetime.now()
    lowered = due_expression.lower()
    if lowered == "today":
        return _anchor(current)
    if lowered == "tomorrow":
        return _anchor(current + timedelta(days=1))
    if "T" in due_expression or ISO_DATE_PATTERN.search(due_expression):
        return parse_real_time(due_expression)
    return _anchor(current)


def apply_offset(
    due_expression: str,
    offset_minutes: int,
    content: str,
    now: Optional[datetime] = None,
) -> OffsetResult:
    """
    Shift a due time by an alert offset and embed the real time in content.

    Parameters
    ----------
    due_expression : str
        Due expression, already alias-expanded.
    offset_minutes : int
        Signed minutes; negative alerts before the real time.
    content : str
        Current task content, possibly already tagged.
    now : Optional[datetime], optional
        Override for the current time (default: local now).

    Returns
    -------
    OffsetResult
        Adjusted due string, tagged content, and real time. When the due
        expression cannot be parsed the inputs come back unchanged with
        ``applied=False``.

    Examples
    --------
    >>> result = apply_offset("2024-12-20T14:00:00", -10, "Call mom")
    >>> result.adjusted_due
    '2024-12-20 13:50'
    >>> result.content
    'Call mom [realtime:2024-12-20T14:00:00]'
    >>> apply_offset("Thursday", -10, "Call mom").applied
    False
    """
    try:
        real = resolve_real_time(due_expression, now=now)
        adjusted = real + timedelta(minutes=offset_minutes)
    except (ValueError, OverflowError):
        return OffsetResult(
            adjusted_due=due_expression,
            content=content,
            real_time=due_expression,
            applied=False,
        )

    real_time = real.strftime(REAL_TIME_FORMAT)
    return OffsetResult(
        adjusted_due=adjusted.strftime(DUE_FORMAT),
        content=embed_real_time(content, real_time),
        real_time=real_time,
    )


def format_real_time_tag(real_time: str) -> str:
    """
    Examples
    --------
    >>> format_real_time_tag("2024-12-20T14:00:00")
    '[realtime:2024-12-20T14:00:00]'
    """
    return f"[realtime:{real_time}]"


def embed_real_time(content: str, real_time: str) -> str:
    """
    Replace any existing real-time tag with a tag for ``real_time``.

    Examples
    --------
    >>> embed_real_time("Call mom [realtime:2024-12-19T08:00:00]", "2024-12-20T14:00:00")
    'Call mom [realtime:2024-12-20T14:00:00]'
    """
    return f"{clean_content_for_display(content)} {format_real_time_tag(real_time)}"


def extract_real_time(content: str) -> Optional[str]:
    """
    Return the embedded real time, or None when the content has no tag.

    Examples
    --------
    >>> extract_real_time("Call mom [realtime:2024-12-20T14:00:00]")
    '2024-12-20T14:00:00'
    >>> extract_real_time("Call mom") is None
    True
    """
    match = REAL_TIME_PATTERN.search(content)
    return match.group(1) if match else None


def clean_content_for_display(content: str) -> str:
    """
    Strip the real-time tag and surrounding whitespace for display.

    Examples
    --------
    >>> clean_content_for_display("Call mom [realtime:2024-12-20T14:00:00]")
    'Call mom'
    >>> clean_content_for_display("  plain  ")
    'plain'
    """
    return REAL_TIME_PATTERN.sub("", content).strip()


def has_real_time(content: str) -> bool:
    """
    Return True when the content carries a real time tag.

    Examples
    --------
    >>> has_real_time("Call mom [realtime:2024-12-20T14:00:00]")
    True
    >>> has_real_time("Call mom")
    False
    """
    return REAL_TIME_PATTERN.search(content) is not None


def get_display_time(real_time: str, offset_minutes: int) -> str:
    """
    Recompute the alert time for a stored real time and offset.

    Examples
    --------
    >>> get_display_time("2024-12-20T14:00:00", -90)
    '2024-12-20 12:30'
    >>> get_display_time("not a time", 5)
    'not a time'
    """
    try:
        adjusted = parse_real_time(real_time) + timedelta(minutes=offset_minutes)
    except (ValueError, OverflowError):
        return real_time
    return adjusted.strftime(DUE_FORMAT)


def format_time_for_display(value: str, now: Optional[datetime] = None) -> str:
    """
    Format a timestamp relative to today for compact display.

    Parameters
    ----------
    value : str
        ISO 8601 timestamp.
    now : Optional[datetime], optional
        Override for the current time (default: local now).

    Returns
    -------
    str
        ``Today HH:MM``, ``Tomorrow HH:MM`` or ``Mon DD HH:MM``; the input
        unchanged when it does not parse.

    Examples
    --------
    >>> now = datetime(2024, 12, 20, 8, 0)
    >>> format_time_for_display("2024-12-20T14:00:00", now=now)
    'Today 14:00'
    >>> format_time_for_display("2024-12-21T07:05:00", now=now)
    'Tomorrow 07:05'
    >>> format_time_for_display("2025-01-03T18:30:00", now=now)
    'Jan 03 18:30'
    """
    try:
        moment = parse_real_time(value)
    except (ValueError, OverflowError):
        return value
    today = (now or datetime.now()).date()
    clock = moment.strftime("%H:%M")
    if moment.date() == today:
        return f"Today {clock}"
    if moment.date() == today + timedelta(days=1):
        return f"Tomorrow {clock}"
    return moment.strftime("%b %d %H:%M")


def describe_offset(offset_minutes: int) -> str:
    """
    Describe an alert offset relative to the due time.

    Examples
    --------
    >>> describe_offset(-10)
    '10 minutes before due time'
    >>> describe_offset(15)
    '15 minutes after due time'
    >>> describe_offset(0)
    'at due time'
    """
    if offset_minutes == 0:
        return "at due time"
    if offset_minutes > 0:
        return f"{offset_minutes} minutes after due time"
    return f"{abs(offset_minutes)} minutes before due time"
