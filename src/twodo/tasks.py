#!/usr/bin/env python3
"""
Task snapshot parsing and remote update payload helpers.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

from .dates import expand_date_alias
from .offset import apply_offset


class SnapshotError(RuntimeError):
    """Raised when a task snapshot cannot be read or parsed."""


@dataclass(frozen=True)
class TaskRef:
    """
    Minimal view of a remote task.

    Attributes
    ----------
    id : str
        Opaque long identifier assigned by the remote store.
    content : str
        Task text, possibly carrying a real-time tag.
    created_at : str
        Creation timestamp, used for ordering only.
    is_completed : bool
        Completion flag.
    due : Optional[str]
        Due datetime, date, or natural-language string, when present.
    raw : Dict[str, Any]
        Raw task payload.
    """

    id: str
    content: str = ""
    created_at: str = ""
    is_completed: bool = False
    due: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @staticmethod
    def from_json(payload: Dict[str, Any]) -> "TaskRef":
        """
        Build a TaskRef from a task JSON object.

        Parameters
        ----------
        payload : Dict[str, Any]
            Task dictionary with at least an ``id``.

        Returns
        -------
        TaskRef
            Parsed task.

        Raises
        ------
        SnapshotError
            If the payload has no id.

        Examples
        --------
        >>> task = TaskRef.from_json({"id": 8812, "content": "Pay rent",
        ...     "due": {"date": "2024-07-01", "string": "jul 1"}})
        >>> task.id, task.due
        ('8812', '2024-07-01')
        """
        if payload.get("id") in (None, ""):
            raise SnapshotError(f"task without id: {payload!r}")
        return TaskRef(
            id=str(payload["id"]),
            content=str(payload.get("content") or ""),
            created_at=str(payload.get("created_at") or ""),
            is_completed=bool(payload.get("is_completed", False)),
            due=_parse_due(payload.get("due")),
            raw=dict(payload),
        )


def _parse_due(value: Any) -> Optional[str]:
    """Extract a due string from a plain value or a due object."""
    if not value:
        return None
    if isinstance(value, dict):
        for key in ("datetime", "date", "string"):
            if value.get(key):
                return str(value[key])
        return None
    return str(value)


def parse_task_json(text: str) -> List[Dict[str, Any]]:
    """
    Parse task JSON that may be an array, one object, or line-delimited JSON.

    Examples
    --------
    >>> parse_task_json('[{"id": "a"}, {"id": "b"}]')
    [{'id': 'a'}, {'id': 'b'}]
    >>> parse_task_json('{"id": "a"}\\n{"id": "b"}\\n')
    [{'id': 'a'}, {'id': 'b'}]
    """
    try:
        data = json.loads(text)
        return data if isinstance(data, list) else [data]
    except json.JSONDecodeError:
        tasks: List[Dict[str, Any]] = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            tasks.append(json.loads(line))
        return tasks


def load_snapshot(
    path: Optional[Path] = None,
    *,
    stream: Optional[TextIO] = None,
    include_completed: bool = False,
) -> List[TaskRef]:
    """
    Load a task snapshot from a JSON file or stream.

    Parameters
    ----------
    path : Optional[Path], optional
        Snapshot path; ``None`` or ``-`` reads from ``stream``.
    stream : Optional[TextIO], optional
        Stream to read when no path is given (default: stdin).
    include_completed : bool, optional
        Keep completed tasks when True (default: False).

    Returns
    -------
    List[TaskRef]
        Tasks in snapshot order.

    Raises
    ------
    SnapshotError
        If the snapshot cannot be read or parsed.
    """
    try:
        if path is None or str(path) == "-":
            text = (stream or sys.stdin).read()
        else:
            text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise SnapshotError(f"unable to read snapshot: {exc}") from exc
    try:
        payloads = parse_task_json(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"unable to parse snapshot: {exc}") from exc
    tasks: List[TaskRef] = []
    for payload in payloads:
        if not isinstance(payload, dict):
            raise SnapshotError(f"unexpected snapshot entry: {payload!r}")
        task = TaskRef.from_json(payload)
        if task.is_completed and not include_completed:
            continue
        tasks.append(task)
    return tasks


@dataclass(frozen=True)
class TaskUpdate:
    """
    Due string and content to send to the remote store.

    Attributes
    ----------
    content : str
        Task content, tagged with the real time when an offset applied.
    due_string : Optional[str]
        Due string for the remote store; None leaves or clears the due date.
    clear_due : bool
        True when the caller asked to remove the due date.
    real_time : Optional[str]
        Embedded real time when an offset applied.
    """

    content: str
    due_string: Optional[str] = None
    clear_due: bool = False
    real_time: Optional[str] = None


def prepare_due_and_content(
    content: str,
    due: Optional[str] = None,
    offset: Optional[int] = None,
    now: Optional[datetime] = None,
) -> TaskUpdate:
    """
    Compute the due string and content for a create or update call.

    Parameters
    ----------
    content : str
        Task content as entered by the user.
    due : Optional[str], optional
        Due expression; an empty string clears the due date.
    offset : Optional[int], optional
        Alert offset in minutes; None when no offset was requested.
    now : Optional[datetime], optional
        Override for the current time (default: local now).

    Returns
    -------
    TaskUpdate
        Payload pieces for the remote store.

    Examples
    --------
    >>> prepare_due_and_content("Call mom", "2024-12-20T14:00:00", -10).due_string
    '2024-12-20 13:50'
    >>> prepare_due_and_content("Read", "Dec 25")
    TaskUpdate(content='Read', due_string='Dec 25', clear_due=False, real_time=None)
    >>> prepare_due_and_content("Read", "").clear_due
    True
    """
    if due is None:
        return TaskUpdate(content=content)
    if due == "":
        return TaskUpdate(content=content, clear_due=True)
    expanded = expand_date_alias(due, now=now)
    if offset is None:
        return TaskUpdate(content=content, due_string=expanded)
    result = apply_offset(expanded, offset, content, now=now)
    if not result.applied:
        return TaskUpdate(content=content, due_string=expanded)
    return TaskUpdate(
        content=result.content,
        due_string=result.adjusted_due,
        real_time=result.real_time,
    )
