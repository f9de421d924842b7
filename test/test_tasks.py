#!/usr/bin/env python3
"""Unit tests for task snapshots and update payloads."""

from __future__ import annotations

import io
import json
from datetime import datetime

import pytest

import twodo.tasks as tasks
from twodo.tasks import (
    SnapshotError,
    TaskRef,
    TaskUpdate,
    load_snapshot,
    parse_task_json,
    prepare_due_and_content,
)

NOW = datetime(2024, 6, 10, 12, 0)
SNAPSHOT = [
    {
        "id": "7001",
        "content": "Call mom [realtime:2024-06-10T14:00:00]",
        "created_at": "2024-06-01T10:00:00Z",
        "is_completed": False,
        "due": {"date": "2024-06-10", "datetime": "2024-06-10T13:50:00", "string": "today"},
    },
    {
        "id": "7002",
        "content": "File taxes",
        "created_at": "2024-05-01T10:00:00Z",
        "is_completed": True,
    },
]


@pytest.mark.unit
def test_task_ref_from_json_reads_todoist_fields():
    """Build task references from remote payloads."""
    task = TaskRef.from_json(SNAPSHOT[0])
    assert task.id == "7001"
    assert task.due == "2024-06-10T13:50:00"
    assert task.created_at == "2024-06-01T10:00:00Z"
    assert task.raw["due"]["string"] == "today"


@pytest.mark.unit
@pytest.mark.parametrize(
    "due, expected",
    [
        (None, None),
        ({"string": "every monday"}, "every monday"),
        ({"date": "2024-06-10"}, "2024-06-10"),
        ({}, None),
        ("2024-06-10", "2024-06-10"),
    ],
)
def test_task_ref_due_variants(due, expected):
    """Prefer datetime, then date, then the raw due string."""
    assert TaskRef.from_json({"id": 1, "due": due}).due == expected


@pytest.mark.unit
def test_task_ref_requires_id():
    """Payloads without an id are rejected."""
    with pytest.raises(SnapshotError):
        TaskRef.from_json({"content": "orphan"})


@pytest.mark.unit
def test_parse_task_json_accepts_single_object():
    """A single object is wrapped into a list."""
    assert parse_task_json('{"id": "x"}') == [{"id": "x"}]


@pytest.mark.unit
def test_load_snapshot_filters_completed(tmp_path):
    """Completed tasks are dropped unless requested."""
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")

    assert [task.id for task in load_snapshot(path)] == ["7001"]
    assert [task.id for task in load_snapshot(path, include_completed=True)] == [
        "7001",
        "7002",
    ]


@pytest.mark.unit
def test_load_snapshot_reads_stream_for_dash():
    """A dash path reads line-delimited JSON from the stream."""
    stream = io.StringIO("\n".join(json.dumps(item) for item in SNAPSHOT))
    loaded = load_snapshot("-", stream=stream, include_completed=True)
    assert [task.id for task in loaded] == ["7001", "7002"]


@pytest.mark.unit
def test_load_snapshot_reads_stdin_by_default(monkeypatch):
    """Without a path the snapshot comes from stdin."""
    monkeypatch.setattr(tasks.sys, "stdin", io.StringIO(json.dumps(SNAPSHOT)))
    assert [task.id for task in load_snapshot()] == ["7001"]


@pytest.mark.unit
@pytest.mark.parametrize("text", ["{not json", "[1, 2]", '[{"content": "no id"}]'])
def test_load_snapshot_rejects_bad_input(text):
    """Malformed snapshots raise SnapshotError."""
    with pytest.raises(SnapshotError):
        load_snapshot(stream=io.StringIO(text))


@pytest.mark.unit
def test_load_snapshot_missing_file(tmp_path):
    """Unreadable files raise SnapshotError."""
    with pytest.raises(SnapshotError):
        load_snapshot(tmp_path / "missing.json")


@pytest.mark.unit
@pytest.mark.parametrize(
    "content, due, offset, expected",
    [
        ("Read", None, None, TaskUpdate(content="Read")),
        ("Read", None, -10, TaskUpdate(content="Read")),
        ("Read", "", None, TaskUpdate(content="Read", clear_due=True)),
        ("Read", "tm", None, TaskUpdate(content="Read", due_string="2024-06-11")),
        ("Read", "Friday 3pm", None, TaskUpdate(content="Read", due_string="Friday 3pm")),
        (
            "Call mom",
            "2024-12-20T14:00:00",
            -10,
            TaskUpdate(
                content="Call mom [realtime:2024-12-20T14:00:00]",
                due_string="2024-12-20 13:50",
                real_time="2024-12-20T14:00:00",
            ),
        ),
        (
            "Standup",
            "today",
            -15,
            TaskUpdate(
                content="Standup [realtime:2024-06-10T00:00:00]",
                due_string="2024-06-09 23:45",
                real_time="2024-06-10T00:00:00",
            ),
        ),
        (
            "Standup",
            "Thursday",
            -15,
            TaskUpdate(content="Standup", due_string="Thursday"),
        ),
        (
            "Standup",
            "2024-06-12T10:00:00",
            0,
            TaskUpdate(
                content="Standup [realtime:2024-06-12T10:00:00]",
                due_string="2024-06-12 10:00",
                real_time="2024-06-12T10:00:00",
            ),
        ),
    ],
)
def test_prepare_due_and_content(content, due, offset, expected):
    """Offsets send the adjusted time; otherwise aliases are expanded."""
    assert prepare_due_and_content(content, due, offset, now=NOW) == expected


@pytest.mark.unit
def test_doctest_examples():
    """
    Run doctest examples embedded in task helpers.

    Returns
    -------
    None
        This test asserts that doctest examples succeed.
    """
    import doctest

    results = doctest.testmod(tasks)
    assert results.failed == 0
