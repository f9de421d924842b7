"""
Tests for the twodo command line.
"""

import json
import sys

import pytest

import twodo
from twodo.ids import ShortIdIndex
from twodo.tasks import TaskRef

SNAPSHOT = [
    {"id": "a", "content": "Water plants", "created_at": "2024-01-01"},
    {"id": "ab", "content": "Call mom [realtime:2024-12-20T14:00:00]", "created_at": "2024-01-02"},
    {"id": "zz", "content": "Done already", "created_at": "2024-01-03", "is_completed": True},
]


@pytest.fixture
def snapshot_path(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    return path


def run_main(monkeypatch, argv):
    monkeypatch.setattr(sys, "argv", ["twodo", *argv])
    with pytest.raises(SystemExit) as excinfo:
        twodo.main()
    return excinfo.value.code


@pytest.mark.unit
def test_ids_minimal_lists_open_tasks(monkeypatch, capsys, snapshot_path):
    """
    List open tasks with their short codes.

    Parameters
    ----------
    monkeypatch : pytest.MonkeyPatch
        Fixture for patching argv.
    capsys : pytest.CaptureFixture[str]
        Fixture to capture stdout and stderr.
    snapshot_path : pathlib.Path
        Snapshot JSON file.
    """
    code = run_main(
        monkeypatch,
        ["ids", str(snapshot_path), "--format", "minimal", "--no-colors"],
    )

    assert code == 0
    assert capsys.readouterr().out.splitlines() == [
        "2p  Water plants",
        "2e9  Call mom",
    ]


@pytest.mark.unit
def test_ids_json_includes_real_time(monkeypatch, capsys, snapshot_path):
    """JSON output exposes ids, cleaned content and real times."""
    code = run_main(
        monkeypatch,
        ["ids", str(snapshot_path), "--format", "json", "--completed"],
    )

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [item["short_id"] for item in payload] == ["2p", "2e9", "30g"]
    assert payload[1]["content"] == "Call mom"
    assert payload[1]["real_time"] == "2024-12-20T14:00:00"


@pytest.mark.unit
def test_ids_uses_configured_format(monkeypatch, capsys, snapshot_path, tmp_path):
    """The default output format comes from settings."""
    (tmp_path / "config.toml").write_text(
        'colors = false\noutput_format = "minimal"\n',
        encoding="utf-8",
    )
    code = run_main(monkeypatch, ["ids", str(snapshot_path)])

    assert code == 0
    assert capsys.readouterr().out.splitlines()[0] == "2p  Water plants"


@pytest.mark.unit
def test_ids_reports_unreadable_snapshot(monkeypatch, capsys, tmp_path):
    """Missing snapshots exit non-zero with a twodo-prefixed message."""
    code = run_main(monkeypatch, ["ids", str(tmp_path / "missing.json")])

    assert code == 1
    assert capsys.readouterr().err.startswith("twodo: unable to read snapshot")


@pytest.mark.unit
def test_ids_keeps_out_of_range_real_time(monkeypatch, capsys, tmp_path):
    """Real times at the edge of the date range are listed verbatim."""
    path = tmp_path / "edge.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "a",
                    "content": "x [realtime:0001-01-01T00:00:00+05:00]",
                    "created_at": "1",
                    "due": "9999-12-31T23:00:00-05:00",
                }
            ]
        ),
        encoding="utf-8",
    )
    code = run_main(monkeypatch, ["ids", str(path), "--format", "table", "--no-colors"])

    assert code == 0
    row = capsys.readouterr().out.splitlines()[-1]
    assert row.startswith("2p  x")
    assert "9999-12-31T23:00:00-05:00" in row
    assert row.endswith("0001-01-01T00:00:00+05:00")


@pytest.mark.unit
def test_format_task_lines_table():
    """Table output aligns columns and leaves codes uncolored when asked."""
    index = ShortIdIndex.build(
        [
            TaskRef(id="a", content="Water plants", created_at="1"),
            TaskRef(id="ab", content="Call", created_at="2", due="2024-12-20"),
        ]
    )
    lines = twodo.format_task_lines(index, "table", use_colors=False)

    assert lines == [
        "Tasks (2 items)",
        "ID   Task          Due         Real time",
        "---  ------------  ----------  ---------",
        "2p   Water plants",
        "2e9  Call          2024-12-20",
    ]


@pytest.mark.unit
def test_format_task_lines_empty_and_invalid():
    """Empty indexes say so; unknown formats raise ValueError."""
    assert twodo.format_task_lines(ShortIdIndex(), "minimal") == ["No tasks found"]
    with pytest.raises(ValueError):
        twodo.format_task_lines(ShortIdIndex(), "yaml")


@pytest.mark.unit
def test_resolve_batch_reports_each_failure(monkeypatch, capsys, snapshot_path):
    """Resolve every code against one index and report failures separately."""
    code = run_main(
        monkeypatch,
        ["resolve", "2P", "q", "2", "--snapshot", str(snapshot_path)],
    )

    captured = capsys.readouterr()
    assert code == 1
    assert captured.out.splitlines() == ["2P -> a"]
    assert "twodo: No task found matching 'q'" in captured.err
    assert "twodo: Ambiguous ID '2' matches multiple tasks:" in captured.err
    assert 'twodo:     2e9 - "Call mom"' in captured.err


@pytest.mark.unit
def test_resolve_success_exits_zero(monkeypatch, capsys, snapshot_path):
    """A fully successful batch exits with status 0."""
    code = run_main(monkeypatch, ["resolve", "2e", "2p", "-s", str(snapshot_path)])

    assert code == 0
    assert capsys.readouterr().out.splitlines() == ["2e -> ab", "2p -> a"]


@pytest.mark.unit
def test_due_with_offset(monkeypatch, capsys):
    """Offsets print the adjusted due, tagged content and alert wording."""
    code = run_main(
        monkeypatch,
        ["due", "2024-12-20T14:00:00", "--offset", "-10", "--content", "Call mom"],
    )

    assert code == 0
    assert capsys.readouterr().out.splitlines() == [
        "Due: 2024-12-20 13:50",
        "Content: Call mom [realtime:2024-12-20T14:00:00]",
        "Real time: 2024-12-20T14:00:00",
        "Alert: 10 minutes before due time",
    ]


@pytest.mark.unit
def test_due_zero_offset_alerts_at_due_time(capsys):
    """A zero offset keeps the due time and alerts at it."""
    assert twodo.run_due("2024-12-20T14:00:00", offset=0, content="Call") == 0

    assert capsys.readouterr().out.splitlines() == [
        "Due: 2024-12-20 14:00",
        "Content: Call [realtime:2024-12-20T14:00:00]",
        "Real time: 2024-12-20T14:00:00",
        "Alert: at due time",
    ]


@pytest.mark.unit
def test_due_unparseable_offset_warns(capsys):
    """Unparseable expressions pass through and warn on stderr."""
    assert twodo.run_due("Thursday", offset=-10, content="Call") == 0

    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["Due: Thursday", "Content: Call"]
    assert "offset not applied" in captured.err


@pytest.mark.unit
def test_realtime_recomputes_alert(monkeypatch, capsys):
    """Stored content shows its real time and recomputed alert."""
    code = run_main(
        monkeypatch,
        ["realtime", "Call mom [realtime:2024-12-20T14:00:00]", "--offset", "-30"],
    )

    assert code == 0
    assert capsys.readouterr().out.splitlines() == [
        "Content: Call mom",
        "Real time: 2024-12-20T14:00:00",
        "Alert time: 2024-12-20 13:30",
    ]


@pytest.mark.unit
def test_config_set_and_show(monkeypatch, capsys, tmp_path):
    """Config changes persist to the settings file."""
    assert run_main(monkeypatch, ["config", "set", "output-format", "json"]) == 0
    capsys.readouterr()

    assert run_main(monkeypatch, ["config", "show"]) == 0
    out = capsys.readouterr().out
    assert 'output_format = "json"' in out
    assert str(tmp_path / "config.toml") in out


@pytest.mark.unit
def test_config_set_rejects_unknown_key(monkeypatch):
    """Unknown settings are usage errors."""
    assert run_main(monkeypatch, ["config", "set", "token", "abc"]) == 2


@pytest.mark.unit
def test_aliases_and_help(monkeypatch, capsys):
    """Help commands print their summaries."""
    assert run_main(monkeypatch, ["aliases"]) == 0
    assert capsys.readouterr().out.startswith("Available date aliases:")

    assert run_main(monkeypatch, ["help"]) == 0
    assert capsys.readouterr().out.startswith("twodo commands:")


@pytest.mark.unit
def test_doctest_examples():
    """
    Run doctest examples embedded in CLI helpers.

    Returns
    -------
    None
        This test asserts that doctest examples succeed.
    """
    import doctest

    results = doctest.testmod(twodo)
    assert results.failed == 0
