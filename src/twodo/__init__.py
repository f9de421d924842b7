#!/usr/bin/env python3
"""
Short task codes and alert offsets for remote task lists.
"""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .colors import colorize, get_legend_lines
from .config import (
    OUTPUT_FORMATS,
    format_settings_toml,
    get_config_path,
    load_settings,
    save_settings,
    update_setting,
)
from .dates import get_alias_help_lines
from .ids import PrefixResolver, ShortIdIndex
from .offset import (
    clean_content_for_display,
    describe_offset,
    extract_real_time,
    format_time_for_display,
    get_display_time,
)
from .tasks import SnapshotError, TaskRef, load_snapshot, prepare_due_and_content

TABLE_LABELS = ("ID", "Task", "Due", "Real time")


def _format_due(task: TaskRef, now: Optional[datetime] = None) -> str:
    """Format a task due value for the table."""
    if not task.due:
        return ""
    if "T" in task.due:
        return format_time_for_display(task.due, now=now)
    return task.due


def _format_real_time(task: TaskRef, now: Optional[datetime] = None) -> str:
    """Format a task real time tag for the table."""
    real_time = extract_real_time(task.content)
    if real_time is None:
        return ""
    return format_time_for_display(real_time, now=now)


def build_task_rows(
    index: ShortIdIndex,
    now: Optional[datetime] = None,
) -> List[Tuple[str, str, str, str]]:
    """
    Build (code, content, due, real time) rows in index order.

    Parameters
    ----------
    index : ShortIdIndex
        Index built for the current snapshot.
    now : Optional[datetime], optional
        Override for the current time (default: local now).

    Returns
    -------
    List[Tuple[str, str, str, str]]
        Display rows with content cleaned of real-time tags.

    Examples
    --------
    >>> index = ShortIdIndex.build([TaskRef(id="a", content="Call mom [realtime:2024-12-20T14:00:00]")])
    >>> build_task_rows(index, now=datetime(2024, 12, 20, 8, 0))
    [('2p', 'Call mom', '', 'Today 14:00')]
    """
    return [
        (
            code,
            clean_content_for_display(task.content),
            _format_due(task, now=now),
            _format_real_time(task, now=now),
        )
        for code, task in index.entries()
    ]


def format_task_lines(
    index: ShortIdIndex,
    output_format: str = "table",
    use_colors: bool = True,
    now: Optional[datetime] = None,
) -> List[str]:
    """
    Render the indexed tasks for display.

    Parameters
    ----------
    index : ShortIdIndex
        Index built for the current snapshot.
    output_format : str, optional
        One of table/minimal/json (default: table).
    use_colors : bool, optional
        Color short codes when True (default: True).
    now : Optional[datetime], optional
        Override for the current time (default: local now).

    Returns
    -------
    List[str]
        Output lines.

    Examples
    --------
    >>> index = ShortIdIndex.build([TaskRef(id="a", content="Pay rent", due="2024-07-01")])
    >>> format_task_lines(index, "minimal", use_colors=False)
    ['2p  Pay rent (due 2024-07-01)']
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"unknown output format: {output_format}")
    rows = build_task_rows(index, now=now)
    if output_format == "json":
        payload: List[Dict[str, Optional[str]]] = []
        for code, task in index.entries():
            payload.append(
                {
                    "short_id": code,
                    "id": task.id,
                    "content": clean_content_for_display(task.content),
                    "due": task.due,
                    "real_time": extract_real_time(task.content),
                }
            )
        return [json.dumps(payload, indent=2)]
    if not rows:
        return ["No tasks found"]
    if output_format == "minimal":
        lines = []
        for code, content, due, _real in rows:
            suffix = f" (due {due})" if due else ""
            lines.append(f"{colorize(code, use_colors)}  {content}{suffix}")
        return lines

    widths = [len(label) for label in TABLE_LABELS]
    for row in rows:
        for idx, value in enumerate(row):
            widths[idx] = max(widths[idx], len(value))
    lines = [
        f"Tasks ({len(rows)} items)",
        "  ".join(label.ljust(widths[idx]) for idx, label in enumerate(TABLE_LABELS)).rstrip(),
        "  ".join("-" * width for width in widths),
    ]
    for code, *rest in rows:
        cells = [colorize(code, use_colors) + " " * (widths[0] - len(code))]
        cells.extend(value.ljust(widths[idx + 1]) for idx, value in enumerate(rest))
        lines.append("  ".join(cells).rstrip())
    return lines


def run_ids(
    snapshot: Optional[Path] = None,
    *,
    include_completed: bool = False,
    output_format: Optional[str] = None,
    use_colors: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Print short codes for every task in a snapshot.

    Returns
    -------
    int
        Exit code.
    """
    settings = load_settings()
    try:
        tasks = load_snapshot(snapshot, include_completed=include_completed)
    except SnapshotError as exc:
        print(f"twodo: {exc}", file=sys.stderr)
        return 1
    index = ShortIdIndex.build(tasks)
    lines = format_task_lines(
        index,
        output_format or settings.output_format,
        settings.colors if use_colors is None else use_colors,
        now=now,
    )
    for line in lines:
        print(line)
    return 0


def run_resolve(
    codes: Sequence[str],
    snapshot: Optional[Path] = None,
    *,
    include_completed: bool = False,
) -> int:
    """
    Resolve typed codes against one index built from a snapshot.

    Every code is attempted; failures are reported on stderr after the
    successes.

    Returns
    -------
    int
        0 when every code resolved, otherwise 1.
    """
    try:
        tasks = load_snapshot(snapshot, include_completed=include_completed)
    except SnapshotError as exc:
        print(f"twodo: {exc}", file=sys.stderr)
        return 1
    index = ShortIdIndex.build(tasks)
    batch = PrefixResolver(index).resolve_many(codes)
    for typed, full_id in batch.resolved:
        print(f"{typed} -> {full_id}")
    for _typed, error in batch.failures:
        for line in error.describe():
            print(f"twodo: {line}", file=sys.stderr)
    return 0 if batch.ok else 1


def run_due(
    expression: str,
    *,
    offset: Optional[int] = None,
    content: str = "",
    now: Optional[datetime] = None,
) -> int:
    """
    Print the due string and content that would be sent to the task store.
    """
    update = prepare_due_and_content(content, expression, offset, now=now)
    if update.clear_due:
        print("Due: (cleared)")
    else:
        print(f"Due: {update.due_string}")
    print(f"Content: {update.content}")
    if offset is not None and update.real_time is not None:
        print(f"Real time: {update.real_time}")
        print(f"Alert: {describe_offset(offset)}")
    elif offset is not None:
        print(
            f"twodo: could not parse '{expression}'; offset not applied.",
            file=sys.stderr,
        )
    return 0


def run_realtime(content: str, *, offset: Optional[int] = None) -> int:
    """
    Show the display text and embedded real time of stored task content.
    """
    print(f"Content: {clean_content_for_display(content)}")
    real_time = extract_real_time(content)
    if real_time is None:
        print("Real time: (none)")
        return 0
    print(f"Real time: {real_time}")
    if offset is not None:
        print(f"Alert time: {get_display_time(real_time, offset)}")
    return 0


def build_app():
    """
    Build the Typer app lazily to keep fast-path imports light.

    Returns
    -------
    typer.Typer
        Configured Typer application for the twodo CLI.
    """
    import typer

    app = typer.Typer(help="Short task codes and alert offsets")

    @app.command("help")
    def help_cmd():
        """
        Print a brief reminder of twodo commands.
        """
        for line in get_twodo_help_lines():
            print(line)

    @app.command("ids")
    def ids_cmd(
        snapshot: Optional[Path] = typer.Argument(
            None,
            help="Task snapshot JSON (default: stdin).",
        ),
        completed: bool = typer.Option(
            False,
            "--completed",
            help="Include completed tasks.",
        ),
        output_format: Optional[str] = typer.Option(
            None,
            "--format",
            "-f",
            help="Output format (table, minimal, json).",
        ),
        colors: Optional[bool] = typer.Option(
            None,
            "--colors/--no-colors",
            help="Color short codes (default: from config).",
        ),
    ):
        try:
            exit_code = run_ids(
                snapshot,
                include_completed=completed,
                output_format=output_format,
                use_colors=colors,
            )
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        raise typer.Exit(code=exit_code)

    @app.command("resolve")
    def resolve_cmd(
        codes: List[str] = typer.Argument(..., help="Short codes or prefixes."),
        snapshot: Optional[Path] = typer.Option(
            None,
            "--snapshot",
            "-s",
            help="Task snapshot JSON (default: stdin).",
        ),
        completed: bool = typer.Option(
            False,
            "--completed",
            help="Resolve against completed tasks too.",
        ),
    ):
        exit_code = run_resolve(codes, snapshot, include_completed=completed)
        raise typer.Exit(code=exit_code)

    @app.command("due")
    def due_cmd(
        expression: str = typer.Argument(..., help="Due expression or date alias."),
        offset: Optional[int] = typer.Option(
            None,
            "--offset",
            "-o",
            help="Alert offset in minutes (negative for before).",
        ),
        content: str = typer.Option("", "--content", "-t", help="Task content."),
    ):
        raise typer.Exit(code=run_due(expression, offset=offset, content=content))

    @app.command("realtime")
    def realtime_cmd(
        content: str = typer.Argument(..., help="Stored task content."),
        offset: Optional[int] = typer.Option(
            None,
            "--offset",
            "-o",
            help="Recompute the alert time for this offset.",
        ),
    ):
        raise typer.Exit(code=run_realtime(content, offset=offset))

    @app.command("aliases")
    def aliases_cmd():
        for line in get_alias_help_lines():
            print(line)

    @app.command("legend")
    def legend_cmd(
        colors: Optional[bool] = typer.Option(
            None,
            "--colors/--no-colors",
            help="Color the legend (default: from config).",
        ),
    ):
        use_colors = load_settings().colors if colors is None else colors
        for line in get_legend_lines(use_colors):
            print(line)

    config_app = typer.Typer(help="Show or change settings.")

    @config_app.command("show")
    def config_show_cmd():
        print(f"# {get_config_path()}")
        print(format_settings_toml(load_settings()), end="")

    @config_app.command("set")
    def config_set_cmd(
        key: str = typer.Argument(..., help="Setting name (colors, output-format)."),
        value: str = typer.Argument(..., help="New value."),
    ):
        try:
            settings = update_setting(load_settings(), key, value)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        path = save_settings(settings)
        print(f"twodo: saved settings to {path}")

    app.add_typer(config_app, name="config")

    return app


TWODO_HELP_HEADER = "twodo commands:"
TWODO_HELP_FOOTER = "Use twodo COMMAND --help for options."
TWODO_HELP_ENTRIES: Tuple[Tuple[str, str], ...] = (
    ("ids", "List tasks from a snapshot with short codes."),
    ("resolve", "Resolve short codes or prefixes to task ids."),
    ("due", "Expand a due expression and apply an alert offset."),
    ("realtime", "Show the real time embedded in task content."),
    ("aliases", "List date aliases."),
    ("legend", "Explain short code colors."),
    ("config", "Show or change settings."),
    ("help", "Show this help."),
)


def get_twodo_help_lines() -> List[str]:
    """
    Build the help text lines for the `twodo help` command.

    Examples
    --------
    >>> lines = get_twodo_help_lines()
    >>> lines[0]
    'twodo commands:'
    >>> any(line.strip().startswith("resolve") for line in lines)
    True
    """
    max_width = max(len(command) for command, _ in TWODO_HELP_ENTRIES)
    sorted_entries = sorted(TWODO_HELP_ENTRIES, key=lambda entry: entry[0])
    lines = [TWODO_HELP_HEADER]
    for command, description in sorted_entries:
        lines.append(f"  {command:<{max_width}}  {description}")
    lines.append(TWODO_HELP_FOOTER)
    return lines


def main():
    """
    Entry point for the twodo command.
    """
    app = build_app()
    app(prog_name="twodo")


if __name__ == "__main__":
    main()
