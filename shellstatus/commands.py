"""Dot-commands and shell built-ins.

Dot-commands (.help, .history, .sync, .prompt, .quit) are handled by the
REPL itself. ``cd`` is a built-in because a child process cannot change the
REPL's directory. Everything else is run through the system shell.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable

from rich.markup import escape

from .defaults import ReplSettings
from .help import print_help_overview, print_help_topic
from .hist_store import HistStore
from .histutil import CursorError
from .store import StoreError

# Sentinel return value for the REPL loop
QUIT = object()


def handle_dot_command(
    line: str,
    *,
    hist: HistStore,
    settings: ReplSettings,
    reload_history: Callable[[], None],
) -> str | object | None:
    """Handle a dot-command (line starting with '.').

    Args:
        line: The full input line (e.g., ".history git").
        hist: The session's history store.
        settings: Prompt settings, changed in place by ``.prompt``.
        reload_history: Called after a successful ``.sync`` so the line
            editor picks up the new view.

    Returns:
        - A string (rich markup) to display to the user.
        - QUIT to signal the REPL should exit.
        - None for no output (e.g., help was printed directly).
    """
    stripped = line.strip()
    lower = stripped.lower()
    parts = stripped.split(None, 1)
    cmd = parts[0].lower() if parts else ""
    args = parts[1] if len(parts) > 1 else ""

    if lower == ".help":
        print_help_overview()
        return None

    if cmd == ".help":
        print_help_topic(args)
        return None

    if lower == ".quit":
        return QUIT

    if cmd == ".history":
        return _handle_history(hist, args)

    if lower == ".sync":
        return _handle_sync(hist, reload_history)

    if cmd == ".prompt":
        return _handle_prompt(settings, args)

    return f"[red]Unknown command: {escape(stripped)}[/red]"


def _handle_history(hist: HistStore, prefix: str) -> str:
    """List matching commands, oldest first, numbered by sequence."""
    cursor = hist.cursor(prefix)
    lines = []
    while True:
        try:
            cmd = cursor.prev()
        except CursorError:
            break
        lines.append(f"[dim]{cmd.seq:>5}[/dim]  {escape(cmd.text)}")
    if not lines:
        return "[dim]No matching commands[/dim]"
    return "\n".join(reversed(lines))


def _handle_sync(hist: HistStore, reload_history: Callable[[], None]) -> str:
    before = len(hist.all_cmds())
    try:
        hist.fast_forward()
    except StoreError as exc:
        return f"[red]Error:[/red] {escape(str(exc))}"
    reload_history()
    added = len(hist.all_cmds()) - before
    return f"History synced ({added} new command{'s' if added != 1 else ''})"


def _handle_prompt(settings: ReplSettings, args: str) -> str:
    """Handle .prompt [eagerness <n> | stale <seconds>]."""
    if not args:
        return (
            f"eagerness={settings.eagerness} "
            f"stale={settings.stale_threshold:g}s"
        )

    parts = args.split()
    if len(parts) != 2:
        return "[red]Usage: .prompt eagerness <n> | .prompt stale <seconds>[/red]"

    key, value = parts[0].lower(), parts[1]
    try:
        if key == "eagerness":
            settings.eagerness = int(value)
        elif key == "stale":
            seconds = float(value)
            if seconds < 0:
                raise ValueError(value)
            settings.stale_threshold = seconds
        else:
            return f"[red]Unknown prompt setting: {escape(key)}[/red]"
    except ValueError:
        return f"[red]Invalid value for {key}: {escape(value)}[/red]"

    return f"Prompt {key} set to {value}"


# --- Built-ins and external commands ---


def change_dir(args: str) -> str | None:
    """The ``cd`` built-in. Returns an error message, or None on success."""
    target = os.path.expanduser(args.strip() or "~")
    try:
        os.chdir(target)
    except OSError as exc:
        return f"[red]cd:[/red] {escape(exc.strerror or str(exc))}: {escape(target)}"
    return None


def run_command(line: str, runner=subprocess.run) -> int:
    """Run ``line`` through the system shell, attached to the terminal.

    Returns the exit status.
    """
    proc = runner(line, shell=True)
    return proc.returncode
