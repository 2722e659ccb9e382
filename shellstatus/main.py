"""Click CLI entry point for shellstatus.

Handles argument parsing, logging setup, history backend selection, and
handoff to the REPL.
"""

import logging
import sys

import click
from rich.console import Console

from . import __version__
from .defaults import DEFAULT_EAGERNESS, HISTORY_DB_PATH, REPL_STALE_THRESHOLD, ReplSettings
from .hist_store import HistStore
from .repl import run_repl
from .store import MemoryStore, SQLiteStore, Store, StoreError

console = Console()


@click.command()
@click.option(
    "--db",
    "db_path",
    default=HISTORY_DB_PATH,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="History database shared by all sessions.",
)
@click.option(
    "--no-db",
    is_flag=True,
    default=False,
    help="Keep history in memory only, for this session.",
)
@click.option(
    "--log",
    "log_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write a debug log to this file.",
)
@click.option(
    "--stale-threshold",
    default=REPL_STALE_THRESHOLD,
    show_default=True,
    type=click.FloatRange(min=0.0),
    help="Seconds before a slow prompt is shown as stale (0 disables).",
)
@click.option(
    "--eagerness",
    default=DEFAULT_EAGERNESS,
    show_default=True,
    type=int,
    help="Prompt refresh eagerness: 0 manual, 5 on directory change, 10 always.",
)
@click.version_option(version=__version__, prog_name="shellstatus")
def cli(
    db_path: str,
    no_db: bool,
    log_path: str | None,
    stale_threshold: float,
    eagerness: int,
) -> None:
    """Interactive shell with an asynchronous status prompt.

    The prompt and right prompt are recomputed in the background, and
    command history is shared with other running sessions through a
    SQLite database.
    """
    if log_path:
        _setup_logging(log_path)

    backend = _open_backend(db_path, no_db=no_db)
    try:
        hist = HistStore(backend)
    except StoreError as exc:
        console.print(f"[red]Cannot read history:[/red] {exc}")
        sys.exit(1)

    settings = ReplSettings(eagerness=eagerness, stale_threshold=stale_threshold)
    run_repl(hist, settings)


def _setup_logging(path: str) -> None:
    """Send DEBUG records from the package to ``path``."""
    try:
        handler = logging.FileHandler(path)
    except OSError as exc:
        console.print(f"[red]Cannot open log file:[/red] {exc}")
        return
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(threadName)s %(name)s %(levelname)s: %(message)s"
    ))
    pkg_logger = logging.getLogger("shellstatus")
    pkg_logger.setLevel(logging.DEBUG)
    pkg_logger.addHandler(handler)


def _open_backend(db_path: str, *, no_db: bool) -> Store:
    """Open the history backend, exiting on failure."""
    if no_db:
        return MemoryStore()
    try:
        return SQLiteStore(db_path)
    except StoreError as exc:
        console.print(f"[red]Cannot open history database:[/red] {exc}")
        console.print("[dim]Hint: use --no-db to run without shared history.[/dim]")
        sys.exit(1)
