"""Help text for the REPL's dot-commands and built-ins."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()

# --- Dot-commands ---

DOT_HELP: dict[str, str] = {
    "help": (
        "Show help.\n"
        "  .help          — Overview of dot-commands and built-ins\n"
        "  .help <topic>  — Detailed help for one command"
    ),
    "history": (
        "List command history, oldest first.\n"
        "  .history            — Every command in this session's view\n"
        "  .history <prefix>   — Only commands starting with <prefix>"
    ),
    "sync": (
        "Pick up commands other sessions have saved since this one started.\n"
        "  Up-arrow history and .history include them afterwards."
    ),
    "prompt": (
        "Show or change prompt refresh settings for this session.\n"
        "  .prompt                   — Show eagerness and stale threshold\n"
        "  .prompt eagerness <n>     — 0 manual, 5 on directory change, 10 always\n"
        "  .prompt stale <seconds>   — Mark the prompt stale after this long (0 = off)"
    ),
    "quit": "Exit the shell.",
}

# --- Built-in commands ---

BUILTIN_HELP: dict[str, str] = {
    "cd": (
        "Change the working directory.\n"
        "  cd          — Home directory\n"
        "  cd <path>   — Given directory (~ is expanded)"
    ),
}


def print_help_overview() -> None:
    """Print the dot-command and built-in tables."""
    dot_table = Table(title="Dot-Commands", show_header=True, title_style="bold")
    dot_table.add_column("Command", style="cyan", no_wrap=True)
    dot_table.add_column("Description")

    for cmd, text in DOT_HELP.items():
        dot_table.add_row(f".{cmd}", text.split("\n")[0])

    console.print(dot_table)
    console.print()

    builtin_table = Table(title="Built-ins", show_header=True, title_style="bold")
    builtin_table.add_column("Command", style="cyan", no_wrap=True)
    builtin_table.add_column("Description")

    for cmd, text in BUILTIN_HELP.items():
        builtin_table.add_row(cmd, text.split("\n")[0])

    console.print(builtin_table)
    console.print("[dim]Anything else runs through the system shell.[/dim]")


def print_help_topic(topic: str) -> None:
    """Print detailed help for one command (with or without leading dot)."""
    clean = topic.strip().lstrip(".")

    if clean in DOT_HELP:
        console.print(Panel(
            DOT_HELP[clean],
            title=f".{clean}",
            title_align="left",
            border_style="cyan",
        ))
        return

    if clean in BUILTIN_HELP:
        console.print(Panel(
            BUILTIN_HELP[clean],
            title=clean,
            title_align="left",
            border_style="cyan",
        ))
        return

    console.print(f"[red]No help available for '{topic}'[/red]")
    console.print("[dim]Type .help for a list of available commands[/dim]")
