"""Main REPL loop.

Reads lines with prompt_toolkit, runs them, and keeps the prompt and right
prompt fresh through two prompt engines. The engines compute on their own
workers; a watcher thread per engine invalidates the running application
whenever new content is published, so the prompt redraws without the user
pressing a key.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import FormattedText
from rich.console import Console
from rich.markup import escape

from .commands import QUIT, change_dir, handle_dot_command, run_command
from .defaults import ReplSettings
from .help import BUILTIN_HELP, DOT_HELP
from .hist_store import HistStore
from .history import StoreHistory
from .prompt import Prompt, PromptConfig
from .segments import cwd_prompt, vcs_rprompt

logger = logging.getLogger(__name__)

console = Console()


def run_repl(hist: HistStore, settings: ReplSettings | None = None) -> None:
    """Run the interactive REPL loop.

    Args:
        hist: History store for this session.
        settings: Prompt refresh settings; defaults apply when omitted.
    """
    settings = settings or ReplSettings()
    prompt, rprompt = build_prompts(settings)
    engines = (prompt, rprompt)

    history = StoreHistory(hist)
    session: PromptSession = PromptSession(
        message=_render(prompt),
        rprompt=_render(rprompt),
        history=history,
        completer=_DotAwareCompleter(_command_words()),
    )

    # Opportunistic refresh on every edit; the eagerness gate decides.
    session.default_buffer.on_text_changed += lambda _buf: trigger_all(engines)

    for engine in engines:
        _start_watcher(engine, session)

    def reload_history() -> None:
        nonlocal history
        history = swap_history(session, hist)

    try:
        while True:
            trigger_all(engines, force=True)

            # --- Read input ---
            try:
                line = session.prompt()
            except EOFError:
                # Ctrl-D: exit
                console.print("Goodbye")
                break
            except KeyboardInterrupt:
                # Ctrl-C: cancel current line
                continue

            err = history.pop_error()
            if err is not None:
                console.print(f"[red]History error:[/red] {escape(str(err))}")

            trimmed = line.strip()

            # --- Empty line ---
            if not trimmed:
                continue

            # --- Dot-commands ---
            if trimmed.startswith("."):
                result = handle_dot_command(
                    trimmed,
                    hist=hist,
                    settings=settings,
                    reload_history=reload_history,
                )
                if result is QUIT:
                    console.print("Goodbye")
                    break
                if isinstance(result, str):
                    console.print(result, highlight=False)
                # None means output was already printed (e.g., help)
                continue

            # --- Built-ins ---
            if trimmed == "cd" or trimmed.startswith("cd "):
                message = change_dir(trimmed[2:])
                if message:
                    console.print(message)
                continue

            # --- External commands ---
            try:
                status = run_command(trimmed)
            except OSError as exc:
                console.print(f"[red]Error:[/red] {escape(str(exc))}")
                continue
            if status:
                logger.debug("Command exited with status %d: %s", status, trimmed)

    finally:
        for engine in engines:
            engine.close()


def build_prompts(settings: ReplSettings) -> tuple[Prompt, Prompt]:
    """Create the prompt and right-prompt engines for ``settings``."""

    def stale_threshold() -> float:
        return settings.stale_threshold

    def eagerness() -> int:
        return settings.eagerness

    prompt = Prompt(PromptConfig(
        compute=cwd_prompt,
        stale_threshold=stale_threshold,
        eagerness=eagerness,
    ))
    rprompt = Prompt(PromptConfig(
        compute=vcs_rprompt,
        stale_threshold=stale_threshold,
        eagerness=eagerness,
    ))
    return prompt, rprompt


def swap_history(session: PromptSession, hist: HistStore) -> StoreHistory:
    """Point the session's line buffer at a fresh view of ``hist``.

    The buffer loads its history once per load task; resetting it drops the
    finished task so the next prompt loads the new adapter.
    """
    history = StoreHistory(hist)
    buffer = session.default_buffer
    buffer.history = history
    buffer.reset()
    return history


def trigger_all(engines: tuple[Prompt, ...], force: bool = False) -> None:
    for engine in engines:
        engine.trigger(force)


def _render(engine: Prompt) -> Callable[[], FormattedText]:
    """A prompt_toolkit message callable showing the engine's content."""

    def render() -> FormattedText:
        return engine.get().styled().to_formatted_text()

    return render


def _start_watcher(engine: Prompt, session: PromptSession) -> threading.Thread:
    """Redraw the prompt each time ``engine`` publishes new content."""

    def watch() -> None:
        for content in engine.iter_late_updates():
            logger.debug("Prompt update: %r (stale=%s)", str(content), content.is_stale)
            # No-op while no prompt is being shown.
            session.app.invalidate()

    thread = threading.Thread(target=watch, name="prompt-watcher", daemon=True)
    thread.start()
    return thread


def _command_words() -> list[str]:
    return [f".{cmd}" for cmd in DOT_HELP] + list(BUILTIN_HELP)


class _DotAwareCompleter(Completer):
    """Completer that treats '.' as part of the word being completed.

    Only the first word of the line is completed; arguments are left to the
    user.
    """

    def __init__(self, words: list[str]) -> None:
        self.words = [w.lower() for w in words]

    def get_completions(self, document: Document, complete_event):
        text = document.text_before_cursor
        if " " in text:
            return
        prefix = text.lower()

        for word in self.words:
            if word.startswith(prefix):
                yield Completion(word, start_position=-len(text))

