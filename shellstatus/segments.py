"""Default prompt and right-prompt content for the REPL.

These are the ``compute`` callbacks handed to the prompt engines. They may
block (the right prompt runs git) and are only ever called on an engine's
worker thread.
"""

import logging
import os
import shutil
import subprocess

from .defaults import VCS_TIMEOUT
from .prompt import current_dir
from .styled import Text, join, make_text, plain

logger = logging.getLogger(__name__)


def abbreviate_home(path: str, home: str | None = None) -> str:
    """Replace a leading home directory with ``~``."""
    home = home if home is not None else os.path.expanduser("~")
    if home and (path == home or path.startswith(home + os.sep)):
        return "~" + path[len(home):]
    return path


def cwd_prompt() -> Text:
    """``~/src/project> `` with the directory in bold blue."""
    path = current_dir()
    if not path:
        return plain("?> ")
    return join(make_text(abbreviate_home(path), "bold", "blue"), plain("> "))


def git_branch(cwd: str | None = None, runner=subprocess.run) -> str | None:
    """Current git branch for ``cwd``, or None outside a repository.

    Args:
        cwd: Directory to query. Defaults to the working directory.
        runner: subprocess.run-compatible callable (for tests).
    """
    if shutil.which("git") is None:
        return None
    try:
        proc = runner(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=VCS_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        logger.debug("git query failed: %s", exc)
        return None
    if proc.returncode != 0:
        return None
    branch = proc.stdout.strip()
    return branch or None


def vcs_rprompt(runner=subprocess.run) -> Text:
    """The git branch in yellow, or empty text outside a repository."""
    branch = git_branch(runner=runner)
    if branch is None:
        return Text()
    return join(plain("("), make_text(branch, "yellow"), plain(")"))
