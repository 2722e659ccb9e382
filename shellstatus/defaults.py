"""Default settings for the prompt engine, history store and REPL.

Values here are the documented fallbacks; the click options in main.py
override them for a single run.
"""

import os
from dataclasses import dataclass

# --- Prompt engine ---

# Content shown before any computation has finished, and produced by a
# prompt engine configured without a compute callback.
UNKNOWN_PROMPT = "???> "

# Attribute applied to every segment of content that is being recomputed
# for longer than the stale threshold.
STALE_ATTR = "inverse"

# Eagerness levels consulted by unforced triggers. A trigger after the
# working directory changed needs CONTEXT_CHANGED_LEVEL; any other unforced
# trigger needs ALWAYS_LEVEL.
CONTEXT_CHANGED_LEVEL = 5
ALWAYS_LEVEL = 10

# Recompute on directory changes only.
DEFAULT_EAGERNESS = CONTEXT_CHANGED_LEVEL

# Seconds. Zero disables stale marking entirely.
DEFAULT_STALE_THRESHOLD = 0.0

# --- REPL ---

# Stale threshold used by the interactive session unless overridden.
REPL_STALE_THRESHOLD = 0.2

# Shared SQLite history database, used by every running session.
HISTORY_DB_PATH = os.path.expanduser("~/.shellstatus_history.db")

# Seconds allowed for a VCS query issued by the right prompt.
VCS_TIMEOUT = 2.0


@dataclass(slots=True)
class ReplSettings:
    """Prompt refresh settings for one interactive session.

    The prompt engines read these through callables on every trigger, so
    ``.prompt`` changes take effect without rebuilding them.
    """

    eagerness: int = DEFAULT_EAGERNESS
    stale_threshold: float = REPL_STALE_THRESHOLD
