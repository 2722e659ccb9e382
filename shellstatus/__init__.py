"""shellstatus: prompt and history core for an interactive shell.

The package keeps the shell's status line fresh without blocking input, and
shares command history between concurrently running shell sessions.

Architecture:
    PromptSession (prompt_toolkit, UI thread)
        |  trigger / get                 |  add_cmd / cursor / fast_forward
        v                                v
    Prompt engine --worker--> compute  HistStore --lock--> HybridStore
        |                                                    |
        | late updates (queue)                               v
        v                                              Store backend
    app.invalidate()                               (memory or SQLite)
"""

__version__ = "0.3.0"
