"""Asynchronous prompt engine.

A ``Prompt`` owns the content of one prompt (or right prompt). The REPL
calls ``trigger()`` whenever the prompt might be out of date; the engine
recomputes it on a background worker and publishes the result on the
``late_updates()`` queue. The UI thread only ever reads ``get()``, which
never waits for a computation.

Scheduling rules:
    - At most one computation runs at a time. Triggers that arrive while one
      is running collapse into a single follow-up computation.
    - Unforced triggers are gated by the configured eagerness: recompute when
      the working directory changed and eagerness >= 5, or unconditionally
      when eagerness >= 10.
    - If a computation takes longer than the stale threshold, the previous
      content is republished marked stale (rendered inverse) until the new
      content arrives.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .defaults import (
    ALWAYS_LEVEL,
    CONTEXT_CHANGED_LEVEL,
    DEFAULT_EAGERNESS,
    DEFAULT_STALE_THRESHOLD,
    UNKNOWN_PROMPT,
)
from .styled import Content, Text, plain

logger = logging.getLogger(__name__)

# Marks "no directory observed yet", so the first unforced trigger always
# counts as a context change.
_NO_CONTEXT = object()


@dataclass(frozen=True, slots=True)
class PromptConfig:
    """Policies for a prompt engine.

    Attributes:
        compute: Produces the prompt text. May block (it typically shells
            out). Defaults to the fixed unknown prompt.
        stale_threshold: Seconds a computation may run before the previous
            content is marked stale. Zero or negative disables marking.
            Defaults to DEFAULT_STALE_THRESHOLD.
        eagerness: How readily unforced triggers recompute.
            Defaults to DEFAULT_EAGERNESS.
    """

    compute: Callable[[], Text] | None = None
    stale_threshold: Callable[[], float] | None = None
    eagerness: Callable[[], int] | None = None

    def run_compute(self) -> Text:
        if self.compute is None:
            return plain(UNKNOWN_PROMPT)
        return self.compute()

    def threshold(self) -> float:
        if self.stale_threshold is None:
            return DEFAULT_STALE_THRESHOLD
        return self.stale_threshold() or 0.0

    def eagerness_level(self) -> int:
        if self.eagerness is None:
            return DEFAULT_EAGERNESS
        return self.eagerness()


def current_dir() -> str:
    """The working directory, or "" if it no longer exists."""
    try:
        return os.getcwd()
    except OSError:
        return ""


class Prompt:
    """Debounced, staleness-aware prompt recomputation.

    Usage::

        prompt = Prompt(PromptConfig(compute=cwd_prompt))
        prompt.trigger(force=True)
        content = prompt.late_updates().get(timeout=1)
        assert content == prompt.get()

    Args:
        config: Compute, stale threshold and eagerness policies.
        context: Returns the signal compared by unforced triggers. Defaults
            to the current working directory.
    """

    def __init__(
        self,
        config: PromptConfig | None = None,
        *,
        context: Callable[[], object] = current_dir,
    ) -> None:
        self._config = config or PromptConfig()
        self._context = context

        # Everything below is guarded by _lock.
        self._lock = threading.Lock()
        self._content = Content(plain(UNKNOWN_PROMPT))
        self._running = False
        self._pending = False
        self._generation = 0
        self._inflight: int | None = None
        self._overran = False
        self._last_context: object = _NO_CONTEXT
        self._worker: threading.Thread | None = None
        self._closed = False

        self._requests: queue.Queue[int | None] = queue.Queue()
        self._updates: queue.Queue[Content | None] = queue.Queue()

    # --- Public surface ---

    def trigger(self, force: bool = False) -> None:
        """Request a recomputation. Returns immediately."""
        with self._lock:
            if self._closed:
                return
            if not force and not self._should_update_locked():
                return
            if self._running:
                if not self._pending:
                    logger.debug("Computation in flight, queueing one more")
                self._pending = True
                return
            gen = self._start_locked()
            self._ensure_worker_locked()
            # Ordered ahead of any stop request close() enqueues.
            self._requests.put(gen)

    def get(self) -> Content:
        """The most recently published content."""
        with self._lock:
            return self._content

    def late_updates(self) -> queue.Queue[Content | None]:
        """The queue every publish is put on, in publish order.

        There is one queue per engine; it is meant for a single consumer.
        ``None`` marks the end of the stream after ``close()``.
        """
        return self._updates

    def iter_late_updates(self) -> Iterator[Content]:
        """Block on the updates queue, yielding content until ``close()``."""
        return iter(self._updates.get, None)

    def close(self) -> None:
        """Stop the worker once idle and end the updates stream.

        A computation already running is allowed to finish and publish;
        the end marker follows its result. Queued follow-ups are dropped.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._pending = False
            if self._worker is not None:
                self._requests.put(None)
            if self._running:
                # The worker ends the stream after its final publish.
                return
            self._updates.put(None)

    # --- Trigger gate ---

    def _should_update_locked(self) -> bool:
        ctx = self._context()
        changed = self._last_context is _NO_CONTEXT or ctx != self._last_context
        self._last_context = ctx
        required = CONTEXT_CHANGED_LEVEL if changed else ALWAYS_LEVEL
        return self._config.eagerness_level() >= required

    # --- Computation ---

    def _start_locked(self) -> int:
        self._generation += 1
        self._running = True
        self._inflight = self._generation
        self._overran = False
        return self._generation

    def _ensure_worker_locked(self) -> None:
        if self._worker is not None and self._worker.is_alive():
            return
        self._worker = threading.Thread(
            target=self._serve, name="prompt-compute", daemon=True
        )
        self._worker.start()

    def _serve(self) -> None:
        while True:
            gen = self._requests.get()
            if gen is None:
                with self._lock:
                    self._worker = None
                return
            while gen is not None:
                gen = self._compute_once(gen)

    def _compute_once(self, gen: int) -> int | None:
        """Run one computation; return the generation of the next one, if any."""
        threshold = self._config.threshold()
        timer = None
        if threshold > 0:
            timer = threading.Timer(threshold, self._mark_stale, args=(gen,))
            timer.daemon = True
            timer.start()

        logger.debug("Computing prompt (generation %d)", gen)
        try:
            text = self._config.run_compute()
        except Exception:
            logger.exception("Prompt compute failed (generation %d)", gen)
            with self._lock:
                self._inflight = None
                self._running = False
                self._pending = False
                self._worker = None
                if self._closed:
                    self._updates.put(None)
            raise
        finally:
            if timer is not None:
                timer.cancel()

        with self._lock:
            self._inflight = None
            if gen == self._generation:
                content = Content(text)
                if self._overran and self._pending:
                    # Another computation follows immediately; keep the
                    # prompt marked stale rather than flicker.
                    content = content.mark_stale()
                self._publish_locked(content)
            else:
                logger.debug("Discarding superseded prompt (generation %d)", gen)

            if self._pending:
                self._pending = False
                return self._start_locked()
            self._running = False
            if self._closed:
                self._updates.put(None)
            return None

    def _mark_stale(self, gen: int) -> None:
        with self._lock:
            if self._inflight != gen:
                return
            self._overran = True
            stale = self._content.mark_stale()
            if stale == self._content:
                return
            logger.debug("Prompt computation %d overran, marking stale", gen)
            self._publish_locked(stale)

    def _publish_locked(self, content: Content) -> None:
        self._content = content
        self._updates.put(content)
