"""Quiet-period batching of editor input.

Hosts feed every editor change to :meth:`Debouncer.submit` and commit
whatever :meth:`Debouncer.poll` returns, so a burst of keystrokes yields a
single commit (and a single history entry).  Nothing in the engine calls
this; it is a helper for the host's event loop.
"""

from __future__ import annotations

import time
from collections.abc import Callable


class Debouncer:
    """Hold the latest submitted text until input has been quiet long enough.

    Parameters
    ----------
    quiet_period:
        Seconds without a new submission before text is released.
    clock:
        Monotonic time source.  Injected by tests.
    """

    __slots__ = ("_clock", "_last_submit", "_pending", "quiet_period")

    def __init__(
        self,
        quiet_period: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if quiet_period < 0:
            raise ValueError(f"quiet_period must be >= 0, got {quiet_period}")
        self.quiet_period = quiet_period
        self._clock = clock
        self._pending: str | None = None
        self._last_submit = 0.0

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def submit(self, text: str) -> None:
        """Replace any pending text with *text* and restart the quiet period."""
        self._pending = text
        self._last_submit = self._clock()

    def poll(self) -> str | None:
        """Return the pending text once the quiet period has elapsed, else ``None``."""
        if self._pending is None:
            return None
        if self._clock() - self._last_submit < self.quiet_period:
            return None
        return self.flush()

    def flush(self) -> str | None:
        """Release pending text immediately (e.g. when the editor closes)."""
        text, self._pending = self._pending, None
        return text

    def cancel(self) -> None:
        """Drop pending text without committing it."""
        self._pending = None
