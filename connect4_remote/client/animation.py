"""
animation.py - Falling-disc animations driven by scheduler ticks

A DropAnimation moves one disc from row 0 down to its landing row, one row
per tick, drawing it into the client's view grid and erasing the cell above.
The AnimationQueue runs queued animations strictly one after another.
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional

import numpy as np

from connect4_remote.debug import debug
from connect4_remote.utils import Actor


@dataclass
class DropAnimation:
    """One disc on its way down; finished once current_row reaches target_row."""
    actor: Actor
    column: int
    target_row: int
    current_row: int = -1

    @property
    def done(self) -> bool:
        return self.current_row >= self.target_row

    def advance(self, view: np.ndarray):
        """Move the disc one row down in ``view``."""
        if self.done:
            return
        if self.current_row >= 0:
            view[self.current_row, self.column] = Actor.EMPTY.value
        self.current_row += 1
        view[self.current_row, self.column] = self.actor.value


class AnimationQueue:
    """
    Runs drop animations one at a time against a view grid.

    Args:
        view: The grid the animations draw into (owned by the caller)
    """

    def __init__(self, view: np.ndarray):
        self.view = view
        self.active: Optional[DropAnimation] = None
        self.pending: Deque[DropAnimation] = deque()
        self._on_idle: Optional[Callable[[], None]] = None

    @property
    def busy(self) -> bool:
        return self.active is not None or bool(self.pending)

    def enqueue(self, animation: DropAnimation):
        self.pending.append(animation)
        debug.trace(f"Queued {animation.actor.name} drop into column {animation.column}", "client")

    def when_idle(self, callback: Optional[Callable[[], None]]):
        """Call ``callback`` once, after the last queued animation finishes."""
        self._on_idle = callback
        if not self.busy:
            self._fire_idle()

    def tick(self) -> bool:
        """
        Advance the active animation by one row.

        Returns:
            True while animations remain in flight after this tick
        """
        if self.active is None:
            if not self.pending:
                return False
            self.active = self.pending.popleft()

        self.active.advance(self.view)
        if self.active.done:
            debug.trace(f"{self.active.actor.name} disc landed at "
                        f"({self.active.target_row}, {self.active.column})", "client")
            self.active = None
            if not self.pending:
                self._fire_idle()

        return self.busy

    def run_to_completion(self, max_ticks: int = 10_000) -> int:
        """Tick until idle; returns the number of ticks taken."""
        ticks = 0
        while self.busy and ticks < max_ticks:
            self.tick()
            ticks += 1
        return ticks

    def _fire_idle(self):
        callback, self._on_idle = self._on_idle, None
        if callback is not None:
            callback()
