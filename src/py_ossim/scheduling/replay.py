"""Tick-by-tick replay of scheduler results.

A ``TimelineSession`` walks the timelines of several results one tick
at a time, finishing one algorithm before moving to the next, the way
an animated CPU view would show them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_ossim.scheduling.algorithms import IDLE
from py_ossim.session import StepSession

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_ossim.scheduling.algorithms import SchedulerResult


@dataclass(frozen=True)
class TimelineTick:
    """What the CPU was doing at one tick of one algorithm's run."""

    algorithm: str
    tick: int
    label: str

    @property
    def idle(self) -> bool:
        """Return True if nothing ran on this tick."""
        return self.label == IDLE

    def __str__(self) -> str:
        """Format as ``[FCFS ...] t=3: P2``."""
        return f"[{self.algorithm}] t={self.tick}: {'IDLE' if self.idle else self.label}"


class TimelineSession(StepSession[TimelineTick]):
    """Step through every tick of several results, in order."""

    def __init__(self, results: Sequence[SchedulerResult]) -> None:
        """Flatten the timelines of *results* into one step sequence."""
        self._results = tuple(results)
        super().__init__(
            [
                TimelineTick(algorithm=r.name, tick=i, label=label)
                for r in self._results
                for i, label in enumerate(r.timeline)
            ]
        )

    @property
    def results(self) -> tuple[SchedulerResult, ...]:
        """Return the results being replayed."""
        return self._results

    @property
    def current(self) -> TimelineTick | None:
        """Return the most recently revealed tick, or None before the first."""
        visible = self.visible_steps
        return visible[-1] if visible else None
