"""Step-through sessions over precomputed results.

Every "step-by-step" view in the simulator works the same way: compute
the whole answer once, then walk a cursor over it.  Stepping never
re-executes an algorithm incrementally, so resetting and stepping again
always shows exactly the same thing for the same inputs.

A session is an ordinary object owned by whoever asked for it (the
shell keeps one per view).  There is no module-level cursor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Sequence


T = TypeVar("T")


class StepSession(Generic[T]):
    """A cursor over an immutable sequence of steps.

    The cursor counts how many steps have been revealed.  It starts at 0,
    only moves forward via ``step()`` and saturates at ``total_steps``.
    """

    def __init__(self, steps: Sequence[T]) -> None:
        """Create a session over *steps* with the cursor at the start."""
        self._steps: tuple[T, ...] = tuple(steps)
        self._cursor = 0

    @property
    def cursor(self) -> int:
        """Return the number of steps revealed so far."""
        return self._cursor

    @property
    def total_steps(self) -> int:
        """Return the number of steps in the session."""
        return len(self._steps)

    @property
    def done(self) -> bool:
        """Return True when every step has been revealed."""
        return self._cursor >= self.total_steps

    @property
    def visible_steps(self) -> tuple[T, ...]:
        """Return the steps revealed so far, in order."""
        return self._steps[: self._cursor]

    def reset(self) -> None:
        """Move the cursor back to the start."""
        self._cursor = 0

    def step(self) -> T | None:
        """Reveal the next step and return it, or None if already done."""
        if self.done:
            return None
        item = self._steps[self._cursor]
        self._cursor += 1
        return item

    def run_to_completion(self) -> tuple[T, ...]:
        """Reveal every remaining step and return all steps."""
        self._cursor = self.total_steps
        return self._steps
