"""The simulated process model shared by every scheduling algorithm.

A process here is a CPU burst with an arrival time, not a program: the
scheduler only needs to know when it shows up, how many ticks it needs
and how important it is.  The bookkeeping fields (remaining, start,
finish, turnaround, waiting) are filled in by a single simulation run.

Schedulers never touch the caller's objects.  Each run works on fresh
copies (``Process.fresh``), so the same input list can be fed to every
algorithm and each result keeps its own final states.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

UNSET_START = -1


@dataclass
class Process:
    """A process to be scheduled.

    Attributes:
        name: Label shown in the timeline (e.g. "P1").
        arrival: Tick at which the process becomes ready.
        burst: Total CPU ticks the process needs.
        priority: Base priority; larger values are more important.

    """

    name: str
    arrival: int
    burst: int
    priority: int = 0
    remaining: int = field(init=False)
    dynamic_priority: int = field(init=False)
    start: int = field(init=False, default=UNSET_START)
    finish: int = field(init=False, default=0)
    turnaround: int = field(init=False, default=0)
    waiting: int = field(init=False, default=0)
    completed: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        """Validate timing fields and initialise the run state."""
        if self.arrival < 0:
            msg = f"Process {self.name}: arrival must not be negative, got {self.arrival}"
            raise ValueError(msg)
        if self.burst < 1:
            msg = f"Process {self.name}: burst must be at least 1, got {self.burst}"
            raise ValueError(msg)
        self.reset()

    def reset(self) -> None:
        """Restore the state a process has before any run."""
        self.remaining = self.burst
        self.dynamic_priority = self.priority
        self.start = UNSET_START
        self.finish = 0
        self.turnaround = 0
        self.waiting = 0
        self.completed = False

    def fresh(self) -> Process:
        """Return an independent, reset copy of this process."""
        return replace(self)

    def mark_started(self, time: int) -> None:
        """Record *time* as the first tick on the CPU, if not already set."""
        if self.start == UNSET_START:
            self.start = time

    def complete(self, time: int) -> None:
        """Mark the process finished at *time* and derive its metrics."""
        self.finish = time
        self.turnaround = self.finish - self.arrival
        self.waiting = self.turnaround - self.burst
        self.completed = True

    def arrived_by(self, time: int) -> bool:
        """Return True if the process has arrived at or before *time*."""
        return self.arrival <= time
