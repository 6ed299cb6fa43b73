"""CPU scheduling algorithms — who gets the CPU on each tick.

Every algorithm replays a model clock one tick at a time and produces a
**timeline**: for each tick, the name of the process on the CPU or the
``IDLE`` marker.  Six algorithms ship:

- **FCFSPolicy** (First Come, First Served): run processes to completion
  in arrival order.  Simple, but a long job delays everyone behind it
  (convoy effect).
- **RoundRobinPolicy**: a FIFO ready queue where each process runs for
  at most one quantum before going to the back.  Fair, at the cost of
  more switches.
- **SPNPolicy** (Shortest Process Next): non-preemptive; whenever the
  CPU frees up, pick the ready process with the smallest burst.
- **SRTPolicy** (Shortest Remaining Time): preemptive SPN; every tick,
  run the ready process with the least work left.
- **HRRNPolicy** (Highest Response Ratio Next): non-preemptive; pick the
  largest ``1 + waited / burst``, so long waiters eventually win.
- **PriorityAgingPolicy**: preemptive priority where waiting processes
  earn a bonus every tick (aging) so low priorities cannot starve.
  Optional idle ticks model context-switch overhead.

Ties always go to the process met first in the input order.

Design: Strategy pattern
    Each algorithm is a policy class with a ``run`` method.  The
    ``Algorithm`` enum names them, and ``make_policy`` maps one to the
    other with an exhaustive ``match``, so adding an algorithm without a
    policy is caught by the type checker.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, assert_never

from py_ossim.config import RR_MIN_TICK_CAP, SimulationConfig
from py_ossim.logging import Logger, LogSource

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from py_ossim.scheduling.process import Process

_SOURCE = LogSource.SCHEDULER

# Timeline marker for a tick with nothing on the CPU.
IDLE = "idle"


class Algorithm(StrEnum):
    """The scheduling algorithms the simulator implements."""

    FCFS = "fcfs"
    ROUND_ROBIN = "rr"
    SPN = "spn"
    SRT = "srt"
    HRRN = "hrrn"
    PRIORITY = "priority"


@dataclass(frozen=True)
class AlgorithmInfo:
    """Textbook summary of an algorithm, for display."""

    name: str
    description: str
    complexity: str
    advantages: tuple[str, ...]
    disadvantages: tuple[str, ...]


ALGORITHM_INFO: dict[Algorithm, AlgorithmInfo] = {
    Algorithm.FCFS: AlgorithmInfo(
        name="FCFS (First Come First Serve)",
        description=(
            "Processes are executed in the order they arrive."
            " Simple but can cause convoy effect."
        ),
        complexity="O(n)",
        advantages=("Simple to implement", "No starvation", "Fair scheduling"),
        disadvantages=(
            "Poor average waiting time",
            "Convoy effect",
            "Not optimal for short processes",
        ),
    ),
    Algorithm.ROUND_ROBIN: AlgorithmInfo(
        name="Round Robin",
        description="Each process gets a fixed time slice (quantum). Preemptive scheduling.",
        complexity="O(n)",
        advantages=("Fair to all processes", "Good response time", "No starvation"),
        disadvantages=("Context switching overhead", "Performance depends on quantum size"),
    ),
    Algorithm.SPN: AlgorithmInfo(
        name="SPN (Shortest Process Next)",
        description="Processes with shortest burst time are executed first. Non-preemptive.",
        complexity="O(n²)",
        advantages=("Optimal average waiting time", "Minimal average turnaround time"),
        disadvantages=("Starvation of long processes", "Difficult to predict burst time"),
    ),
    Algorithm.SRT: AlgorithmInfo(
        name="SRT (Shortest Remaining Time)",
        description="Preemptive version of SPN. Process with shortest remaining time runs.",
        complexity="O(n²)",
        advantages=("Better than SPN", "Optimal for short processes"),
        disadvantages=(
            "Complex implementation",
            "Starvation possible",
            "Context switching overhead",
        ),
    ),
    Algorithm.HRRN: AlgorithmInfo(
        name="HRRN (Highest Response Ratio Next)",
        description=(
            "Scheduling based on response ratio = (waiting time + burst time) / burst time."
        ),
        complexity="O(n²)",
        advantages=("No starvation", "Considers both waiting and burst time"),
        disadvantages=("Complex calculation", "Not optimal for all cases"),
    ),
    Algorithm.PRIORITY: AlgorithmInfo(
        name="Priority (Preemptive + Aging)",
        description=(
            "Preemptive priority scheduling with dynamic aging to prevent starvation."
            " Optional context switch overhead included."
        ),
        complexity="O(n²) naive (select each tick)",
        advantages=(
            "Respects priorities",
            "Aging mitigates starvation",
            "Preemptive responsiveness",
        ),
        disadvantages=("Frequent preemptions", "Needs careful parameter tuning"),
    ),
}


@dataclass(frozen=True)
class Stats:
    """Aggregate metrics over the processes that completed."""

    avg_turnaround: float
    avg_waiting: float
    cpu_utilization: float
    total_processes: int


@dataclass(frozen=True)
class SchedulerResult:
    """Everything one algorithm run produced.

    Attributes:
        algorithm: Which algorithm ran.
        name: Display name (includes the quantum for Round Robin).
        timeline: One entry per tick: a process name or ``IDLE``.
        processes: Final process states, owned by this result.
        stats: Aggregate metrics, or None if nothing completed.

    """

    algorithm: Algorithm
    name: str
    timeline: tuple[str, ...]
    processes: tuple[Process, ...]
    stats: Stats | None

    @property
    def completed(self) -> list[Process]:
        """Return the processes that finished."""
        return [p for p in self.processes if p.completed]

    @property
    def busy_ticks(self) -> int:
        """Return how many ticks had a process on the CPU."""
        return sum(1 for slot in self.timeline if slot != IDLE)

    @property
    def idle_ticks(self) -> int:
        """Return how many ticks the CPU sat idle."""
        return len(self.timeline) - self.busy_ticks


def calculate_stats(processes: Iterable[Process], timeline: Sequence[str]) -> Stats | None:
    """Compute averages and CPU utilization, or None if nothing completed."""
    completed = [p for p in processes if p.completed]
    if not completed:
        return None
    busy = sum(1 for slot in timeline if slot != IDLE)
    utilization = busy / len(timeline) * 100 if timeline else 0.0
    return Stats(
        avg_turnaround=sum(p.turnaround for p in completed) / len(completed),
        avg_waiting=sum(p.waiting for p in completed) / len(completed),
        cpu_utilization=utilization,
        total_processes=len(completed),
    )


class _Clock:
    """The model clock and timeline for a single run.

    Owns fresh copies of the input processes, so a run can mutate them
    freely without touching the caller's objects.
    """

    def __init__(self, processes: Iterable[Process], logger: Logger | None) -> None:
        self.processes = [p.fresh() for p in processes]
        self.time = 0
        self.timeline: list[str] = []
        self._logger = logger

    @property
    def all_done(self) -> bool:
        return all(p.completed for p in self.processes)

    def ready(self) -> list[Process]:
        """Return arrived, incomplete processes in input order."""
        return [p for p in self.processes if p.arrived_by(self.time) and not p.completed]

    def idle(self, ticks: int = 1) -> None:
        self.timeline.extend([IDLE] * ticks)
        self.time += ticks

    def execute(self, process: Process, ticks: int) -> None:
        """Run *process* for *ticks* ticks, completing it if it finishes."""
        process.mark_started(self.time)
        self.timeline.extend([process.name] * ticks)
        self.time += ticks
        process.remaining -= ticks
        if process.remaining <= 0:
            process.complete(self.time)
            if self._logger is not None:
                self._logger.debug(f"{process.name} finished at t={self.time}", source=_SOURCE)

    def result(
        self,
        algorithm: Algorithm,
        name: str,
        processes: Sequence[Process] | None = None,
    ) -> SchedulerResult:
        final = tuple(self.processes if processes is None else processes)
        stats = calculate_stats(final, self.timeline)
        if self._logger is not None:
            done = sum(1 for p in final if p.completed)
            self._logger.info(
                f"{name}: {done}/{len(final)} completed in {len(self.timeline)} ticks",
                source=_SOURCE,
            )
            if done < len(final):
                self._logger.warning(
                    f"{name}: tick limit reached with {len(final) - done} unfinished",
                    source=_SOURCE,
                )
        return SchedulerResult(
            algorithm=algorithm,
            name=name,
            timeline=tuple(self.timeline),
            processes=final,
            stats=stats,
        )


def _preemptive_tick_cap(processes: Sequence[Process]) -> int:
    return sum(p.burst for p in processes) + max((p.arrival for p in processes), default=0)


class SchedulingPolicy(Protocol):
    """Interface every scheduling algorithm satisfies."""

    algorithm: Algorithm

    @property
    def name(self) -> str:
        """Return the display name for results."""
        ...  # pragma: no cover

    def run(
        self,
        processes: Iterable[Process],
        *,
        logger: Logger | None = None,
    ) -> SchedulerResult:
        """Simulate *processes* and return the result."""
        ...  # pragma: no cover


class FCFSPolicy:
    """First Come, First Served — run to completion in arrival order.

    The result lists processes in the order they ran (sorted by
    arrival, stable for equal arrivals).
    """

    algorithm = Algorithm.FCFS
    name = "FCFS (First Come First Serve)"

    def run(self, processes: Iterable[Process], *, logger: Logger | None = None) -> SchedulerResult:
        """Run each process to completion, idling until it arrives."""
        clock = _Clock(processes, logger)
        order = sorted(clock.processes, key=lambda p: p.arrival)
        for process in order:
            if clock.time < process.arrival:
                clock.idle(process.arrival - clock.time)
            clock.execute(process, process.remaining)
        return clock.result(self.algorithm, self.name, order)


class RoundRobinPolicy:
    """Round Robin — FIFO queue with a fixed time quantum.

    Newly arrived processes join the queue before the current slice
    starts and again after it ends, ahead of the preempted process
    rejoining at the back.  Stops after ``max(50, 2 × Σburst)`` ticks.
    """

    algorithm = Algorithm.ROUND_ROBIN

    def __init__(self, *, quantum: int) -> None:
        """Create a Round Robin policy.

        Args:
            quantum: Most ticks a process runs before being preempted.

        """
        if quantum < 1:
            msg = f"quantum must be at least 1, got {quantum}"
            raise ValueError(msg)
        self._quantum = quantum

    @property
    def quantum(self) -> int:
        """Return the time quantum (ticks per slice)."""
        return self._quantum

    @property
    def name(self) -> str:
        """Return the display name, including the quantum."""
        return f"Round Robin (Quantum = {self._quantum})"

    def run(self, processes: Iterable[Process], *, logger: Logger | None = None) -> SchedulerResult:
        """Cycle through the ready queue one quantum at a time."""
        clock = _Clock(processes, logger)
        cap = max(RR_MIN_TICK_CAP, 2 * sum(p.burst for p in clock.processes))
        queue: deque[Process] = deque()
        admitted: set[int] = set()

        def admit_arrivals() -> None:
            for i, p in enumerate(clock.processes):
                if i not in admitted and p.arrived_by(clock.time) and not p.completed:
                    queue.append(p)
                    admitted.add(i)

        while clock.time < cap and not clock.all_done:
            admit_arrivals()
            if not queue:
                clock.idle()
                continue
            current = queue.popleft()
            clock.execute(current, min(self._quantum, current.remaining))
            admit_arrivals()
            if not current.completed:
                queue.append(current)

        return clock.result(self.algorithm, self.name)


class SPNPolicy:
    """Shortest Process Next — non-preemptive, smallest burst first."""

    algorithm = Algorithm.SPN
    name = "SPN (Shortest Process Next)"

    def run(self, processes: Iterable[Process], *, logger: Logger | None = None) -> SchedulerResult:
        """Whenever the CPU is free, run the shortest ready job to completion."""
        clock = _Clock(processes, logger)
        while not clock.all_done:
            ready = clock.ready()
            if not ready:
                clock.idle()
                continue
            shortest = min(ready, key=lambda p: p.burst)
            clock.execute(shortest, shortest.remaining)
        return clock.result(self.algorithm, self.name)


class SRTPolicy:
    """Shortest Remaining Time — preemptive, re-decided every tick."""

    algorithm = Algorithm.SRT
    name = "SRT (Shortest Remaining Time)"

    def run(self, processes: Iterable[Process], *, logger: Logger | None = None) -> SchedulerResult:
        """Each tick, run the ready process with the least work left."""
        clock = _Clock(processes, logger)
        cap = _preemptive_tick_cap(clock.processes)
        while clock.time < cap and not clock.all_done:
            ready = clock.ready()
            if not ready:
                clock.idle()
                continue
            shortest = min(ready, key=lambda p: p.remaining)
            clock.execute(shortest, 1)
        return clock.result(self.algorithm, self.name)


class HRRNPolicy:
    """Highest Response Ratio Next — non-preemptive, favours long waiters.

    Response ratio = 1 + (time waited so far) / burst.  Short jobs start
    with an advantage, but every tick of waiting raises a job's ratio,
    so nothing waits forever.
    """

    algorithm = Algorithm.HRRN
    name = "HRRN (Highest Response Ratio Next)"

    @staticmethod
    def response_ratio(process: Process, time: int) -> float:
        """Return *process*'s response ratio at *time*."""
        return 1 + (time - process.arrival) / process.burst

    def run(self, processes: Iterable[Process], *, logger: Logger | None = None) -> SchedulerResult:
        """Whenever the CPU is free, run the highest-ratio job to completion."""
        clock = _Clock(processes, logger)
        while not clock.all_done:
            ready = clock.ready()
            if not ready:
                clock.idle()
                continue
            selected = max(ready, key=lambda p: self.response_ratio(p, clock.time))
            clock.execute(selected, selected.remaining)
        return clock.result(self.algorithm, self.name)


class PriorityAgingPolicy:
    """Preemptive priority with aging and optional context-switch cost.

    Every tick, each ready process except the one that ran last tick
    gains ``aging_rate`` dynamic priority.  The highest dynamic priority
    runs for one tick and drops back to its base priority.  Larger
    numbers mean more important.

    When the CPU moves from one process to another, ``context_switch``
    idle ticks are spent first.  The run stops after
    ``Σburst + max(arrival)`` ticks; switch overhead counts against that
    limit, so heavy overhead can leave processes unfinished.
    """

    algorithm = Algorithm.PRIORITY
    name = "Priority (Preemptive + Aging)"

    def __init__(self, *, aging_rate: int = 1, context_switch: int = 0) -> None:
        """Create a priority policy.

        Args:
            aging_rate: Priority bonus per tick spent waiting.
            context_switch: Idle ticks charged per process switch.

        """
        self._aging_rate = aging_rate
        self._context_switch = context_switch

    @property
    def aging_rate(self) -> int:
        """Return the per-tick aging bonus."""
        return self._aging_rate

    @property
    def context_switch(self) -> int:
        """Return the idle ticks charged per switch."""
        return self._context_switch

    def run(self, processes: Iterable[Process], *, logger: Logger | None = None) -> SchedulerResult:
        """Age the waiters, then run the highest dynamic priority for one tick."""
        clock = _Clock(processes, logger)
        cap = _preemptive_tick_cap(clock.processes)
        last: Process | None = None

        while clock.time < cap and not clock.all_done:
            ready = clock.ready()
            for p in ready:
                if p is not last:
                    p.dynamic_priority += self._aging_rate
            if not ready:
                clock.idle()
                continue

            selected = max(ready, key=lambda p: p.dynamic_priority)
            if last is not None and last is not selected and self._context_switch > 0:
                clock.idle(self._context_switch)

            selected.dynamic_priority = selected.priority
            clock.execute(selected, 1)
            last = selected

        return clock.result(self.algorithm, self.name)


def make_policy(
    algorithm: Algorithm | str,
    config: SimulationConfig | None = None,
) -> SchedulingPolicy:
    """Return the policy object for *algorithm*.

    Raises:
        ValueError: If *algorithm* is not a known algorithm name.

    """
    config = config or SimulationConfig()
    algorithm = Algorithm(algorithm)
    match algorithm:
        case Algorithm.FCFS:
            return FCFSPolicy()
        case Algorithm.ROUND_ROBIN:
            return RoundRobinPolicy(quantum=config.quantum)
        case Algorithm.SPN:
            return SPNPolicy()
        case Algorithm.SRT:
            return SRTPolicy()
        case Algorithm.HRRN:
            return HRRNPolicy()
        case Algorithm.PRIORITY:
            return PriorityAgingPolicy(
                aging_rate=config.aging_rate,
                context_switch=config.context_switch,
            )
        case _:
            assert_never(algorithm)


def simulate(
    processes: Sequence[Process],
    algorithms: Iterable[Algorithm | str] = tuple(Algorithm),
    *,
    config: SimulationConfig | None = None,
    logger: Logger | None = None,
) -> list[SchedulerResult]:
    """Run each of *algorithms* over the same *processes*, in order.

    An empty *algorithms* gives an empty list, not an error.
    """
    return [make_policy(a, config).run(processes, logger=logger) for a in algorithms]
