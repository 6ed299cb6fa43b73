"""Deadlock avoidance with the Banker's safety algorithm.

The Banker's algorithm is named after a banker who must decide whether
to grant loans: if granting one might make it impossible to satisfy all
customers, the banker refuses.  The key idea is the **safe state**, one
where some ordering (a safe sequence) lets every process finish.

Data structures (per the textbook):
    - **Available[r]** — free instances of resource r.
    - **Max[p][r]** — most instances process p will ever hold.
    - **Allocation[p][r]** — instances process p holds now.
    - **Need[p][r]** — Max - Allocation (what p may still ask for).

Safety check:
    1. Work = Available, Finish[p] = False for every p.
    2. Scan processes left to right.  An unfinished p whose Need <= Work
       can run to completion: Work += Allocation[p], Finish[p] = True.
    3. Repeat full passes until one makes no progress.
    4. Safe iff every Finish[p] is True; the sequence is discovery order.

Every attempt in every pass, successful or not, is recorded as a
``SafetyStep`` so a caller can replay the run one decision at a time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from py_ossim.config import BANKERS_MAX_PASSES
from py_ossim.deadlock.vectors import (
    Matrix,
    Vector,
    as_matrix,
    as_vector,
    need_matrix,
    vector_add,
    vector_leq,
    vector_sub,
)
from py_ossim.logging import Logger, LogSource
from py_ossim.session import StepSession

if TYPE_CHECKING:
    from collections.abc import Sequence

_SOURCE = LogSource.BANKERS

Signature: TypeAlias = tuple[Vector, Matrix, Matrix]


@dataclass(frozen=True)
class SafetyStep:
    """One attempt to let a process finish.

    Attributes:
        process: Index of the process considered.
        need: Its Need vector.
        work_before: Work when the attempt started.
        allocation: Its Allocation vector.
        work_after: Work after the attempt (unchanged if not finished).
        finished: Whether the process was granted in this attempt.

    """

    process: int
    need: Vector
    work_before: Vector
    allocation: Vector
    work_after: Vector
    finished: bool

    @property
    def label(self) -> str:
        """Return the process label, e.g. ``P3``."""
        return f"P{self.process}"


@dataclass(frozen=True)
class SafetyResult:
    """The outcome of one safety check."""

    need: Matrix
    steps: tuple[SafetyStep, ...]
    safe: bool
    sequence: tuple[str, ...]
    work: Vector
    passes: int

    @property
    def unfinished(self) -> list[str]:
        """Return labels of processes that never finished."""
        done = set(self.sequence)
        return [f"P{i}" for i in range(len(self.need)) if f"P{i}" not in done]


def input_signature(
    available: Sequence[int],
    maximum: Sequence[Sequence[int]],
    allocation: Sequence[Sequence[int]],
) -> Signature:
    """Return a structural signature of a safety check's inputs.

    Two calls with equal signatures produce identical traces, so a caller
    holding a cached result can compare signatures to detect staleness.
    """
    return as_vector(available), as_matrix(maximum), as_matrix(allocation)


def check_safety(
    available: Sequence[int],
    maximum: Sequence[Sequence[int]],
    allocation: Sequence[Sequence[int]],
    *,
    max_passes: int = BANKERS_MAX_PASSES,
    logger: Logger | None = None,
) -> SafetyResult:
    """Run the Banker's safety algorithm.

    Args:
        available: Free instances per resource type.
        maximum: Max matrix, one row per process.
        allocation: Allocation matrix; its row count defines n.
        max_passes: Upper bound on full passes over the processes.
        logger: Optional decision log.

    Returns:
        The full trace, the safe flag and the safe sequence (possibly
        partial when unsafe).

    """
    alloc = as_matrix(allocation)
    need = need_matrix(maximum, alloc)
    n = len(alloc)

    work = as_vector(available)
    finish = [False] * n
    sequence: list[str] = []
    steps: list[SafetyStep] = []

    passes = 0
    progress = True
    while progress and passes < max_passes:
        passes += 1
        progress = False
        for i in range(n):
            if finish[i]:
                continue
            if vector_leq(need[i], work):
                after = vector_add(work, alloc[i])
                steps.append(SafetyStep(i, need[i], work, alloc[i], after, finished=True))
                work = after
                finish[i] = True
                sequence.append(f"P{i}")
                progress = True
                if logger is not None:
                    logger.debug(f"P{i} can finish, work is now {list(work)}", source=_SOURCE)
            else:
                steps.append(SafetyStep(i, need[i], work, alloc[i], work, finished=False))

    if progress and passes >= max_passes and logger is not None:
        logger.warning(f"Stopped after {max_passes} passes", source=_SOURCE)

    result = SafetyResult(
        need=need,
        steps=tuple(steps),
        safe=all(finish),
        sequence=tuple(sequence),
        work=work,
        passes=passes,
    )
    if logger is not None:
        if result.safe:
            logger.info(f"Safe state, sequence: {' → '.join(sequence)}", source=_SOURCE)
        else:
            logger.warning(
                f"Unsafe state, stuck: {', '.join(result.unfinished)}",
                source=_SOURCE,
            )
    return result


@dataclass(frozen=True)
class RequestDecision:
    """The outcome of a Banker's resource request.

    When granted, ``available`` and ``allocation`` describe the state
    after the grant; otherwise they are the unchanged inputs.
    """

    granted: bool
    reason: str
    available: Vector
    allocation: Matrix
    safety: SafetyResult | None = None


def request_resources(
    available: Sequence[int],
    maximum: Sequence[Sequence[int]],
    allocation: Sequence[Sequence[int]],
    *,
    process: int,
    request: Sequence[int],
    logger: Logger | None = None,
) -> RequestDecision:
    """Decide a resource request with the Banker's algorithm.

    The request is granted only if it stays within the process's Need,
    fits in Available, and leaves the system in a safe state.  Inputs
    are never modified.

    Raises:
        IndexError: If *process* is not a row of *allocation*.

    """
    avail = as_vector(available)
    alloc = as_matrix(allocation)
    if not 0 <= process < len(alloc):
        msg = f"No process P{process}: allocation has {len(alloc)} rows"
        raise IndexError(msg)

    need = need_matrix(maximum, alloc)[process]
    if not vector_leq(request, need):
        reason = f"P{process} requested {list(request)}, more than its need {list(need)}"
        decision = RequestDecision(granted=False, reason=reason, available=avail, allocation=alloc)
    elif not vector_leq(request, avail):
        reason = f"P{process} must wait: only {list(avail)} available"
        decision = RequestDecision(granted=False, reason=reason, available=avail, allocation=alloc)
    else:
        new_avail = vector_sub(avail, request)
        new_alloc = tuple(
            vector_add(row, request) if i == process else row for i, row in enumerate(alloc)
        )
        safety = check_safety(new_avail, maximum, new_alloc)
        if safety.safe:
            reason = f"Granted: safe sequence {' → '.join(safety.sequence)}"
            decision = RequestDecision(
                granted=True,
                reason=reason,
                available=new_avail,
                allocation=new_alloc,
                safety=safety,
            )
        else:
            reason = f"Denied: granting P{process} {list(request)} would leave the system unsafe"
            decision = RequestDecision(
                granted=False,
                reason=reason,
                available=avail,
                allocation=alloc,
                safety=safety,
            )

    if logger is not None:
        logger.info(decision.reason, source=_SOURCE)
    return decision


class BankersSession(StepSession[SafetyStep]):
    """Step through one Banker's safety check.

    The session computes the whole trace up front.  ``step()`` reveals
    the next attempt; ``run_to_completion()`` reveals them all.  Build a
    new session when the inputs change (``is_stale`` tells you when).
    """

    def __init__(
        self,
        available: Sequence[int],
        maximum: Sequence[Sequence[int]],
        allocation: Sequence[Sequence[int]],
        *,
        max_passes: int = BANKERS_MAX_PASSES,
        logger: Logger | None = None,
    ) -> None:
        """Run the safety check and prepare the trace for stepping."""
        self._signature = input_signature(available, maximum, allocation)
        self._result = check_safety(
            available,
            maximum,
            allocation,
            max_passes=max_passes,
            logger=logger,
        )
        super().__init__(self._result.steps)

    @property
    def signature(self) -> Signature:
        """Return the structural signature of this session's inputs."""
        return self._signature

    @property
    def result(self) -> SafetyResult:
        """Return the complete safety result."""
        return self._result

    @property
    def visible_sequence(self) -> list[str]:
        """Return the part of the safe sequence revealed so far."""
        return [s.label for s in self.visible_steps if s.finished]

    def is_stale(
        self,
        available: Sequence[int],
        maximum: Sequence[Sequence[int]],
        allocation: Sequence[Sequence[int]],
    ) -> bool:
        """Return True if the given inputs differ from this session's."""
        return input_signature(available, maximum, allocation) != self._signature
