"""Deadlock prevention policies.

Prevention attacks one of the four necessary conditions for deadlock so
that a deadlock can never form:

    1. **Mutual exclusion** — refuse a request for a resource someone
       already holds.
    2. **Hold and wait** — a process that holds anything may not acquire
       more until it releases everything.
    3. **No preemption** — let the system take resources back.
    4. **Circular wait** — impose a global order on resources so requests
       can never form a cycle.

``simulate_prevention`` replays a scripted sequence of allocate/request
events under one policy and labels each event allowed, blocked or
prevented.  The simulation only ever records allocations and requests;
nothing is released within a run.

The "no preemption" policy is accepted but has no rule of its own yet:
it behaves exactly like running without a policy.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from py_ossim.logging import Logger, LogSource

if TYPE_CHECKING:
    from collections.abc import Iterable

_SOURCE = LogSource.PREVENTION


class PreventionPolicy(StrEnum):
    """The prevention strategies the simulator knows."""

    NONE = "none"
    MUTEX = "mutex"
    HOLD_WAIT = "holdwait"
    PREEMPTION = "preemption"
    CIRCULAR = "circular"

    @property
    def display_name(self) -> str:
        """Return a human-readable policy name."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    PreventionPolicy.NONE: "None (Original)",
    PreventionPolicy.MUTEX: "Mutual Exclusion",
    PreventionPolicy.HOLD_WAIT: "Hold & Wait Elimination",
    PreventionPolicy.PREEMPTION: "No Preemption",
    PreventionPolicy.CIRCULAR: "Circular Wait Ordering",
}


class EventType(StrEnum):
    """Whether a scripted event allocates or requests a resource."""

    ALLOCATE = "A"
    REQUEST = "R"


class Outcome(StrEnum):
    """How a policy treated an event."""

    ALLOWED = "allowed"
    BLOCKED = "blocked"
    PREVENTED = "prevented"


@dataclass(frozen=True)
class ScenarioEvent:
    """One scripted step: *process* allocates or requests *resource*."""

    process: str
    resource: str
    type: EventType


@dataclass(frozen=True)
class PreventionEvent:
    """A scripted event annotated with the policy's decision."""

    process: str
    resource: str
    type: EventType
    step: int
    outcome: Outcome
    reason: str

    def __str__(self) -> str:
        """Format as ``Step 2: P1 requests R2 — blocked (...)``."""
        verb = "allocates" if self.type is EventType.ALLOCATE else "requests"
        return (
            f"Step {self.step}: {self.process} {verb} {self.resource}"
            f" — {self.outcome} ({self.reason})"
        )


@dataclass(frozen=True)
class PreventionResult:
    """The annotated timeline of one prevention run."""

    policy: PreventionPolicy
    timeline: tuple[PreventionEvent, ...]
    counts: dict[Outcome, int] = field(default_factory=dict)

    @property
    def allowed(self) -> int:
        """Return how many events were allowed."""
        return self.counts.get(Outcome.ALLOWED, 0)

    @property
    def blocked(self) -> int:
        """Return how many events were blocked."""
        return self.counts.get(Outcome.BLOCKED, 0)

    @property
    def prevented(self) -> int:
        """Return how many events were prevented."""
        return self.counts.get(Outcome.PREVENTED, 0)


class _Ledger:
    """What has been allocated and requested so far in one run."""

    def __init__(self) -> None:
        self.allocations: dict[str, list[str]] = defaultdict(list)
        self.requests: dict[str, list[str]] = defaultdict(list)

    def holds_anything(self, process: str) -> bool:
        return bool(self.allocations.get(process))

    def is_allocated(self, resource: str) -> bool:
        return any(resource in held for held in self.allocations.values())


def _decide(
    event: ScenarioEvent,
    policy: PreventionPolicy,
    ledger: _Ledger,
) -> tuple[Outcome, str]:
    """Apply *policy* to one event, updating *ledger* when it is recorded."""
    if event.type is EventType.ALLOCATE:
        if policy is PreventionPolicy.HOLD_WAIT and ledger.holds_anything(event.process):
            return (
                Outcome.PREVENTED,
                "Hold & Wait Prevention: Process must release all resources"
                " before acquiring new ones",
            )
        ledger.allocations[event.process].append(event.resource)
        return Outcome.ALLOWED, "Resource allocated"

    match policy:
        case PreventionPolicy.MUTEX if ledger.is_allocated(event.resource):
            return Outcome.BLOCKED, "Mutual Exclusion: Resource already allocated"
        case PreventionPolicy.CIRCULAR:
            return Outcome.ALLOWED, "Circular Wait Prevention: Resource ordering enforced"
        case (
            PreventionPolicy.NONE
            | PreventionPolicy.MUTEX
            | PreventionPolicy.HOLD_WAIT
            | PreventionPolicy.PREEMPTION
        ):
            ledger.requests[event.process].append(event.resource)
            return Outcome.ALLOWED, "Request processed"


def simulate_prevention(
    events: Iterable[ScenarioEvent],
    policy: PreventionPolicy | str,
    *,
    logger: Logger | None = None,
) -> PreventionResult:
    """Replay *events* in order under *policy*.

    Args:
        events: The scripted allocate/request events.
        policy: A ``PreventionPolicy`` or its string value.
        logger: Optional decision log.

    Returns:
        The annotated timeline and per-outcome counts.

    Raises:
        ValueError: If *policy* is not a known policy name.

    """
    policy = PreventionPolicy(policy)
    ledger = _Ledger()
    timeline: list[PreventionEvent] = []

    for step, event in enumerate(events, start=1):
        outcome, reason = _decide(event, policy, ledger)
        annotated = PreventionEvent(
            process=event.process,
            resource=event.resource,
            type=event.type,
            step=step,
            outcome=outcome,
            reason=reason,
        )
        timeline.append(annotated)
        if logger is not None:
            logger.info(str(annotated), source=_SOURCE)

    counts = Counter(e.outcome for e in timeline)
    return PreventionResult(
        policy=policy,
        timeline=tuple(timeline),
        counts={outcome: counts.get(outcome, 0) for outcome in Outcome},
    )
