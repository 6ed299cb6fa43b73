"""Simulation defaults and safety limits.

The engine has no external configuration source: every knob is a
keyword argument with a default taken from here.  ``SimulationConfig``
bundles the scheduler knobs so a caller (shell, web app, test) can pass
one object around and tweak it with ``with_overrides``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

# Process and resource count used when the caller gives none (or nonsense).
DEFAULT_COUNT = 3

DEFAULT_QUANTUM = 3
DEFAULT_AGING_RATE = 1
DEFAULT_CONTEXT_SWITCH = 0

# Iteration caps.  These only bound malformed input; a well-formed run
# never reaches them.
BANKERS_MAX_PASSES = 100
RR_MIN_TICK_CAP = 50


@dataclass(frozen=True)
class SimulationConfig:
    """Tunable parameters for the scheduling algorithms.

    Attributes:
        quantum: Round Robin time slice, in ticks.
        aging_rate: Priority bonus a waiting process earns per tick.
        context_switch: Idle ticks inserted when the priority scheduler
            switches from one process to another.

    """

    quantum: int = DEFAULT_QUANTUM
    aging_rate: int = DEFAULT_AGING_RATE
    context_switch: int = DEFAULT_CONTEXT_SWITCH

    def __post_init__(self) -> None:
        """Reject values no scheduler can run with."""
        if self.quantum < 1:
            msg = f"quantum must be at least 1, got {self.quantum}"
            raise ValueError(msg)
        if self.aging_rate < 0:
            msg = f"aging_rate must not be negative, got {self.aging_rate}"
            raise ValueError(msg)
        if self.context_switch < 0:
            msg = f"context_switch must not be negative, got {self.context_switch}"
            raise ValueError(msg)

    def with_overrides(self, **overrides: int | None) -> SimulationConfig:
        """Return a copy with the non-None *overrides* applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)
