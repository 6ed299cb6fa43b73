"""Scheduling subsystem — process model, six algorithms, reports and replay.

Re-exports public symbols so callers can write::

    from py_ossim.scheduling import Algorithm, Process, simulate
"""

from py_ossim.scheduling.algorithms import (
    ALGORITHM_INFO,
    IDLE,
    Algorithm,
    AlgorithmInfo,
    FCFSPolicy,
    HRRNPolicy,
    PriorityAgingPolicy,
    RoundRobinPolicy,
    SchedulerResult,
    SchedulingPolicy,
    SPNPolicy,
    SRTPolicy,
    Stats,
    calculate_stats,
    make_policy,
    simulate,
)
from py_ossim.scheduling.process import Process
from py_ossim.scheduling.replay import TimelineSession, TimelineTick

__all__ = [
    "ALGORITHM_INFO",
    "IDLE",
    "Algorithm",
    "AlgorithmInfo",
    "FCFSPolicy",
    "HRRNPolicy",
    "PriorityAgingPolicy",
    "Process",
    "RoundRobinPolicy",
    "SPNPolicy",
    "SRTPolicy",
    "SchedulerResult",
    "SchedulingPolicy",
    "Stats",
    "TimelineSession",
    "TimelineTick",
    "calculate_stats",
    "make_policy",
    "simulate",
]
