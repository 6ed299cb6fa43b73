"""Deadlock subsystem — RAG detection, Banker's avoidance, prevention policies.

Re-exports public symbols so callers can write::

    from py_ossim.deadlock import build_graph, find_cycles, check_safety
"""

from py_ossim.deadlock.bankers import (
    BankersSession,
    RequestDecision,
    SafetyResult,
    SafetyStep,
    check_safety,
    input_signature,
    request_resources,
)
from py_ossim.deadlock.cycles import (
    Cycle,
    DetectionSession,
    build_wait_for_graph,
    find_cycles,
)
from py_ossim.deadlock.graph import Edge, EdgeKind, ResourceAllocationGraph, build_graph
from py_ossim.deadlock.prevention import (
    EventType,
    Outcome,
    PreventionEvent,
    PreventionPolicy,
    PreventionResult,
    ScenarioEvent,
    simulate_prevention,
)

__all__ = [
    "BankersSession",
    "Cycle",
    "DetectionSession",
    "Edge",
    "EdgeKind",
    "EventType",
    "Outcome",
    "PreventionEvent",
    "PreventionPolicy",
    "PreventionResult",
    "RequestDecision",
    "ResourceAllocationGraph",
    "SafetyResult",
    "SafetyStep",
    "ScenarioEvent",
    "build_graph",
    "build_wait_for_graph",
    "check_safety",
    "find_cycles",
    "input_signature",
    "request_resources",
    "simulate_prevention",
]
