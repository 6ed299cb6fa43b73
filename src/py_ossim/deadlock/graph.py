"""Resource Allocation Graph (RAG) construction.

A RAG is a bipartite directed graph of processes and resources.  Two
kinds of edge connect them, both written process → resource:

- **allocation** — the process currently holds the resource.
- **request** — the process is blocked asking for the resource.

Labels are generated, not taken from the edges: a graph of *n*
processes and *m* resources always has nodes ``P1..Pn`` and
``R1..Rm``.  Edges naming a resource outside that range still appear in
the raw edge lists (so a renderer can draw them) but are left out of the
per-resource holder and requester lists that cycle detection reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from py_ossim.config import DEFAULT_COUNT

if TYPE_CHECKING:
    from collections.abc import Iterable


class EdgeKind(StrEnum):
    """The two kinds of RAG edge."""

    ALLOCATION = "allocation"
    REQUEST = "request"


@dataclass(frozen=True)
class Edge:
    """A directed process → resource edge."""

    source: str
    target: str
    kind: EdgeKind


@dataclass(frozen=True)
class ResourceAllocationGraph:
    """An immutable RAG built by ``build_graph``.

    Attributes:
        processes: Declared process labels, ``P1..Pn``.
        resources: Declared resource labels, ``R1..Rm``.
        allocations: Every allocation edge given, declared or not.
        requests: Every request edge given, declared or not.
        adjacency: Node → outgoing edges, in input order.
        holders: Declared resource → processes allocated it.
        requesters: Declared resource → processes requesting it.

    """

    processes: tuple[str, ...]
    resources: tuple[str, ...]
    allocations: tuple[Edge, ...] = ()
    requests: tuple[Edge, ...] = ()
    adjacency: dict[str, tuple[Edge, ...]] = field(default_factory=dict)
    holders: dict[str, tuple[str, ...]] = field(default_factory=dict)
    requesters: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def edges(self) -> tuple[Edge, ...]:
        """Return allocation edges followed by request edges."""
        return self.allocations + self.requests

    def held_by(self, process: str) -> list[str]:
        """Return the declared resources *process* holds."""
        return [r for r in self.resources if process in self.holders[r]]

    def requested_by(self, process: str) -> list[str]:
        """Return the declared resources *process* is requesting."""
        return [r for r in self.resources if process in self.requesters[r]]


def _count_or_default(count: int | None) -> int:
    if count is None or count < 0:
        return DEFAULT_COUNT
    return count


def build_graph(
    process_count: int | None,
    resource_count: int | None,
    allocation_edges: Iterable[tuple[str, str]] = (),
    request_edges: Iterable[tuple[str, str]] = (),
) -> ResourceAllocationGraph:
    """Build a RAG from counts and (process, resource) edge pairs.

    Args:
        process_count: Number of processes; None or negative means 3.
        resource_count: Number of resources; None or negative means 3.
        allocation_edges: ``(process, resource)`` pairs the process holds.
        request_edges: ``(process, resource)`` pairs the process wants.

    Returns:
        The constructed graph.  Malformed rows are tolerated by omission:
        there is no failure mode.

    """
    processes = tuple(f"P{i + 1}" for i in range(_count_or_default(process_count)))
    resources = tuple(f"R{i + 1}" for i in range(_count_or_default(resource_count)))

    adjacency: dict[str, list[Edge]] = {node: [] for node in processes + resources}
    holders: dict[str, list[str]] = {r: [] for r in resources}
    requesters: dict[str, list[str]] = {r: [] for r in resources}

    allocations = tuple(Edge(s, t, EdgeKind.ALLOCATION) for s, t in allocation_edges)
    requests = tuple(Edge(s, t, EdgeKind.REQUEST) for s, t in request_edges)

    for edge in allocations:
        adjacency.setdefault(edge.source, []).append(edge)
        if edge.target in holders:
            holders[edge.target].append(edge.source)

    for edge in requests:
        adjacency.setdefault(edge.source, []).append(edge)
        if edge.target in requesters:
            requesters[edge.target].append(edge.source)

    return ResourceAllocationGraph(
        processes=processes,
        resources=resources,
        allocations=allocations,
        requests=requests,
        adjacency={node: tuple(edges) for node, edges in adjacency.items()},
        holders={r: tuple(ps) for r, ps in holders.items()},
        requesters={r: tuple(ps) for r, ps in requesters.items()},
    )
