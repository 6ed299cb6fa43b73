"""Deadlock detection on a Resource Allocation Graph.

With single-instance resources, a RAG is deadlocked exactly when it
contains a cycle.  Rather than search the bipartite graph directly we
collapse it into a **wait-for graph**: process P2 has an edge to P1 when
P1 holds a resource P2 is requesting.  A cycle among processes there is
a deadlock; each hop is then expanded back into the RAG path

    requester → (requested resource) → holder

so a three-way deadlock reads ``P1 R2 P2 R3 P3 R1`` (closing back on P1).

Search is an iterative depth-first traversal with one shared "on stack"
set: mark on entry, unmark on exit.  Meeting a node that is still on the
stack means the path from that node's first occurrence back to here is a
cycle.  A new search starts only from processes no earlier search
reached, but within one search every edge is followed, so a process
reachable along two routes is explored along both.  The search walks
simple paths only, which can be exponential on dense graphs; simulator
graphs are small.

Duplicate cycles are removed with a deliberately weak key: the sorted
set of labels.  Two cycles over the same processes and resources count
as one even when they visit them in a different order.  Keying on the
canonical rotation of the node sequence would make the check exact.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_ossim.logging import Logger, LogSource
from py_ossim.session import StepSession

if TYPE_CHECKING:
    from collections.abc import Iterator

    from py_ossim.deadlock.graph import ResourceAllocationGraph

_SOURCE = LogSource.DETECTOR

# Two processes and two resources.
_MIN_CYCLE_LENGTH = 4


@dataclass(frozen=True)
class Cycle:
    """A closed RAG cycle alternating process and resource labels.

    The first label is not repeated at the end; ``edges`` adds the
    closing hop.
    """

    nodes: tuple[str, ...]

    def __len__(self) -> int:
        """Return the number of labels in the cycle."""
        return len(self.nodes)

    def __iter__(self) -> Iterator[str]:
        """Iterate over the labels in cycle order."""
        return iter(self.nodes)

    def __str__(self) -> str:
        """Format as ``P1 → R2 → P2 → ... → P1``."""
        return " → ".join((*self.nodes, self.nodes[0]))

    @property
    def processes(self) -> tuple[str, ...]:
        """Return the process labels, in cycle order."""
        return self.nodes[0::2]

    @property
    def resources(self) -> tuple[str, ...]:
        """Return the resource labels, in cycle order."""
        return self.nodes[1::2]

    @property
    def edges(self) -> list[tuple[str, str]]:
        """Return consecutive (from, to) pairs including the closing hop."""
        return [
            (self.nodes[i], self.nodes[(i + 1) % len(self.nodes)]) for i in range(len(self.nodes))
        ]

    @property
    def key(self) -> tuple[str, ...]:
        """Return the sorted-label key used for deduplication."""
        return tuple(sorted(self.nodes))


def build_wait_for_graph(graph: ResourceAllocationGraph) -> dict[str, list[str]]:
    """Derive the wait-for graph from a RAG's holder and requester lists.

    Returns:
        Process → processes it waits for, deduplicated, in discovery order.
        Every declared process has an entry, possibly empty.

    """
    wait_for: dict[str, list[str]] = {p: [] for p in graph.processes}
    for resource in graph.resources:
        for holder in graph.holders[resource]:
            for requester in graph.requesters[resource]:
                if holder == requester:
                    continue
                waits = wait_for.setdefault(requester, [])
                if holder not in waits:
                    waits.append(holder)
    return wait_for


def _wait_cycles(roots: tuple[str, ...], wait_for: dict[str, list[str]]) -> list[list[str]]:
    """Return the process cycles found by DFS over *wait_for*.

    *visited* only decides which roots start a search.  Inside a search the
    on-stack set alone stops a path from looping.
    """
    visited: set[str] = set()
    on_stack: set[str] = set()
    found: list[list[str]] = []

    for root in roots:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        path = [root]
        stack = [(root, iter(wait_for.get(root, ())))]
        while stack:
            node, neighbours = stack[-1]
            nxt = next(neighbours, None)
            if nxt is None:
                stack.pop()
                path.pop()
                on_stack.discard(node)
                continue
            if nxt in on_stack:
                found.append(path[path.index(nxt) :])
            else:
                visited.add(nxt)
                on_stack.add(nxt)
                path.append(nxt)
                stack.append((nxt, iter(wait_for.get(nxt, ()))))
    return found


def _to_rag_cycle(graph: ResourceAllocationGraph, wait_cycle: list[str]) -> Cycle:
    """Expand a process-only wait cycle into a process/resource cycle."""
    nodes: list[str] = []
    for i, requester in enumerate(wait_cycle):
        holder = wait_cycle[(i + 1) % len(wait_cycle)]
        resource = next(
            (
                r
                for r in graph.resources
                if holder in graph.holders[r] and requester in graph.requesters[r]
            ),
            None,
        )
        nodes.append(requester)
        if resource is not None:
            nodes.append(resource)
    return Cycle(tuple(nodes))


def find_cycles(graph: ResourceAllocationGraph, *, logger: Logger | None = None) -> list[Cycle]:
    """Find the deadlock cycles in *graph*.

    Args:
        graph: The RAG to inspect.
        logger: Optional decision log to record findings in.

    Returns:
        Distinct cycles in discovery order.  An empty list means the
        graph is deadlock-free.

    """
    wait_for = build_wait_for_graph(graph)
    cycles: list[Cycle] = []
    seen: set[tuple[str, ...]] = set()

    for wait_cycle in _wait_cycles(graph.processes, wait_for):
        cycle = _to_rag_cycle(graph, wait_cycle)
        if len(cycle) < _MIN_CYCLE_LENGTH or cycle.key in seen:
            continue
        seen.add(cycle.key)
        cycles.append(cycle)
        if logger is not None:
            logger.warning(f"Deadlock cycle: {cycle}", source=_SOURCE)

    if logger is not None and not cycles:
        logger.info(
            f"No deadlock among {len(graph.processes)} processes"
            f" and {len(graph.resources)} resources",
            source=_SOURCE,
        )
    return cycles


class DetectionSession(StepSession[tuple[Cycle, ...]]):
    """Reveal detected cycles one at a time.

    Step *k* shows the first *k* cycles.  A deadlock-free graph still
    has a single step, which shows no cycles.
    """

    def __init__(self, graph: ResourceAllocationGraph, *, logger: Logger | None = None) -> None:
        """Run detection on *graph* and prepare the step sequence."""
        self._graph = graph
        self._cycles = tuple(find_cycles(graph, logger=logger))
        prefixes = [self._cycles[: k + 1] for k in range(len(self._cycles))] or [()]
        super().__init__(prefixes)

    @property
    def graph(self) -> ResourceAllocationGraph:
        """Return the graph under analysis."""
        return self._graph

    @property
    def cycles(self) -> tuple[Cycle, ...]:
        """Return every detected cycle."""
        return self._cycles

    @property
    def deadlocked(self) -> bool:
        """Return True if at least one cycle was found."""
        return bool(self._cycles)
