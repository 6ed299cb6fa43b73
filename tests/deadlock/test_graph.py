"""Tests for Resource Allocation Graph construction.

A RAG has one node per process (P1..Pn) and per resource (R1..Rm), with
allocation and request edges both written process → resource.  The
builder also derives, per declared resource, who holds it and who is
waiting for it.
"""

from py_ossim.deadlock.graph import Edge, EdgeKind, build_graph


class TestLabels:
    """Verify generated node labels and count defaults."""

    def test_labels_follow_counts(self) -> None:
        """Processes and resources should be labelled from 1."""
        graph = build_graph(2, 3)
        assert graph.processes == ("P1", "P2")
        assert graph.resources == ("R1", "R2", "R3")

    def test_none_count_defaults_to_three(self) -> None:
        """A missing count should fall back to three nodes."""
        graph = build_graph(None, None)
        default = 3
        assert len(graph.processes) == default
        assert len(graph.resources) == default

    def test_negative_count_defaults_to_three(self) -> None:
        """A negative count is nonsense and should fall back to three."""
        graph = build_graph(-1, -5)
        default = 3
        assert len(graph.processes) == default
        assert len(graph.resources) == default

    def test_zero_counts_give_empty_graph(self) -> None:
        """Zero is a legitimate count, not a missing one."""
        graph = build_graph(0, 0)
        assert graph.processes == ()
        assert graph.resources == ()
        assert graph.edges == ()


class TestEdges:
    """Verify edge lists, adjacency and holder/requester indexes."""

    def test_edges_keep_input_order(self) -> None:
        """Allocations should come before requests, each in input order."""
        graph = build_graph(2, 2, [("P1", "R1"), ("P2", "R2")], [("P1", "R2")])
        assert graph.edges == (
            Edge("P1", "R1", EdgeKind.ALLOCATION),
            Edge("P2", "R2", EdgeKind.ALLOCATION),
            Edge("P1", "R2", EdgeKind.REQUEST),
        )

    def test_adjacency_lists_outgoing_edges(self) -> None:
        """Each process should list its allocation and request edges."""
        graph = build_graph(2, 2, [("P1", "R1")], [("P1", "R2")])
        targets = [e.target for e in graph.adjacency["P1"]]
        assert targets == ["R1", "R2"]
        assert graph.adjacency["P2"] == ()

    def test_holders_and_requesters(self) -> None:
        """Holder and requester lists should be indexed by resource."""
        graph = build_graph(3, 2, [("P1", "R1"), ("P2", "R1")], [("P3", "R1")])
        assert graph.holders["R1"] == ("P1", "P2")
        assert graph.requesters["R1"] == ("P3",)
        assert graph.holders["R2"] == ()

    def test_undeclared_resource_stays_in_raw_edges(self) -> None:
        """An edge to an undeclared resource is drawn but not indexed."""
        graph = build_graph(1, 1, [("P1", "R9")])
        assert Edge("P1", "R9", EdgeKind.ALLOCATION) in graph.edges
        assert "R9" not in graph.holders
        assert graph.held_by("P1") == []

    def test_held_by_and_requested_by(self) -> None:
        """Per-process queries should list declared resources only."""
        graph = build_graph(2, 3, [("P1", "R1"), ("P1", "R3")], [("P1", "R2")])
        assert graph.held_by("P1") == ["R1", "R3"]
        assert graph.requested_by("P1") == ["R2"]
        assert graph.requested_by("P2") == []
