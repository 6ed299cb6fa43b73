"""Tests for the Banker's safety algorithm and resource requests.

The textbook example (five processes, three resource types) is safe
with the sequence P1, P3, P4, P0, P2 when processes are scanned left to
right in repeated passes.
"""

import pytest

from py_ossim.deadlock.bankers import (
    BankersSession,
    check_safety,
    input_signature,
    request_resources,
)
from py_ossim.deadlock.vectors import need_matrix, vector_add, vector_leq, vector_sub
from py_ossim.logging import Logger, LogLevel

AVAILABLE = [3, 3, 2]
MAXIMUM = [[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]]
ALLOCATION = [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]]

# Two passes make progress; the third finds nothing left and stops.
TEXTBOOK_STEPS = 7
TEXTBOOK_PASSES = 3


# -- Vector arithmetic ----------------------------------------------------------


class TestVectors:
    """Verify the pure vector helpers."""

    def test_leq(self) -> None:
        """Comparison should hold only when every component does."""
        assert vector_leq([1, 2], [1, 3])
        assert not vector_leq([2, 2], [1, 3])

    def test_add_and_sub(self) -> None:
        """Elementwise add and subtract should return tuples."""
        assert vector_add([1, 2], [3, 4]) == (4, 6)
        assert vector_sub([3, 4], [1, 2]) == (2, 2)

    def test_mismatched_lengths_pad_with_zero(self) -> None:
        """The shorter operand should be treated as zero-padded."""
        assert vector_add([1, 2, 3], [1]) == (2, 2, 3)
        assert vector_sub([1], [0, 2]) == (1, -2)
        assert vector_leq([1], [1, 0])

    def test_need_is_max_minus_allocation(self) -> None:
        """Need should be Max - Allocation row by row."""
        assert need_matrix(MAXIMUM, ALLOCATION) == (
            (7, 4, 3),
            (1, 2, 2),
            (6, 0, 0),
            (0, 1, 1),
            (4, 3, 1),
        )

    def test_need_missing_max_row(self) -> None:
        """A process with no Max row should get a negative need."""
        assert need_matrix([], [[1, 2]]) == ((-1, -2),)


# -- Safety check ---------------------------------------------------------------


class TestCheckSafety:
    """Verify the safety algorithm."""

    def test_textbook_example_is_safe(self) -> None:
        """The classic example should be safe with the known sequence."""
        result = check_safety(AVAILABLE, MAXIMUM, ALLOCATION)
        assert result.safe
        assert result.sequence == ("P1", "P3", "P4", "P0", "P2")

    def test_final_work_is_available_plus_all_allocations(self) -> None:
        """Once everyone finishes, work holds every instance in the system."""
        result = check_safety(AVAILABLE, MAXIMUM, ALLOCATION)
        assert result.work == (10, 5, 7)

    def test_every_attempt_is_recorded(self) -> None:
        """Failed attempts should be traced alongside granted ones."""
        result = check_safety(AVAILABLE, MAXIMUM, ALLOCATION)
        assert len(result.steps) == TEXTBOOK_STEPS
        assert result.passes == TEXTBOOK_PASSES
        assert [s.finished for s in result.steps[:3]] == [False, True, False]

    def test_work_never_decreases(self) -> None:
        """Each granted step should add the process's allocation to work."""
        result = check_safety(AVAILABLE, MAXIMUM, ALLOCATION)
        for step in result.steps:
            assert vector_leq(step.work_before, step.work_after)
            if step.finished:
                assert step.work_after == vector_add(step.work_before, step.allocation)
            else:
                assert step.work_after == step.work_before

    def test_sequence_never_forward_references(self) -> None:
        """Each process in the sequence fit in the work available at its turn."""
        result = check_safety(AVAILABLE, MAXIMUM, ALLOCATION)
        granted = [s for s in result.steps if s.finished]
        assert [s.label for s in granted] == list(result.sequence)
        for step in granted:
            assert vector_leq(step.need, step.work_before)

    def test_unsafe_state(self) -> None:
        """Nobody can finish when every need exceeds available."""
        result = check_safety([0, 0], [[2, 2], [2, 2]], [[1, 1], [1, 1]])
        assert not result.safe
        assert result.sequence == ()
        assert result.unfinished == ["P0", "P1"]
        assert result.passes == 1

    def test_partial_sequence_when_unsafe(self) -> None:
        """Processes that could finish still appear when others are stuck."""
        result = check_safety([1, 0], [[1, 0], [5, 5]], [[0, 0], [0, 0]])
        assert not result.safe
        assert result.sequence == ("P0",)
        assert result.unfinished == ["P1"]

    def test_no_processes_is_safe(self) -> None:
        """With no processes the empty sequence is trivially safe."""
        result = check_safety([1, 2], [], [])
        assert result.safe
        assert result.sequence == ()
        assert result.steps == ()

    def test_inputs_are_not_modified(self) -> None:
        """The safety check must not write to the caller's lists."""
        available = list(AVAILABLE)
        allocation = [list(row) for row in ALLOCATION]
        check_safety(available, MAXIMUM, allocation)
        assert available == AVAILABLE
        assert allocation == ALLOCATION

    def test_logger_records_verdict(self) -> None:
        """The verdict should be logged under the bankers source."""
        logger = Logger()
        check_safety(AVAILABLE, MAXIMUM, ALLOCATION, logger=logger)
        infos = logger.filter(min_level=LogLevel.INFO, source="bankers")
        assert "Safe state" in infos[-1].message


# -- Resource requests ----------------------------------------------------------


class TestRequestResources:
    """Verify the Banker's resource-request decision."""

    def test_safe_request_is_granted(self) -> None:
        """P1 asking for (1, 0, 2) leaves the system safe."""
        decision = request_resources(
            AVAILABLE, MAXIMUM, ALLOCATION, process=1, request=[1, 0, 2]
        )
        assert decision.granted
        assert decision.available == (2, 3, 0)
        assert decision.allocation[1] == (3, 0, 2)
        assert decision.safety is not None
        assert decision.safety.safe

    def test_unsafe_request_is_denied(self) -> None:
        """P4 taking (3, 3, 0) would leave nobody able to finish."""
        decision = request_resources(
            AVAILABLE, MAXIMUM, ALLOCATION, process=4, request=[3, 3, 0]
        )
        assert not decision.granted
        assert "unsafe" in decision.reason
        assert decision.available == tuple(AVAILABLE)
        assert decision.safety is not None
        assert not decision.safety.safe

    def test_request_above_need_is_denied(self) -> None:
        """Asking for more than the declared maximum is an error."""
        decision = request_resources(
            AVAILABLE, MAXIMUM, ALLOCATION, process=1, request=[2, 0, 0]
        )
        assert not decision.granted
        assert "more than its need" in decision.reason
        assert decision.safety is None

    def test_request_above_available_must_wait(self) -> None:
        """A request within need but above available cannot be granted yet."""
        decision = request_resources(
            AVAILABLE, MAXIMUM, ALLOCATION, process=0, request=[0, 0, 3]
        )
        assert not decision.granted
        assert "must wait" in decision.reason

    def test_unknown_process_raises(self) -> None:
        """A process index outside the allocation matrix is rejected."""
        with pytest.raises(IndexError, match="No process P5"):
            request_resources(AVAILABLE, MAXIMUM, ALLOCATION, process=5, request=[0, 0, 0])


# -- Step-through ---------------------------------------------------------------


class TestBankersSession:
    """Verify stepping through a safety check."""

    def test_steps_follow_the_trace(self) -> None:
        """Stepping should reveal attempts in trace order."""
        session = BankersSession(AVAILABLE, MAXIMUM, ALLOCATION)
        assert session.total_steps == TEXTBOOK_STEPS
        first = session.step()
        assert first is not None
        assert first.label == "P0"
        assert not first.finished
        session.step()
        assert session.visible_sequence == ["P1"]

    def test_run_to_completion(self) -> None:
        """Running out the session should reveal the whole sequence."""
        session = BankersSession(AVAILABLE, MAXIMUM, ALLOCATION)
        session.run_to_completion()
        assert session.done
        assert session.visible_sequence == list(session.result.sequence)
        assert session.step() is None

    def test_staleness(self) -> None:
        """A session is stale only when its inputs change."""
        session = BankersSession(AVAILABLE, MAXIMUM, ALLOCATION)
        assert not session.is_stale(AVAILABLE, MAXIMUM, ALLOCATION)
        assert session.is_stale([3, 3, 3], MAXIMUM, ALLOCATION)

    def test_signature_is_structural(self) -> None:
        """Lists and tuples with the same values have the same signature."""
        as_tuples = ((3, 3, 2), tuple(map(tuple, MAXIMUM)), tuple(map(tuple, ALLOCATION)))
        assert input_signature(AVAILABLE, MAXIMUM, ALLOCATION) == as_tuples
