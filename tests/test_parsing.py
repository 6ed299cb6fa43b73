"""Tests for the text input grammars."""

import pytest

from py_ossim.deadlock.prevention import EventType, ScenarioEvent
from py_ossim.parsing import (
    ParseError,
    parse_count,
    parse_edges,
    parse_matrix,
    parse_processes,
    parse_scenario,
    parse_vector,
)
from py_ossim.scheduling.process import Process


class TestParseCount:
    """Verify count parsing with its fallback."""

    def test_number(self) -> None:
        """A plain number is used as-is."""
        expected = 5
        assert parse_count("5") == expected

    def test_zero_is_kept(self) -> None:
        """Zero is a valid count."""
        assert parse_count("0") == 0

    def test_fallbacks(self) -> None:
        """Missing, negative and non-numeric counts fall back to three."""
        default = 3
        assert parse_count(None) == default
        assert parse_count("-4") == default
        assert parse_count("many") == default


class TestParseEdges:
    """Verify edge list parsing."""

    def test_pairs(self) -> None:
        """Each line gives a (from, to) pair."""
        assert parse_edges("P1,R1\n P2 , R2 \n") == [("P1", "R1"), ("P2", "R2")]

    def test_missing_target(self) -> None:
        """A line with one field gets an empty target."""
        assert parse_edges("P1") == [("P1", "")]

    def test_blank_lines_skipped(self) -> None:
        """Blank lines are ignored."""
        assert parse_edges("\n\nP1,R1\n\n") == [("P1", "R1")]


class TestParseVectors:
    """Verify lenient vector and matrix parsing."""

    def test_vector(self) -> None:
        """Comma-separated integers form a vector."""
        assert parse_vector("3, 3, 2") == [3, 3, 2]

    def test_vector_drops_garbage(self) -> None:
        """Tokens that are not integers are dropped."""
        assert parse_vector("1,x,,2") == [1, 2]

    def test_matrix(self) -> None:
        """One vector per non-blank line."""
        assert parse_matrix("1,2\n\n3,4") == [[1, 2], [3, 4]]


class TestParseProcesses:
    """Verify strict process list parsing."""

    def test_with_and_without_priority(self) -> None:
        """Priority is optional and defaults to zero."""
        procs = parse_processes("P1,0,5\nP2,1,3,2")
        assert procs == [Process("P1", 0, 5), Process("P2", 1, 3, priority=2)]

    def test_wrong_field_count(self) -> None:
        """Too few fields is an error naming the line."""
        with pytest.raises(ParseError, match="line 2") as exc:
            parse_processes("P1,0,5\nP2,1")
        expected_line = 2
        assert exc.value.line == expected_line

    def test_line_numbers_count_blank_lines(self) -> None:
        """Line numbers refer to the original text."""
        with pytest.raises(ParseError, match="line 3"):
            parse_processes("P1,0,5\n\nP2,x,3")

    def test_non_integer(self) -> None:
        """Numbers must be integers."""
        with pytest.raises(ParseError, match="burst must be an integer"):
            parse_processes("P1,0,five")

    def test_empty_name(self) -> None:
        """A process needs a name."""
        with pytest.raises(ParseError, match="name is empty"):
            parse_processes(",0,5")

    def test_invalid_burst(self) -> None:
        """A zero burst is rejected as a parse error."""
        with pytest.raises(ParseError, match="burst must be at least 1"):
            parse_processes("P1,0,0")

    def test_parse_error_is_value_error(self) -> None:
        """Callers catching ValueError also catch parse errors."""
        with pytest.raises(ValueError, match="line 1"):
            parse_processes("nonsense")

    def test_empty_text(self) -> None:
        """No lines give no processes."""
        assert parse_processes("") == []


class TestParseScenario:
    """Verify prevention scenario parsing."""

    def test_short_and_long_types(self) -> None:
        """Types may be written A/R or allocate/request, any case."""
        events = parse_scenario("P1,R1,A\nP2,R1,request\nP3,R2,Allocate")
        assert events == [
            ScenarioEvent("P1", "R1", EventType.ALLOCATE),
            ScenarioEvent("P2", "R1", EventType.REQUEST),
            ScenarioEvent("P3", "R2", EventType.ALLOCATE),
        ]

    def test_unknown_type(self) -> None:
        """Anything other than A or R is rejected."""
        with pytest.raises(ParseError, match="event type"):
            parse_scenario("P1,R1,X")

    def test_wrong_field_count(self) -> None:
        """Exactly three fields are required."""
        with pytest.raises(ParseError, match="line 1"):
            parse_scenario("P1,R1")
