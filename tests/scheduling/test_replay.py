"""Tests for tick-by-tick timeline replay."""

from py_ossim.scheduling.algorithms import Algorithm, SchedulerResult, simulate
from py_ossim.scheduling.process import Process
from py_ossim.scheduling.replay import TimelineSession


def _results() -> list[SchedulerResult]:
    """Run FCFS and SRT over a small workload with a gap."""
    procs = [Process("P1", 0, 2), Process("P2", 3, 1)]
    return simulate(procs, [Algorithm.FCFS, Algorithm.SRT])


class TestTimelineSession:
    """Verify stepping through several timelines."""

    def test_total_steps_spans_all_results(self) -> None:
        """Every tick of every result is one step."""
        results = _results()
        session = TimelineSession(results)
        assert session.total_steps == sum(len(r.timeline) for r in results)

    def test_first_tick(self) -> None:
        """The first step is tick 0 of the first result."""
        session = TimelineSession(_results())
        tick = session.step()
        assert tick is not None
        assert tick.tick == 0
        assert tick.label == "P1"
        assert str(tick) == "[FCFS (First Come First Serve)] t=0: P1"

    def test_idle_tick(self) -> None:
        """Idle ticks render as IDLE."""
        session = TimelineSession(_results())
        ticks = session.run_to_completion()
        idle = ticks[2]
        assert idle.idle
        assert str(idle).endswith("t=2: IDLE")

    def test_moves_on_to_next_algorithm(self) -> None:
        """After one timeline ends the next one starts at tick 0."""
        results = _results()
        session = TimelineSession(results)
        for _ in results[0].timeline:
            session.step()
        tick = session.step()
        assert tick is not None
        assert tick.algorithm == "SRT (Shortest Remaining Time)"
        assert tick.tick == 0

    def test_current(self) -> None:
        """``current`` is the last revealed tick."""
        session = TimelineSession(_results())
        assert session.current is None
        first = session.step()
        assert session.current == first

    def test_no_results(self) -> None:
        """Replaying nothing is immediately done."""
        session = TimelineSession([])
        assert session.done
        assert session.step() is None
