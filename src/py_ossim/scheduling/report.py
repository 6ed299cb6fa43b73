"""Text reports for scheduler results.

Pure functions that turn ``SchedulerResult`` objects into strings or
plain data: an ASCII Gantt chart, a per-process table, a side-by-side
comparison that marks the best performer per metric, and a Markdown
export.  No I/O happens here; callers decide where the text goes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_ossim.scheduling.algorithms import IDLE

if TYPE_CHECKING:
    from collections.abc import Sequence

    from py_ossim.scheduling.algorithms import SchedulerResult

# Ticks shown in an ASCII Gantt chart before truncating with "...".
GANTT_WIDTH = 30
_RULE_WIDTH = 80


@dataclass(frozen=True)
class ComparisonRow:
    """One algorithm's averages, with best-in-class flags."""

    name: str
    avg_turnaround: float
    avg_waiting: float
    cpu_utilization: float
    best_turnaround: bool
    best_waiting: bool
    best_utilization: bool


def compare(results: Sequence[SchedulerResult]) -> list[ComparisonRow]:
    """Tabulate *results* and flag the best value of each metric.

    Lower turnaround and waiting are better; higher utilization is
    better.  Ties are all flagged.  Results with no statistics (nothing
    completed) are left out.
    """
    scored = [(r, r.stats) for r in results if r.stats is not None]
    if not scored:
        return []
    best_tat = min(s.avg_turnaround for _, s in scored)
    best_wt = min(s.avg_waiting for _, s in scored)
    best_util = max(s.cpu_utilization for _, s in scored)
    return [
        ComparisonRow(
            name=r.name,
            avg_turnaround=s.avg_turnaround,
            avg_waiting=s.avg_waiting,
            cpu_utilization=s.cpu_utilization,
            best_turnaround=s.avg_turnaround == best_tat,
            best_waiting=s.avg_waiting == best_wt,
            best_utilization=s.cpu_utilization == best_util,
        )
        for r, s in scored
    ]


def format_comparison(rows: Sequence[ComparisonRow]) -> str:
    """Render comparison rows as a fixed-width table; ``*`` marks the best."""

    def cell(value: float, best: bool, suffix: str = "") -> str:  # noqa: FBT001
        return f"{value:.2f}{suffix}{'*' if best else ''}"

    lines = [f"{'ALGORITHM':<36} {'AVG TAT':>10} {'AVG WT':>10} {'CPU %':>10}"]
    lines.extend(
        f"{row.name:<36} {cell(row.avg_turnaround, row.best_turnaround):>10}"
        f" {cell(row.avg_waiting, row.best_waiting):>10}"
        f" {cell(row.cpu_utilization, row.best_utilization, '%'):>10}"
        for row in rows
    )
    return "\n".join(lines)


def ascii_gantt(timeline: Sequence[str], *, width: int = GANTT_WIDTH) -> str:
    """Draw the first *width* ticks of *timeline* as an ASCII Gantt chart."""
    shown = timeline[:width]
    more = "..." if len(timeline) > width else ""
    border = "      " + "+---" * (len(shown) + 1)

    labels = ["IDLE" if slot == IDLE else slot for slot in shown]
    boxes = ["   " if slot == IDLE else f" {slot} " for slot in shown]

    lines = [
        "GANTT CHART:",
        "─" * _RULE_WIDTH,
        "Time: " + "".join(f"{i:>4}" for i in range(len(shown))) + more,
        "Proc: " + "".join(f"{label:>4}" for label in labels) + more,
        border,
        "      " + "".join(f"|{box:<3}" for box in boxes) + "|",
        border,
        "      " + "".join(f"{i:>4}" for i in range(len(shown) + 1)),
    ]
    return "\n".join(lines)


def process_table(result: SchedulerResult) -> str:
    """Render the completed processes of *result* as a fixed-width table."""
    lines = [
        f"{'PROCESS':<10} {'ARRIVAL':>7} {'BURST':>5} {'START':>5}"
        f" {'FINISH':>6} {'TAT':>5} {'WT':>5}"
    ]
    lines.extend(
        f"{p.name:<10} {p.arrival:>7} {p.burst:>5} {p.start:>5} {p.finish:>6}"
        f" {p.turnaround:>5} {p.waiting:>5}"
        for p in result.completed
    )
    return "\n".join(lines)


def format_result(result: SchedulerResult) -> str:
    """Render one result: name, Gantt chart, process table and summary."""
    parts = [f"== {result.name} ==", ascii_gantt(result.timeline), process_table(result)]
    stats = result.stats
    if stats is None:
        parts.append("No process completed.")
    else:
        parts.append(
            f"Average turnaround: {stats.avg_turnaround:.2f}\n"
            f"Average waiting:    {stats.avg_waiting:.2f}\n"
            f"CPU utilization:    {stats.cpu_utilization:.2f}%\n"
            f"Completed:          {stats.total_processes}"
        )
    return "\n\n".join(parts)


def export_markdown(results: Sequence[SchedulerResult]) -> str:
    """Summarise *results* as a Markdown document."""
    out = ["# CPU Scheduling Simulation Results", ""]
    for result in results:
        out.extend([f"## {result.name}", ""])
        stats = result.stats
        if stats is None:
            out.extend(["No process completed.", ""])
            continue
        out.extend(
            [
                f"**Average Turnaround Time:** {stats.avg_turnaround:.2f}",
                f"**Average Waiting Time:** {stats.avg_waiting:.2f}",
                f"**CPU Utilization:** {stats.cpu_utilization:.2f}%",
                "",
            ]
        )
    return "\n".join(out)
