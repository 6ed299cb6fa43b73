"""The shell — command interpreter for the simulator.

The shell reads a command string, splits it into a command name and
arguments, dispatches to a handler and returns the output as a string.

Scenario arguments use the text grammars from ``py_ossim.parsing`` with
``;`` standing in for a line break, so a whole scenario fits on one
command line::

    detect 3 3 P1,R1;P2,R2;P3,R3 P1,R2;P2,R3;P3,R1
    bankers 3,3,2 7,5,3;3,2,2;9,0,2;2,2,2;4,3,3 0,1,0;2,0,0;3,0,2;2,1,1;0,0,2
    schedule fcfs,rr P1,0,5;P2,1,3;P3,2,8 quantum=2

Design choices:
    - **Returns strings, not prints.**  The shell is fully testable; the
      REPL decides how to display output.
    - **Command dispatch via a dict.**  Adding a command means writing
      a method and adding one entry.
    - **Sessions live on the shell.**  Step-through commands keep their
      session object here, one per view, and rebuild it when the inputs
      change.
"""

from __future__ import annotations

import shlex
from collections.abc import Callable
from typing import TypeAlias

from py_ossim.config import SimulationConfig
from py_ossim.deadlock.bankers import (
    BankersSession,
    SafetyStep,
    check_safety,
    request_resources,
)
from py_ossim.deadlock.cycles import Cycle, DetectionSession
from py_ossim.deadlock.graph import build_graph
from py_ossim.deadlock.prevention import PreventionPolicy, simulate_prevention
from py_ossim.logging import Logger, LogSource
from py_ossim.parsing import (
    parse_count,
    parse_edges,
    parse_matrix,
    parse_processes,
    parse_scenario,
    parse_vector,
)
from py_ossim.scheduling.algorithms import ALGORITHM_INFO, Algorithm, SchedulerResult, simulate
from py_ossim.scheduling.replay import TimelineSession
from py_ossim.scheduling.report import (
    ascii_gantt,
    compare,
    export_markdown,
    format_comparison,
    format_result,
)

# Type alias for a command handler: takes a list of args, returns output.
_Handler: TypeAlias = Callable[[list[str]], str]

# Placeholder for an empty scenario argument.
_EMPTY_ARG = "-"

_BANKERS_ARGS = 3
_DETECT_MIN_ARGS = 3
_REQUEST_ARGS = 5
_PREVENT_ARGS = 2
_SCHEDULE_MIN_ARGS = 2
_GANTT_MIN_ARGS = 2

_OPTION_NAMES = {
    "quantum": "quantum",
    "aging": "aging_rate",
    "overhead": "context_switch",
}


def _lines_arg(arg: str) -> str:
    """Turn a ``;``-separated argument back into multi-line text."""
    return "" if arg == _EMPTY_ARG else arg.replace(";", "\n")


def _format_vector(values: tuple[int, ...] | list[int]) -> str:
    return "[" + ", ".join(str(v) for v in values) + "]"


class Shell:
    """Command interpreter over the simulation engine."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(self, *, config: SimulationConfig | None = None) -> None:
        """Create a shell.

        Args:
            config: Default scheduler settings; ``schedule`` options
                override them per command.

        """
        self._config = config or SimulationConfig()
        self._logger = Logger()
        self._history: list[str] = []
        self._detection: DetectionSession | None = None
        self._detection_args: list[str] | None = None
        self._bankers: BankersSession | None = None
        self._results: list[SchedulerResult] = []
        self._replay: TimelineSession | None = None

        # Command dispatch table — maps command names to handler methods.
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "detect": self._cmd_detect,
            "detect-step": self._cmd_detect_step,
            "bankers": self._cmd_bankers,
            "bankers-step": self._cmd_bankers_step,
            "request": self._cmd_request,
            "prevent": self._cmd_prevent,
            "schedule": self._cmd_schedule,
            "gantt": self._cmd_gantt,
            "replay": self._cmd_replay,
            "export": self._cmd_export,
            "info": self._cmd_info,
            "log": self._cmd_log,
            "history": self._cmd_history,
            "exit": self._cmd_exit,
        }

    @property
    def logger(self) -> Logger:
        """Return the shell's decision log."""
        return self._logger

    @property
    def command_names(self) -> list[str]:
        """Return all command names, sorted."""
        return sorted(self._commands)

    def execute(self, command: str) -> str:
        """Parse and execute a single command.

        Args:
            command: The raw command string (e.g. "info srt").

        Returns:
            The command output, or an ``Error:`` / ``Unknown command:``
            message.

        """
        stripped = command.strip()
        if not stripped:
            return ""
        self._history.append(stripped)
        try:
            parts = shlex.split(stripped)
        except ValueError as e:
            return f"Error: {e}"
        name, args = parts[0], parts[1:]
        handler = self._commands.get(name)
        if handler is None:
            return f"Unknown command: {name}"
        try:
            return handler(args)
        except ValueError as e:
            # ParseError and unknown enum values both land here.
            return f"Error: {e}"

    # -- General ---------------------------------------------------------------

    def _cmd_help(self, _args: list[str]) -> str:
        """List available commands."""
        return "\n".join(
            [
                "Commands (use ';' between lines, '-' for an empty list):",
                "  detect <procs> <resources> <allocs> [requests]",
                "  detect-step [<procs> <resources> <allocs> [requests]]",
                "  bankers <available> <max> <allocation>",
                "  bankers-step <available> <max> <allocation>",
                "  request <available> <max> <allocation> <pid> <request>",
                "  prevent <policy> <events>",
                "  schedule <algs|all> <processes> [quantum=N] [aging=N] [overhead=N]",
                "  gantt <algorithm> <processes> [quantum=N] [aging=N] [overhead=N]",
                "  replay            step one tick through the last schedule",
                "  export            markdown summary of the last schedule",
                "  info <algorithm>",
                "  log [detector|bankers|prevention|scheduler]",
                "  history | help | exit",
            ]
        )

    def _cmd_log(self, args: list[str]) -> str:
        """Show the decision log, optionally for one engine."""
        source = LogSource(args[0]) if args else None
        lines = self._logger.lines(source=source)
        return "\n".join(lines) if lines else "No log entries."

    def _cmd_history(self, _args: list[str]) -> str:
        """Show command history."""
        if not self._history:
            return "No history."
        return "\n".join(f"  {i + 1}  {cmd}" for i, cmd in enumerate(self._history))

    def _cmd_exit(self, _args: list[str]) -> str:
        """Signal the REPL to stop."""
        return self.EXIT_SENTINEL

    # -- Deadlock detection ----------------------------------------------------

    def _new_detection(self, args: list[str]) -> DetectionSession:
        if len(args) < _DETECT_MIN_ARGS:
            msg = "Usage: detect <procs> <resources> <allocs> [requests]"
            raise ValueError(msg)
        graph = build_graph(
            parse_count(args[0]),
            parse_count(args[1]),
            parse_edges(_lines_arg(args[2])),
            parse_edges(_lines_arg(args[3])) if len(args) > _DETECT_MIN_ARGS else [],
        )
        return DetectionSession(graph, logger=self._logger)

    @staticmethod
    def _format_cycles(cycles: tuple[Cycle, ...]) -> str:
        if not cycles:
            return "No deadlock detected — the graph has no cycle."
        lines = [f"DEADLOCK detected: {len(cycles)} cycle(s)"]
        lines.extend(f"  {i + 1}. {cycle}" for i, cycle in enumerate(cycles))
        return "\n".join(lines)

    def _cmd_detect(self, args: list[str]) -> str:
        """Build a RAG and report every deadlock cycle."""
        self._detection = None
        self._detection_args = None
        session = self._new_detection(args)
        return self._format_cycles(session.cycles)

    def _cmd_detect_step(self, args: list[str]) -> str:
        """Reveal detected cycles one at a time."""
        if args and args != self._detection_args:
            self._detection = self._new_detection(args)
            self._detection_args = args
        if self._detection is None:
            return "Usage: detect-step <procs> <resources> <allocs> [requests]"
        shown = self._detection.step()
        if shown is None:
            self._detection = None
            self._detection_args = None
            return "Step-by-step analysis complete. Run detect-step again to start over."
        out = self._format_cycles(shown)
        if self._detection.done:
            out += "\nStep-by-step analysis complete!"
        return out

    # -- Banker's algorithm ----------------------------------------------------

    @staticmethod
    def _bankers_inputs(args: list[str]) -> tuple[list[int], list[list[int]], list[list[int]]]:
        if len(args) != _BANKERS_ARGS:
            msg = "expected <available> <max> <allocation>"
            raise ValueError(msg)
        return (
            parse_vector(args[0]),
            parse_matrix(_lines_arg(args[1])),
            parse_matrix(_lines_arg(args[2])),
        )

    @staticmethod
    def _format_step(index: int, step: SafetyStep) -> str:
        verdict = "finish" if step.finished else "wait"
        return (
            f"  {index:>3}. {step.label}: need {_format_vector(step.need)}"
            f" <= work {_format_vector(step.work_before)}? {verdict}"
            f" → work {_format_vector(step.work_after)}"
        )

    def _cmd_bankers(self, args: list[str]) -> str:
        """Run the Banker's safety algorithm to completion."""
        available, maximum, allocation = self._bankers_inputs(args)
        result = check_safety(available, maximum, allocation, logger=self._logger)
        lines = [self._format_step(i + 1, s) for i, s in enumerate(result.steps)]
        if result.safe:
            lines.append(f"SAFE state. Safe sequence: {' → '.join(result.sequence)}")
        else:
            lines.append(
                "UNSAFE state. No complete safe sequence exists."
                f" Stuck: {', '.join(result.unfinished)}"
            )
        return "\n".join(lines)

    def _cmd_bankers_step(self, args: list[str]) -> str:
        """Reveal the next attempt of the Banker's safety algorithm."""
        available, maximum, allocation = self._bankers_inputs(args)
        if self._bankers is None or self._bankers.is_stale(available, maximum, allocation):
            self._bankers = BankersSession(available, maximum, allocation, logger=self._logger)
        session = self._bankers
        session.step()
        lines = [self._format_step(i + 1, s) for i, s in enumerate(session.visible_steps)]
        lines.append(f"Step {session.cursor}/{session.total_steps}")
        if session.done:
            result = session.result
            lines.append(
                f"SAFE state. Safe sequence: {' → '.join(result.sequence)}"
                if result.safe
                else "UNSAFE state. No complete safe sequence exists."
            )
        return "\n".join(lines)

    def _cmd_request(self, args: list[str]) -> str:
        """Decide a resource request with the Banker's algorithm."""
        if len(args) != _REQUEST_ARGS:
            return "Usage: request <available> <max> <allocation> <pid> <request>"
        available, maximum, allocation = self._bankers_inputs(args[:_BANKERS_ARGS])
        try:
            pid = int(args[3].removeprefix("P"))
        except ValueError:
            return f"Error: invalid process '{args[3]}'"
        try:
            decision = request_resources(
                available,
                maximum,
                allocation,
                process=pid,
                request=parse_vector(args[4]),
                logger=self._logger,
            )
        except IndexError as e:
            return f"Error: {e}"
        verdict = "GRANTED" if decision.granted else "DENIED"
        return f"{verdict}: {decision.reason}"

    # -- Prevention ------------------------------------------------------------

    def _cmd_prevent(self, args: list[str]) -> str:
        """Replay scripted events under a prevention policy."""
        if len(args) != _PREVENT_ARGS:
            names = ", ".join(p.value for p in PreventionPolicy)
            return f"Usage: prevent <policy> <events>  (policies: {names})"
        policy = PreventionPolicy(args[0])
        result = simulate_prevention(
            parse_scenario(_lines_arg(args[1])),
            policy,
            logger=self._logger,
        )
        lines = [f"Prevention Method: {policy.display_name}"]
        lines.extend(f"  {event}" for event in result.timeline)
        lines.append(
            f"Allowed: {result.allowed}  Blocked: {result.blocked}  Prevented: {result.prevented}"
        )
        return "\n".join(lines)

    # -- Scheduling ------------------------------------------------------------

    def _parse_options(self, args: list[str]) -> SimulationConfig:
        overrides: dict[str, int | None] = {}
        for arg in args:
            key, sep, value = arg.partition("=")
            field = _OPTION_NAMES.get(key)
            if not sep or field is None:
                msg = f"unknown option '{arg}' (use quantum=, aging=, overhead=)"
                raise ValueError(msg)
            try:
                overrides[field] = int(value)
            except ValueError:
                msg = f"{key} must be an integer, got '{value}'"
                raise ValueError(msg) from None
        return self._config.with_overrides(**overrides)

    def _cmd_schedule(self, args: list[str]) -> str:
        """Run one or more scheduling algorithms over a process list."""
        if len(args) < _SCHEDULE_MIN_ARGS:
            return "Usage: schedule <algs|all> <processes> [quantum=N] [aging=N] [overhead=N]"
        algorithms = (
            list(Algorithm)
            if args[0] == "all"
            else [Algorithm(a.strip()) for a in args[0].split(",") if a.strip()]
        )
        processes = parse_processes(_lines_arg(args[1]))
        if not processes:
            return "Error: no processes given"
        config = self._parse_options(args[2:])
        if not algorithms:
            return "Error: no algorithm selected"

        self._results = simulate(processes, algorithms, config=config, logger=self._logger)
        self._replay = None
        out = [format_result(r) for r in self._results]
        if len(self._results) > 1:
            out.append(format_comparison(compare(self._results)))
        return "\n\n".join(out)

    def _cmd_gantt(self, args: list[str]) -> str:
        """Draw the ASCII Gantt chart of one algorithm."""
        if len(args) < _GANTT_MIN_ARGS:
            return "Usage: gantt <algorithm> <processes> [quantum=N] [aging=N] [overhead=N]"
        algorithm = Algorithm(args[0])
        processes = parse_processes(_lines_arg(args[1]))
        if not processes:
            return "Error: no processes given"
        config = self._parse_options(args[2:])
        [result] = simulate(processes, [algorithm], config=config, logger=self._logger)
        return f"== {result.name} ==\n{ascii_gantt(result.timeline)}"

    def _cmd_replay(self, _args: list[str]) -> str:
        """Reveal the next tick of the last schedule run."""
        if not self._results:
            return "Nothing to replay. Run schedule first."
        if self._replay is None:
            self._replay = TimelineSession(self._results)
        tick = self._replay.step()
        if tick is None:
            self._replay = None
            return "Replay complete."
        return str(tick)

    def _cmd_export(self, _args: list[str]) -> str:
        """Export the last schedule run as Markdown."""
        if not self._results:
            return "No results to export."
        return export_markdown(self._results)

    def _cmd_info(self, args: list[str]) -> str:
        """Describe a scheduling algorithm."""
        if not args:
            names = ", ".join(a.value for a in Algorithm)
            return f"Usage: info <algorithm>  (algorithms: {names})"
        info = ALGORITHM_INFO[Algorithm(args[0])]
        lines = [
            info.name,
            f"Description: {info.description}",
            f"Time Complexity: {info.complexity}",
            "Advantages:",
            *(f"  + {a}" for a in info.advantages),
            "Disadvantages:",
            *(f"  - {d}" for d in info.disadvantages),
        ]
        return "\n".join(lines)
