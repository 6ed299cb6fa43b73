"""Decision log for the deadlock and scheduling engines.

The engines return complete result objects, but those say *what* came
out, not *how* the run got there.  Passing a ``Logger`` to an engine
entry point records the decisions along the way, so the shell's ``log``
command can show the reasoning behind the last few results.

Each engine writes under its own ``LogSource``:

- ``detector`` warns once per deadlock cycle found in a RAG, or notes
  at INFO that the graph is deadlock-free.
- ``bankers`` notes at DEBUG each process the safety check lets finish
  together with the new work vector, then the verdict: the safe sequence
  at INFO, or the processes left stuck as a WARNING.  Resource requests
  log whether they were granted.
- ``prevention`` notes every replayed event with its outcome and, for a
  blocked or prevented event, the rule that stopped it.
- ``scheduler`` notes at DEBUG each process finishing, then one summary
  line per algorithm run.  A run that hits its tick limit with work left
  is a WARNING.

Nothing is ever logged at a level above WARNING: bad input raises
``ValueError`` instead of being recorded.
"""

from dataclasses import dataclass
from enum import IntEnum, StrEnum


class LogLevel(IntEnum):
    """How much an entry matters when reading the log back.

    DEBUG entries trace individual steps of a run; INFO entries are the
    outcome of a run; WARNING entries flag a deadlock, an unsafe state
    or a run cut short.
    """

    DEBUG = 0
    INFO = 1
    WARNING = 2


class LogSource(StrEnum):
    """The engine that wrote an entry."""

    DETECTOR = "detector"
    BANKERS = "bankers"
    PREVENTION = "prevention"
    SCHEDULER = "scheduler"


@dataclass(frozen=True)
class LogEntry:
    """One recorded decision.

    Attributes:
        level: How much the decision matters.
        message: The decision in words, e.g. ``"P1 can finish, work is
            now [5, 3, 2]"``.
        source: The engine that made it.

    """

    level: LogLevel
    message: str
    source: str

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """The decisions of every engine run handed this logger, oldest first.

    One logger is shared by a shell for its whole lifetime, so entries
    from successive commands pile up until ``clear`` is called.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of the recorded decisions."""
        return list(self._entries)

    @property
    def sources(self) -> list[str]:
        """Return each engine that has written, in order of first entry."""
        return list(dict.fromkeys(e.source for e in self._entries))

    def log(self, level: LogLevel, message: str, *, source: str) -> None:
        """Record one decision made by *source*."""
        self._entries.append(LogEntry(level=level, message=message, source=source))

    def debug(self, message: str, *, source: str) -> None:
        """Record a single step of a run."""
        self.log(LogLevel.DEBUG, message, source=source)

    def info(self, message: str, *, source: str) -> None:
        """Record the outcome of a run."""
        self.log(LogLevel.INFO, message, source=source)

    def warning(self, message: str, *, source: str) -> None:
        """Record a deadlock, an unsafe state or a run cut short."""
        self.log(LogLevel.WARNING, message, source=source)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return the decisions worth reading for one question.

        ``filter(min_level=LogLevel.WARNING)`` answers "what went wrong",
        ``filter(source="bankers")`` replays one engine's reasoning.

        Args:
            min_level: Drop entries quieter than this.
            source: Keep only this engine's entries.

        Returns:
            The matching entries, oldest first, as a new list.

        """
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
        ]

    def lines(self, *, source: str | None = None) -> list[str]:
        """Return entries formatted for display, optionally for one engine."""
        return [str(e) for e in self.filter(source=source)]

    def clear(self) -> None:
        self._entries.clear()
