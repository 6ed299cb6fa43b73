"""Text input grammars.

Users describe scenarios as small blocks of text, one record per line:

- **Edge list** — ``from,to`` (e.g. ``P1,R1``).
- **Vector** — comma-separated integers (``3,3,2``).
- **Matrix** — one vector per line.
- **Process list** — ``name,arrival,burst[,priority]``.
- **Prevention scenario** — ``process,resource,type`` with type ``A``
  (allocate) or ``R`` (request).

Blank lines are skipped everywhere.  Vectors are lenient (tokens that
are not integers are dropped), matching how loosely people type them.
Process lists and scenarios are strict: a bad line raises
``ParseError`` naming the line, because a silently skipped process
would change every scheduling result.
"""

from __future__ import annotations

from py_ossim.config import DEFAULT_COUNT
from py_ossim.deadlock.prevention import EventType, ScenarioEvent
from py_ossim.scheduling.process import Process

_MIN_PROCESS_FIELDS = 3
_MAX_PROCESS_FIELDS = 4
_SCENARIO_FIELDS = 3

_EVENT_TYPES = {
    "a": EventType.ALLOCATE,
    "allocate": EventType.ALLOCATE,
    "r": EventType.REQUEST,
    "request": EventType.REQUEST,
}


class ParseError(ValueError):
    """Raised when a line of input does not match its grammar."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        """Create a parse error, optionally tied to a 1-based line number."""
        self.line = line
        super().__init__(f"line {line}: {message}" if line is not None else message)


def _lines(text: str) -> list[tuple[int, str]]:
    """Return ``(line_number, stripped_line)`` for every non-blank line."""
    return [(n, line.strip()) for n, line in enumerate(text.splitlines(), start=1) if line.strip()]


def _fields(line: str) -> list[str]:
    return [part.strip() for part in line.split(",")]


def _int_field(value: str, what: str, line: int) -> int:
    try:
        return int(value)
    except ValueError:
        raise ParseError(f"{what} must be an integer, got {value!r}", line=line) from None


def parse_count(text: str | None, *, default: int = DEFAULT_COUNT) -> int:
    """Parse a non-negative count, falling back to *default*."""
    try:
        value = int(text) if text is not None else default
    except ValueError:
        return default
    return value if value >= 0 else default


def parse_edges(text: str) -> list[tuple[str, str]]:
    """Parse ``from,to`` lines into pairs.

    Lines with fewer than two fields give an empty target; extra fields
    are ignored.
    """
    edges: list[tuple[str, str]] = []
    for _, line in _lines(text):
        parts = _fields(line)
        edges.append((parts[0], parts[1] if len(parts) > 1 else ""))
    return edges


def parse_vector(text: str) -> list[int]:
    """Parse comma-separated integers, dropping tokens that are not integers."""
    values: list[int] = []
    for token in text.split(","):
        try:
            values.append(int(token.strip()))
        except ValueError:
            continue
    return values


def parse_matrix(text: str) -> list[list[int]]:
    """Parse one vector per non-blank line."""
    return [parse_vector(line) for _, line in _lines(text)]


def parse_processes(text: str) -> list[Process]:
    """Parse ``name,arrival,burst[,priority]`` lines into processes.

    Raises:
        ParseError: On a wrong field count, an empty name, a non-integer
            number, a negative arrival or a burst below 1.

    """
    processes: list[Process] = []
    for n, line in _lines(text):
        parts = _fields(line)
        if not _MIN_PROCESS_FIELDS <= len(parts) <= _MAX_PROCESS_FIELDS:
            msg = f"expected name,arrival,burst[,priority], got {len(parts)} fields"
            raise ParseError(msg, line=n)
        name = parts[0]
        if not name:
            raise ParseError("process name is empty", line=n)
        arrival = _int_field(parts[1], "arrival", n)
        burst = _int_field(parts[2], "burst", n)
        priority = _int_field(parts[3], "priority", n) if len(parts) == _MAX_PROCESS_FIELDS else 0
        try:
            processes.append(Process(name=name, arrival=arrival, burst=burst, priority=priority))
        except ValueError as e:
            raise ParseError(str(e), line=n) from e
    return processes


def parse_scenario(text: str) -> list[ScenarioEvent]:
    """Parse ``process,resource,type`` lines into prevention events.

    Raises:
        ParseError: On a wrong field count or an unknown event type.

    """
    events: list[ScenarioEvent] = []
    for n, line in _lines(text):
        parts = _fields(line)
        if len(parts) != _SCENARIO_FIELDS:
            msg = f"expected process,resource,type, got {len(parts)} fields"
            raise ParseError(msg, line=n)
        process, resource, kind = parts
        event_type = _EVENT_TYPES.get(kind.lower())
        if event_type is None:
            raise ParseError(f"event type must be A or R, got {kind!r}", line=n)
        events.append(ScenarioEvent(process=process, resource=resource, type=event_type))
    return events
