"""Flask application factory for the simulator's JSON API.

The ``create_app`` function returns a Flask app exposing the engine:

- ``POST /api/deadlock/detect`` — RAG cycle detection.
- ``POST /api/deadlock/bankers`` — Banker's safety check with full trace.
- ``POST /api/deadlock/prevention`` — prevention policy replay.
- ``POST /api/schedule`` — run scheduling algorithms and compare them.
- ``GET /api/algorithms`` — algorithm descriptions.

Request bodies carry text in the grammars of ``py_ossim.parsing``
(multi-line strings).  Input that does not parse, and unknown policy or
algorithm names, are answered with HTTP 400 and ``{"error": ...}``.  A
deadlock or an unsafe state is a normal 200 response.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, jsonify, request

from py_ossim.config import SimulationConfig
from py_ossim.deadlock.bankers import check_safety
from py_ossim.deadlock.cycles import find_cycles
from py_ossim.deadlock.graph import build_graph
from py_ossim.deadlock.prevention import simulate_prevention
from py_ossim.parsing import (
    parse_count,
    parse_edges,
    parse_matrix,
    parse_processes,
    parse_scenario,
    parse_vector,
)
from py_ossim.scheduling.algorithms import ALGORITHM_INFO, Algorithm, SchedulerResult, simulate
from py_ossim.scheduling.report import compare

_HTTP_BAD_REQUEST = 400


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key, "")
    return value if isinstance(value, str) else str(value)


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    msg = f"{key} must be an integer, got {value!r}"
    # JSON numbers like 2.7 and booleans would otherwise pass through int().
    if isinstance(value, bool | float):
        raise ValueError(msg)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(msg) from None


def _algorithm_names(data: dict[str, Any]) -> list[str]:
    """Read ``algorithms`` as a list of names or a comma-separated string.

    A missing or empty value, or the string ``"all"``, selects every
    algorithm, as the shell's ``schedule`` command does.
    """
    value = data.get("algorithms")
    if not value or value == "all":
        return [a.value for a in Algorithm]
    if isinstance(value, str):
        return [name.strip() for name in value.split(",") if name.strip()]
    if isinstance(value, list) and all(isinstance(name, str) for name in value):
        return value
    msg = f"algorithms must be a list of names or a comma-separated string, got {value!r}"
    raise ValueError(msg)


def _result_json(result: SchedulerResult) -> dict[str, Any]:
    stats = result.stats
    return {
        "algorithm": result.algorithm.value,
        "name": result.name,
        "timeline": list(result.timeline),
        "processes": [
            {
                "name": p.name,
                "arrival": p.arrival,
                "burst": p.burst,
                "priority": p.priority,
                "start": p.start,
                "finish": p.finish,
                "turnaround": p.turnaround,
                "waiting": p.waiting,
                "completed": p.completed,
            }
            for p in result.processes
        ],
        "stats": None
        if stats is None
        else {
            "avg_turnaround": stats.avg_turnaround,
            "avg_waiting": stats.avg_waiting,
            "cpu_utilization": stats.cpu_utilization,
            "total_processes": stats.total_processes,
        },
    }


def _bad_input(error: ValueError) -> tuple[Response, int]:
    """Report unparseable input as a client error."""
    return jsonify({"error": str(error)}), _HTTP_BAD_REQUEST


def create_app(config: SimulationConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Default scheduler settings for ``/api/schedule``.

    Returns:
        A configured Flask application ready to serve.

    """
    defaults = config or SimulationConfig()
    app = Flask(__name__)
    app.register_error_handler(ValueError, _bad_input)

    def body() -> dict[str, Any]:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    @app.route("/api/deadlock/detect", methods=["POST"])
    def detect() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Build a RAG and return its deadlock cycles.

        Expects JSON: ``{"processes", "resources", "allocations", "requests"}``.
        """
        data = body()
        graph = build_graph(
            parse_count(_text(data, "processes") or None),
            parse_count(_text(data, "resources") or None),
            parse_edges(_text(data, "allocations")),
            parse_edges(_text(data, "requests")),
        )
        cycles = find_cycles(graph)
        return jsonify(
            {
                "processes": list(graph.processes),
                "resources": list(graph.resources),
                "edges": [
                    {"from": e.source, "to": e.target, "kind": e.kind.value} for e in graph.edges
                ],
                "cycles": [list(c.nodes) for c in cycles],
                "deadlocked": bool(cycles),
            }
        )

    @app.route("/api/deadlock/bankers", methods=["POST"])
    def bankers() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Run the Banker's safety check.

        Expects JSON: ``{"available", "max", "allocation"}``.
        """
        data = body()
        result = check_safety(
            parse_vector(_text(data, "available")),
            parse_matrix(_text(data, "max")),
            parse_matrix(_text(data, "allocation")),
        )
        return jsonify(
            {
                "safe": result.safe,
                "sequence": list(result.sequence),
                "need": [list(row) for row in result.need],
                "steps": [
                    {
                        "process": s.process,
                        "need": list(s.need),
                        "work_before": list(s.work_before),
                        "allocation": list(s.allocation),
                        "work_after": list(s.work_after),
                        "finished": s.finished,
                    }
                    for s in result.steps
                ],
            }
        )

    @app.route("/api/deadlock/prevention", methods=["POST"])
    def prevention() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Replay a scenario under a prevention policy.

        Expects JSON: ``{"policy", "events"}``.
        """
        data = body()
        result = simulate_prevention(
            parse_scenario(_text(data, "events")),
            _text(data, "policy") or "none",
        )
        return jsonify(
            {
                "policy": result.policy.value,
                "policy_name": result.policy.display_name,
                "timeline": [
                    {
                        "step": e.step,
                        "process": e.process,
                        "resource": e.resource,
                        "type": e.type.value,
                        "outcome": e.outcome.value,
                        "reason": e.reason,
                    }
                    for e in result.timeline
                ],
                "allowed": result.allowed,
                "blocked": result.blocked,
                "prevented": result.prevented,
            }
        )

    @app.route("/api/schedule", methods=["POST"])
    def schedule() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run scheduling algorithms over a process list.

        Expects JSON: ``{"processes", "algorithms", "quantum", "aging_rate",
        "context_switch"}``; ``algorithms`` defaults to all six.
        """
        data = body()
        processes = parse_processes(_text(data, "processes"))
        if not processes:
            return jsonify({"error": "Please enter valid process data"}), _HTTP_BAD_REQUEST
        algorithms = [Algorithm(name) for name in _algorithm_names(data)]
        config = defaults.with_overrides(
            quantum=_optional_int(data, "quantum"),
            aging_rate=_optional_int(data, "aging_rate"),
            context_switch=_optional_int(data, "context_switch"),
        )
        results = simulate(processes, algorithms, config=config)
        return jsonify(
            {
                "results": [_result_json(r) for r in results],
                "comparison": [
                    {
                        "name": row.name,
                        "avg_turnaround": row.avg_turnaround,
                        "avg_waiting": row.avg_waiting,
                        "cpu_utilization": row.cpu_utilization,
                        "best_turnaround": row.best_turnaround,
                        "best_waiting": row.best_waiting,
                        "best_utilization": row.best_utilization,
                    }
                    for row in compare(results)
                ],
            }
        )

    @app.route("/api/algorithms")
    def algorithms() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Describe every scheduling algorithm."""
        return jsonify(
            {
                algorithm.value: {
                    "name": info.name,
                    "description": info.description,
                    "complexity": info.complexity,
                    "advantages": list(info.advantages),
                    "disadvantages": list(info.disadvantages),
                }
                for algorithm, info in ALGORITHM_INFO.items()
            }
        )

    return app


def main() -> None:
    """Run the development server.

    This is the ``py-ossim-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
