"""JSON web API for PyOSSim.

This package provides a Flask application that exposes the deadlock and
scheduling engines over HTTP.  The ``create_app`` factory in ``app.py``
serves:

- ``POST /api/deadlock/detect`` — resource-allocation-graph cycles.
- ``POST /api/deadlock/bankers`` — Banker's safety check.
- ``POST /api/deadlock/prevention`` — prevention policy replay.
- ``POST /api/schedule`` — scheduling runs and their comparison.
- ``GET /api/algorithms`` — algorithm descriptions.
"""
