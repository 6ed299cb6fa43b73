"""PyOSSim — an educational simulator for deadlocks and CPU scheduling."""

__version__ = "0.1.0"
