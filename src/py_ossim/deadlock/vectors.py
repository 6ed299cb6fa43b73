"""Resource vector arithmetic.

Vectors are tuples of ints indexed by resource type; matrices are
tuples of vectors indexed by process.  Every operation returns a new
tuple, so a vector stored in a step trace can never change underneath
whoever kept it.

Vectors of different lengths are padded with zeros on the right.  The
engine does not reject mismatched input; it just computes something
that does not crash.
"""

from __future__ import annotations

from itertools import zip_longest
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Sequence

Vector: TypeAlias = tuple[int, ...]
Matrix: TypeAlias = tuple[Vector, ...]


def as_vector(values: Sequence[int]) -> Vector:
    """Return *values* as an immutable vector."""
    return tuple(values)


def as_matrix(rows: Sequence[Sequence[int]]) -> Matrix:
    """Return *rows* as an immutable matrix."""
    return tuple(tuple(row) for row in rows)


def vector_leq(a: Sequence[int], b: Sequence[int]) -> bool:
    """Return True if ``a[j] <= b[j]`` for every index j."""
    return all(x <= y for x, y in zip_longest(a, b, fillvalue=0))


def vector_add(a: Sequence[int], b: Sequence[int]) -> Vector:
    """Return the elementwise sum ``a + b``."""
    return tuple(x + y for x, y in zip_longest(a, b, fillvalue=0))


def vector_sub(a: Sequence[int], b: Sequence[int]) -> Vector:
    """Return the elementwise difference ``a - b``."""
    return tuple(x - y for x, y in zip_longest(a, b, fillvalue=0))


def need_matrix(maximum: Sequence[Sequence[int]], allocation: Sequence[Sequence[int]]) -> Matrix:
    """Return ``Need = Max - Allocation``, one row per allocation row.

    A process with no Max row is treated as declaring a maximum of zero,
    which gives it a negative need.
    """
    return tuple(
        vector_sub(maximum[i] if i < len(maximum) else (), row) for i, row in enumerate(allocation)
    )
