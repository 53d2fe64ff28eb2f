"""Sampling primitives backed by a :class:`RandomStream`."""

from __future__ import annotations

import datetime as dt
from typing import Sequence, Tuple

import numpy as np

from qgen.errors import InvariantViolation
from qgen.sampler.stream import RandomStream


def index_for_weight(weight: int, cumulative: Sequence[int]) -> int:
    """
    Return the smallest row whose cumulative weight is at least ``weight``.

    A weight equal to a cumulative boundary selects that row, so with
    cumulative weights ``[10, 15]`` a weight of 10 maps to row 0 and 11 to
    row 1.
    """

    bounds = np.asarray(cumulative, dtype=np.int64)
    idx = int(np.searchsorted(bounds, weight, side="left"))
    if idx >= len(bounds):
        raise InvariantViolation(
            f"random weight {weight} was greater than max weight "
            f"{int(bounds[-1]) if len(bounds) else 0}"
        )
    return idx


def pick_weighted_index(cumulative: Sequence[int], rng: RandomStream) -> int:
    """Draw a row index with probability proportional to its raw weight."""

    if len(cumulative) == 0:
        raise ValueError("cannot draw from an empty weight column")
    total = int(cumulative[-1])
    if total <= 0:
        raise ValueError("cannot draw from a weight column whose weights are all zero")
    return index_for_weight(rng.uniform_int(1, total), cumulative)


def pick_weighted_text(pairs: Sequence[Tuple[str, int]], rng: RandomStream) -> str:
    """
    Choose one text from ``(text, weight)`` pairs.

    The draw lies in ``[0, total)`` and the first text whose running weight
    meets or exceeds it wins.
    """

    total = sum(weight for _, weight in pairs)
    if total <= 0:
        raise ValueError("weighted text needs a positive total weight")
    needle = rng.next_int(total)
    running = 0
    for text, weight in pairs:
        running += weight
        if running >= needle:
            return text
    raise InvariantViolation(f"weighted text draw {needle} exceeded total {total}")


def uniform_date(lo: dt.date, hi: dt.date, rng: RandomStream) -> dt.date:
    """Return a date uniformly drawn from ``[lo, hi]`` inclusive."""

    span = (hi - lo).days
    if span < 0:
        raise ValueError(f"date range is empty: {lo.isoformat()} > {hi.isoformat()}")
    return lo + dt.timedelta(days=rng.uniform_int(0, span))
