"""Seeded random stream and sampling helpers."""

from .stream import RandomStream
from .draws import (
    index_for_weight,
    pick_weighted_index,
    pick_weighted_text,
    uniform_date,
)

__all__ = [
    "RandomStream",
    "index_for_weight",
    "pick_weighted_index",
    "pick_weighted_text",
    "uniform_date",
]
