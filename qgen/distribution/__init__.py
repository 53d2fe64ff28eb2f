"""Distribution tables and their registry."""

from .table import (
    DistributionTable,
    load_distribution,
    parse_distribution,
    split_fields,
    split_values,
)
from .registry import DistributionRegistry, load_row_counts

__all__ = [
    "DistributionTable",
    "DistributionRegistry",
    "load_distribution",
    "load_row_counts",
    "parse_distribution",
    "split_fields",
    "split_values",
]
