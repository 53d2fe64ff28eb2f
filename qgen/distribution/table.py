"""Weighted value distributions loaded from ``.dst`` resource files."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from qgen.errors import DistributionLoadError, UnknownReferenceError
from qgen.sampler.draws import pick_weighted_index
from qgen.sampler.stream import RandomStream

logger = logging.getLogger(__name__)

RESOURCE_ENCODING = "iso-8859-1"

_FIELD_SPLIT = re.compile(r"(?<!\\):")
_VALUE_SPLIT = re.compile(r"(?<!\\),")


def split_fields(line: str) -> List[str]:
    """Split a record into its colon-separated parts (``\\:`` is literal)."""

    return [part.strip() for part in _FIELD_SPLIT.split(line)]


def split_values(field: str) -> List[str]:
    """Split a part into comma-separated values and strip escapes."""

    return [value.strip().replace("\\", "") for value in _VALUE_SPLIT.split(field)]


def iter_records(lines: Iterable[str]) -> Iterator[Tuple[int, List[str]]]:
    """Yield ``(line_number, parts)`` for every non-comment, non-blank line."""

    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        yield lineno, split_fields(stripped)


def default_weight_names(count: int) -> List[str]:
    """Numeric weight names, e.g. ``["1", "2", "3"]`` for three columns."""

    return [str(i + 1) for i in range(count)]


class DistributionTable:
    """
    Immutable set of parallel value columns plus cumulative weight columns.

    Value columns hold strings; each weight column holds the running sum of
    the raw per-row weights, so ``cumulative[-1]`` is the column total. Field
    and row arguments of the Python API are 0-based.
    """

    def __init__(
        self,
        name: str,
        values: Sequence[Sequence[str]],
        cumulative: Sequence[Sequence[int]],
        value_names: Optional[Sequence[str]] = None,
        weight_names: Optional[Sequence[str]] = None,
    ) -> None:
        if not values:
            raise DistributionLoadError(f"distribution {name} has no value fields")
        if not cumulative:
            raise DistributionLoadError(f"distribution {name} has no weight fields")
        size = len(values[0])
        self.name = name
        self._values: Tuple[Tuple[str, ...], ...] = tuple(tuple(column) for column in values)
        weights = []
        for column in cumulative:
            array = np.asarray(column, dtype=np.int64)
            array.setflags(write=False)
            weights.append(array)
        self._cumulative: Tuple[np.ndarray, ...] = tuple(weights)

        for idx, column in enumerate(self._values):
            if len(column) != size:
                raise DistributionLoadError(
                    f"distribution {name}: value field {idx} has {len(column)} rows, expected {size}"
                )
        for idx, column in enumerate(self._cumulative):
            if len(column) != size:
                raise DistributionLoadError(
                    f"distribution {name}: weight field {idx} has {len(column)} rows, expected {size}"
                )
            if size and (column[0] < 0 or np.any(np.diff(column) < 0)):
                raise DistributionLoadError(
                    f"distribution {name}: weight field {idx} is not non-decreasing"
                )

        self.value_names = tuple(value_names) if value_names else tuple(
            f"value{i + 1}" for i in range(len(self._values))
        )
        self.weight_names = tuple(weight_names) if weight_names else tuple(
            default_weight_names(len(self._cumulative))
        )
        if len(self.value_names) != len(self._values):
            raise DistributionLoadError(
                f"distribution {name}: {len(self.value_names)} value names for {len(self._values)} fields"
            )
        if len(self.weight_names) != len(self._cumulative):
            raise DistributionLoadError(
                f"distribution {name}: {len(self.weight_names)} weight names for {len(self._cumulative)} fields"
            )

    @classmethod
    def from_rows(
        cls,
        name: str,
        rows: Iterable[Tuple[Sequence[str], Sequence[int]]],
        value_names: Optional[Sequence[str]] = None,
        weight_names: Optional[Sequence[str]] = None,
    ) -> "DistributionTable":
        """Build a table from ``(values, raw_weights)`` rows."""

        rows = list(rows)
        if not rows:
            raise DistributionLoadError(f"distribution {name} has no rows")
        n_values = len(rows[0][0])
        n_weights = len(rows[0][1])
        values: List[List[str]] = [[] for _ in range(n_values)]
        raw: List[List[int]] = [[] for _ in range(n_weights)]
        for row_values, row_weights in rows:
            if len(row_values) != n_values or len(row_weights) != n_weights:
                raise DistributionLoadError(f"distribution {name}: ragged row {row_values}")
            for idx, value in enumerate(row_values):
                values[idx].append(value)
            for idx, weight in enumerate(row_weights):
                if weight < 0:
                    raise DistributionLoadError(
                        f"distribution {name}: weight cannot be negative ({weight})"
                    )
                raw[idx].append(int(weight))
        cumulative = [np.cumsum(column, dtype=np.int64) for column in raw]
        return cls(name, values, cumulative, value_names=value_names, weight_names=weight_names)

    # ------------------------------------------------------------------ shape
    @property
    def size(self) -> int:
        return len(self._values[0])

    @property
    def value_field_count(self) -> int:
        return len(self._values)

    @property
    def weight_field_count(self) -> int:
        return len(self._cumulative)

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return (
            f"DistributionTable(name={self.name!r}, size={self.size}, "
            f"fields={self.value_field_count}, weights={list(self.weight_names)})"
        )

    # ---------------------------------------------------------------- lookups
    def _value_column(self, field: int) -> Tuple[str, ...]:
        if not 0 <= field < len(self._values):
            raise IndexError(
                f"value field {field} out of range for {self.name}, "
                f"max value index is {len(self._values) - 1}"
            )
        return self._values[field]

    def _weight_column(self, weight: int) -> np.ndarray:
        if not 0 <= weight < len(self._cumulative):
            raise IndexError(
                f"weight field {weight} out of range for {self.name}, "
                f"max weight index is {len(self._cumulative) - 1}"
            )
        return self._cumulative[weight]

    def cell(self, field: int, row: int) -> str:
        """Return the value of ``field`` at ``row``."""

        column = self._value_column(field)
        if not 0 <= row < len(column):
            raise IndexError(f"row {row} out of range for {self.name} (size {len(column)})")
        return column[row]

    value_at_index = cell

    def value_at_index_mod_size(self, field: int, raw_index: int) -> str:
        """Return the value of ``field`` at ``raw_index`` wrapped into the table."""

        column = self._value_column(field)
        return column[raw_index % len(column)]

    def cumulative_weights(self, weight: int) -> Tuple[int, ...]:
        return tuple(int(w) for w in self._weight_column(weight))

    def weight_for_index(self, row: int, weight: int) -> int:
        """Return the raw (non-accumulated) weight of ``row``."""

        column = self._weight_column(weight)
        if not 0 <= row < len(column):
            raise IndexError(f"row {row} out of range for {self.name} (size {len(column)})")
        return int(column[row] if row == 0 else column[row] - column[row - 1])

    def weight_index(self, token: str) -> int:
        """
        Resolve a weight column from a macro token.

        Tokens match a declared weight name first and otherwise are read as a
        1-based column number.
        """

        if token in self.weight_names:
            return self.weight_names.index(token)
        try:
            number = int(token)
        except ValueError:
            raise UnknownReferenceError("weight", f"{token} in distribution {self.name}") from None
        if not 1 <= number <= len(self._cumulative):
            raise UnknownReferenceError("weight", f"{token} in distribution {self.name}")
        return number - 1

    # ---------------------------------------------------------------- draws
    def pick_weighted_index(self, weight: int, rng: RandomStream) -> int:
        """Draw a row index according to weight column ``weight``."""

        return pick_weighted_index(self._weight_column(weight), rng)

    def pick_random_value(self, field: int, weight: int, rng: RandomStream) -> str:
        """Draw a row with weight column ``weight`` and return its ``field`` value."""

        column = self._value_column(field)
        return column[self.pick_weighted_index(weight, rng)]


def parse_distribution(
    name: str,
    lines: Iterable[str],
    value_names: Sequence[str],
    weight_names: Sequence[str],
    origin: str = "<memory>",
) -> DistributionTable:
    """Parse ``VALUES:WEIGHTS`` records into a :class:`DistributionTable`."""

    n_values = len(value_names)
    n_weights = len(weight_names)
    rows: List[Tuple[List[str], List[int]]] = []
    for lineno, parts in iter_records(lines):
        where = f"{origin}:{lineno}"
        if len(parts) != 2:
            raise DistributionLoadError(
                f"{where}: expected line to contain 2 parts but it contains {len(parts)}: {parts}"
            )
        values = split_values(parts[0])
        if len(values) != n_values:
            raise DistributionLoadError(
                f"{where}: expected line to contain {n_values} values, but it contained {len(values)}, {values}"
            )
        raw_weights = split_values(parts[1])
        if len(raw_weights) != n_weights:
            raise DistributionLoadError(
                f"{where}: expected line to contain {n_weights} weights, but it contained {len(raw_weights)}, {raw_weights}"
            )
        try:
            weights = [int(w) for w in raw_weights]
        except ValueError:
            raise DistributionLoadError(f"{where}: non-integer weight in {raw_weights}") from None
        if any(w < 0 for w in weights):
            raise DistributionLoadError(f"{where}: weight cannot be negative: {weights}")
        rows.append((values, weights))
    return DistributionTable.from_rows(name, rows, value_names=value_names, weight_names=weight_names)


def load_distribution(
    path: str | Path,
    name: str,
    value_names: Sequence[str],
    weight_names: Sequence[str],
) -> DistributionTable:
    """Load a distribution file (ISO-8859-1) from disk."""

    path = Path(path)
    if not path.is_file():
        raise DistributionLoadError(f"Distribution file '{path}' not found")
    with path.open("r", encoding=RESOURCE_ENCODING) as handle:
        table = parse_distribution(name, handle, value_names, weight_names, origin=str(path))
    logger.debug("loaded distribution %s: %d rows from %s", name, table.size, path)
    return table
