"""Substitution expression tree."""

from __future__ import annotations

import datetime as dt
import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Set, Tuple

from qgen.distribution.table import DistributionTable
from qgen.sampler.draws import pick_weighted_text, uniform_date

if TYPE_CHECKING:
    from .context import GenerationContext

logger = logging.getLogger(__name__)


class Substitution(ABC):
    """A lazily evaluated macro expression."""

    @abstractmethod
    def evaluate(self, context: "GenerationContext") -> str:
        """Evaluate against ``context``, consuming its random stream as needed."""


def _as_int(text: str, what: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"{what} is not an integer: {text!r}") from None


def _as_date(text: str) -> dt.date:
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"bad date: {text}") from None


@dataclass(frozen=True)
class Fixed(Substitution):
    text: str

    def evaluate(self, context: "GenerationContext") -> str:
        return self.text


@dataclass(frozen=True)
class RowCount(Substitution):
    """Row count of a benchmark relation."""

    relation: str

    def evaluate(self, context: "GenerationContext") -> str:
        return str(context.row_count(self.relation))


@dataclass(frozen=True)
class Transform(Substitution):
    """Applies a string-to-string function to another substitution."""

    inner: Substitution
    function: Callable[[str], str]

    def evaluate(self, context: "GenerationContext") -> str:
        return self.function(self.inner.evaluate(context))


@dataclass(frozen=True)
class UniformRange(Substitution):
    """Integer drawn uniformly from ``[start, end]``."""

    start: Substitution
    end: Substitution

    def evaluate(self, context: "GenerationContext") -> str:
        lo = _as_int(self.start.evaluate(context), "random() start")
        hi = _as_int(self.end.evaluate(context), "random() end")
        return str(context.random.uniform_int(lo, hi))


@dataclass(frozen=True)
class ListOf(Substitution):
    """
    ``count`` evaluations of ``inner``, distinct where possible.

    Duplicates are discarded until more than ``count * 2 + 10000`` of them
    have been seen; after that they are accepted so generation always ends
    with exactly ``count`` items.
    """

    inner: Substitution
    count: int

    @property
    def retry_limit(self) -> int:
        return self.count * 2 + 10000

    def generate_list(self, context: "GenerationContext") -> Tuple[str, ...]:
        seen: Set[str] = set()
        items: List[str] = []
        limit = self.retry_limit
        duplicates = 0
        while len(items) < self.count:
            value = self.inner.evaluate(context)
            if value not in seen:
                seen.add(value)
                items.append(value)
                continue
            exhausted = duplicates > limit
            duplicates += 1
            if exhausted:
                if duplicates == limit + 2:
                    logger.info(
                        "list of %d: no unique value after %d duplicates, accepting repeats",
                        self.count,
                        limit,
                    )
                items.append(value)
        return tuple(items)

    def evaluate(self, context: "GenerationContext") -> str:
        return render_list(self.generate_list(context))


def render_list(items: Tuple[str, ...]) -> str:
    return ", ".join(items)


class DateKind(enum.Enum):
    """Classification tag of ``date(...)``; every kind samples uniformly."""

    SALES = "sales"
    RETURNS = "returns"
    EXPONENTIAL = "exponential"
    UNIFORM = "uniform"


@dataclass(frozen=True)
class DateBetween(Substitution):
    """ISO date drawn uniformly from ``[minimum, maximum]``."""

    minimum: Substitution
    maximum: Substitution
    kind: DateKind = DateKind.UNIFORM

    def evaluate(self, context: "GenerationContext") -> str:
        lo = _as_date(self.minimum.evaluate(context))
        hi = _as_date(self.maximum.evaluate(context))
        return uniform_date(lo, hi, context.random).isoformat()


@dataclass(frozen=True)
class Divide(Substitution):
    inner: Substitution
    divisor: int

    def evaluate(self, context: "GenerationContext") -> str:
        return str(_as_int(self.inner.evaluate(context), "dividend") // self.divisor)


@dataclass(frozen=True)
class DistributionMember(Substitution):
    """
    Value of ``field`` at the row selected by ``index``.

    ``index`` evaluates to a 1-based row number; ``field`` is the 0-based
    value column.
    """

    index: Substitution
    distribution: DistributionTable
    field: int

    def evaluate(self, context: "GenerationContext") -> str:
        row = _as_int(self.index.evaluate(context), "distmember() index")
        if not 1 <= row <= self.distribution.size:
            raise IndexError(
                f"distmember row {row} out of range for {self.distribution.name} "
                f"(size {self.distribution.size})"
            )
        return self.distribution.cell(self.field, row - 1)


@dataclass(frozen=True)
class DistributionLookup(Substitution):
    """Weighted random pick of a value from a distribution."""

    distribution: DistributionTable
    field: int
    weight: int

    def evaluate(self, context: "GenerationContext") -> str:
        return self.distribution.pick_random_value(self.field, self.weight, context.random)


@dataclass(frozen=True)
class Ref(Substitution):
    """Reference to another named substitution; cached per context."""

    name: str

    def evaluate(self, context: "GenerationContext") -> str:
        return context.resolve(self.name)


@dataclass(frozen=True)
class ItemOf(Substitution):
    """Item ``index`` (0-based) of a named list substitution."""

    name: str
    index: int

    def evaluate(self, context: "GenerationContext") -> str:
        return context.resolve_item(self.name, self.index)


@dataclass(frozen=True)
class WeightedText(Substitution):
    choices: Tuple[Tuple[str, int], ...]

    def evaluate(self, context: "GenerationContext") -> str:
        return pick_weighted_text(self.choices, context.random)


@dataclass(frozen=True)
class Concatenate(Substitution):
    left: Substitution
    right: Substitution

    def evaluate(self, context: "GenerationContext") -> str:
        return self.left.evaluate(context) + self.right.evaluate(context)
