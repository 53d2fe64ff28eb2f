"""Per-instantiation evaluation state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Set, Tuple, Union

from qgen.distribution.registry import DistributionRegistry
from qgen.errors import QgenError, UnknownReferenceError
from qgen.sampler.stream import RandomStream

from .nodes import ListOf, Substitution, render_list


@dataclass(frozen=True)
class ScalarValue:
    text: str


@dataclass(frozen=True)
class ListValue:
    items: Tuple[str, ...]


CachedValue = Union[ScalarValue, ListValue]


class GenerationContext:
    """
    Evaluation state for one query instantiation.

    Holds the random stream (owned), the named substitutions (borrowed,
    read-only) and a memo of values already produced by name. Only ``Ref``
    and ``ItemOf`` evaluation writes to the memo, so every later reference
    to a name sees the same value without consuming more randomness.
    """

    def __init__(
        self,
        random: RandomStream,
        substitutions: Mapping[str, Substitution],
        registry: Optional[DistributionRegistry] = None,
    ) -> None:
        self.random = random
        self.substitutions = substitutions
        self.registry = registry
        self._values: Dict[str, CachedValue] = {}
        self._resolving: Set[str] = set()

    @classmethod
    def constant(
        cls,
        substitution: Substitution,
        registry: Optional[DistributionRegistry] = None,
    ) -> str:
        """Evaluate a substitution that references no other substitution."""

        return substitution.evaluate(cls(RandomStream(0), {}, registry))

    def lookup(self, name: str) -> Substitution:
        try:
            return self.substitutions[name]
        except KeyError:
            raise UnknownReferenceError("substitution", name) from None

    def cached(self, name: str) -> Optional[CachedValue]:
        return self._values.get(name)

    def row_count(self, relation: str) -> int:
        if self.registry is None:
            raise UnknownReferenceError("relation", relation)
        return self.registry.row_count(relation)

    def _compute(self, name: str) -> CachedValue:
        if name in self._resolving:
            raise QgenError(f"circular reference to substitution {name}")
        substitution = self.lookup(name)
        self._resolving.add(name)
        try:
            if isinstance(substitution, ListOf):
                value: CachedValue = ListValue(substitution.generate_list(self))
            else:
                value = ScalarValue(substitution.evaluate(self))
        finally:
            self._resolving.discard(name)
        self._values[name] = value
        return value

    def resolve(self, name: str) -> str:
        """Value of the named substitution, evaluated at most once."""

        value = self._values.get(name)
        if value is None:
            value = self._compute(name)
        if isinstance(value, ListValue):
            return render_list(value.items)
        return value.text

    def resolve_item(self, name: str, index: int) -> str:
        """Item ``index`` of the named list substitution."""

        value = self._values.get(name)
        if value is None:
            if not isinstance(self.lookup(name), ListOf):
                raise UnknownReferenceError("list substitution", name)
            value = self._compute(name)
        if not isinstance(value, ListValue):
            raise UnknownReferenceError("list substitution", name)
        if not 0 <= index < len(value.items):
            raise IndexError(f"{name} has {len(value.items)} items, no item {index + 1}")
        return value.items[index]
