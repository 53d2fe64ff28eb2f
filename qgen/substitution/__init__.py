"""Macro language: expression tree, parser and evaluation context."""

from .nodes import (
    Concatenate,
    DateBetween,
    DateKind,
    DistributionLookup,
    DistributionMember,
    Divide,
    Fixed,
    ItemOf,
    ListOf,
    Ref,
    RowCount,
    Substitution,
    Transform,
    UniformRange,
    WeightedText,
)
from .context import CachedValue, GenerationContext, ListValue, ScalarValue
from .parser import MacroParser, split_args

__all__ = [
    "Substitution",
    "Fixed",
    "RowCount",
    "Transform",
    "UniformRange",
    "ListOf",
    "DateBetween",
    "DateKind",
    "Divide",
    "DistributionMember",
    "DistributionLookup",
    "Ref",
    "ItemOf",
    "WeightedText",
    "Concatenate",
    "GenerationContext",
    "CachedValue",
    "ScalarValue",
    "ListValue",
    "MacroParser",
    "split_args",
]
