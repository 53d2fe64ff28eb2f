"""Recursive-descent parser for the template macro language.

Supported forms::

    text(ARG)                       text({"a",1},{"b",3})
    "literal"                       123
    ulist(EXPR, COUNT)              random(START, END, uniform)
    date(MIN, MAX, KIND)            rowcount("relation")[/N]
    distmember(DIST, INDEX, FIELD)  dist(DIST, FIELD, WEIGHT)
    [NAME]                          [NAME]+EXPR        "literal"+EXPR

Distribution names are resolved through the registry while parsing.
"""

from __future__ import annotations

import re
from typing import List

from qgen.distribution.registry import DistributionRegistry
from qgen.distribution.table import DistributionTable
from qgen.errors import MacroParseError

from .nodes import (
    Concatenate,
    DateBetween,
    DateKind,
    DistributionLookup,
    DistributionMember,
    Divide,
    Fixed,
    ListOf,
    Ref,
    RowCount,
    Substitution,
    UniformRange,
    WeightedText,
)

_INTEGER = re.compile(r"^[+-]?\d+$")
_DIVIDED = re.compile(r"^.*/([0-9]+)$", re.DOTALL)

# One template ships "dist(distmember(categories,[CINDX],2),1,1)".
_CATEGORY_MEMBER_NAME = "distmember(categories,[CINDX],2)"


def split_args(text: str, start: str, end: str) -> List[str]:
    """
    Strip ``start``/``end`` from ``text`` and split on top-level commas.

    Commas nested in parentheses or braces, or inside double quotes, do not
    separate arguments. Spaces following a separator are skipped.
    """

    if not text.startswith(start) or not text.endswith(end) or len(text) < len(start) + len(end):
        raise MacroParseError(text)
    body = text[len(start):len(text) - len(end)]
    args: List[str] = []
    depth = 0
    in_quote = False
    mark = 0
    i = 0
    while i < len(body):
        char = body[i]
        if char in "({":
            depth += 1
        elif char in ")}":
            depth -= 1
        elif char == '"':
            in_quote = not in_quote
        elif char == "," and depth == 0 and not in_quote:
            args.append(body[mark:i])
            while i + 1 < len(body) and body[i + 1] == " ":
                i += 1
            mark = i + 1
        i += 1
    if len(body) > mark:
        args.append(body[mark:])
    return args


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


class MacroParser:
    """Turns macro source into a :class:`Substitution` tree."""

    def __init__(self, registry: DistributionRegistry) -> None:
        self.registry = registry

    def parse(self, source: str) -> Substitution:
        return self._parse(source, source)

    # ------------------------------------------------------------------ helpers
    def _int(self, token: str, source: str) -> int:
        token = token.strip()
        if not _INTEGER.match(token):
            raise MacroParseError(token, source)
        return int(token)

    def _args(self, text: str, start: str, count: int, source: str) -> List[str]:
        try:
            args = split_args(text, start, ")")
        except MacroParseError:
            raise MacroParseError(text, source) from None
        if count and len(args) != count:
            raise MacroParseError(text, source)
        return args

    def _distribution(self, name: str) -> DistributionTable:
        return self.registry.get(name.strip())

    def _field(self, table: DistributionTable, token: str, source: str) -> int:
        field = self._int(token, source)
        if not 1 <= field <= table.value_field_count:
            raise MacroParseError(
                f"field {field} of {table.name} (has {table.value_field_count})", source
            )
        return field - 1

    # ------------------------------------------------------------------- forms
    def _parse(self, text: str, source: str) -> Substitution:
        text = text.strip()
        if text.startswith("text("):
            return self._text(text, source)
        if text.startswith('"') and '"' in text[1:]:
            close = text.index('"', 1)
            literal = Fixed(text[1:close])
            rest = text[close + 1:]
            if rest == "":
                return literal
            if rest.startswith("+"):
                return Concatenate(literal, self._parse(rest[1:], source))
            raise MacroParseError(text, source)
        if text.startswith("ulist("):
            # ulist(random(10000,99999,uniform),400)
            expr, count = self._args(text, "ulist(", 2, source)
            size = self._int(count, source)
            if size < 0:
                raise MacroParseError(text, source)
            return ListOf(self._parse(expr, source), size)
        if text.startswith("date("):
            # date([YEAR]+"-08-01",[YEAR]+"-08-30",sales)
            low, high, kind = self._args(text, "date(", 3, source)
            try:
                date_kind = DateKind(kind.strip().lower())
            except ValueError:
                raise MacroParseError(text, source) from None
            return DateBetween(self._parse(low, source), self._parse(high, source), date_kind)
        if text.startswith("rowcount("):
            return self._rowcount(text, source)
        if text.startswith("distmember("):
            # distmember(fips_county, [COUNTY], 3)
            name, index, field = self._args(text, "distmember(", 3, source)
            table = self._distribution(name)
            return DistributionMember(
                self._parse(index, source), table, self._field(table, field, source)
            )
        if text.startswith("DIST("):
            text = "dist" + text[len("DIST"):]
        if text.startswith("dist("):
            return self._dist(text, source)
        if text.startswith("random("):
            start, end, kind = self._args(text, "random(", 3, source)
            if kind.strip() != "uniform":
                raise MacroParseError(text, source)
            return UniformRange(self._parse(start, source), self._parse(end, source))
        if text.startswith("[") and "]" in text:
            close = text.index("]")
            ref = Ref(text[1:close])
            rest = text[close + 1:]
            if rest == "":
                return ref
            if rest.startswith("+"):
                return Concatenate(ref, self._parse(rest[1:], source))
            raise MacroParseError(text, source)
        if _INTEGER.match(text):
            return Fixed(text)
        raise MacroParseError(text, source)

    def _text(self, text: str, source: str) -> Substitution:
        args = self._args(text, "text(", 0, source)
        if not args:
            raise MacroParseError(text, source)
        if len(args) == 1 and not args[0].startswith("{"):
            return Fixed(_unquote(args[0]))
        choices = []
        for arg in args:
            if not arg.startswith("{"):
                raise MacroParseError(arg, source)
            pair = split_args(arg.strip(), "{", "}")
            if len(pair) != 2:
                raise MacroParseError(arg, source)
            literal = pair[0].strip()
            if len(literal) < 2 or not (literal.startswith('"') and literal.endswith('"')):
                raise MacroParseError(arg, source)
            choices.append((literal[1:-1], self._int(pair[1], source)))
        if len(choices) == 1:
            return Fixed(choices[0][0])
        return WeightedText(tuple(choices))

    def _rowcount(self, text: str, source: str) -> Substitution:
        divisor = 1
        match = _DIVIDED.match(text)
        if match:
            # rowcount("store_sales")/5
            divisor = int(match.group(1))
            text = text[:text.rindex("/")].rstrip()
            if divisor == 0:
                raise MacroParseError(text, source)
        # rowcount("active_counties", "store")
        args = self._args(text, "rowcount(", 0, source)
        if not args:
            raise MacroParseError(text, source)
        substitution: Substitution = RowCount(_unquote(args[-1]))
        if divisor > 1:
            return Divide(substitution, divisor)
        return substitution

    def _dist(self, text: str, source: str) -> Substitution:
        # dist(gender, 1, 1)
        name, field, weight = self._args(text, "dist(", 3, source)
        if name == _CATEGORY_MEMBER_NAME:
            name = "categories"
        table = self._distribution(name)
        return DistributionLookup(
            table, self._field(table, field, source), table.weight_index(weight.strip())
        )
