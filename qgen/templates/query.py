"""Query templates: define bindings and placeholder expansion."""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

from qgen.distribution.registry import DistributionRegistry
from qgen.errors import MacroParseError, TemplateNotFoundError
from qgen.sampler.stream import RandomStream
from qgen.substitution.context import GenerationContext
from qgen.substitution.nodes import Fixed, ItemOf, ListOf, Substitution, Transform
from qgen.substitution.parser import MacroParser

from .dialect import format_limit, limit_format

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "resources" / "query_templates"

_DEFINE = re.compile(r"^\s*define\s", re.IGNORECASE)
_BLANK = re.compile(r"^ *$")
_TRAILING_TERMINATOR = re.compile(r" *; *$")

_EMPTY = Fixed("")


def template_name(query_id: int) -> str:
    return f"query{query_id}.tpl"


@dataclass(frozen=True)
class Query:
    """A parsed template: body text plus its defines in file order."""

    id: int
    template: str
    defines: Mapping[str, Substitution] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return template_name(self.id)

    def substitutions(
        self,
        dialect: str = "ansi",
        registry: Optional[DistributionRegistry] = None,
    ) -> Dict[str, Substitution]:
        """
        Build the ordered name-to-substitution map used for expansion.

        ``_LIMIT`` adds the three limit anchors first; each list define is
        followed by ``NAME.1`` .. ``NAME.n`` item references; built-in anchors
        a template does not define come last.
        """

        result: Dict[str, Substitution] = {}
        limit_arg = self.defines.get("_LIMIT")
        if limit_arg is not None:
            limit_text = GenerationContext.constant(limit_arg, registry)
            try:
                limit = int(limit_text)
            except ValueError:
                raise MacroParseError(limit_text, f"_LIMIT in {self.name}") from None
            formats = limit_format(dialect)
            render = functools.partial(format_limit, limit=limit)
            result["_LIMITA"] = Transform(Fixed(formats.before), render)
            result["_LIMITB"] = Transform(Fixed(formats.select), render)
            result["_LIMITC"] = Transform(Fixed(formats.after), render)
        for name, substitution in self.defines.items():
            result[name] = substitution
            if isinstance(substitution, ListOf):
                for i in range(substitution.count):
                    result[f"{name}.{i + 1}"] = ItemOf(name, i)
        builtins = {
            "_QUERY": Fixed(str(self.id)),
            "_STREAM": Fixed("0"),
            "_TEMPLATE": Fixed(self.name),
            "_BEGIN": _EMPTY,
            "_END": _EMPTY,
        }
        for name, substitution in builtins.items():
            result.setdefault(name, substitution)
        return result

    def sql(
        self,
        random: RandomStream,
        registry: Optional[DistributionRegistry] = None,
        dialect: str = "ansi",
    ) -> str:
        """Expand every ``[NAME]`` placeholder using ``random``."""

        context = GenerationContext(random, self.substitutions(dialect, registry), registry)
        text = self.template
        for name in context.substitutions:
            token = f"[{name}]"
            if token in text:
                text = text.replace(token, context.resolve(name))
        return text


def parse_define(line: str):
    """Split a ``define NAME = VALUE;`` line into ``(NAME, VALUE)``."""

    line = line.strip()
    eq = line.find("=")
    if eq < 0:
        raise MacroParseError(line)
    name = line[len("define"):eq].strip()
    value = line[eq + 1:]
    value = re.sub(r"--.*", "", value)
    value = value.strip()
    value = re.sub(r";\s*$", "", value)
    return name.upper(), value.strip()


def parse_template(
    lines: Iterable[str],
    query_id: int,
    parser: MacroParser,
) -> Query:
    """Separate define bindings from the body and parse each binding."""

    defines: Dict[str, Substitution] = {}
    body = []
    for line in lines:
        line = line.rstrip("\r\n")
        if line.startswith("--") or _BLANK.match(line):
            continue
        if _DEFINE.match(line):
            name, value = parse_define(line)
            defines[name] = parser.parse(value)
        else:
            body.append(line + "\n")
    template = _TRAILING_TERMINATOR.sub("", "".join(body))
    return Query(id=query_id, template=template, defines=defines)


def load_query(
    query_id: int,
    parser: MacroParser,
    directory: str | Path = DEFAULT_TEMPLATES_DIR,
) -> Query:
    """Read ``query<N>.tpl`` from ``directory``."""

    path = Path(directory) / template_name(query_id)
    if not path.is_file():
        raise TemplateNotFoundError(f"no template for query {query_id}: {path}")
    with path.open("r", encoding="iso-8859-1") as handle:
        query = parse_template(handle, query_id, parser)
    logger.debug("parsed %s: %d defines", path.name, len(query.defines))
    return query
