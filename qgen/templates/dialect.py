"""Dialect-specific row-limit anchors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class LimitFormat:
    """
    ``%d`` patterns rendered into the ``_LIMITA``/``_LIMITB``/``_LIMITC`` anchors.

    Templates place ``[_LIMITA]`` before the statement, ``[_LIMITB]`` after
    ``select`` and ``[_LIMITC]`` at the end, so each dialect fills in the
    anchor its row-limit syntax needs and leaves the others empty.
    """

    before: str = ""
    select: str = ""
    after: str = ""


LIMIT_DIALECTS: Dict[str, LimitFormat] = {
    "ansi": LimitFormat(after="LIMIT %d"),
    "netezza": LimitFormat(after="limit %d"),
    "db2": LimitFormat(after="fetch first %d rows only"),
    "oracle": LimitFormat(before="select * from (", after=" ) where rownum <= %d"),
    "sqlserver": LimitFormat(select="top %d"),
}


def limit_format(dialect: str) -> LimitFormat:
    """Return the anchors for ``dialect`` (case-insensitive)."""

    try:
        return LIMIT_DIALECTS[dialect.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported dialect: {dialect} (expected one of {', '.join(sorted(LIMIT_DIALECTS))})"
        ) from None


def format_limit(pattern: str, limit: int) -> str:
    """Render a ``%d`` pattern; patterns without ``%d`` pass through."""

    return pattern.replace("%d", str(limit))
