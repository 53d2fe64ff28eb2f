"""Name-to-table registry and the built-in relation row counts."""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

import yaml

from qgen.errors import DistributionLoadError, UnknownReferenceError

from .table import DistributionTable, default_weight_names, load_distribution

logger = logging.getLogger(__name__)

RESOURCE_DIR = Path(__file__).resolve().parents[1] / "resources"
DEFAULT_CATALOG = RESOURCE_DIR / "distributions.yaml"
DEFAULT_ROW_COUNTS = RESOURCE_DIR / "row_counts.yaml"


class DistributionRegistry:
    """
    Read-only lookup of distributions by name.

    The registry also owns the relation row-count table consulted by
    ``rowcount(...)`` macros. Built once, it can be shared by any number of
    generation contexts.
    """

    def __init__(
        self,
        tables: Mapping[str, DistributionTable],
        aliases: Optional[Mapping[str, str]] = None,
        row_counts: Optional[Mapping[str, int]] = None,
    ) -> None:
        self._tables = MappingProxyType(dict(tables))
        resolved: Dict[str, str] = {}
        for alias, target in (aliases or {}).items():
            if target not in self._tables:
                raise DistributionLoadError(f"alias {alias} points at unknown distribution {target}")
            resolved[alias] = target
        self._aliases = MappingProxyType(resolved)
        self._row_counts = MappingProxyType(
            {str(k).upper(): int(v) for k, v in (row_counts or {}).items()}
        )

    # ------------------------------------------------------------------ tables
    def get(self, name: str) -> DistributionTable:
        """Return the table registered under ``name`` (or an alias of it)."""

        key = self._aliases.get(name, name)
        try:
            return self._tables[key]
        except KeyError:
            raise UnknownReferenceError("distribution", name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._tables or name in self._aliases

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def names(self) -> List[str]:
        return sorted(self._tables)

    @property
    def aliases(self) -> Mapping[str, str]:
        return self._aliases

    # -------------------------------------------------------------- row counts
    def row_count(self, relation: str) -> int:
        """Row count of ``relation`` (case-insensitive)."""

        try:
            return self._row_counts[relation.upper()]
        except KeyError:
            raise UnknownReferenceError("relation", relation) from None

    @property
    def row_counts(self) -> Mapping[str, int]:
        return self._row_counts

    # ----------------------------------------------------------------- loading
    @classmethod
    def from_catalog(
        cls,
        catalog: str | Path = DEFAULT_CATALOG,
        row_counts: str | Path | None = DEFAULT_ROW_COUNTS,
    ) -> "DistributionRegistry":
        """Load every distribution listed in a YAML catalog."""

        catalog = Path(catalog)
        if not catalog.is_file():
            raise DistributionLoadError(f"distribution catalog '{catalog}' not found")
        with catalog.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}

        entries = payload.get("distributions") or {}
        if not entries:
            raise DistributionLoadError(f"distribution catalog '{catalog}' lists no distributions")
        tables: Dict[str, DistributionTable] = {}
        for name, entry in entries.items():
            if "file" not in entry or "values" not in entry:
                raise DistributionLoadError(f"catalog entry {name} needs 'file' and 'values'")
            value_names = [str(v) for v in entry["values"]]
            weights = entry.get("weights", 1)
            if isinstance(weights, int):
                weight_names = default_weight_names(weights)
            else:
                weight_names = [str(w) for w in weights]
            tables[name] = load_distribution(
                catalog.parent / entry["file"], name, value_names, weight_names
            )
        counts = load_row_counts(row_counts) if row_counts is not None else {}
        logger.debug("registry built with %d distributions from %s", len(tables), catalog)
        return cls(tables, aliases=payload.get("aliases") or {}, row_counts=counts)


def load_row_counts(path: str | Path) -> Dict[str, int]:
    """Read ``{RELATION: rows}`` from YAML."""

    path = Path(path)
    if not path.is_file():
        raise DistributionLoadError(f"row count file '{path}' not found")
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    counts = payload.get("row_counts", payload)
    try:
        return {str(name).upper(): int(rows) for name, rows in counts.items()}
    except (TypeError, ValueError) as exc:
        raise DistributionLoadError(f"malformed row counts in '{path}': {exc}") from exc
