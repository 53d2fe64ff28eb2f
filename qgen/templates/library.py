"""Query lookup by id and the top-level ``generate_sql`` entry point."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional

from qgen.distribution.registry import DistributionRegistry
from qgen.sampler.stream import RandomStream
from qgen.substitution.parser import MacroParser

from .dialect import limit_format
from .query import DEFAULT_TEMPLATES_DIR, Query, load_query, template_name

if TYPE_CHECKING:
    from qgen.config import GeneratorConfig

QUERY_IDS = range(1, 100)


def check_query_id(query_id: int) -> int:
    if query_id not in QUERY_IDS:
        raise ValueError(f"query id must be within 1..99, got {query_id}")
    return query_id


class QueryLibrary:
    """
    Parses templates on first use and keeps them for later calls.

    The registry and parsed queries are read-only once built, so one library
    can serve concurrent ``generate_sql`` calls; each call gets its own
    random stream and generation context.
    """

    def __init__(
        self,
        registry: DistributionRegistry,
        templates_dir: str | Path = DEFAULT_TEMPLATES_DIR,
        dialect: str = "ansi",
    ) -> None:
        limit_format(dialect)
        self.registry = registry
        self.templates_dir = Path(templates_dir)
        self.dialect = dialect
        self.parser = MacroParser(registry)
        self._queries: Dict[int, Query] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: "GeneratorConfig") -> "QueryLibrary":
        registry = DistributionRegistry.from_catalog(config.distributions, config.row_counts)
        return cls(registry, templates_dir=config.templates_dir, dialect=config.dialect)

    def query(self, query_id: int) -> Query:
        check_query_id(query_id)
        with self._lock:
            query = self._queries.get(query_id)
            if query is None:
                query = load_query(query_id, self.parser, self.templates_dir)
                self._queries[query_id] = query
        return query

    def available(self) -> List[int]:
        """Ids of the queries whose templates exist in the template directory."""

        return [qid for qid in QUERY_IDS if (self.templates_dir / template_name(qid)).is_file()]

    def generate_sql(self, query_id: int, seed: int = 0, dialect: Optional[str] = None) -> str:
        """Expand query ``query_id`` with a fresh stream seeded by ``seed``."""

        query = self.query(query_id)
        return query.sql(RandomStream(seed), self.registry, dialect or self.dialect)


_default_library: Optional[QueryLibrary] = None
_default_lock = threading.Lock()


def default_library() -> QueryLibrary:
    """Library backed by the packaged resources, built on first use."""

    global _default_library
    with _default_lock:
        if _default_library is None:
            _default_library = QueryLibrary(DistributionRegistry.from_catalog())
        return _default_library


def generate_sql(query_id: int, seed: int = 0, dialect: str = "ansi") -> str:
    """Generate the SQL text of query ``query_id`` for ``seed``."""

    return default_library().generate_sql(query_id, seed, dialect)
