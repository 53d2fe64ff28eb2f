"""Emit generated queries to a directory of ``.sql`` files."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List


def write_sql_dir(
    directory: str | Path,
    queries: Iterable[Dict[str, object]],
    prefix: str = "query",
) -> List[Path]:
    """
    Write each entry's ``sql`` text to ``<prefix><query>.sql``.

    Entries are the dictionaries produced by the CLI (``query``, ``seed``,
    ``dialect``, ``sql``). The written paths are returned in input order.
    """

    output_dir = Path(directory)
    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for entry in queries:
        filename = output_dir / f"{prefix}{entry['query']}.sql"
        with filename.open("w", encoding="utf-8") as handle:
            handle.write(str(entry.get("sql", "")))
        written.append(filename)
    return written
