"""YAML manifest of generated queries."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import yaml


def write_workload(path: str | Path, queries: List[Dict[str, object]]) -> None:
    """Persist generated queries (with their seed and dialect) to YAML."""

    payload = {"workload": queries}
    with Path(path).open("w", encoding="utf-8") as handle:
        yaml.safe_dump(payload, handle, sort_keys=False)


def read_workload(path: str | Path) -> List[Dict[str, object]]:
    """Load the entries written by :func:`write_workload`."""

    with Path(path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    return list(payload.get("workload") or [])
