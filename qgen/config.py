"""Generator configuration loaded from YAML."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict

import yaml

from qgen.distribution.registry import DEFAULT_CATALOG, DEFAULT_ROW_COUNTS
from qgen.templates.query import DEFAULT_TEMPLATES_DIR

_PATH_KEYS = ("distributions", "row_counts", "templates_dir")


@dataclass
class GeneratorConfig:
    """Where resources live and the defaults used by the CLI."""

    distributions: Path = DEFAULT_CATALOG
    row_counts: Path = DEFAULT_ROW_COUNTS
    templates_dir: Path = DEFAULT_TEMPLATES_DIR
    dialect: str = "ansi"
    seed: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "distributions": str(self.distributions),
            "row_counts": str(self.row_counts),
            "templates_dir": str(self.templates_dir),
            "dialect": self.dialect,
            "seed": int(self.seed),
        }


def load_config(path: str | Path) -> GeneratorConfig:
    """
    Read a :class:`GeneratorConfig` from YAML.

    Missing keys keep their defaults. Relative resource paths are resolved
    against the directory holding the YAML file.
    """

    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ValueError(f"config {path} must be a mapping")
    known = {f.name for f in fields(GeneratorConfig)}
    unknown = sorted(set(payload) - known)
    if unknown:
        raise ValueError(f"unknown config keys in {path}: {', '.join(unknown)}")

    values: Dict[str, object] = {}
    for key, value in payload.items():
        if key in _PATH_KEYS:
            resolved = Path(str(value)).expanduser()
            if not resolved.is_absolute():
                resolved = path.parent / resolved
            values[key] = resolved
        elif key == "seed":
            values[key] = int(value)
        else:
            values[key] = str(value)
    return GeneratorConfig(**values)
