"""Pytest configuration and fixtures for qgen tests."""

from pathlib import Path
from typing import Callable

import pytest

from qgen.distribution import DistributionRegistry, DistributionTable
from qgen.sampler import RandomStream
from qgen.substitution import GenerationContext, MacroParser


# =============================================================================
# DISTRIBUTION FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def registry() -> DistributionRegistry:
    """Registry built from the packaged catalog."""
    return DistributionRegistry.from_catalog()


@pytest.fixture
def tiny_table() -> DistributionTable:
    """Two rows with raw weights [10, 5] (cumulative [10, 15]) and [1, 1]."""
    return DistributionTable.from_rows(
        "tiny",
        [
            (["alpha", "A"], [10, 1]),
            (["beta", "B"], [5, 1]),
        ],
        value_names=["name", "code"],
        weight_names=["skewed", "uniform"],
    )


@pytest.fixture
def tiny_registry(tiny_table) -> DistributionRegistry:
    return DistributionRegistry(
        {"tiny": tiny_table},
        aliases={"small": "tiny"},
        row_counts={"store_sales": 2880404, "store": 12},
    )


@pytest.fixture
def parser(tiny_registry) -> MacroParser:
    return MacroParser(tiny_registry)


@pytest.fixture
def make_context(tiny_registry) -> Callable[..., GenerationContext]:
    """Factory: ``make_context(seed, NAME=substitution, ...)``."""

    def _make(seed: int = 0, **substitutions) -> GenerationContext:
        return GenerationContext(RandomStream(seed), substitutions, tiny_registry)

    return _make


@pytest.fixture
def write_dst(tmp_path) -> Callable[[str, str], Path]:
    """Write a ``.dst`` file in ISO-8859-1 and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="iso-8859-1")
        return path

    return _write
