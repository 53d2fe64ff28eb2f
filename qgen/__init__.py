"""
TPC-DS query generator (qgen) package.

This package expands parameterised benchmark query templates into concrete
SQL text. Templates embed a small macro language whose random choices are
drawn from weighted value distributions using a seeded random stream, so a
``(query, seed)`` pair always yields the same text.
"""

from .templates.library import QueryLibrary, generate_sql

__all__ = [
    "sampler",
    "distribution",
    "substitution",
    "templates",
    "emit",
    "cli",
    "QueryLibrary",
    "generate_sql",
]
