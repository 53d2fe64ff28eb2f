"""Query templates, limit dialects and the query library."""

from .dialect import LIMIT_DIALECTS, LimitFormat, format_limit, limit_format
from .query import Query, load_query, parse_define, parse_template
from .library import QueryLibrary, default_library, generate_sql

__all__ = [
    "LIMIT_DIALECTS",
    "LimitFormat",
    "Query",
    "QueryLibrary",
    "default_library",
    "format_limit",
    "generate_sql",
    "limit_format",
    "load_query",
    "parse_define",
    "parse_template",
]
