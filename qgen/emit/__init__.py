"""Emit generated queries to external representations."""

from .yaml_emit import read_workload, write_workload
from .sql_emit import write_sql_dir

__all__ = ["read_workload", "write_workload", "write_sql_dir"]
