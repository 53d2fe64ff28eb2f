"""Typer-based CLI entry points for query generation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

# ---- project imports ----
from qgen.config import GeneratorConfig, load_config
from qgen.emit.sql_emit import write_sql_dir
from qgen.emit.yaml_emit import write_workload
from qgen.errors import QgenError
from qgen.templates.library import QueryLibrary

# -----------------------------------------------------------------------------
# Typer app
# -----------------------------------------------------------------------------
app = typer.Typer(help="TPC-DS query generator CLI.")


# -----------------------------------------------------------------------------
# Utility helpers (shared by commands)
# -----------------------------------------------------------------------------
def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_library(config_path: Optional[Path], dialect: Optional[str]) -> tuple[GeneratorConfig, QueryLibrary]:
    """Build the configuration and library, turning load errors into CLI errors."""
    try:
        config = load_config(config_path) if config_path else GeneratorConfig()
        if dialect:
            config.dialect = dialect
        return config, QueryLibrary.from_config(config)
    except (QgenError, ValueError, OSError) as exc:
        typer.secho(f"error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _ensure_parent_dir(path: Path) -> None:
    """Create the parent directory for `path` if needed."""
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)


# -----------------------------------------------------------------------------
# GENERATE: expand query templates into SQL
# -----------------------------------------------------------------------------
@app.command(name="generate")
def generate(
    query: List[int] = typer.Option([], "--query", "-q", help="Query id (1-99); repeatable."),
    all_queries: bool = typer.Option(False, "--all", help="Generate every query with a template."),
    seed: Optional[int] = typer.Option(None, help="Random seed (defaults to the config seed)."),
    dialect: Optional[str] = typer.Option(None, help="LIMIT dialect (ansi/netezza/db2/oracle/sqlserver)."),
    config: Optional[Path] = typer.Option(None, help="Generator config YAML."),
    sql_dir: Optional[Path] = typer.Option(None, help="Optional dir to emit .sql files."),
    manifest: Optional[Path] = typer.Option(None, help="Optional workload YAML manifest."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Generate SQL for the requested queries; prints to stdout unless outputs are given."""
    _configure_logging(verbose)
    cfg, library = _load_library(config, dialect)
    run_seed = cfg.seed if seed is None else seed

    ids = library.available() if all_queries else list(query)
    if not ids:
        raise typer.BadParameter("Pass --query at least once or use --all.")

    outputs = []
    for qid in ids:
        try:
            sql = library.generate_sql(qid, run_seed)
        except (QgenError, ValueError) as exc:
            typer.secho(f"error: query {qid}: {exc}", err=True, fg=typer.colors.RED)
            raise typer.Exit(code=1)
        outputs.append({"query": qid, "seed": run_seed, "dialect": cfg.dialect, "sql": sql})

    if sql_dir:
        written = write_sql_dir(sql_dir, outputs)
        typer.echo(f"[generate] Wrote {len(written)} SQL files to {sql_dir}")
    if manifest:
        _ensure_parent_dir(manifest)
        write_workload(manifest, outputs)
        typer.echo(f"[generate] Wrote workload YAML to {manifest}")
    if not sql_dir and not manifest:
        for entry in outputs:
            typer.echo(f"-- query {entry['query']} (seed {entry['seed']})")
            typer.echo(entry["sql"])


# -----------------------------------------------------------------------------
# DISTRIBUTIONS: list the registered distributions
# -----------------------------------------------------------------------------
@app.command(name="distributions")
def distributions(
    config: Optional[Path] = typer.Option(None, help="Generator config YAML."),
) -> None:
    """List registered distributions with their size and weight columns."""
    _, library = _load_library(config, None)
    registry = library.registry
    for name in registry.names():
        table = registry.get(name)
        typer.echo(
            f"{name}\trows={table.size}\tfields={','.join(table.value_names)}"
            f"\tweights={','.join(table.weight_names)}"
        )
    for alias, target in sorted(registry.aliases.items()):
        typer.echo(f"{alias}\t-> {target}")


# Allow `python -m qgen.cli.main` direct execution (and `python -m qgen.cli` via __main__.py)
if __name__ == "__main__":
    app()
