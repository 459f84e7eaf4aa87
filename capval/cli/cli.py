"""
CLI entry point for capval.

Provides a headless command-line interface for validating ArchiMate models.
Uses Typer for the CLI and Rich for tabular output.

Usage:
    capval validate model.archimate --mode full
    capval validate model.archimate --view "Capability Map" --yes
    capval validate model.archimate --no-check
    capval standalone --output out
    capval select model.archimate --view "Capability Map"
    capval rules
    capval rules --only C6_L0,C11
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from capval.adapters.archimate import Collection, parse_archimate
from capval.common.exceptions import ModelError
from capval.modules.validation import (
    RelationDialect,
    RuleInstance,
    build_catalog,
    compute_level_profile,
    select_from_profile,
    select_rules,
)
from capval.services.config_models import CapvalSettings
from capval.services.validation import ValidationService

app = typer.Typer(
    name="capval",
    help="Capval CLI - Validate ArchiMate capability models with Ampersand",
    no_args_is_help=True,
)

MODES = ("full", "partial")


# =============================================================================
# Helpers
# =============================================================================


def _configure_logging(settings: CapvalSettings, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_settings(
    output: Path | None = None, ampersand: Path | None = None
) -> CapvalSettings:
    """Settings from environment/.env, with CLI overrides applied."""
    load_dotenv()
    settings = CapvalSettings()
    updates: dict = {}
    if output is not None:
        updates["output_dir"] = output
        updates["logs_dir"] = output / "logs"
    if ampersand is not None:
        updates["ampersand_path"] = ampersand
    return settings.model_copy(update=updates) if updates else settings


def _load_collection(model: Path, view: str | None) -> Collection:
    try:
        archi_model = parse_archimate(model)
        if view:
            return archi_model.view_collection(view)
        return archi_model.collection()
    except ModelError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _print_validation_result(result: dict) -> None:
    """Print validation results."""
    typer.echo(f"\n{'-' * 60}")
    typer.echo("VALIDATION RESULTS")
    typer.echo(f"{'-' * 60}")
    stats = result.get("stats", {})
    typer.echo(f"  Elements:       {stats.get('elements', 0)}")
    typer.echo(f"  Relationships:  {stats.get('relationships', 0)}")

    selected = result.get("selected_rules")
    if selected is None:
        typer.echo("  Rules:          all")
    else:
        typer.echo(f"  Rules:          {len(selected)} selected")

    for name, path in result.get("files", {}).items():
        typer.echo(f"  {name.capitalize() + ' file:':<16}{path}")

    check = result.get("check")
    if check and check.get("exit_code") is not None:
        typer.echo(f"  Ampersand exit: {check['exit_code']}")

    if stats.get("run_log"):
        typer.echo(f"  Run log:        {stats['run_log']}")

    if result.get("errors"):
        typer.echo(f"\nErrors ({len(result['errors'])}):")
        for err in result["errors"]:
            typer.echo(f"  - {err}")


# =============================================================================
# Validate Command
# =============================================================================


@app.command("validate")
def validate(
    model: Annotated[Path, typer.Argument(help="Archi .archimate model file")],
    mode: Annotated[
        str,
        typer.Option(
            "--mode",
            "-m",
            help="full: all rules; partial: rules applicable to the collection",
        ),
    ] = "partial",
    view: Annotated[
        str | None,
        typer.Option("--view", help="Validate only the elements shown on this view"),
    ] = None,
    output: Annotated[
        Path | None, typer.Option("-o", "--output", help="Output directory")
    ] = None,
    ampersand: Annotated[
        Path | None, typer.Option("--ampersand", help="Path to the ampersand binary")
    ] = None,
    yes: Annotated[
        bool, typer.Option("-y", "--yes", help="Do not ask for confirmation")
    ] = False,
    no_check: Annotated[
        bool, typer.Option("--no-check", help="Only write the ADL files")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Print debug logging")
    ] = False,
) -> None:
    """Validate a model (or one of its views) against the rule catalog."""
    if mode not in MODES:
        typer.echo(f"Error: mode must be 'full' or 'partial', got '{mode}'", err=True)
        raise typer.Exit(1)

    settings = _load_settings(output, ampersand)
    _configure_logging(settings, verbose)

    typer.echo(f"\n{'=' * 60}")
    typer.echo(f"CAPVAL - {mode.upper()} validation")
    typer.echo(f"{'=' * 60}")

    collection = _load_collection(model, view)
    if collection.is_empty():
        typer.echo(f"Warning: {collection} is empty; only structural rules apply.")

    if not yes:
        confirmed = typer.confirm(
            f"{collection} contains {len(collection.elements)} elements and "
            f"{len(collection.relationships)} relationships.\n\n"
            "Continue with validation?"
        )
        if not confirmed:
            typer.echo("Validation cancelled.")
            raise typer.Exit(0)

    service = ValidationService(settings)
    result = service.validate(
        collection, mode=mode, run_checker=not no_check, on_line=typer.echo
    )
    _print_validation_result(result)

    if not result.get("success"):
        raise typer.Exit(1)
    exit_code = result.get("check", {}).get("exit_code")
    if exit_code:
        raise typer.Exit(exit_code)


# =============================================================================
# Standalone Command
# =============================================================================


@app.command("standalone")
def standalone(
    output: Annotated[
        Path | None, typer.Option("-o", "--output", help="Output directory")
    ] = None,
) -> None:
    """Write a standalone rules file for checking Archi exports directly."""
    settings = _load_settings(output)
    _configure_logging(settings, verbose=False)

    result = ValidationService(settings).export_standalone()
    if not result["success"]:
        for err in result["errors"]:
            typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(1)

    typer.echo(f"File written: {result['path']}\n")
    typer.echo("Update the INCLUDE statement to point to your ARCHIMATE file.\n")
    typer.echo(
        "To validate your model, execute the command: "
        f"ampersand check {settings.standalone_file}"
    )


# =============================================================================
# Select Command
# =============================================================================


@app.command("select")
def select(
    model: Annotated[Path, typer.Argument(help="Archi .archimate model file")],
    view: Annotated[
        str | None,
        typer.Option("--view", help="Select for the elements shown on this view"),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Show levels per relationship family")
    ] = False,
) -> None:
    """Print the rule instances applicable to a model or view."""
    collection = _load_collection(model, view)
    profile = compute_level_profile(collection)

    if verbose:
        for family, levels in profile.to_dict().items():
            typer.echo(f"{family}: {', '.join(levels) or '-'}")
        typer.echo("")

    typer.echo(", ".join(str(instance) for instance in select_from_profile(profile)))


# =============================================================================
# Rules Command
# =============================================================================


@app.command("rules")
def rules(
    model: Annotated[
        Path | None,
        typer.Argument(help="Only list the rules selected for this model"),
    ] = None,
    view: Annotated[
        str | None,
        typer.Option("--view", help="Select for the elements shown on this view"),
    ] = None,
    only: Annotated[
        str | None,
        typer.Option("--only", help="Comma-separated rule instances, e.g. C6_L0,C11"),
    ] = None,
) -> None:
    """List the rule catalog, or the rules a model needs."""
    catalog = build_catalog(RelationDialect())

    wanted = None
    if only:
        try:
            wanted = {RuleInstance.parse(value) for value in only.split(",") if value.strip()}
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    if model is None:
        instances = [
            instance
            for instance in catalog
            if (instance in wanted if wanted is not None else instance.is_universal)
        ]
        title = "Rule catalog"
    else:
        collection = _load_collection(model, view)
        instances = select_rules(collection)
        if wanted is not None:
            instances = [instance for instance in instances if instance in wanted]
        title = f"Rules selected for {collection}"

    table = Table(title=title)
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Checks")
    table.add_column("Level variants", justify="center")

    for instance in instances:
        entry = catalog[instance]
        labels = ", ".join(rule.label for rule in entry.rules)
        table.add_row(
            str(instance),
            f"{entry.meaning}\n[dim]{labels}[/dim]",
            "yes" if entry.level_variant else "no",
        )

    Console().print(table)


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> int:
    """Main entry point."""
    try:
        app()
        return 0
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1


if __name__ == "__main__":
    sys.exit(main())
