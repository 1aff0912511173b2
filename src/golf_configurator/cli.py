"""CLI interface for golf-configurator."""

import json
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from golf_configurator import __version__
from golf_configurator.bundles.identity import build_submission, generate_bundle_id
from golf_configurator.bundles.transform import consolidate
from golf_configurator.config import ConfiguratorConfig, load_configurator_config
from golf_configurator.database.engine import get_session, init_db
from golf_configurator.database.repository import SelectionRepository
from golf_configurator.errors import BundleTransformError
from golf_configurator.models.pydantic_models import ProductVariant, SelectionState
from golf_configurator.rules.selection_rules import validate_complete_configuration
from golf_configurator.state.store import derive

app = typer.Typer(
    name="golf-configurator",
    help="Golf iron set configurator and bundle consolidation",
    add_completion=False,
)
console = Console()

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to configurator YAML (defaults to config/configurator.yaml).",
)


def output_json(data: Any) -> None:
    """Output JSON to stdout (for LLM consumption)."""
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _load_config(config_path: Path | None) -> ConfiguratorConfig:
    try:
        return load_configurator_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e


def _read_json(path: Path) -> Any:
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/red]")
        raise typer.Exit(1) from e


def _read_selection(path: Path) -> SelectionState:
    try:
        return SelectionState.model_validate(_read_json(path))
    except ValidationError as e:
        console.print(f"[red]Invalid selection in {path}:[/red]\n{e}")
        raise typer.Exit(1) from e


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"golf-configurator version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Golf iron set configurator."""
    pass


@app.command()
def init_database(
    db_path: Path | None = typer.Option(
        None,
        "--db",
        "-d",
        help="Path to SQLite database file.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Show SQL statements.",
    ),
) -> None:
    """Initialize the database, creating all tables."""
    console.print("[bold blue]Initializing database...[/bold blue]")

    try:
        init_db(db_path, echo=verbose)
        db_location = db_path or "data/golf_configurator.db"
        console.print(f"[green]Database initialized at: {db_location}[/green]")
    except Exception as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1) from e


@app.command()
def catalog(
    config_path: Path | None = CONFIG_OPTION,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON (for LLM/programmatic consumption).",
    ),
) -> None:
    """Show the club catalog, shaft brands and grips."""
    config = _load_config(config_path)
    rules = config.rules

    if json_output:
        output_json({
            "clubs": [club.model_dump() for club in config.clubs],
            "shaft_brands": config.shaft_brands,
            "grips": {brand: entry.model_dump() for brand, entry in config.grips.items()},
            "rules": rules.model_dump(),
        })
        return

    table = Table(title=f"Clubs ({len(config.clubs)})")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="white")
    table.add_column("Type", style="dim")
    table.add_column("Required", style="magenta", justify="center")
    table.add_column("Requires", style="yellow")

    for club in config.clubs:
        required_str = "[green]Y[/green]" if club.id in rules.required_clubs else "-"
        requires = rules.dependencies.get(club.id, [])
        table.add_row(club.id, club.name, club.type, required_str, ", ".join(requires) or "-")

    console.print(table)
    console.print(
        f"[bold]Clubs per set:[/bold] {rules.min_club_count}-{rules.max_club_count}"
    )
    console.print(f"[bold]Shaft brands:[/bold] {', '.join(config.shaft_brands) or '-'}")
    for brand, entry in config.grips.items():
        console.print(
            f"[bold]Grip {brand}:[/bold] {', '.join(entry.models)} "
            f"[dim]({', '.join(entry.sizes)})[/dim]"
        )


@app.command()
def validate(
    selection_file: Path = typer.Argument(..., help="Selection JSON file."),
    config_path: Path | None = CONFIG_OPTION,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON (for LLM/programmatic consumption).",
    ),
) -> None:
    """Validate a selection and show its derived step and checkout values.

    Exits with status 1 when the selection is not complete.
    """
    config = _load_config(config_path)
    state = _read_selection(selection_file)

    result = validate_complete_configuration(
        state, config.rules, require_shaft=bool(state.shaft_brand)
    )
    derived = derive(state, config.rules)

    if json_output:
        output_json({
            "valid": result.valid,
            "reason": result.reason,
            "derived": derived.model_dump(mode="json"),
        })
    else:
        status = "[green]VALID[/green]" if result.valid else f"[red]INVALID[/red] {result.reason}"
        details = [
            f"[bold]Status:[/bold] {status}",
            f"[bold]Hand:[/bold] {state.hand.value if state.hand else '-'}",
            f"[bold]Clubs:[/bold] {', '.join(state.clubs)} ({derived.iron_set_type})",
            f"[bold]Shaft:[/bold] {' '.join(p for p in (state.shaft_brand, state.shaft_flex) if p) or 'Stock'}",
            f"[bold]Grip:[/bold] {state.grip.display() if state.grip else '-'}",
            f"[bold]Lie:[/bold] {state.lie}",
            "",
            f"[bold]Unlocked up to:[/bold] {derived.max_unlocked_step.name.title()}",
            f"[bold]Can checkout:[/bold] {'yes' if derived.can_checkout else 'no'}",
        ]
        console.print(Panel("\n".join(details), title="[bold blue]Selection[/bold blue]", expand=False))

    if not result.valid:
        raise typer.Exit(1)


@app.command()
def build_lines(
    selection_file: Path = typer.Argument(..., help="Selection JSON file."),
    main_variant: str = typer.Option(..., "--main-variant", help="Iron set variant id."),
    parent_variant: str = typer.Option(..., "--parent-variant", help="Bundle parent variant id."),
    shaft_variant: str | None = typer.Option(
        None, "--shaft-variant", help="Shaft variant id (with a chosen shaft brand)."
    ),
    bundle_id: str | None = typer.Option(
        None, "--bundle-id", help="Bundle id to use instead of a generated one."
    ),
    config_path: Path | None = CONFIG_OPTION,
) -> None:
    """Print the cart submission for a complete selection as JSON."""
    config = _load_config(config_path)
    state = _read_selection(selection_file)

    result = validate_complete_configuration(
        state, config.rules, require_shaft=bool(state.shaft_brand)
    )
    if not result.valid:
        console.print(f"[red]Cannot build lines - {result.reason}[/red]")
        raise typer.Exit(1)

    submission = build_submission(
        state,
        bundle_id or generate_bundle_id(),
        ProductVariant(id=main_variant),
        ProductVariant(id=shaft_variant) if shaft_variant else None,
        parent_variant_id=parent_variant,
        rules=config.rules,
    )
    output_json(submission.model_dump(mode="json"))


@app.command()
def transform(
    lines_file: Path = typer.Argument(
        ..., help="JSON file with a list of lines or an object with a 'lines' key."
    ),
    config_path: Path | None = CONFIG_OPTION,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON (for LLM/programmatic consumption).",
    ),
) -> None:
    """Consolidate purchase-order lines into merge operations."""
    config = _load_config(config_path)
    data = _read_json(lines_file)
    lines = data.get("lines", []) if isinstance(data, dict) else data

    try:
        operations = consolidate(lines, config)
    except (BundleTransformError, ValidationError) as e:
        if json_output:
            output_json({"error": str(e)})
        else:
            console.print(f"[red]Transform failed: {e}[/red]")
        raise typer.Exit(1) from e

    if json_output:
        output_json({
            "operations": [op.model_dump(mode="json", by_alias=True) for op in operations],
            "count": len(operations),
        })
        return

    if not operations:
        console.print("[yellow]No bundles found.[/yellow]")
        return

    table = Table(title=f"Merge Operations ({len(operations)})")
    table.add_column("Title", style="white")
    table.add_column("Parent", style="cyan")
    table.add_column("Lines", style="blue", justify="right")
    table.add_column("Total", style="green", justify="right")
    table.add_column("Attributes", style="dim")

    for op in operations:
        table.add_row(
            op.title,
            op.parent_variant_id,
            str(len(op.lines)),
            f"{op.total_price} {op.currency}",
            "; ".join(f"{a.key}: {a.value}" for a in op.attributes),
        )

    console.print(table)


@app.command()
def show_session(
    session_key: str = typer.Argument(..., help="Configurator session key."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON (for LLM/programmatic consumption).",
    ),
) -> None:
    """Show the saved selection of a configurator session."""
    # Ensure database exists
    init_db()

    with get_session() as session:
        state = SelectionRepository(session).load(session_key)

    if state is None:
        if json_output:
            output_json({"error": f"Session {session_key} not found"})
        else:
            console.print(f"[red]Session {session_key} not found.[/red]")
        raise typer.Exit(1)

    if json_output:
        output_json(state.model_dump(mode="json"))
        return

    console.print(
        Panel(
            json.dumps(state.model_dump(mode="json"), indent=2, ensure_ascii=False),
            title=f"[bold blue]Session {session_key}[/bold blue]",
            expand=False,
        )
    )


if __name__ == "__main__":
    app()
