"""CLI commands for event custom fields."""

import asyncio
import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional
from uuid import UUID

import typer

from src.custom_fields.repository.read_models import SqlCustomFieldReadModel
from src.custom_fields.validators import validate_field_definitions

app = typer.Typer(help="CLI commands for event custom fields")


@app.command()
def validate_fields(file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True)):
    """Check a JSON file of field definitions without saving anything."""
    try:
        definitions = json.loads(file.read_text())
    except json.JSONDecodeError as e:
        typer.secho(f"Invalid JSON: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    # accept either a bare list or the request body of the sync endpoint
    if isinstance(definitions, dict) and "fields" in definitions:
        definitions = definitions["fields"]

    result = validate_field_definitions(definitions)
    if result.valid:
        typer.secho(f"{len(definitions)} field definition(s) are valid", fg=typer.colors.GREEN)
        return

    for error in result.errors:
        typer.secho(error, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command()
def results(
    event_id: Optional[UUID] = typer.Argument(None, help="Event to print the host view for"),
    public_slug: Optional[str] = typer.Option(
        None, "--public-slug", help="Print the public page view for this slug instead"
    ),
):
    """Print the aggregated answers for an event, by id or by public slug."""
    if event_id is None and not public_slug:
        typer.secho("Give an EVENT_ID or --public-slug", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    read_model = SqlCustomFieldReadModel()
    if public_slug:
        aggregated = asyncio.run(read_model.get_public_results(public_slug))
    else:
        aggregated = asyncio.run(read_model.get_private_results(event_id))

    if aggregated is None:
        typer.secho("Event not found", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(json.dumps(asdict(aggregated), indent=2, default=str))


if __name__ == "__main__":
    app()
