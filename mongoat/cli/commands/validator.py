"""
Validator command for CLI.

Prints the validation descriptors of the models a module defines.

This module is part of MONGOAT.
"""

import click

from ..utils import format_output, load_database


@click.command()
@click.argument("models_module")
@click.option(
    "--collection",
    "-c",
    "collections",
    multiple=True,
    help="Only show these collections (repeatable)",
)
@click.option(
    "--format",
    "format_type",
    type=click.Choice(["json", "compact"]),
    default="json",
    show_default=True,
    help="Output format",
)
def validator(models_module: str, collections: tuple[str, ...], format_type: str) -> None:
    """
    Show the collMod validator each model would apply.

    MODELS_MODULE: Dotted module name or path to a .py file defining models

    Examples:
        mongoat validator app/models.py
        mongoat validator app.models -c users
    """
    database = load_database(models_module)

    output = {}
    for model in database.models:
        if collections and model.collection_name not in collections:
            continue
        output[model.collection_name] = {
            **model.validator.to_dict(),
            "allowedOperations": sorted(kind.value for kind in model.allowed_operations),
            "indexes": list(model.indexes),
        }

    missing = [name for name in collections if name not in output]
    if missing:
        raise click.ClickException(f"Unknown collection(s): {', '.join(missing)}")

    click.echo(format_output(output, format_type))
