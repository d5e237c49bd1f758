"""
Setup command for CLI.

Connects to MongoDB and applies collections, validators and indexes for
the models a module defines.

This module is part of MONGOAT.
"""

import asyncio

import click

from ...exceptions import MongoatError
from ..utils import load_database


async def _run_setup(database, clean: bool) -> list[str]:
    await database.connect()
    try:
        await database.setup_collections()
        if clean:
            await database.clean_collections()
        return [model.collection_name for model in database.models]
    finally:
        await database.disconnect()


@click.command()
@click.argument("models_module")
@click.option(
    "--clean",
    is_flag=True,
    help="Also delete all documents from every collection",
)
def setup(models_module: str, clean: bool) -> None:
    """
    Create collections and apply validators and indexes.

    MODELS_MODULE: Dotted module name or path to a .py file defining models

    Examples:
        mongoat setup app/models.py
        MONGODB_URI=mongodb://db:27017 mongoat setup app.models
    """
    database = load_database(models_module)

    try:
        names = asyncio.run(_run_setup(database, clean))
    except MongoatError as e:
        raise click.ClickException(str(e)) from e

    for name in names:
        click.echo(click.style(f"✅ {name}", fg="green"))
    click.echo(f"Set up {len(names)} collection(s) in '{database.config.db_name}'")
