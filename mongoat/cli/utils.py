"""
Utility functions for CLI commands.

This module is part of MONGOAT.
"""

from types import ModuleType
from typing import Any

import click
from bson import json_util

from ..core import Database


def load_database(module_path: str) -> Database:
    """
    Import a models module and return the Database it defines.

    Args:
        module_path: Dotted module name or path to a .py file

    Raises:
        click.ClickException: If the module cannot be imported or defines
            no Database (or more than one)
    """
    try:
        module = Database.load_models(module_path)
    except (ImportError, OSError, SyntaxError) as e:
        raise click.ClickException(f"Cannot import models from '{module_path}': {e}") from e

    databases = _databases_in(module)
    if not databases:
        raise click.ClickException(f"No Database instance found in '{module_path}'")
    if len(databases) > 1:
        names = ", ".join(sorted(databases))
        raise click.ClickException(f"Several Database instances found in '{module_path}': {names}")
    return next(iter(databases.values()))


def _databases_in(module: ModuleType) -> dict[str, Database]:
    found: dict[str, Database] = {}
    for name, value in vars(module).items():
        if isinstance(value, Database) and all(value is not db for db in found.values()):
            found[name] = value
    return found


def format_output(data: Any, format_type: str) -> str:
    """
    Format command output.

    Args:
        data: Data to render
        format_type: 'json' or 'compact'
    """
    if format_type == "compact":
        return json_util.dumps(data)
    return json_util.dumps(data, indent=2)
