"""
Command line entry point for MONGOAT.

This module is part of MONGOAT.
"""

import logging

import click

from .. import __version__
from .commands.setup import setup
from .commands.validator import validator


@click.group()
@click.version_option(__version__, prog_name="mongoat")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """MONGOAT - MongoDB models with closed schemas."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


cli.add_command(validator)
cli.add_command(setup)
