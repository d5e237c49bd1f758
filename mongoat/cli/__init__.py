"""
Command line interface for MONGOAT.
"""

from .main import cli

__all__ = ["cli"]
