"""
CLI module for aether-skills.

Provides the command-line interface using Click.
"""

from aetherskills.cli.main import cli, main

__all__ = ["main", "cli"]
