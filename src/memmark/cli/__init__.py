"""
Command-line interface for the memmark package.

This module provides the main CLI entry point for the sampler.
"""

from .main import main_cli, run_cli

__all__ = [
    "main_cli",
    "run_cli",
]
