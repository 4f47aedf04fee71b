"""
CLI module for the CQL sink tooling.

Exposes the main entry point installed as the ``cql-sink`` console script.
"""

from .commands import main

__all__ = ["main"]
