"""Command-line interface module for mmbr-html.

This module provides CLI tools to parse HTML into a tree and to inspect the
tokenizer's output.
"""

from .main import main

__all__ = ["main"]
