"""Tree construction engine for HTML parsing.

Key Components:
    HTMLTreeBuilder: Insertion-mode state machine building a Node tree
    InsertionMode: Enumeration of the builder's insertion modes
    ParseResult: Document tree with diagnostics and performance metrics
    construct_tree: Consume a token sequence and return the document root
"""

from .builder import (
    BODY_CONTENT_KINDS,
    HTMLTreeBuilder,
    InsertionMode,
    ParseResult,
    construct_tree,
)

__all__ = [
    "BODY_CONTENT_KINDS",
    "HTMLTreeBuilder",
    "InsertionMode",
    "ParseResult",
    "construct_tree",
]
