"""Document object model for parsed HTML.

Key Components:
    Node: Document, Element or Text node with single-owner sibling links
    NodeType: Variant tag distinguishing the three node kinds
    ElementKind: Closed vocabulary of recognized element names
"""

from .element import ElementKind
from .node import Node, NodeType

__all__ = [
    "ElementKind",
    "Node",
    "NodeType",
]
