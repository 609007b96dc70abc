"""Export adapters for parsed document trees.

The parser defines no serialization of its own; these helpers walk a
``Node`` tree and hand it to other representations: plain dictionaries and
JSON, an indented text outline, and ``lxml.etree`` elements.
"""

import json
from typing import Any, Dict, List, Optional

from mmbr_html.dom import Node
from mmbr_html.shared import HTMLParserError


class AdapterError(HTMLParserError):
    """Raised when a tree cannot be converted to the target representation."""


class AdapterUnavailableError(AdapterError):
    """Raised when the target library of an adapter is not installed."""


def to_dict(node: Node) -> Dict[str, Any]:
    """Convert a tree to nested dictionaries."""
    return node.to_dict()


def to_json(node: Node, indent: Optional[int] = 2) -> str:
    """Convert a tree to a JSON string."""
    return json.dumps(to_dict(node), indent=indent)


def format_tree(node: Node, indent: str = "  ") -> str:
    """Render a tree as an indented outline, one node per line.

    Example:
        >>> print(format_tree(parse_string('<html>hi</html>').document))
        #document
          html
            "hi"
    """
    lines: List[str] = []
    base_depth = node.get_depth()
    for current in [node, *node.iter_descendants()]:
        prefix = indent * (current.get_depth() - base_depth)
        if current.is_text:
            lines.append(f"{prefix}{json.dumps(current.data)}")
        else:
            lines.append(f"{prefix}{current.tag_name}")
    return "\n".join(lines)


def lxml_available() -> bool:
    """Check if lxml is available."""
    try:
        import lxml.etree  # noqa: F401
    except ImportError:
        return False
    return True


def to_lxml(node: Node) -> Any:
    """Convert a tree to an ``lxml.etree`` element.

    Text nodes become ``text`` or ``tail`` of the surrounding elements. A
    Document converts to its single root element; surrounding whitespace is
    dropped.

    Raises:
        AdapterUnavailableError: if lxml is not installed
        AdapterError: if a document has no single root element, or a Text
            node is passed directly
    """
    try:
        import lxml.etree as ET
    except ImportError as e:
        raise AdapterUnavailableError(
            "lxml is required for to_lxml; install the 'lxml' extra"
        ) from e

    if node.is_text:
        raise AdapterError("Text nodes cannot be converted to lxml elements")

    if node.is_document:
        elements = [child for child in node.children if child.is_element]
        stray_text = any(
            child.is_text and (child.data or "").strip() for child in node.children
        )
        if len(elements) != 1 or stray_text:
            raise AdapterError("Document does not have a single root element")
        node = elements[0]

    return _convert_element_to_lxml(node, ET)


def _convert_element_to_lxml(element: Node, ET: Any) -> Any:
    lxml_element = ET.Element(element.tag_name)
    last_child = None

    for child in element.children:
        if child.is_text:
            if last_child is None:
                lxml_element.text = (lxml_element.text or "") + (child.data or "")
            else:
                last_child.tail = (last_child.tail or "") + (child.data or "")
        else:
            last_child = _convert_element_to_lxml(child, ET)
            lxml_element.append(last_child)

    return lxml_element
