"""N-ary document tree with single-owner parent/child/sibling links.

Every node is owned by exactly one strong reference: its parent's
``first_child`` slot when it is the first child, otherwise its preceding
sibling's ``next_sibling`` slot. ``parent``, ``last_child`` and
``previous_sibling`` are weak references used only for traversal, so the
owning chain can never form a cycle and dropping the document root releases
the whole tree.
"""

import weakref
from enum import Enum, auto
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from mmbr_html.shared.exceptions import TreeStructureError

from .element import ElementKind

_WeakNode = Optional[Callable[[], Optional["Node"]]]


class NodeType(Enum):
    """Variant tag for tree nodes."""

    DOCUMENT = auto()
    ELEMENT = auto()
    TEXT = auto()


def _deref(ref: _WeakNode) -> Optional["Node"]:
    return ref() if ref is not None else None


class Node:
    """A Document, Element or Text node.

    Nodes are built through the ``document``, ``element`` and ``text``
    constructors and linked with ``append_child``; the link attributes are
    read-only properties.
    """

    __slots__ = (
        "__weakref__",
        "_data",
        "_first_child",
        "_last_child",
        "_next_sibling",
        "_parent",
        "_previous_sibling",
        "element_kind",
        "node_type",
    )

    def __init__(
        self,
        node_type: NodeType,
        element_kind: Optional[ElementKind] = None,
        data: Optional[str] = None,
    ) -> None:
        if node_type is NodeType.ELEMENT and not isinstance(element_kind, ElementKind):
            raise TypeError("Element nodes require an ElementKind")
        if node_type is not NodeType.ELEMENT and element_kind is not None:
            raise TypeError("Only element nodes carry an ElementKind")
        if node_type is NodeType.TEXT and not isinstance(data, str):
            raise TypeError("Text nodes require string data")
        if node_type is not NodeType.TEXT and data is not None:
            raise TypeError("Only text nodes carry character data")

        self.node_type = node_type
        self.element_kind = element_kind
        self._data = data

        # Owning links
        self._first_child: Optional[Node] = None
        self._next_sibling: Optional[Node] = None

        # Non-owning back-references
        self._parent: _WeakNode = None
        self._last_child: _WeakNode = None
        self._previous_sibling: _WeakNode = None

    @classmethod
    def document(cls) -> "Node":
        """Create a new Document root."""
        return cls(NodeType.DOCUMENT)

    @classmethod
    def element(cls, kind: Union[ElementKind, str]) -> "Node":
        """Create an Element node.

        A string is resolved through ``ElementKind.from_tag_name`` and raises
        ``UnsupportedElementKindError`` for names outside the vocabulary.
        """
        if not isinstance(kind, ElementKind):
            kind = ElementKind.from_tag_name(kind)
        return cls(NodeType.ELEMENT, element_kind=kind)

    @classmethod
    def text(cls, data: str) -> "Node":
        """Create a Text node holding ``data``."""
        return cls(NodeType.TEXT, data=data)

    @property
    def is_document(self) -> bool:
        return self.node_type is NodeType.DOCUMENT

    @property
    def is_element(self) -> bool:
        return self.node_type is NodeType.ELEMENT

    @property
    def is_text(self) -> bool:
        return self.node_type is NodeType.TEXT

    @property
    def data(self) -> Optional[str]:
        """Character data of a Text node, ``None`` otherwise."""
        return self._data

    @property
    def tag_name(self) -> str:
        """Tag name for elements, ``#text`` or ``#document`` otherwise."""
        if self.element_kind is not None:
            return self.element_kind.tag_name
        if self.node_type is NodeType.TEXT:
            return "#text"
        return "#document"

    @property
    def parent(self) -> Optional["Node"]:
        return _deref(self._parent)

    @property
    def first_child(self) -> Optional["Node"]:
        return self._first_child

    @property
    def last_child(self) -> Optional["Node"]:
        return _deref(self._last_child)

    @property
    def next_sibling(self) -> Optional["Node"]:
        return self._next_sibling

    @property
    def previous_sibling(self) -> Optional["Node"]:
        return _deref(self._previous_sibling)

    @property
    def has_children(self) -> bool:
        return self._first_child is not None

    @property
    def children(self) -> Iterator["Node"]:
        """Iterate over direct children in document order."""
        child = self._first_child
        while child is not None:
            yield child
            child = child._next_sibling

    def append_data(self, text: str) -> None:
        """Extend a Text node's data in place."""
        if self.node_type is not NodeType.TEXT:
            raise TreeStructureError(
                f"Cannot append character data to a {self.tag_name} node"
            )
        self._data = (self._data or "") + text

    def append_child(self, child: "Node") -> "Node":
        """Link ``child`` as the new last child of this node.

        The previous last child, found through the ``last_child``
        back-reference, becomes the owner of ``child``.

        Returns:
            The appended child

        Raises:
            TreeStructureError: if the link would give a node two owners,
                put a Document below another node, give a Text node
                children or introduce a cycle
        """
        if not isinstance(child, Node):
            raise TypeError("Child must be a Node instance")
        if self.node_type is NodeType.TEXT:
            raise TreeStructureError("Text nodes cannot have children")
        if child.node_type is NodeType.DOCUMENT:
            raise TreeStructureError("A document cannot be appended as a child")
        if child._parent is not None or child._previous_sibling is not None:
            raise TreeStructureError("Child is already linked into a tree")

        ancestor: Optional[Node] = self
        while ancestor is not None:
            if ancestor is child:
                raise TreeStructureError("Appending a node below itself creates a cycle")
            ancestor = ancestor.parent

        previous = self.last_child
        if previous is None:
            self._first_child = child
        else:
            previous._next_sibling = child
            child._previous_sibling = weakref.ref(previous)

        self._last_child = weakref.ref(child)
        child._parent = weakref.ref(self)
        return child

    def iter_descendants(self) -> Iterator["Node"]:
        """Iterate over all descendants in document (pre-order) order."""
        node = self._first_child
        while node is not None:
            yield node
            if node._first_child is not None:
                node = node._first_child
                continue
            while node is not None and node._next_sibling is None:
                node = node.parent
                if node is self:
                    return
            if node is not None:
                node = node._next_sibling

    @property
    def text_content(self) -> str:
        """Concatenated data of all descendant Text nodes."""
        if self.node_type is NodeType.TEXT:
            return self._data or ""
        return "".join(
            node._data or "" for node in self.iter_descendants()
            if node.node_type is NodeType.TEXT
        )

    def find(self, kind: Union[ElementKind, str]) -> Optional["Node"]:
        """Find the first descendant element of the given kind."""
        return next(iter(self.find_all(kind)), None)

    def find_all(self, kind: Union[ElementKind, str]) -> List["Node"]:
        """Find all descendant elements of the given kind in document order."""
        if not isinstance(kind, ElementKind):
            kind = ElementKind.from_tag_name(kind)
        return [node for node in self.iter_descendants() if node.element_kind is kind]

    def get_depth(self) -> int:
        """Get depth of this node in the tree (root = 0)."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    def to_dict(self) -> Dict[str, Any]:
        """Convert the subtree rooted here to a dictionary."""
        result: Dict[str, Any] = {"type": self.node_type.name.lower()}
        if self.element_kind is not None:
            result["tag"] = self.element_kind.tag_name
        if self.node_type is NodeType.TEXT:
            result["data"] = self._data
        if self._first_child is not None:
            result["children"] = [child.to_dict() for child in self.children]
        return result

    def __repr__(self) -> str:
        if self.node_type is NodeType.TEXT:
            return f"<Node #text {self._data!r}>"
        return f"<Node {self.tag_name}>"
