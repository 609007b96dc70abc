"""Closed vocabulary of HTML element kinds recognized by the parser."""

from enum import Enum
from typing import Dict

from mmbr_html.shared.exceptions import UnsupportedElementKindError


class ElementKind(Enum):
    """HTML element kinds with a total mapping to and from tag names."""

    HTML = "html"
    HEAD = "head"
    BODY = "body"
    TITLE = "title"
    P = "p"
    DIV = "div"
    SPAN = "span"
    H1 = "h1"
    H2 = "h2"

    @property
    def tag_name(self) -> str:
        """Tag name text for this element kind."""
        return self.value

    @classmethod
    def from_tag_name(cls, name: str) -> "ElementKind":
        """Look up the element kind for a tag name.

        Matching is ASCII case-insensitive.

        Raises:
            UnsupportedElementKindError: if ``name`` is not in the vocabulary
        """
        kind = _BY_TAG_NAME.get(name.lower()) if isinstance(name, str) else None
        if kind is None:
            raise UnsupportedElementKindError(str(name))
        return kind

    @classmethod
    def is_supported(cls, name: str) -> bool:
        """Check whether ``name`` maps to an element kind."""
        return isinstance(name, str) and name.lower() in _BY_TAG_NAME

    def __str__(self) -> str:
        return self.value


_BY_TAG_NAME: Dict[str, ElementKind] = {kind.value: kind for kind in ElementKind}
