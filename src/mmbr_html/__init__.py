"""mmbr-html: a small two-stage HTML parser.

A character-level tokenizer feeds an insertion-mode tree builder that
materializes a Document/Element/Text node tree over a closed vocabulary of
element names.

Progressive API Disclosure:
- Level 1: Core boundary - tokenize(), construct_tree()
- Level 2: Simple functions - parse_string(), parse_file()
- Level 3: Configured parser - HTMLParser class with ParserConfig
"""

__version__ = "0.1.0"
__author__ = "mmbr-html developers"

from .api import HTMLParser, construct_tree, parse_file, parse_string, tokenize
from .dom import ElementKind, Node, NodeType
from .shared.config import EndTagMatching, ParserConfig, TokenizerConfig, TreeConfig
from .shared.exceptions import (
    HTMLParserError,
    TokenizerContractError,
    UnsupportedElementKindError,
)
from .tokenization import Token, TokenType
from .tree import InsertionMode, ParseResult

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Core boundary
    "tokenize",
    "construct_tree",

    # Simple parsing functions
    "parse_string",
    "parse_file",

    # Configured parser
    "HTMLParser",

    # Data structures
    "ElementKind",
    "InsertionMode",
    "Node",
    "NodeType",
    "ParseResult",
    "Token",
    "TokenType",

    # Configuration
    "EndTagMatching",
    "ParserConfig",
    "TokenizerConfig",
    "TreeConfig",

    # Errors
    "HTMLParserError",
    "TokenizerContractError",
    "UnsupportedElementKindError",
]
