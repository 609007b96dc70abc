"""Public API for the HTML parsing pipeline.

Progressive API disclosure:
- Core boundary: tokenize(), construct_tree()
- Simple functions: parse_string(), parse_file()
- Configured parser: HTMLParser class
"""

from .adapters import (
    AdapterError,
    AdapterUnavailableError,
    format_tree,
    lxml_available,
    to_dict,
    to_json,
    to_lxml,
)
from .parser import (
    HTMLParser,
    construct_tree,
    parse_file,
    parse_string,
    tokenize,
)

__all__ = [
    "AdapterError",
    "AdapterUnavailableError",
    "HTMLParser",
    "construct_tree",
    "format_tree",
    "lxml_available",
    "parse_file",
    "parse_string",
    "to_dict",
    "to_json",
    "to_lxml",
    "tokenize",
]
