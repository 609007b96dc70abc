"""Exception hierarchy for the HTML parsing pipeline."""

from typing import List, Optional


class HTMLParserError(Exception):
    """Base exception for parsing failures."""


class UnsupportedElementKindError(HTMLParserError, ValueError):
    """Raised when a tag name is outside the recognized element vocabulary."""

    def __init__(self, tag_name: str) -> None:
        super().__init__(f"Unsupported element kind: {tag_name!r}")
        self.tag_name = tag_name


class TokenizerContractError(HTMLParserError):
    """Raised when the tokenizer state machine reaches an impossible state.

    This is never a recoverable parse error: it means a tag-name character was
    appended while no tag token was under construction.
    """


class TreeStructureError(HTMLParserError):
    """Raised when a node link operation would break tree ownership rules."""


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []
