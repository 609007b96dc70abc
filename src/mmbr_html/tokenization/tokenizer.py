"""Character-level HTML tokenizer.

This module implements a small subset of the HTML tokenization state machine:
enough to recognize unattributed start and end tags and literal text. The
tokenizer is a single-pass iterator over an in-memory string.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, Optional

from mmbr_html.shared import TokenizerConfig, get_logger
from mmbr_html.shared.exceptions import TokenizerContractError


class TokenType(Enum):
    """Token kinds produced by the tokenizer."""

    CHAR = auto()        # A single literal character
    START_TAG = auto()   # <name>
    END_TAG = auto()     # </name>
    EOF = auto()         # End of input, emitted exactly once


class TokenizerState(Enum):
    """State machine states for tokenization."""

    DATA = auto()
    TAG_OPEN = auto()
    END_TAG_OPEN = auto()
    TAG_NAME = auto()
    AFTER_TAG_NAME = auto()  # Skipping unparsed attributes up to '>'


@dataclass
class TokenPosition:
    """Position of a token's first character in the input."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass
class Token:
    """A single token: a character, a start or end tag, or end of input.

    ``value`` holds the character for CHAR tokens, the tag name for tag
    tokens, and is empty for EOF.
    """

    type: TokenType
    value: str = ""
    position: Optional[TokenPosition] = None

    @classmethod
    def char(cls, c: str, position: Optional[TokenPosition] = None) -> "Token":
        if len(c) != 1:
            raise ValueError("Character tokens hold exactly one character")
        return cls(TokenType.CHAR, c, position)

    @classmethod
    def start_tag(cls, name: str, position: Optional[TokenPosition] = None) -> "Token":
        return cls(TokenType.START_TAG, name, position)

    @classmethod
    def end_tag(cls, name: str, position: Optional[TokenPosition] = None) -> "Token":
        return cls(TokenType.END_TAG, name, position)

    @classmethod
    def eof(cls, position: Optional[TokenPosition] = None) -> "Token":
        return cls(TokenType.EOF, "", position)

    @property
    def is_tag(self) -> bool:
        return self.type in (TokenType.START_TAG, TokenType.END_TAG)

    def matches(self, other: "Token") -> bool:
        """Compare type and value, ignoring position."""
        return self.type is other.type and self.value == other.value

    def __str__(self) -> str:
        if self.type is TokenType.CHAR:
            return f"Char({self.value!r})"
        if self.type is TokenType.START_TAG:
            return f"StartTag({self.value!r})"
        if self.type is TokenType.END_TAG:
            return f"EndTag({self.value!r})"
        return "Eof"


class HTMLTokenizer:
    """Single-pass HTML tokenizer.

    Iterating yields tokens until one terminal EOF token has been produced;
    the tokenizer cannot be restarted.

    Example:
        >>> [str(t) for t in HTMLTokenizer("<p>hi</p>")]
        ["StartTag('p')", "Char('h')", "Char('i')", "EndTag('p')", 'Eof']
    """

    def __init__(
        self,
        text: str,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the tokenizer.

        Args:
            text: Complete, already decoded input
            config: Tokenizer configuration
            correlation_id: Optional correlation ID for log records
        """
        if not isinstance(text, str):
            raise TypeError("HTMLTokenizer input must be a str")

        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "html_tokenizer")

        self._input = text
        self._pos = 0
        self._line = 1
        self._column = 1
        self._reconsume = False
        self._last_char_position: Optional[TokenPosition] = None
        self._current_token: Optional[Token] = None
        self._finished = False

        self.state = TokenizerState.DATA
        self.characters_consumed = 0
        self.tokens_emitted = 0

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        token = self.next_token()
        if token is None:
            raise StopIteration
        return token

    @property
    def finished(self) -> bool:
        """True once the EOF token has been emitted."""
        return self._finished

    def next_token(self) -> Optional[Token]:
        """Pull the next token, or ``None`` once the sequence has ended."""
        if self._finished:
            return None

        while True:
            c = self._consume()
            if c is None:
                return self._emit_eof()

            if self.state is TokenizerState.DATA:
                if c == "<":
                    self.state = TokenizerState.TAG_OPEN
                    continue
                return self._emit(Token.char(c, self._last_char_position))

            if self.state is TokenizerState.TAG_OPEN:
                if c == "/":
                    self.state = TokenizerState.END_TAG_OPEN
                elif c.isalpha():
                    self._create_tag_token(TokenType.START_TAG)
                else:
                    self._log_dropped("<", c)
                    self.state = TokenizerState.DATA
                    self._reconsume = True
                continue

            if self.state is TokenizerState.END_TAG_OPEN:
                if c.isalpha():
                    self._create_tag_token(TokenType.END_TAG)
                elif c == ">":
                    self._log_dropped("</>", c)
                    self.state = TokenizerState.DATA
                else:
                    # Stay in END_TAG_OPEN, so '</ p>' still closes p
                    self._log_dropped("</", c)
                continue

            if self.state is TokenizerState.TAG_NAME:
                if c == ">":
                    return self._emit_current_tag()
                if c.isalnum():
                    self._append_tag_name(c)
                elif c.isspace() or c == "/":
                    self.state = TokenizerState.AFTER_TAG_NAME
                else:
                    self.logger.debug(
                        "Dropped invalid tag name character",
                        extra={"char": c, "offset": self._pos - 1},
                    )
                continue

            if self.state is TokenizerState.AFTER_TAG_NAME:
                if c == ">":
                    return self._emit_current_tag()
                continue

            raise TokenizerContractError(f"Unknown tokenizer state: {self.state}")

    def _consume(self) -> Optional[str]:
        """Return the next input character, honoring one-slot pushback."""
        if self._reconsume:
            self._reconsume = False
            return self._input[self._pos - 1]

        if self._pos >= len(self._input):
            return None

        c = self._input[self._pos]
        if self.config.track_positions:
            self._last_char_position = TokenPosition(self._line, self._column, self._pos)
            if c == "\n":
                self._line += 1
                self._column = 1
            else:
                self._column += 1
        self._pos += 1
        self.characters_consumed += 1
        return c

    def _create_tag_token(self, token_type: TokenType) -> None:
        """Start a tag token and reconsume the current character as its name."""
        position = self._last_char_position
        if position is not None:
            # Point at the '<' that opened the tag
            back = 2 if token_type is TokenType.END_TAG else 1
            position = TokenPosition(
                position.line,
                max(1, position.column - back),
                max(0, position.offset - back),
            )
        self._current_token = Token(token_type, "", position)
        self.state = TokenizerState.TAG_NAME
        self._reconsume = True

    def _append_tag_name(self, c: str) -> None:
        token = self._current_token
        if token is None or not token.is_tag:
            raise TokenizerContractError(
                f"Tag name character {c!r} with no tag under construction"
            )
        if self.config.lowercase_tag_names and "A" <= c <= "Z":
            c = c.lower()
        token.value += c

    def _emit_current_tag(self) -> Token:
        token = self._current_token
        if token is None:
            raise TokenizerContractError("Tag close with no tag under construction")
        self._current_token = None
        self.state = TokenizerState.DATA
        return self._emit(token)

    def _emit_eof(self) -> Token:
        if self._current_token is not None:
            self.logger.debug(
                "Discarded unterminated tag at end of input",
                extra={"tag_name": self._current_token.value},
            )
            self._current_token = None

        self._finished = True
        position = None
        if self.config.track_positions:
            position = TokenPosition(self._line, self._column, self._pos)
        return self._emit(Token.eof(position))

    def _emit(self, token: Token) -> Token:
        self.tokens_emitted += 1
        return token

    def _log_dropped(self, markup: str, next_char: str) -> None:
        self.logger.debug(
            "Dropped incomplete tag opener",
            extra={"markup": markup, "next_char": next_char, "offset": self._pos - 1},
        )


def tokenize(
    text: str,
    config: Optional[TokenizerConfig] = None,
    correlation_id: Optional[str] = None,
) -> HTMLTokenizer:
    """Create a single-pass token iterator over ``text``."""
    return HTMLTokenizer(text, config=config, correlation_id=correlation_id)
