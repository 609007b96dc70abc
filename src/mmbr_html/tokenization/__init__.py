"""Tokenization engine for HTML parsing.

Key Components:
    HTMLTokenizer: Single-pass iterator turning a string into tokens
    Token: A character, start tag, end tag or end-of-input marker
    TokenType: Enumeration of the token kinds
    TokenPosition: Line/column/offset of a token's first character
    TokenizerState: State machine states of the tokenizer
    tokenize: Convenience constructor for HTMLTokenizer
"""

from .tokenizer import (
    HTMLTokenizer,
    Token,
    TokenizerState,
    TokenPosition,
    TokenType,
    tokenize,
)

__all__ = [
    "HTMLTokenizer",
    "Token",
    "TokenPosition",
    "TokenType",
    "TokenizerState",
    "tokenize",
]
