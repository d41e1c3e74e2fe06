"""Lexical front end for ISO 10303-21 (STEP physical file) exchange structures."""

from __future__ import annotations

from steplex.errors import ErrorKind, LexError, LexicalError
from steplex.lexer import Lexer, tokenize
from steplex.tokens import PRIORITY, Token, TokenKind

__version__ = "0.1.0"

__all__ = [
    "PRIORITY",
    "ErrorKind",
    "LexError",
    "Lexer",
    "LexicalError",
    "Token",
    "TokenKind",
    "tokenize",
]
