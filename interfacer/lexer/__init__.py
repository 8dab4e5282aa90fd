"""
Lexer module for the Solidity interfacer.

This module provides tokenization of Solidity source code.
"""

from .tokens import TokenType, Token, KEYWORDS, CONTEXTUAL_KEYWORDS
from .lexer import Lexer

__all__ = [
    'TokenType',
    'Token',
    'KEYWORDS',
    'CONTEXTUAL_KEYWORDS',
    'Lexer',
]
