"""
Token definitions for the Solidity lexer.

This module contains the TokenType enum, Token dataclass, and
constant mappings for keywords and operators.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Enumeration of all token types recognized by the Solidity lexer."""

    # Keywords
    CONTRACT = auto()
    INTERFACE = auto()
    LIBRARY = auto()
    ABSTRACT = auto()
    STRUCT = auto()
    ENUM = auto()
    FUNCTION = auto()
    MODIFIER = auto()
    EVENT = auto()
    ERROR = auto()
    MAPPING = auto()
    STORAGE = auto()
    MEMORY = auto()
    CALLDATA = auto()
    PUBLIC = auto()
    PRIVATE = auto()
    INTERNAL = auto()
    EXTERNAL = auto()
    VIEW = auto()
    PURE = auto()
    PAYABLE = auto()
    VIRTUAL = auto()
    OVERRIDE = auto()
    IMMUTABLE = auto()
    CONSTANT = auto()
    TRANSIENT = auto()
    INDEXED = auto()
    RETURNS = auto()
    PRAGMA = auto()
    IMPORT = auto()
    IS = auto()
    USING = auto()
    TYPE = auto()
    CONSTRUCTOR = auto()
    RECEIVE = auto()
    FALLBACK = auto()

    # Types
    ELEMENTARY_TYPE = auto()

    # Operators
    ARROW = auto()
    EQ = auto()
    STAR = auto()
    OPERATOR = auto()

    # Delimiters
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    SEMICOLON = auto()
    COMMA = auto()
    DOT = auto()

    # Literals
    NUMBER = auto()
    HEX_NUMBER = auto()
    STRING_LITERAL = auto()
    IDENTIFIER = auto()
    PRAGMA_VALUE = auto()

    # Special
    EOF = auto()


@dataclass
class Token:
    """Represents a single token from the lexer."""
    type: TokenType
    value: str
    line: int
    column: int


# Keyword to TokenType mapping
KEYWORDS = {
    'contract': TokenType.CONTRACT,
    'interface': TokenType.INTERFACE,
    'library': TokenType.LIBRARY,
    'abstract': TokenType.ABSTRACT,
    'struct': TokenType.STRUCT,
    'enum': TokenType.ENUM,
    'function': TokenType.FUNCTION,
    'modifier': TokenType.MODIFIER,
    'event': TokenType.EVENT,
    'error': TokenType.ERROR,
    'mapping': TokenType.MAPPING,
    'storage': TokenType.STORAGE,
    'memory': TokenType.MEMORY,
    'calldata': TokenType.CALLDATA,
    'public': TokenType.PUBLIC,
    'private': TokenType.PRIVATE,
    'internal': TokenType.INTERNAL,
    'external': TokenType.EXTERNAL,
    'view': TokenType.VIEW,
    'pure': TokenType.PURE,
    'payable': TokenType.PAYABLE,
    'virtual': TokenType.VIRTUAL,
    'override': TokenType.OVERRIDE,
    'immutable': TokenType.IMMUTABLE,
    'constant': TokenType.CONSTANT,
    'transient': TokenType.TRANSIENT,
    'indexed': TokenType.INDEXED,
    'returns': TokenType.RETURNS,
    'pragma': TokenType.PRAGMA,
    'import': TokenType.IMPORT,
    'is': TokenType.IS,
    'using': TokenType.USING,
    'type': TokenType.TYPE,
    'constructor': TokenType.CONSTRUCTOR,
    'receive': TokenType.RECEIVE,
    'fallback': TokenType.FALLBACK,
}

# Elementary value types, including the sized families (uint8..uint256, bytes1..bytes32, ...)
ELEMENTARY_TYPES = {'address', 'bool', 'string', 'bytes', 'byte', 'uint', 'int', 'fixed', 'ufixed'}
SIZED_ELEMENTARY_TYPE = re.compile(r'^(u?int\d+|bytes\d+|u?fixed\d+x\d+)$')

# Keywords that are also legal as plain identifiers in name positions
CONTEXTUAL_KEYWORDS = {
    TokenType.ERROR,
    TokenType.TYPE,
    TokenType.RECEIVE,
    TokenType.FALLBACK,
}

SINGLE_CHAR_OPS = {
    '=': TokenType.EQ,
    '*': TokenType.STAR,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    ';': TokenType.SEMICOLON,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
}

# Characters that only ever show up inside skipped expressions
OPERATOR_CHARS = '+-/%&|^~<>!?:'
