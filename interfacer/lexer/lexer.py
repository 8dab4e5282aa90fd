"""
Lexer implementation for Solidity source code.

The Lexer tokenizes Solidity source code into a stream of tokens
that can be consumed by the declaration parser.
"""

from typing import List, Tuple

from .tokens import (
    Token,
    TokenType,
    KEYWORDS,
    ELEMENTARY_TYPES,
    SIZED_ELEMENTARY_TYPE,
    SINGLE_CHAR_OPS,
    OPERATOR_CHARS,
)


class Lexer:
    """
    Lexer for Solidity source code.

    Converts source text into a list of tokens for parsing. Comments are
    dropped; the text of a pragma directive is kept as a single token.
    """

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def peek(self, offset: int = 0) -> str:
        """Look ahead in the source without consuming."""
        pos = self.pos + offset
        if pos >= len(self.source):
            return ''
        return self.source[pos]

    def advance(self) -> str:
        """Consume and return the current character."""
        ch = self.peek()
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def skip_whitespace(self) -> None:
        """Skip over whitespace characters."""
        ch = self.peek()
        while ch and ch in ' \t\r\n':
            self.advance()
            ch = self.peek()

    def skip_comment(self) -> None:
        """Skip over single-line and multi-line comments."""
        if self.peek() == '/' and self.peek(1) == '/':
            while self.peek() and self.peek() != '\n':
                self.advance()
        elif self.peek() == '/' and self.peek(1) == '*':
            self.advance()
            self.advance()
            while self.peek():
                if self.peek() == '*' and self.peek(1) == '/':
                    self.advance()
                    self.advance()
                    break
                self.advance()

    def read_string(self) -> str:
        """Read a string literal including its quotes."""
        quote = self.advance()
        result = quote
        while self.peek() and self.peek() != quote:
            if self.peek() == '\\':
                result += self.advance()
            result += self.advance()
        if self.peek() == quote:
            result += self.advance()
        return result

    def read_number(self) -> Tuple[str, TokenType]:
        """Read a numeric literal (decimal or hex)."""
        result = ''
        token_type = TokenType.NUMBER

        if self.peek() == '0' and self.peek(1) in ('x', 'X'):
            result += self.advance()
            result += self.advance()
            token_type = TokenType.HEX_NUMBER
            while self.peek() and self.peek() in '0123456789abcdefABCDEF_':
                result += self.advance()
        else:
            while self.peek() and self.peek() in '0123456789_':
                result += self.advance()
            if self.peek() == '.' and self.peek(1).isdigit():
                result += self.advance()
                while self.peek() and self.peek() in '0123456789_':
                    result += self.advance()
            if self.peek() and self.peek() in 'eE':
                result += self.advance()
                if self.peek() and self.peek() in '+-':
                    result += self.advance()
                while self.peek().isdigit():
                    result += self.advance()

        return result, token_type

    def read_identifier(self) -> str:
        """Read an identifier or keyword."""
        result = ''
        while self.peek() and (self.peek().isalnum() or self.peek() in '_$'):
            result += self.advance()
        return result

    def read_pragma(self) -> None:
        """Read `<name> <value>` after the pragma keyword, keeping the value verbatim."""
        self.skip_whitespace()
        start_line, start_col = self.line, self.column
        name = self.read_identifier()
        self.tokens.append(Token(TokenType.IDENTIFIER, name, start_line, start_col))

        self.skip_whitespace()
        start_line, start_col = self.line, self.column
        value = ''
        while self.peek() and self.peek() != ';':
            value += self.advance()
        self.tokens.append(Token(TokenType.PRAGMA_VALUE, value.strip(), start_line, start_col))

    def classify_word(self, value: str) -> TokenType:
        """Map an identifier-shaped word to its token type."""
        if value in KEYWORDS:
            return KEYWORDS[value]
        if value in ELEMENTARY_TYPES or SIZED_ELEMENTARY_TYPE.match(value):
            return TokenType.ELEMENTARY_TYPE
        return TokenType.IDENTIFIER

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source and return a list of tokens.

        Returns:
            List of Token objects, ending with an EOF token.
        """
        while self.pos < len(self.source):
            self.skip_whitespace()

            if self.pos >= len(self.source):
                break

            if self.peek() == '/' and self.peek(1) in ('/', '*'):
                self.skip_comment()
                continue

            start_line = self.line
            start_col = self.column
            ch = self.peek()

            if ch in '"\'':
                value = self.read_string()
                self.tokens.append(Token(TokenType.STRING_LITERAL, value, start_line, start_col))
                continue

            if ch.isdigit():
                value, token_type = self.read_number()
                self.tokens.append(Token(token_type, value, start_line, start_col))
                continue

            if ch.isalpha() or ch in '_$':
                value = self.read_identifier()
                token_type = self.classify_word(value)
                self.tokens.append(Token(token_type, value, start_line, start_col))
                if token_type == TokenType.PRAGMA:
                    self.read_pragma()
                continue

            two_char = ch + self.peek(1)
            if two_char == '=>':
                self.advance()
                self.advance()
                self.tokens.append(Token(TokenType.ARROW, two_char, start_line, start_col))
                continue

            if ch in OPERATOR_CHARS or two_char == '==':
                value = ''
                while self.peek() and (self.peek() in OPERATOR_CHARS or self.peek() == '='):
                    value += self.advance()
                self.tokens.append(Token(TokenType.OPERATOR, value, start_line, start_col))
                continue

            if ch in SINGLE_CHAR_OPS:
                self.advance()
                self.tokens.append(Token(SINGLE_CHAR_OPS[ch], ch, start_line, start_col))
                continue

            # Unknown character - skip
            self.advance()

        self.tokens.append(Token(TokenType.EOF, '', self.line, self.column))
        return self.tokens
