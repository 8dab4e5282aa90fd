"""
Solidity declaration parser.

The Parser converts a stream of tokens from the Lexer into the
declaration-level AST used for interface synthesis. Function bodies,
modifier definitions, events, errors and initialisers are skipped by
balanced-delimiter scanning.
"""

from typing import List, Optional

from ..lexer import Lexer, Token, TokenType, CONTEXTUAL_KEYWORDS
from .ast_nodes import (
    SourceUnit,
    PragmaDirective,
    ImportDirective,
    ContractDefinition,
    StructDefinition,
    EnumDefinition,
    FunctionDefinition,
    ModifierInvocation,
    VariableDeclaration,
    StateVariableDeclaration,
    TypeName,
    ElementaryTypeName,
    UserDefinedTypeName,
    ArrayTypeName,
    Mapping,
)


OPENERS = {
    TokenType.LPAREN: TokenType.RPAREN,
    TokenType.LBRACE: TokenType.RBRACE,
    TokenType.LBRACKET: TokenType.RBRACKET,
}
CLOSERS = set(OPENERS.values())

VISIBILITIES = {
    TokenType.PUBLIC: 'public',
    TokenType.PRIVATE: 'private',
    TokenType.INTERNAL: 'internal',
    TokenType.EXTERNAL: 'external',
}

STATE_MUTABILITIES = {
    TokenType.VIEW: 'view',
    TokenType.PURE: 'pure',
    TokenType.PAYABLE: 'payable',
    TokenType.CONSTANT: 'view',  # pre-0.5 spelling of view
}

DATA_LOCATIONS = {
    TokenType.STORAGE: 'storage',
    TokenType.MEMORY: 'memory',
    TokenType.CALLDATA: 'calldata',
}


class Parser:
    """
    Recursive descent parser for Solidity declarations.

    Parses a stream of tokens into a SourceUnit holding pragmas, imports,
    contract definitions and file-level structs and enums.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Token:
        """Look ahead in the token stream without consuming."""
        pos = self.pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]  # Return EOF
        return self.tokens[pos]

    def current(self) -> Token:
        """Return the current token."""
        return self.peek()

    def advance(self) -> Token:
        """Consume and return the current token."""
        token = self.current()
        self.pos += 1
        return token

    def match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types."""
        return self.current().type in types

    def expect(self, token_type: TokenType, message: str = '') -> Token:
        """Consume the current token if it matches, otherwise raise an error."""
        if self.current().type != token_type:
            raise SyntaxError(
                f"Expected {token_type.name} but got {self.current().type.name} "
                f"at line {self.current().line}, column {self.current().column}: {message}"
            )
        return self.advance()

    def match_name(self) -> bool:
        """Check if the current token can be used as an identifier."""
        return self.match(TokenType.IDENTIFIER) or self.current().type in CONTEXTUAL_KEYWORDS

    def expect_name(self, message: str = '') -> str:
        """Consume an identifier (or a contextual keyword used as one)."""
        if not self.match_name():
            return self.expect(TokenType.IDENTIFIER, message).value
        return self.advance().value

    def parse_qualified_name(self) -> str:
        """Parse a dotted name such as Lib.Position."""
        name = self.expect_name()
        while self.match(TokenType.DOT):
            self.advance()
            name += '.' + self.expect_name()
        return name

    # =========================================================================
    # SKIPPING
    # =========================================================================

    def skip_balanced(self) -> None:
        """Skip a delimited group starting at the current opening token."""
        opener = self.current().type
        closer = OPENERS[opener]
        start = self.advance()
        depth = 1
        while depth > 0:
            if self.match(TokenType.EOF):
                raise SyntaxError(
                    f"Unterminated '{start.value}' opened at line {start.line}, column {start.column}"
                )
            token = self.advance()
            if token.type == opener:
                depth += 1
            elif token.type == closer:
                depth -= 1

    def skip_until_semicolon(self) -> None:
        """Skip tokens up to and including the next top-level semicolon.

        Stops before an unmatched closing delimiter, which belongs to the
        enclosing construct.
        """
        depth = 0
        while not self.match(TokenType.EOF):
            token = self.current()
            if token.type in OPENERS:
                depth += 1
            elif token.type in CLOSERS:
                if depth == 0:
                    return
                depth -= 1
            elif token.type == TokenType.SEMICOLON and depth == 0:
                self.advance()
                return
            self.advance()

    def skip_body(self) -> None:
        """Skip everything up to and including a `{...}` body or a terminating `;`."""
        while not self.match(TokenType.LBRACE, TokenType.SEMICOLON, TokenType.EOF):
            if self.current().type in OPENERS:
                self.skip_balanced()
            else:
                self.advance()
        if self.match(TokenType.LBRACE):
            self.skip_balanced()
        elif self.match(TokenType.SEMICOLON):
            self.advance()

    # =========================================================================
    # TOP-LEVEL PARSING
    # =========================================================================

    def parse(self) -> SourceUnit:
        """Parse the entire source file into a SourceUnit AST."""
        unit = SourceUnit()

        while not self.match(TokenType.EOF):
            if self.match(TokenType.PRAGMA):
                unit.pragmas.append(self.parse_pragma())
            elif self.match(TokenType.IMPORT):
                unit.imports.append(self.parse_import())
            elif self.match(TokenType.CONTRACT, TokenType.INTERFACE, TokenType.LIBRARY, TokenType.ABSTRACT):
                unit.contracts.append(self.parse_contract())
            elif self.match(TokenType.STRUCT):
                unit.structs.append(self.parse_struct())
            elif self.match(TokenType.ENUM):
                unit.enums.append(self.parse_enum())
            elif self.match(TokenType.FUNCTION):
                self.parse_function()  # free function, not part of any interface
            elif self.current().type in CLOSERS:
                self.advance()  # stray closing delimiter
            else:
                # Constants, events, errors, using-for and user-defined value types
                self.skip_until_semicolon()

        return unit

    def parse_pragma(self) -> PragmaDirective:
        """Parse a pragma directive."""
        self.expect(TokenType.PRAGMA)
        name = self.expect(TokenType.IDENTIFIER).value
        value = self.expect(TokenType.PRAGMA_VALUE).value
        self.expect(TokenType.SEMICOLON)
        return PragmaDirective(name, value)

    def parse_import(self) -> ImportDirective:
        """Parse an import directive in any of its four forms."""
        self.expect(TokenType.IMPORT)
        symbols = []
        unit_alias = None

        if self.match(TokenType.STRING_LITERAL):
            path = self.advance().value
            if self.current().value == 'as':
                self.advance()
                unit_alias = self.expect_name()
        else:
            if self.match(TokenType.STAR):
                # import * as X from "..."
                self.advance()
                if self.current().value == 'as':
                    self.advance()
                    unit_alias = self.expect_name()
            else:
                # import {A, B as C} from "..."
                self.expect(TokenType.LBRACE)
                while not self.match(TokenType.RBRACE, TokenType.EOF):
                    name = self.expect_name()
                    alias = None
                    if self.current().value == 'as':
                        self.advance()
                        alias = self.expect_name()
                    symbols.append((name, alias))
                    if self.match(TokenType.COMMA):
                        self.advance()
                self.expect(TokenType.RBRACE)
            if self.current().value != 'from':
                raise SyntaxError(
                    f"Expected 'from' in import at line {self.current().line}, "
                    f"column {self.current().column}"
                )
            self.advance()
            path = self.expect(TokenType.STRING_LITERAL).value

        self.expect(TokenType.SEMICOLON)
        return ImportDirective(path=path[1:-1], unit_alias=unit_alias, symbols=symbols)

    # =========================================================================
    # CONTRACT PARSING
    # =========================================================================

    def parse_contract(self) -> ContractDefinition:
        """Parse a contract, interface, library, or abstract contract."""
        is_abstract = False
        if self.match(TokenType.ABSTRACT):
            is_abstract = True
            self.advance()

        if not self.match(TokenType.CONTRACT, TokenType.INTERFACE, TokenType.LIBRARY):
            self.expect(TokenType.CONTRACT)
        kind = self.advance().value

        name = self.expect_name()
        base_contracts = []

        if self.match(TokenType.IS):
            self.advance()
            while True:
                base_contracts.append(self.parse_qualified_name())
                # Base constructor arguments: is Ownable(msg.sender)
                if self.match(TokenType.LPAREN):
                    self.skip_balanced()
                if self.match(TokenType.COMMA):
                    self.advance()
                else:
                    break

        self.expect(TokenType.LBRACE)
        contract = ContractDefinition(
            name=name,
            kind=kind,
            is_abstract=is_abstract,
            base_contracts=base_contracts,
        )

        while not self.match(TokenType.RBRACE, TokenType.EOF):
            if self.match(TokenType.FUNCTION):
                contract.sub_nodes.append(self.parse_function())
            elif self.match(TokenType.CONSTRUCTOR, TokenType.RECEIVE, TokenType.FALLBACK) \
                    and self.peek(1).type == TokenType.LPAREN:
                contract.sub_nodes.append(self.parse_special_function())
            elif self.match(TokenType.STRUCT):
                contract.sub_nodes.append(self.parse_struct())
            elif self.match(TokenType.ENUM):
                contract.sub_nodes.append(self.parse_enum())
            elif self.match(TokenType.MODIFIER):
                self.advance()
                self.skip_body()
            elif self.match(TokenType.EVENT, TokenType.ERROR, TokenType.USING, TokenType.TYPE):
                self.skip_until_semicolon()
            else:
                # State variable
                start = self.pos
                try:
                    contract.sub_nodes.append(self.parse_state_variable())
                except SyntaxError:
                    self.pos = start
                    self.skip_until_semicolon()
                    if self.pos == start:
                        self.advance()  # Skip on error

        self.expect(TokenType.RBRACE)
        return contract

    # =========================================================================
    # DEFINITION PARSING
    # =========================================================================

    def parse_struct(self) -> StructDefinition:
        """Parse a struct definition."""
        self.expect(TokenType.STRUCT)
        name = self.expect_name()
        self.expect(TokenType.LBRACE)

        members = []
        while not self.match(TokenType.RBRACE, TokenType.EOF):
            type_name = self.parse_type_name()
            member_name = self.expect_name()
            self.expect(TokenType.SEMICOLON)
            members.append(VariableDeclaration(type_name=type_name, name=member_name))

        self.expect(TokenType.RBRACE)
        return StructDefinition(name=name, members=members)

    def parse_enum(self) -> EnumDefinition:
        """Parse an enum definition."""
        self.expect(TokenType.ENUM)
        name = self.expect_name()
        self.expect(TokenType.LBRACE)

        members = []
        while not self.match(TokenType.RBRACE, TokenType.EOF):
            members.append(self.expect_name())
            if self.match(TokenType.COMMA):
                self.advance()

        self.expect(TokenType.RBRACE)
        return EnumDefinition(name=name, members=members)

    # =========================================================================
    # FUNCTION PARSING
    # =========================================================================

    def parse_function(self) -> FunctionDefinition:
        """Parse a function definition; the legacy `function()` fallback has no name."""
        self.expect(TokenType.FUNCTION)
        name = None
        if not self.match(TokenType.LPAREN):
            name = self.expect_name()
        kind = 'function' if name else 'fallback'
        return self.parse_function_rest(FunctionDefinition(name=name, kind=kind))

    def parse_special_function(self) -> FunctionDefinition:
        """Parse constructor(), receive() or fallback()."""
        kind = self.advance().value
        return self.parse_function_rest(FunctionDefinition(name=None, kind=kind))

    def parse_function_rest(self, function: FunctionDefinition) -> FunctionDefinition:
        """Parse parameters, attributes and (skipped) body of a function."""
        function.parameters = self.parse_parameter_list()

        while True:
            token_type = self.current().type
            if token_type in VISIBILITIES:
                function.visibility = VISIBILITIES[self.advance().type]
            elif token_type in STATE_MUTABILITIES:
                function.mutability = STATE_MUTABILITIES[self.advance().type]
            elif token_type == TokenType.VIRTUAL:
                function.is_virtual = True
                self.advance()
            elif token_type == TokenType.OVERRIDE:
                function.is_override = True
                self.advance()
                # Handle override(A, B)
                if self.match(TokenType.LPAREN):
                    self.skip_balanced()
            elif token_type == TokenType.RETURNS:
                self.advance()
                function.return_parameters = self.parse_parameter_list()
            elif self.match_name():
                # Modifier invocation, possibly with arguments
                function.modifiers.append(ModifierInvocation(self.parse_qualified_name()))
                if self.match(TokenType.LPAREN):
                    self.skip_balanced()
            else:
                break

        if self.match(TokenType.LBRACE):
            self.skip_balanced()
        else:
            self.expect(TokenType.SEMICOLON, f'after function {function.name or function.kind}')

        return function

    def parse_function_type(self) -> TypeName:
        """Parse a function type such as `function (uint) external returns (bool)`."""
        self.expect(TokenType.FUNCTION)
        self.skip_balanced()
        while self.current().type in VISIBILITIES or self.current().type in STATE_MUTABILITIES:
            self.advance()
        if self.match(TokenType.RETURNS):
            self.advance()
            self.skip_balanced()
        return ElementaryTypeName('function')

    # =========================================================================
    # PARAMETER AND VARIABLE PARSING
    # =========================================================================

    def parse_parameter_list(self) -> List[VariableDeclaration]:
        """Parse a parenthesised, comma-separated parameter list."""
        self.expect(TokenType.LPAREN)
        parameters = []
        while not self.match(TokenType.RPAREN, TokenType.EOF):
            parameters.append(self.parse_parameter())
            if self.match(TokenType.COMMA):
                self.advance()
        self.expect(TokenType.RPAREN)
        return parameters

    def parse_parameter(self) -> VariableDeclaration:
        """Parse a function parameter."""
        type_name = self.parse_type_name()

        storage_location = None
        is_indexed = False

        while True:
            if self.current().type in DATA_LOCATIONS:
                storage_location = DATA_LOCATIONS[self.advance().type]
            elif self.match(TokenType.INDEXED):
                is_indexed = True
                self.advance()
            else:
                break

        name = None
        if self.match_name():
            name = self.advance().value

        return VariableDeclaration(
            type_name=type_name,
            name=name,
            storage_location=storage_location,
            is_indexed=is_indexed,
        )

    def parse_state_variable(self) -> StateVariableDeclaration:
        """Parse a state variable declaration, skipping its initialiser."""
        start = self.current()
        type_name = self.parse_type_name()

        visibility = 'internal'
        mutability = ''

        while True:
            token_type = self.current().type
            if token_type in (TokenType.PUBLIC, TokenType.PRIVATE, TokenType.INTERNAL):
                visibility = VISIBILITIES[self.advance().type]
            elif token_type in (TokenType.CONSTANT, TokenType.IMMUTABLE, TokenType.TRANSIENT):
                mutability = self.advance().value
            elif token_type == TokenType.OVERRIDE:
                self.advance()
                if self.match(TokenType.LPAREN):
                    self.skip_balanced()
            else:
                break

        name = self.expect_name(f'state variable declared at line {start.line}')

        if self.match(TokenType.EQ):
            self.skip_until_semicolon()
        else:
            self.expect(TokenType.SEMICOLON)

        variable = VariableDeclaration(
            type_name=type_name,
            name=name,
            visibility=visibility,
            mutability=mutability,
        )
        return StateVariableDeclaration(variables=[variable])

    # =========================================================================
    # TYPE PARSING
    # =========================================================================

    def parse_type_name(self) -> TypeName:
        """Parse a type name (including mappings and arrays)."""
        type_name: TypeName
        if self.match(TokenType.MAPPING):
            type_name = self.parse_mapping_type()
        elif self.match(TokenType.FUNCTION):
            type_name = self.parse_function_type()
        elif self.match(TokenType.ELEMENTARY_TYPE):
            name = self.advance().value
            if name == 'address' and self.match(TokenType.PAYABLE):
                self.advance()
                name = 'address payable'
            type_name = ElementaryTypeName(name)
        elif self.match_name():
            type_name = UserDefinedTypeName(self.parse_qualified_name())
        else:
            token = self.current()
            raise SyntaxError(
                f"Expected a type name but got '{token.value or token.type.name}' "
                f"at line {token.line}, column {token.column}"
            )

        # Array brackets can repeat for multi-dimensional arrays
        while self.match(TokenType.LBRACKET):
            self.advance()
            length = ''
            while not self.match(TokenType.RBRACKET, TokenType.EOF):
                length += self.advance().value
            self.expect(TokenType.RBRACKET)
            type_name = ArrayTypeName(base_type=type_name, length=length or None)

        return type_name

    def parse_mapping_type(self) -> Mapping:
        """Parse a mapping type, dropping optional key and value names."""
        self.expect(TokenType.MAPPING)
        self.expect(TokenType.LPAREN)

        key_type = self.parse_type_name()
        if self.match_name():
            self.advance()

        self.expect(TokenType.ARROW)

        value_type = self.parse_type_name()
        if self.match_name():
            self.advance()

        self.expect(TokenType.RPAREN)
        return Mapping(key_type=key_type, value_type=value_type)


def parse_source(source: str) -> SourceUnit:
    """Tokenize and parse Solidity source text."""
    return Parser(Lexer(source).tokenize()).parse()


__all__ = ['Parser', 'parse_source']
