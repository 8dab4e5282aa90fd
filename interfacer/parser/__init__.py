"""
Parser module for the Solidity interfacer.

This module provides AST node definitions and the declaration parser.
"""

from .ast_nodes import (
    # Base
    ASTNode,
    # Top-level
    SourceUnit,
    PragmaDirective,
    ImportDirective,
    ContractDefinition,
    # Definitions
    StructDefinition,
    EnumDefinition,
    FunctionDefinition,
    ModifierInvocation,
    SubNode,
    # Type and variable
    TypeName,
    ElementaryTypeName,
    UserDefinedTypeName,
    ArrayTypeName,
    Mapping,
    VariableDeclaration,
    StateVariableDeclaration,
)
from .parser import Parser, parse_source

__all__ = [
    # Base
    'ASTNode',
    # Top-level
    'SourceUnit',
    'PragmaDirective',
    'ImportDirective',
    'ContractDefinition',
    # Definitions
    'StructDefinition',
    'EnumDefinition',
    'FunctionDefinition',
    'ModifierInvocation',
    'SubNode',
    # Type and variable
    'TypeName',
    'ElementaryTypeName',
    'UserDefinedTypeName',
    'ArrayTypeName',
    'Mapping',
    'VariableDeclaration',
    'StateVariableDeclaration',
    # Parser
    'Parser',
    'parse_source',
]
