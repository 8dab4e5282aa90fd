"""
Solidity Interfacer

This package generates minimal interface files from Solidity contracts:
external function signatures, public variable getters, the structs and
enums they reference, and the inheritance clause, following imports
across files.

Module Structure:
- lexer/: Tokenization (TokenType, Token, Lexer)
- parser/: Declaration AST and parsing (Parser, AST node types)
- synthesis/: Interface synthesis (InterfaceSynthesizer and its stages)
- config.py, diagnostics.py, errors.py: Options, warnings and exceptions
- cli.py: Command line entry point

Usage:
    from interfacer import generate_interface

    artifact = generate_interface('contracts/Vault.sol', target_root='interfaces')
    print(artifact.output_path)
"""

from .config import InterfacerConfig
from .diagnostics import InterfacerDiagnostics
from .errors import InterfacerError, MalformedSourceError, ConfigError
from .lexer import Lexer
from .parser import Parser, parse_source
from .synthesis import (
    InterfaceSynthesizer,
    InterfaceArtifact,
    SourceRecord,
    generate_interface,
    generate_interfaces,
)

__all__ = [
    'InterfacerConfig',
    'InterfacerDiagnostics',
    'InterfacerError',
    'MalformedSourceError',
    'ConfigError',
    'Lexer',
    'Parser',
    'parse_source',
    'InterfaceSynthesizer',
    'InterfaceArtifact',
    'SourceRecord',
    'generate_interface',
    'generate_interfaces',
]
