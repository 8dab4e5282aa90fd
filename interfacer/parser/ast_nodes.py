"""
AST node definitions for Solidity parsing.

This module contains the dataclasses representing the declaration-level
nodes produced by the parser. Function bodies and expressions are not
modelled; interface synthesis only needs signatures and type names.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Tuple, Union


# =============================================================================
# BASE NODE
# =============================================================================

@dataclass
class ASTNode:
    """Base class for all AST nodes."""
    pass


# =============================================================================
# TYPE NAMES
# =============================================================================

@dataclass
class ElementaryTypeName(ASTNode):
    """A built-in value type (uint256, address, bool, string, bytes32, ...)."""
    name: str


@dataclass
class UserDefinedTypeName(ASTNode):
    """A reference to a struct, enum, contract or value type by (qualified) name."""
    name_path: str

    @property
    def qualifier(self) -> Optional[str]:
        """The part before the last dot, e.g. 'Lib' for 'Lib.Position'."""
        if '.' not in self.name_path:
            return None
        return self.name_path.rsplit('.', 1)[0]

    @property
    def base_name(self) -> str:
        """The unqualified type name."""
        return self.name_path.rsplit('.', 1)[-1]


@dataclass
class ArrayTypeName(ASTNode):
    """An array of base_type; length is the source text of a fixed size, if any."""
    base_type: 'TypeName'
    length: Optional[str] = None


@dataclass
class Mapping(ASTNode):
    """A mapping(key_type => value_type)."""
    key_type: 'TypeName'
    value_type: 'TypeName'


TypeName = Union[ElementaryTypeName, UserDefinedTypeName, ArrayTypeName, Mapping]


# =============================================================================
# TOP-LEVEL NODES
# =============================================================================

@dataclass
class PragmaDirective(ASTNode):
    """Represents a pragma directive (e.g., pragma solidity ^0.8.0)."""
    name: str
    value: str


@dataclass
class ImportDirective(ASTNode):
    """Represents an import statement."""
    path: str
    unit_alias: Optional[str] = None
    symbols: List[Tuple[str, Optional[str]]] = field(default_factory=list)  # (name, alias)


@dataclass
class SourceUnit(ASTNode):
    """Root node representing an entire Solidity source file."""
    pragmas: List[PragmaDirective] = field(default_factory=list)
    imports: List[ImportDirective] = field(default_factory=list)
    contracts: List['ContractDefinition'] = field(default_factory=list)
    structs: List['StructDefinition'] = field(default_factory=list)
    enums: List['EnumDefinition'] = field(default_factory=list)


# =============================================================================
# VARIABLES
# =============================================================================

@dataclass
class VariableDeclaration(ASTNode):
    """A parameter, struct member or state variable."""
    type_name: TypeName
    name: Optional[str] = None
    visibility: str = 'internal'
    mutability: str = ''  # '', 'constant', 'immutable', 'transient'
    storage_location: Optional[str] = None  # 'storage', 'memory', 'calldata'
    is_indexed: bool = False


@dataclass
class StateVariableDeclaration(ASTNode):
    """A state variable declaration statement; Solidity declares one variable per statement."""
    variables: List[VariableDeclaration] = field(default_factory=list)


# =============================================================================
# DEFINITION NODES
# =============================================================================

@dataclass
class StructDefinition(ASTNode):
    """Represents a struct definition."""
    name: str
    members: List[VariableDeclaration] = field(default_factory=list)


@dataclass
class EnumDefinition(ASTNode):
    """Represents an enum definition."""
    name: str
    members: List[str] = field(default_factory=list)


@dataclass
class ModifierInvocation(ASTNode):
    """A modifier (or base constructor) named in a function header."""
    name: str


@dataclass
class FunctionDefinition(ASTNode):
    """Represents a function, constructor, or special function definition.

    Constructors, receive(), fallback() and the legacy unnamed function()
    have no name.
    """
    name: Optional[str]
    parameters: List[VariableDeclaration] = field(default_factory=list)
    return_parameters: List[VariableDeclaration] = field(default_factory=list)
    visibility: str = 'default'
    mutability: str = ''  # '', 'view', 'pure', 'payable'
    modifiers: List[ModifierInvocation] = field(default_factory=list)
    is_virtual: bool = False
    is_override: bool = False
    kind: str = 'function'  # 'function', 'constructor', 'receive', 'fallback'


SubNode = Union[FunctionDefinition, StateVariableDeclaration, StructDefinition, EnumDefinition]


@dataclass
class ContractDefinition(ASTNode):
    """Represents a contract, interface or library."""
    name: str
    kind: str  # 'contract', 'interface', 'library'
    is_abstract: bool = False
    base_contracts: List[str] = field(default_factory=list)
    sub_nodes: List[SubNode] = field(default_factory=list)

    @property
    def functions(self) -> List[FunctionDefinition]:
        return [node for node in self.sub_nodes if isinstance(node, FunctionDefinition)]

    @property
    def state_variables(self) -> List[StateVariableDeclaration]:
        return [node for node in self.sub_nodes if isinstance(node, StateVariableDeclaration)]

    @property
    def structs(self) -> List[StructDefinition]:
        return [node for node in self.sub_nodes if isinstance(node, StructDefinition)]

    @property
    def enums(self) -> List[EnumDefinition]:
        return [node for node in self.sub_nodes if isinstance(node, EnumDefinition)]
