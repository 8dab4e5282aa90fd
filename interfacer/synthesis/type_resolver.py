"""
Projection of declared Solidity types into interface signatures.

This module provides the TypeResolver, which turns a type name from the
AST into the text an external function signature needs, tracking every
user-defined type it meets so that imports and local types can be pruned.
"""

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import SynthesisContext

from ..parser import (
    TypeName,
    ElementaryTypeName,
    UserDefinedTypeName,
    ArrayTypeName,
    Mapping,
)


DEFAULT_LOCATION = 'memory'

# Dynamically sized primitives that always carry a data location
REFERENCE_PRIMITIVES = {'string', 'bytes'}


class TypeResolver:
    """
    Projects type names into interface-legal type expressions.

    resolve() returns None when a type cannot be expressed in the current
    mode (a user-defined type under raw-types-only, a function type, or a
    local struct whose layout cannot be re-declared); the caller must then
    drop the whole stub. Use tentative() for a stub that may be dropped and
    commit() it once kept, so that only kept stubs mark types as used.
    """

    def __init__(self, ctx: 'SynthesisContext'):
        """
        Initialize the type resolver.

        Args:
            ctx: The synthesis context whose used-type set is updated
        """
        self._ctx = ctx

    def tentative(self) -> 'TypeResolver':
        """A resolver recording uses into a scratch context."""
        return TypeResolver(self._ctx.scratch())

    def commit(self, tentative: 'TypeResolver') -> None:
        """Keep the uses recorded by a tentative resolver."""
        self._ctx.commit(tentative._ctx)

    # =========================================================================
    # MAIN TYPE PROJECTION
    # =========================================================================

    def resolve(self, type_name: TypeName, location: Optional[str] = None) -> Optional[str]:
        """Project a parameter, return or getter type.

        Args:
            type_name: The TypeName AST node to project
            location: The data location written in the source, if any

        Returns:
            The type text, including a data location where one is required,
            or None when the type is unresolvable
        """
        if location == 'storage':
            # storage pointers cannot cross an external call
            location = DEFAULT_LOCATION
        return self._project(type_name, location, bare=False)

    def resolve_member(self, type_name: TypeName) -> Optional[str]:
        """Project a struct member type; members never carry a data location."""
        return self._project(type_name, None, bare=True)

    def getter_key_types(self, type_name: TypeName) -> Optional[List[str]]:
        """Unwind nested mappings into the parameter list of their public getter.

        mapping(address => mapping(uint256 => bool)) yields ['address', 'uint256'];
        any other type yields []. None means a key type is unresolvable.
        """
        if not isinstance(type_name, Mapping):
            return []
        key = self.resolve(type_name.key_type)
        rest = self.getter_key_types(type_name.value_type)
        if key is None or rest is None:
            return None
        return [key] + rest

    def _project(self, type_name: TypeName, location: Optional[str], bare: bool) -> Optional[str]:
        if isinstance(type_name, UserDefinedTypeName):
            if self._ctx.only_raw_types:
                return None
            if self._ctx.local_name(type_name.name_path) in self._ctx.unprojectable_structs:
                return None
            name = self._ctx.use_type(type_name.name_path)
            if bare:
                return name
            if location:
                return f'{name} {location}'
            if self._ctx.is_local_struct(name):
                return f'{name} {DEFAULT_LOCATION}'
            return name

        if isinstance(type_name, ElementaryTypeName) and type_name.name in REFERENCE_PRIMITIVES:
            if bare:
                return type_name.name
            return f'{type_name.name} {location or DEFAULT_LOCATION}'

        if isinstance(type_name, ArrayTypeName):
            # The location belongs to the array as a whole, never to its elements
            element = self._project(type_name.base_type, None, bare=True)
            if element is None:
                return None
            array = f'{element}[{type_name.length or ""}]'
            if bare:
                return array
            return f'{array} {location or DEFAULT_LOCATION}'

        if isinstance(type_name, Mapping):
            if bare:
                return None  # a mapping member makes a struct unusable externally
            return self._project(type_name.value_type, location, bare)

        if type_name.name == 'function':
            return None
        return type_name.name
