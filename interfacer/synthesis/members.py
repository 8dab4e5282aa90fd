"""
Selection and projection of a contract's externally visible members.

Functions callable from outside the contract become function stubs and
public state variables become the getter stubs the compiler generates
for them.
"""

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import SynthesisContext
    from .type_resolver import TypeResolver

from ..parser import FunctionDefinition, StateVariableDeclaration, VariableDeclaration


EXTERNAL_VISIBILITIES = ('external', 'public', 'default')
HIDING_MODIFIERS = ('private', 'internal')


def is_exposed_function(function: FunctionDefinition) -> bool:
    """Named, externally visible and not hidden by a private/internal modifier."""
    return (
        bool(function.name)  # constructor, receive and fallback have no name
        and function.visibility in EXTERNAL_VISIBILITIES
        and all(mod.name not in HIDING_MODIFIERS for mod in function.modifiers)
    )


def has_public_getter(declaration: StateVariableDeclaration) -> bool:
    return bool(declaration.variables) and declaration.variables[0].visibility == 'public'


class MemberFilter:
    """
    Builds function and getter stubs for one contract.

    Stubs are returned in source declaration order; a stub any of whose
    types cannot be projected is dropped as a whole, and the types it
    references are not marked as used.
    """

    def __init__(self, ctx: 'SynthesisContext', resolver: 'TypeResolver'):
        self._ctx = ctx
        self._resolver = resolver

    def exposed_functions(self) -> List[FunctionDefinition]:
        return [
            node for node in self._ctx.record.sub_nodes
            if isinstance(node, FunctionDefinition) and is_exposed_function(node)
        ]

    def public_state_variables(self) -> List[VariableDeclaration]:
        return [
            node.variables[0] for node in self._ctx.record.sub_nodes
            if isinstance(node, StateVariableDeclaration) and has_public_getter(node)
        ]

    # =========================================================================
    # STUBS
    # =========================================================================

    def function_stubs(self) -> List[str]:
        stubs = (self.function_stub(f) for f in self.exposed_functions())
        return [stub for stub in stubs if stub is not None]

    def getter_stubs(self) -> List[str]:
        stubs = (self.getter_stub(v) for v in self.public_state_variables())
        return [stub for stub in stubs if stub is not None]

    def function_stub(self, function: FunctionDefinition) -> Optional[str]:
        """Render `function f(params) external[ mutability][ returns (...)];`."""
        resolver = self._resolver.tentative()
        parameters = self._parameter_list(resolver, function.parameters)
        return_parameters = self._parameter_list(resolver, function.return_parameters)
        if parameters is None or return_parameters is None:
            return None
        self._resolver.commit(resolver)

        mutability = f' {function.mutability}' if function.mutability else ''
        returns = f' returns ({return_parameters})' if function.return_parameters else ''
        return f'function {function.name}({parameters}) external{mutability}{returns};'

    def getter_stub(self, variable: VariableDeclaration) -> Optional[str]:
        """Render the accessor the compiler generates for a public state variable."""
        resolver = self._resolver.tentative()
        key_types = resolver.getter_key_types(variable.type_name)
        return_type = resolver.resolve(variable.type_name, variable.storage_location)
        if key_types is None or return_type is None:
            return None
        self._resolver.commit(resolver)
        return f'function {variable.name}({", ".join(key_types)}) external view returns ({return_type});'

    @staticmethod
    def _parameter_list(resolver: 'TypeResolver', parameters: List[VariableDeclaration]) -> Optional[str]:
        projected = []
        for parameter in parameters:
            type_text = resolver.resolve(parameter.type_name, parameter.storage_location)
            if type_text is None:
                return None
            projected.append(f'{type_text} {parameter.name}' if parameter.name else type_text)
        return ', '.join(projected)
