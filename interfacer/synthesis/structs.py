"""
Re-declaration of local types inside the generated interface.

An interface cannot see the structs and enums of the contract it was
generated from, so the ones its stubs reference are emitted again.
"""

from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import SynthesisContext
    from .type_resolver import TypeResolver

from ..parser import EnumDefinition, StructDefinition


class StructProjector:
    """
    Emits struct and enum stubs for the locally declared types in use.

    Struct members may reference further local structs, so projection
    repeats until no new type becomes used. A struct is emitted with its
    full layout or not at all. Enums come first, then structs, each in
    declaration order.
    """

    def __init__(self, ctx: 'SynthesisContext', resolver: 'TypeResolver'):
        self._ctx = ctx
        self._resolver = resolver

    def stubs(self) -> List[str]:
        if self._ctx.only_raw_types:
            return []

        record = self._ctx.record
        projected: Dict[str, str] = {}
        changed = True
        while changed:
            changed = False
            for struct in record.structs:
                if struct.name in projected or struct.name not in self._ctx.used_types:
                    continue
                stub = self.struct_stub(struct)
                if stub is not None:
                    projected[struct.name] = stub
                    changed = True

        enum_stubs = [self.enum_stub(e) for e in record.enums if e.name in self._ctx.used_types]
        return enum_stubs + [projected[s.name] for s in record.structs if s.name in projected]

    def struct_stub(self, struct: StructDefinition) -> Optional[str]:
        """Re-declare a struct member by member; None if any member cannot be."""
        resolver = self._resolver.tentative()
        lines = [f'struct {struct.name} {{']
        for member in struct.members:
            type_text = resolver.resolve_member(member.type_name)
            if type_text is None:
                return None
            lines.append(f'    {type_text} {member.name};')
        lines.append('}')
        self._resolver.commit(resolver)
        return '\n'.join(lines)

    def enum_stub(self, enum: EnumDefinition) -> str:
        return f'enum {enum.name} {{ {", ".join(enum.members)} }}'
