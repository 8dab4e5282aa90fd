"""
Per-file synthesis context.

This module provides the state threaded through one synthesis call: the
record being synthesized, the active options, and the set of user-defined
type names referenced by the stubs generated so far.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Set

from ..parser import ArrayTypeName, Mapping, TypeName, UserDefinedTypeName
from .records import SourceRecord


@dataclass
class SynthesisContext:
    """
    Holds the state of one synthesis call.

    used_types starts with the contract's base-contract names and only
    grows; it decides which imports are kept and which local structs
    and enums are re-declared in the interface.
    """

    record: SourceRecord
    only_raw_types: bool = False
    used_types: Set[str] = field(default_factory=set)
    unprojectable_structs: FrozenSet[str] = field(init=False, default=frozenset())

    def __post_init__(self):
        self.used_types.update(self.record.base_contract_names)
        self.unprojectable_structs = self._find_unprojectable_structs()

    def scratch(self) -> 'SynthesisContext':
        """An empty context over the same record, for uses that may be discarded."""
        return SynthesisContext(self.record, only_raw_types=self.only_raw_types)

    def commit(self, scratch: 'SynthesisContext') -> None:
        """Keep the uses recorded in a scratch context."""
        self.used_types.update(scratch.used_types)

    def local_name(self, name_path: str) -> str:
        """Drop a qualifier naming the contract itself (C.Position -> Position)."""
        qualifier, _, name = name_path.rpartition('.')
        if qualifier and qualifier == self.record.contract_name:
            return name
        return name_path

    def use_type(self, name_path: str) -> str:
        """Register a referenced type and return the name to emit for it.

        Qualified names register their head as well, so that `Lib.Position`
        marks the file declaring `Lib` as used.
        """
        name = self.local_name(name_path)
        self.used_types.add(name)
        if '.' in name:
            self.used_types.add(name.split('.', 1)[0])
        return name

    def uses_any(self, names: Iterable[str]) -> bool:
        return any(name in self.used_types for name in names)

    def is_local_struct(self, name: str) -> bool:
        return name in self.record.struct_names

    def is_local_enum(self, name: str) -> bool:
        return name in self.record.enum_names

    # =========================================================================
    # STRUCT LAYOUTS
    # =========================================================================

    def _find_unprojectable_structs(self) -> FrozenSet[str]:
        """Local structs that cannot be re-declared with their full layout.

        A mapping or function member blocks a struct, and so does a member
        of a blocked struct type; repeated until nothing changes.
        """
        blocked: Set[str] = set()
        changed = True
        while changed:
            changed = False
            for struct in self.record.structs:
                if struct.name in blocked:
                    continue
                if any(self._blocks(member.type_name, blocked) for member in struct.members):
                    blocked.add(struct.name)
                    changed = True
        return frozenset(blocked)

    def _blocks(self, type_name: TypeName, blocked: Set[str]) -> bool:
        while isinstance(type_name, ArrayTypeName):
            type_name = type_name.base_type
        if isinstance(type_name, Mapping):
            return True
        if isinstance(type_name, UserDefinedTypeName):
            return self.local_name(type_name.name_path) in blocked
        return type_name.name == 'function'
