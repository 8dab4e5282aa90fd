"""
Records shared across one synthesis run.

SourceRecord summarises a parsed source file, ImportEdge describes one
import directive of the file being synthesized, and InterfaceArtifact is
what synthesis of a file hands back to the files that import it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional, Tuple

from ..parser import ImportDirective, PragmaDirective, StructDefinition, EnumDefinition, SubNode


@dataclass(frozen=True)
class SourceRecord:
    """Structural facts about one source file, keyed by its resolved path.

    A record with exists=False is the placeholder for a missing file: it
    declares no types, so it is never considered used by an importer.
    """
    path: Path
    exists: bool
    pragma: Optional[PragmaDirective] = None
    contract_kind: Optional[str] = None  # 'contract', 'interface', 'library'
    contract_name: Optional[str] = None
    is_abstract: bool = False
    base_contract_names: Tuple[str, ...] = ()
    sub_nodes: Tuple[SubNode, ...] = ()
    imports: Tuple[ImportDirective, ...] = ()
    structs: Tuple[StructDefinition, ...] = ()
    enums: Tuple[EnumDefinition, ...] = ()
    declared_type_names: Tuple[str, ...] = ()
    license: Optional[str] = None

    @classmethod
    def placeholder(cls, path: Path) -> 'SourceRecord':
        return cls(path=path, exists=False)

    @property
    def interface_name(self) -> Optional[str]:
        if self.contract_name is None:
            return None
        if self.contract_kind == 'interface':
            return self.contract_name
        return f'I{self.contract_name}'

    @property
    def struct_names(self) -> FrozenSet[str]:
        return frozenset(struct.name for struct in self.structs)

    @property
    def enum_names(self) -> FrozenSet[str]:
        return frozenset(enum.name for enum in self.enums)

    @property
    def needs_interface(self) -> bool:
        """Whether synthesis writes a new file; interfaces and libraries are imported as they are."""
        return self.exists and self.contract_kind == 'contract'


@dataclass(frozen=True)
class ImportEdge:
    """One import directive of the contract being synthesized."""
    declared_path: str
    resolved_path: Path
    import_name: str
    from_modules: bool = False


@dataclass(frozen=True)
class InterfaceArtifact:
    """The result of synthesizing one source file.

    rendered_text is None for sources imported as they are (interfaces,
    libraries) and for the provisional artifact handed to import cycles.
    """
    source_path: Path
    output_path: Path
    interface_name: str
    rendered_text: Optional[str] = None
    used_type_names: FrozenSet[str] = field(default_factory=frozenset)
    emitted: bool = False
