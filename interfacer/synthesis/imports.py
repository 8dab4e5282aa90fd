"""
Import and inheritance resolution for interface synthesis.

This module follows the import directives of the contract being
synthesized, synthesizes the imported files its stubs depend on, and
turns them into import lines and the `is` clause of the interface.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import SynthesisContext
    from .synthesizer import InterfaceSynthesizer

from .cache import resolve_key
from .emitter import relative_import
from .records import ImportEdge, SourceRecord


@dataclass
class ResolvedImports:
    """Import lines and ordered parent interfaces for one interface."""
    import_lines: List[str] = field(default_factory=list)
    inherited_names: List[str] = field(default_factory=list)


class ImportResolver:
    """
    Resolves the imports of a contract against the file system.

    Relative imports are resolved against the contract's directory, all
    others against the modules root. An import is used when the file it
    names declares a type the interface references; used imports are
    synthesized recursively through the synthesizer, which guarantees at
    most one synthesis per file.
    """

    def __init__(self, synthesizer: 'InterfaceSynthesizer'):
        self._synthesizer = synthesizer

    def edges(self, record: SourceRecord) -> List[ImportEdge]:
        modules_root = Path(self._synthesizer.config.modules_root)
        edges = []
        for directive in record.imports:
            from_modules = not directive.path.startswith('.')
            base_dir = modules_root if from_modules else record.path.parent
            edges.append(ImportEdge(
                declared_path=directive.path,
                resolved_path=resolve_key(base_dir / directive.path),
                import_name=PurePosixPath(directive.path).stem,
                from_modules=from_modules,
            ))
        return edges

    async def resolve(
        self,
        ctx: 'SynthesisContext',
        output_dir: Path,
        dependency_root: Path,
    ) -> ResolvedImports:
        """Synthesize the used imports of ctx.record and classify them.

        Args:
            ctx: Context of the contract being synthesized, with its used types
            output_dir: Directory the interface is written to
            dependency_root: Root under which module dependencies are generated

        Returns:
            The import lines, and the parent interface names in the order
            the contract declares its bases
        """
        record = ctx.record
        edges = self.edges(record)
        cache = self._synthesizer.cache

        targets = await asyncio.gather(
            *(cache.load(edge.resolved_path, importer=record.path) for edge in edges)
        )
        used = [
            (edge, target) for edge, target in zip(edges, targets)
            if ctx.uses_any(target.declared_type_names)
        ]
        artifacts = await asyncio.gather(*(
            self._synthesizer.artifact_for(target.path, dependency_root, waiter=record.path)
            for _, target in used
        ))

        resolved = ResolvedImports()
        inherited: Dict[str, str] = {}
        for (edge, target), artifact in zip(used, artifacts):
            if artifact is None:
                continue
            base = self.inherited_base(edge, target, record.base_contract_names)
            if base is not None:
                inherited.setdefault(base, artifact.interface_name)
                line = f'import "{relative_import(artifact.output_path, output_dir)}";'
            else:
                line = f'import "{relative_import(target.path, output_dir)}";'
            if line not in resolved.import_lines:
                resolved.import_lines.append(line)

        resolved.inherited_names = [
            inherited[base] for base in record.base_contract_names if base in inherited
        ]
        return resolved

    @staticmethod
    def inherited_base(edge: ImportEdge, target: SourceRecord, bases) -> Optional[str]:
        """The base contract an import provides, matched by file stem or contract name."""
        if edge.import_name in bases:
            return edge.import_name
        if target.contract_name in bases:
            return target.contract_name
        return None
