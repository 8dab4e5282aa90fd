"""
Interface synthesis orchestration.

The InterfaceSynthesizer drives the pipeline for every file of a run:
load the source, build function, getter and type stubs, resolve the
imports the stubs depend on (synthesizing them in turn), then render and
write the interface.

Each file is synthesized at most once per run. Concurrent requests for
the same file await the same task. A request that would wait on a
synthesis which is itself (transitively) waiting on the requester is an
import cycle; it receives the provisional artifact registered before the
file's imports were resolved, which already carries the output path and
interface name an importer needs.
"""

import asyncio
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Union

from ..config import InterfacerConfig
from ..diagnostics import InterfacerDiagnostics
from .cache import SourceCache, resolve_key
from .context import SynthesisContext
from .emitter import InterfaceBuilder, output_path_for, write_artifact
from .imports import ImportResolver
from .members import MemberFilter
from .records import InterfaceArtifact
from .structs import StructProjector
from .type_resolver import TypeResolver


class InterfaceSynthesizer:
    """Generates interface files for contracts and the files they depend on."""

    def __init__(
        self,
        config: Optional[InterfacerConfig] = None,
        diagnostics: Optional[InterfacerDiagnostics] = None,
    ):
        self.config = config or InterfacerConfig()
        self.diagnostics = diagnostics or InterfacerDiagnostics()
        self.cache = SourceCache(self.config.license, self.diagnostics)
        self.imports = ImportResolver(self)
        self.written: List[Path] = []

        self._tasks: Dict[Path, asyncio.Future] = {}
        self._provisional: Dict[Path, InterfaceArtifact] = {}
        self._awaiting: Dict[Path, Set[Path]] = defaultdict(set)

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    async def synthesize(self, path: Union[str, Path]) -> Optional[InterfaceArtifact]:
        """Synthesize the interface of a root source file.

        Returns:
            The artifact, or None when the file does not exist

        Raises:
            MalformedSourceError: The file, or a file it depends on, is malformed
        """
        key = resolve_key(path)
        return await self.artifact_for(key, self.dependency_root_for(key))

    async def synthesize_all(self, paths: Iterable[Union[str, Path]]) -> List[Optional[InterfaceArtifact]]:
        """Synthesize several roots concurrently, sharing one cache."""
        return list(await asyncio.gather(*(self.synthesize(path) for path in paths)))

    def run(self, paths: Iterable[Union[str, Path]]) -> List[Optional[InterfaceArtifact]]:
        """Blocking wrapper around synthesize_all."""
        return asyncio.run(self.synthesize_all(paths))

    def dependency_root_for(self, root: Path) -> Path:
        """Output root of a root file; its module dependencies go below it."""
        target = Path(self.config.target_root)
        if target.is_absolute():
            return resolve_key(target)
        return root.parent / target

    # =========================================================================
    # SINGLE-FLIGHT
    # =========================================================================

    async def artifact_for(
        self,
        key: Path,
        dependency_root: Path,
        waiter: Optional[Path] = None,
    ) -> Optional[InterfaceArtifact]:
        """Return the artifact for key, synthesizing it on first request.

        Args:
            key: Resolved path of the source file
            dependency_root: Output root for module dependencies
            waiter: The file whose synthesis needs this artifact, if any
        """
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(self._synthesize(key, dependency_root))
            self._tasks[key] = task
        elif task.done():
            return task.result()

        if waiter is None:
            return await task

        if self._waits_on(key, waiter):
            return self._provisional[key]

        self._awaiting[waiter].add(key)
        try:
            return await task
        finally:
            self._awaiting[waiter].discard(key)

    def _waits_on(self, start: Path, target: Path) -> bool:
        """Whether the synthesis of start is, directly or transitively, waiting on target."""
        stack = [start]
        seen: Set[Path] = set()
        while stack:
            node = stack.pop()
            if node == target:
                return True
            if node in seen:
                continue
            seen.add(node)
            stack.extend(self._awaiting.get(node, ()))
        return False

    # =========================================================================
    # PIPELINE
    # =========================================================================

    async def _synthesize(self, key: Path, dependency_root: Path) -> Optional[InterfaceArtifact]:
        record = await self.cache.load(key)
        if not record.exists:
            return None

        output_path = output_path_for(record, self.config, dependency_root)
        if not record.needs_interface:
            self.diagnostics.info_interface_reused(str(key))
            return InterfaceArtifact(
                source_path=key,
                output_path=output_path,
                interface_name=record.contract_name,
            )

        if self.config.log_files:
            print(f'Interfacing: {key}')

        self._provisional[key] = InterfaceArtifact(
            source_path=key,
            output_path=output_path,
            interface_name=record.interface_name,
        )

        ctx = SynthesisContext(record, only_raw_types=self.config.only_raw_types)
        resolver = TypeResolver(ctx)
        members = MemberFilter(ctx, resolver)
        getter_stubs = members.getter_stubs()
        function_stubs = members.function_stubs()
        # Struct members can reference imported types, so project before resolving imports
        type_stubs = StructProjector(ctx, resolver).stubs()

        resolved = await self.imports.resolve(ctx, output_path.parent, dependency_root)

        builder = InterfaceBuilder(record.interface_name, record.license, record.pragma)
        for line in resolved.import_lines:
            builder.add_import(line)
        builder.inherit(resolved.inherited_names)
        builder.add_group(type_stubs, spaced=True)
        builder.add_group(getter_stubs)
        builder.add_group(function_stubs)
        text = builder.render()

        await asyncio.to_thread(write_artifact, output_path, text)
        self.written.append(output_path)
        self.diagnostics.info_interface_written(str(output_path), str(key))
        if self.config.log_files:
            print(f'Written: {output_path}')

        return InterfaceArtifact(
            source_path=key,
            output_path=output_path,
            interface_name=record.interface_name,
            rendered_text=text,
            used_type_names=frozenset(ctx.used_types),
            emitted=True,
        )


# =============================================================================
# CONVENIENCE WRAPPERS
# =============================================================================

def generate_interface(
    path: Union[str, Path],
    config: Optional[InterfacerConfig] = None,
    **options,
) -> Optional[InterfaceArtifact]:
    """Generate the interface of one contract and of every file it depends on."""
    config = (config or InterfacerConfig()).with_overrides(**options)
    return InterfaceSynthesizer(config).run([path])[0]


def generate_interfaces(
    paths: Iterable[Union[str, Path]],
    config: Optional[InterfacerConfig] = None,
    diagnostics: Optional[InterfacerDiagnostics] = None,
) -> List[Optional[InterfaceArtifact]]:
    """Generate interfaces for several contracts in one run."""
    return InterfaceSynthesizer(config, diagnostics).run(paths)
