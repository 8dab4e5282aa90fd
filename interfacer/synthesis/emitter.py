"""
Assembly and output of interface files.

This module decides where each interface is written and renders the
interface text from an ordered set of stub groups.
"""

import os
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import InterfacerConfig
    from .records import SourceRecord

from ..parser import PragmaDirective
from .cache import resolve_key


INDENT = '    '


# =============================================================================
# OUTPUT PATHS
# =============================================================================

def module_package(path: Path, modules_root: str) -> Optional[str]:
    """The package a file under the modules root belongs to (`@scope/pkg` or `pkg`).

    Returns None for files outside the modules root.
    """
    try:
        parts = path.relative_to(resolve_key(modules_root)).parts
    except ValueError:
        return None
    if len(parts) > 2 and parts[0].startswith('@'):
        return f'{parts[0]}/{parts[1]}'
    return parts[0] if len(parts) > 1 else ''


def output_directory(record: 'SourceRecord', config: 'InterfacerConfig', dependency_root: Path) -> Path:
    """Directory receiving the interface generated for record."""
    package = module_package(record.path, config.modules_root)
    if package is not None:
        return dependency_root / 'dependencies' / package
    target = Path(config.target_root)
    if target.is_absolute():
        return resolve_key(target)
    return record.path.parent / target


def output_path_for(record: 'SourceRecord', config: 'InterfacerConfig', dependency_root: Path) -> Path:
    """Interfaces and libraries are imported as they are; contracts get I<Name>.sol."""
    if not record.needs_interface:
        return record.path
    return output_directory(record, config, dependency_root) / f'{record.interface_name}.sol'


def relative_import(target: Path, output_dir: Path) -> str:
    """Import path of target as seen from a file in output_dir."""
    rel = PurePosixPath(Path(os.path.relpath(target, output_dir)).as_posix())
    if not str(rel).startswith('.'):
        return f'./{rel}'
    return str(rel)


def write_artifact(path: Path, text: str) -> None:
    """Write an interface file, creating its directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        f.write(text)


# =============================================================================
# RENDERING
# =============================================================================

class InterfaceBuilder:
    """
    Ordered builder for the text of one interface file.

    Layout: license, pragma, imports, then the interface body holding the
    stub groups in the order they were added, separated by blank lines.
    """

    def __init__(self, name: str, license: str, pragma: PragmaDirective):
        self.name = name
        self.license = license
        self.pragma = pragma
        self.bases: List[str] = []
        self.imports: List[str] = []
        self.groups: List[Tuple[List[str], bool]] = []

    def add_import(self, line: str) -> None:
        if line not in self.imports:
            self.imports.append(line)

    def inherit(self, names: List[str]) -> None:
        self.bases.extend(n for n in names if n not in self.bases)

    def add_group(self, stubs: List[str], spaced: bool = False) -> None:
        """Add a group of stubs; spaced groups put a blank line between stubs."""
        if stubs:
            self.groups.append((list(stubs), spaced))

    def header(self) -> str:
        if self.bases:
            return f'interface {self.name} is {", ".join(self.bases)} {{'
        return f'interface {self.name} {{'

    def render(self) -> str:
        lines = [
            f'// SPDX-License-Identifier: {self.license}',
            f'pragma {self.pragma.name} {self.pragma.value};',
            '',
        ]
        if self.imports:
            lines.extend(self.imports)
            lines.append('')

        lines.append(self.header())
        for group_index, (stubs, spaced) in enumerate(self.groups):
            if group_index:
                lines.append('')
            for stub_index, stub in enumerate(stubs):
                if spaced and stub_index:
                    lines.append('')
                lines.extend(f'{INDENT}{line}' for line in stub.split('\n'))
        lines.append('}')
        return '\n'.join(lines) + '\n'
