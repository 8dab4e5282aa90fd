"""
Diagnostic/warning system for the interfacer.

Collects warnings about imports that could not be followed, and notes
about the files generated, so that the caller can decide how to report
them. Generated interfaces may be incomplete when warnings are present.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import List


class DiagnosticSeverity(Enum):
    """Severity levels for interfacer diagnostics."""
    WARNING = 'warning'
    INFO = 'info'


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    severity: DiagnosticSeverity
    code: str
    message: str
    file_path: str = ''
    construct: str = ''  # e.g., 'import', 'interface'

    def __str__(self) -> str:
        if self.file_path:
            return f'[{self.severity.value}] {self.file_path}: {self.message} ({self.code})'
        return f'[{self.severity.value}] {self.message} ({self.code})'


class InterfacerDiagnostics:
    """
    Collects interfacer warnings and notes during synthesis.

    Usage:
        diag = InterfacerDiagnostics()
        diag.warn_missing_import("node_modules/x/Y.sol", "Token.sol")
        # ... after synthesis ...
        diag.print_summary()
    """

    def __init__(self, verbose: bool = False):
        self._diagnostics: List[Diagnostic] = []
        self._verbose = verbose

    @property
    def diagnostics(self) -> List[Diagnostic]:
        """Get all collected diagnostics."""
        return list(self._diagnostics)

    @property
    def warnings(self) -> List[Diagnostic]:
        """Get only warning-level diagnostics."""
        return [d for d in self._diagnostics if d.severity == DiagnosticSeverity.WARNING]

    @property
    def count(self) -> int:
        """Get total diagnostic count."""
        return len(self._diagnostics)

    def clear(self) -> None:
        """Clear all diagnostics."""
        self._diagnostics.clear()

    # =========================================================================
    # SPECIFIC DIAGNOSTIC METHODS
    # =========================================================================

    def warn_missing_import(self, missing_path: str, file_path: str = '') -> None:
        """Warn that a source file could not be found."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.WARNING,
            code='W001',
            message=f'{missing_path} not found: interfaces may not be complete.',
            file_path=file_path,
            construct='import',
        ))

    def info_interface_written(self, output_path: str, file_path: str = '') -> None:
        """Note that an interface file was written."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.INFO,
            code='I001',
            message=f'Interface written to {output_path}',
            file_path=file_path,
            construct='interface',
        ))

    def info_interface_reused(self, file_path: str) -> None:
        """Note that a source file is already an interface (or library) and is imported as is."""
        self._diagnostics.append(Diagnostic(
            severity=DiagnosticSeverity.INFO,
            code='I002',
            message='Source is already importable as an interface; no file generated.',
            file_path=file_path,
            construct='interface',
        ))

    # =========================================================================
    # REPORTING
    # =========================================================================

    def print_summary(self, file=None) -> None:
        """Print a summary of all diagnostics to stderr (or specified file)."""
        if file is None:
            file = sys.stderr

        if not self._diagnostics:
            return

        warnings = self.warnings
        infos = [d for d in self._diagnostics if d.severity == DiagnosticSeverity.INFO]

        if warnings:
            print(f'\nInterfacer warnings ({len(warnings)}):', file=file)
            for w in warnings:
                print(f'  {w}', file=file)

        if infos and self._verbose:
            print(f'\nInterfacer info ({len(infos)}):', file=file)
            for d in infos:
                print(f'  {d}', file=file)

    def get_summary(self) -> str:
        """Get a summary string of all diagnostics."""
        warnings = self.warnings
        if not warnings:
            return 'No interfacer warnings.'

        by_construct: dict = {}
        for w in warnings:
            key = w.construct or 'other'
            by_construct[key] = by_construct.get(key, 0) + 1

        parts = [f'{count} {construct}' for construct, count in sorted(by_construct.items())]
        return f'Interfacer warnings: {", ".join(parts)}'
