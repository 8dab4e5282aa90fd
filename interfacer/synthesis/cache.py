"""
Source loading and memoization.

Each source file is read and parsed at most once per run. Concurrent
requests for the same path share the first request's in-flight result.
"""

import asyncio
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..diagnostics import InterfacerDiagnostics
from ..errors import MalformedSourceError
from ..parser import ContractDefinition, PragmaDirective, SourceUnit, parse_source
from .records import SourceRecord


LICENSE_PATTERN = re.compile(r'SPDX-License-Identifier:\s*([^\s*]+)')


def resolve_key(path: Union[str, Path]) -> Path:
    """Normalise a path into a cache key."""
    return Path(path).resolve()


def scrape_license(source: str) -> Optional[str]:
    """Find the SPDX identifier on the comment lines preceding the pragma."""
    for line in source.splitlines():
        stripped = line.strip()
        if stripped.startswith('pragma'):
            break
        if stripped.startswith(('//', '/*', '*')):
            match = LICENSE_PATTERN.search(stripped)
            if match:
                return match.group(1)
    return None


def select_pragma(unit: SourceUnit) -> Optional[PragmaDirective]:
    """Prefer the compiler version pragma over abicoder/experimental ones."""
    for pragma in unit.pragmas:
        if pragma.name == 'solidity':
            return pragma
    return unit.pragmas[0] if unit.pragmas else None


def select_contract(unit: SourceUnit, path: Path) -> Optional[ContractDefinition]:
    """The definition named after the file, else the first one in the file."""
    for contract in unit.contracts:
        if contract.name == path.stem:
            return contract
    return unit.contracts[0] if unit.contracts else None


def build_record(path: Path, source: str, fallback_license: str) -> SourceRecord:
    """Parse source text into a SourceRecord, raising on malformed files."""
    try:
        unit = parse_source(source)
    except SyntaxError as e:
        raise MalformedSourceError(path, f'Syntax error: {e}') from e

    pragma = select_pragma(unit)
    if pragma is None:
        raise MalformedSourceError(path, 'No pragma found!')

    contract = select_contract(unit, path)
    if contract is None:
        raise MalformedSourceError(path, 'No contract definition found!')

    structs = tuple(contract.structs) + tuple(unit.structs)
    enums = tuple(contract.enums) + tuple(unit.enums)

    declared: List[str] = [contract.name]
    for name in [s.name for s in structs] + [e.name for e in enums]:
        if name not in declared:
            declared.append(name)

    return SourceRecord(
        path=path,
        exists=True,
        pragma=pragma,
        contract_kind=contract.kind,
        contract_name=contract.name,
        is_abstract=contract.is_abstract,
        base_contract_names=tuple(contract.base_contracts),
        sub_nodes=tuple(contract.sub_nodes),
        imports=tuple(unit.imports),
        structs=structs,
        enums=enums,
        declared_type_names=tuple(declared),
        license=scrape_license(source) or fallback_license,
    )


class SourceCache:
    """
    Path-keyed, single-flight cache of SourceRecords.

    The first caller for a path performs the read and parse; every other
    caller, concurrent or later, receives the same record.
    """

    def __init__(self, fallback_license: str, diagnostics: InterfacerDiagnostics):
        self._fallback_license = fallback_license
        self._diagnostics = diagnostics
        self._records: Dict[Path, asyncio.Future] = {}

    def __contains__(self, path: Union[str, Path]) -> bool:
        return resolve_key(path) in self._records

    def __len__(self) -> int:
        return len(self._records)

    async def load(self, path: Union[str, Path], importer: Optional[Path] = None) -> SourceRecord:
        """Return the record for path, reading and parsing it on first request.

        Args:
            path: The source file to load
            importer: The file whose import led here, for warnings

        Raises:
            MalformedSourceError: The file exists but has no pragma or
                contract definition, or does not parse.
        """
        key = resolve_key(path)
        future = self._records.get(key)
        if future is not None:
            return await future

        future = asyncio.get_running_loop().create_future()
        self._records[key] = future
        try:
            record = await self._read(key, importer)
        except asyncio.CancelledError:
            # Waiters are cancelled too; a later request reads the file afresh
            future.cancel()
            del self._records[key]
            raise
        except Exception as e:
            future.set_exception(e)
            future.exception()  # retrieved here; this caller re-raises it
            raise
        future.set_result(record)
        return record

    async def _read(self, key: Path, importer: Optional[Path]) -> SourceRecord:
        if not await asyncio.to_thread(key.is_file):
            self._diagnostics.warn_missing_import(str(key), str(importer) if importer else '')
            return SourceRecord.placeholder(key)

        source = await asyncio.to_thread(key.read_text, encoding='utf-8')
        return build_record(key, source, self._fallback_license)
