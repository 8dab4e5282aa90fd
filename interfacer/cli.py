#!/usr/bin/env python3
"""
Solidity Interfacer command line.

Automatically generates the interfaces of Solidity contracts.

Usage:
    interfacer contracts/**/*.sol
    interfacer src/Vault.sol --target-root interfaces --modules-root lib
"""

import argparse
import glob
import sys
from typing import List, Optional

from .config import InterfacerConfig
from .diagnostics import InterfacerDiagnostics
from .errors import InterfacerError
from .synthesis import generate_interfaces


def expand_sources(patterns: List[str]) -> List[str]:
    """Expand glob patterns into source paths, keeping order and dropping duplicates."""
    paths: List[str] = []
    for pattern in patterns:
        matches = sorted(glob.glob(pattern, recursive=True)) if glob.has_magic(pattern) else [pattern]
        if not matches:
            print(f"Warning: No files match '{pattern}'", file=sys.stderr)
        for match in matches:
            if match not in paths:
                paths.append(match)
    return paths


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='interfacer',
        description="Automatically generates your Solidity contracts' interfaces",
    )
    parser.add_argument('src', nargs='+',
                        help='Input contracts to generate interfaces for; globs are expanded')
    parser.add_argument('--modules-root', metavar='PATH',
                        help='The path to the node modules directory, relative to the working directory '
                             '(default: node_modules)')
    parser.add_argument('--target-root', metavar='PATH',
                        help="The path to the target interfaces directory, relative to the contract's "
                             'directory (default: interfaces)')
    parser.add_argument('--license', metavar='SPDX',
                        help='License written into interfaces whose source declares none (default: UNLICENSED)')
    parser.add_argument('--only-raw-types', action='store_true', default=None,
                        help='Only keep members whose signatures use elementary types')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Do not log each file interfaced and written')
    parser.add_argument('-c', '--config', metavar='FILE',
                        help='JSON file with modulesRoot, targetRoot, license, onlyRawTypes, logFiles')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print every diagnostic, including notes')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = InterfacerConfig.from_json(args.config) if args.config else InterfacerConfig()
        config = config.with_overrides(
            modules_root=args.modules_root,
            target_root=args.target_root,
            license=args.license,
            only_raw_types=args.only_raw_types,
            log_files=False if args.quiet else None,
        )

        sources = expand_sources(args.src)
        if not sources:
            print('Error: No source file specified!', file=sys.stderr)
            return 1

        diagnostics = InterfacerDiagnostics(verbose=args.verbose)
        artifacts = generate_interfaces(sources, config, diagnostics)
    except InterfacerError as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1

    diagnostics.print_summary()
    for source, artifact in zip(sources, artifacts):
        if artifact is not None and artifact.emitted and config.log_files:
            print(f'Interface for {source} generated at: {artifact.output_path}')
    return 0


if __name__ == '__main__':
    sys.exit(main())
