"""
Configuration for interface generation.

Options can be given directly, read from a JSON file using the camelCase
keys of the command line (modulesRoot, targetRoot, license, onlyRawTypes,
logFiles), or layered: file first, explicit overrides on top.
"""

import json
import sys
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

from .errors import ConfigError


DEFAULT_MODULES_ROOT = 'node_modules'
DEFAULT_TARGET_ROOT = 'interfaces'
DEFAULT_LICENSE = 'UNLICENSED'

JSON_KEYS = {
    'modulesRoot': 'modules_root',
    'targetRoot': 'target_root',
    'license': 'license',
    'onlyRawTypes': 'only_raw_types',
    'logFiles': 'log_files',
}


@dataclass(frozen=True)
class InterfacerConfig:
    """Options consumed by the synthesis engine.

    Attributes:
        modules_root: Search root for non-relative (package) imports.
        target_root: Output directory, relative to each contract's directory
            unless absolute.
        license: SPDX identifier used when a source file declares none.
        only_raw_types: Drop every stub that references a user-defined type.
        log_files: Print a line for every file interfaced and written.
    """
    modules_root: str = DEFAULT_MODULES_ROOT
    target_root: str = DEFAULT_TARGET_ROOT
    license: str = DEFAULT_LICENSE
    only_raw_types: bool = False
    log_files: bool = True

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'InterfacerConfig':
        """Load a configuration file."""
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigError(f'Cannot read config file {path}: {e}') from e
        except json.JSONDecodeError as e:
            raise ConfigError(f'Invalid JSON in config file {path}: {e}') from e

        if not isinstance(data, dict):
            raise ConfigError(f'Config file {path} must contain a JSON object')

        options = {}
        for key, value in data.items():
            if key in JSON_KEYS:
                options[JSON_KEYS[key]] = value
            else:
                print(f"Warning: Ignoring unknown config key '{key}' in {path}", file=sys.stderr)
        return cls(**options)

    def with_overrides(self, **overrides: Optional[object]) -> 'InterfacerConfig':
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
