"""
Exceptions raised by the interfacer.

Only unrecoverable conditions are raised; missing imports and types that
cannot be projected are absorbed where they are detected.
"""

from pathlib import Path
from typing import Union


class InterfacerError(Exception):
    """Base class for all interfacer errors."""


class MalformedSourceError(InterfacerError):
    """A source file exists but cannot yield a contract record."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f'{self.path}: {reason}')


class ConfigError(InterfacerError):
    """The configuration file could not be read."""
