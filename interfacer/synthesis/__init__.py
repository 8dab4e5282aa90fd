"""
Interface synthesis for the Solidity interfacer.

This module turns parsed contracts into interface files.
"""

from .records import SourceRecord, ImportEdge, InterfaceArtifact
from .cache import SourceCache, build_record, scrape_license, resolve_key
from .context import SynthesisContext
from .type_resolver import TypeResolver
from .members import MemberFilter
from .structs import StructProjector
from .imports import ImportResolver, ResolvedImports
from .emitter import InterfaceBuilder, output_path_for, relative_import
from .synthesizer import InterfaceSynthesizer, generate_interface, generate_interfaces

__all__ = [
    'SourceRecord',
    'ImportEdge',
    'InterfaceArtifact',
    'SourceCache',
    'build_record',
    'scrape_license',
    'resolve_key',
    'SynthesisContext',
    'TypeResolver',
    'MemberFilter',
    'StructProjector',
    'ImportResolver',
    'ResolvedImports',
    'InterfaceBuilder',
    'output_path_for',
    'relative_import',
    'InterfaceSynthesizer',
    'generate_interface',
    'generate_interfaces',
]
