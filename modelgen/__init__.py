"""Generate a registry module listing the record types of a model package."""

from .declarations import DeclarationFilter, classify
from .emitter import RegistryEmitter
from .errors import ConfigError, DiscoveryError, EmitError, ModelGenError, ParseError
from .models import GeneratedFile, PackageScan, RegistryEntry, ShapeKind, SourceUnit, TypeDeclaration
from .orchestrator import GenerateOutcome, Orchestrator, generate_registry
from .source_scanner import SourceScanner

__all__ = [
    "ConfigError",
    "DeclarationFilter",
    "DiscoveryError",
    "EmitError",
    "GenerateOutcome",
    "GeneratedFile",
    "ModelGenError",
    "Orchestrator",
    "PackageScan",
    "ParseError",
    "RegistryEmitter",
    "RegistryEntry",
    "ShapeKind",
    "SourceScanner",
    "SourceUnit",
    "TypeDeclaration",
    "classify",
    "generate_registry",
]
