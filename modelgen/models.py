"""Core data models shared across modelgen components."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List


class ShapeKind(str, Enum):
    """Structural shape of a module-level type declaration."""

    RECORD = "record"
    ALIAS = "alias"
    INTERFACE = "interface"
    OTHER = "other"


@dataclass
class SourceUnit:
    """One parsed source file of the model package."""

    path: Path
    module: str
    tree: ast.Module


@dataclass
class PackageScan:
    """All source units of one directory, in deterministic file order."""

    root: Path
    units: List[SourceUnit] = field(default_factory=list)

    @property
    def modules(self) -> List[str]:
        return [unit.module for unit in self.units]


@dataclass
class TypeDeclaration:
    """A named module-level type declaration discovered during traversal."""

    name: str
    shape: ShapeKind
    path: Path
    module: str
    lineno: int
    col_offset: int = 0

    @property
    def location(self) -> str:
        return f"{self.path.name}:{self.lineno}:{self.col_offset + 1}"


@dataclass
class RegistryEntry:
    """Filter result for a declaration; ``selected`` marks record types."""

    name: str
    module: str
    selected: bool
    shape: ShapeKind
    location: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"


@dataclass
class GeneratedFile:
    """Rendered registry module and the path it is written to."""

    path: Path
    content: str

    @property
    def data(self) -> bytes:
        return self.content.encode("utf-8")
