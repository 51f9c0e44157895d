"""Classification of module-level declarations into structural shapes."""

from __future__ import annotations

import ast
from collections import defaultdict
from typing import Dict, Iterator, List, Optional

from .logging import get_logger
from .models import PackageScan, RegistryEntry, ShapeKind, SourceUnit, TypeDeclaration

_INTERFACE_BASES = {"ABC", "Protocol"}
_INTERFACE_METACLASSES = {"ABCMeta"}
_ABSTRACT_DECORATORS = {"abstractmethod"}
_ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}
_CONTAINER_BASES = {"NamedTuple", "TypedDict"}
_EXCEPTION_BASES = {"BaseException", "Exception"}

_PRIMITIVE_NAMES = {
    "bool",
    "bytearray",
    "bytes",
    "complex",
    "float",
    "int",
    "object",
    "str",
}
# Subclassing `object` is an ordinary class, not a primitive re-declaration.
_PRIMITIVE_BASES = _PRIMITIVE_NAMES - {"object"}
_GENERIC_NAMES = {
    "Annotated",
    "Callable",
    "Dict",
    "FrozenSet",
    "List",
    "Literal",
    "Mapping",
    "Optional",
    "Sequence",
    "Set",
    "Tuple",
    "Type",
    "Union",
    "dict",
    "frozenset",
    "list",
    "set",
    "tuple",
    "type",
}
_ALIAS_ANNOTATIONS = {"TypeAlias"}
_NEWTYPE_FACTORIES = {"NewType"}

# Python 3.12+ `type X = ...` statements.
_TYPE_ALIAS_NODE = getattr(ast, "TypeAlias", None)

logger = get_logger("declarations")


def _terminal_name(node: ast.expr) -> Optional[str]:
    """Return the last identifier of ``Name``, ``a.b.Name`` or ``Name[...]``."""
    if isinstance(node, ast.Subscript):
        node = node.value
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _is_abstract_method(node: ast.stmt) -> bool:
    if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        return False
    return any(_terminal_name(item) in _ABSTRACT_DECORATORS for item in node.decorator_list)


def _classify_class(node: ast.ClassDef) -> ShapeKind:
    bases = {_terminal_name(base) for base in node.bases}
    if bases & _INTERFACE_BASES:
        return ShapeKind.INTERFACE
    for item in node.keywords:
        if item.arg == "metaclass" and _terminal_name(item.value) in _INTERFACE_METACLASSES:
            return ShapeKind.INTERFACE
    if any(_is_abstract_method(statement) for statement in node.body):
        return ShapeKind.INTERFACE
    if bases & (_ENUM_BASES | _CONTAINER_BASES | _PRIMITIVE_BASES | _EXCEPTION_BASES):
        return ShapeKind.OTHER
    return ShapeKind.RECORD


def _is_type_expression(node: ast.expr) -> bool:
    if isinstance(node, ast.Name):
        return node.id in _PRIMITIVE_NAMES
    if isinstance(node, ast.Subscript):
        return _terminal_name(node.value) in _GENERIC_NAMES
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _is_type_expression(node.left) or _is_type_expression(node.right)
    return False


def _is_newtype_call(node: ast.expr) -> bool:
    return isinstance(node, ast.Call) and _terminal_name(node.func) in _NEWTYPE_FACTORIES


def _declared_name(node: ast.stmt) -> Optional[str]:
    if isinstance(node, ast.ClassDef):
        return node.name
    if _TYPE_ALIAS_NODE is not None and isinstance(node, _TYPE_ALIAS_NODE):
        return node.name.id
    if isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
        return node.target.id
    if isinstance(node, ast.Assign) and len(node.targets) == 1:
        target = node.targets[0]
        if isinstance(target, ast.Name):
            return target.id
    return None


def classify(node: ast.stmt) -> Optional[ShapeKind]:
    """Return the shape of a module-level statement, or None if it declares no type."""
    if isinstance(node, ast.ClassDef):
        return _classify_class(node)
    if _TYPE_ALIAS_NODE is not None and isinstance(node, _TYPE_ALIAS_NODE):
        return ShapeKind.ALIAS
    if isinstance(node, ast.AnnAssign):
        if _terminal_name(node.annotation) in _ALIAS_ANNOTATIONS:
            return ShapeKind.ALIAS
        return None
    if isinstance(node, ast.Assign) and _declared_name(node) is not None:
        if _is_newtype_call(node.value) or _is_type_expression(node.value):
            return ShapeKind.ALIAS
    return None


def iter_declarations(unit: SourceUnit) -> Iterator[TypeDeclaration]:
    """Yield the type declarations of ``unit`` in source order.

    Only statements directly in the module body are visited; anything nested in
    a function, class, or compound statement such as ``if TYPE_CHECKING:`` is
    not a top-level declaration.
    """
    for node in unit.tree.body:
        shape = classify(node)
        if shape is None:
            continue
        name = _declared_name(node)
        if not name:
            continue
        yield TypeDeclaration(
            name=name,
            shape=shape,
            path=unit.path,
            module=unit.module,
            lineno=node.lineno,
            col_offset=node.col_offset,
        )


class DeclarationFilter:
    """Selects record declarations from a package scan, keeping encounter order."""

    def declarations(self, scan: PackageScan) -> List[TypeDeclaration]:
        found: List[TypeDeclaration] = []
        for unit in scan.units:
            for declaration in iter_declarations(unit):
                logger.debug(
                    "%s %s is %s", declaration.location, declaration.name, declaration.shape.value
                )
                found.append(declaration)
        return found

    def entries(self, scan: PackageScan) -> List[RegistryEntry]:
        """Map every declaration to a registry entry flagged with ``selected``."""
        return [
            RegistryEntry(
                name=declaration.name,
                module=declaration.module,
                selected=declaration.shape is ShapeKind.RECORD,
                shape=declaration.shape,
                location=declaration.location,
            )
            for declaration in self.declarations(scan)
        ]

    def select(self, scan: PackageScan) -> List[RegistryEntry]:
        """Return the record entries only; duplicates are reported, not removed."""
        selected = [entry for entry in self.entries(scan) if entry.selected]
        _warn_duplicates(selected)
        return selected


def _warn_duplicates(entries: List[RegistryEntry]) -> None:
    locations: Dict[str, List[str]] = defaultdict(list)
    for entry in entries:
        locations[entry.name].append(entry.location)
    for name, seen in locations.items():
        if len(seen) > 1:
            logger.warning(
                "Record type %s is declared %d times (%s); every occurrence is registered",
                name,
                len(seen),
                ", ".join(seen),
            )


__all__ = ["DeclarationFilter", "classify", "iter_declarations"]
