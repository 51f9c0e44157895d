"""Rendering and persistence of the generated registry module."""

from __future__ import annotations

import ast
import os
import tempfile
from pathlib import Path
from typing import List, Sequence

from .config import is_module_path
from .errors import EmitError
from .logging import get_logger
from .models import GeneratedFile, RegistryEntry

GENERATED_MARKER = "# Code generated by modelgen. DO NOT EDIT."

_INDENT = "    "
_DEFAULT_MODE = 0o644

logger = get_logger("emitter")


class RegistryEmitter:
    """Renders selected record entries into a Python module and writes it."""

    def __init__(self, name: str = "MODELS", style: str = "instances") -> None:
        self.name = name
        self.style = style

    def render(
        self,
        entries: Sequence[RegistryEntry],
        output_path: Path,
        *,
        package: str,
        relative: bool = True,
    ) -> GeneratedFile:
        """Return the registry module for ``entries``; the same input gives the same bytes."""
        selected = [entry for entry in entries if entry.selected]
        if not relative and not is_module_path(package):
            raise EmitError(
                f"Cannot import from {package!r}: not a dotted module path", path=output_path
            )

        lines: List[str] = [
            GENERATED_MARKER,
            f'"""Record types declared in the ``{package}`` package, in declaration order."""',
            "",
        ]

        modules = _unique_modules(selected)
        if modules:
            source = "." if relative else package
            lines.extend(f"from {source} import {module}" for module in modules)
            lines.append("")

        if selected:
            lines.append(f"{self.name} = [")
            lines.extend(f"{_INDENT}{self._element(entry)}," for entry in selected)
            lines.append("]")
        else:
            lines.append(f"{self.name} = []")

        content = "\n".join(lines) + "\n"
        try:
            ast.parse(content, filename=str(output_path))
        except SyntaxError as exc:
            raise EmitError(f"Rendered registry is not valid Python: {exc}", path=output_path) from exc

        return GeneratedFile(path=output_path, content=content)

    def write(self, generated: GeneratedFile) -> bool:
        """Atomically replace the target file; return False when it is already current."""
        target = generated.path
        data = generated.data
        try:
            if target.read_bytes() == data:
                logger.debug("%s is already up to date", target)
                return False
            mode = target.stat().st_mode & 0o777
        except FileNotFoundError:
            mode = _DEFAULT_MODE
        except OSError as exc:
            raise EmitError(f"Cannot access {target}: {exc}", path=target) from exc

        tmp_path: Path | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, target)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise EmitError(f"Failed to write {target}: {exc}", path=target) from exc

        logger.debug("Wrote %d bytes to %s", len(data), target)
        return True

    def _element(self, entry: RegistryEntry) -> str:
        reference = entry.qualified_name
        if self.style == "classes":
            return reference
        # Bypasses __init__, leaving every field unset.
        return f"{reference}.__new__({reference})"


def _unique_modules(entries: Sequence[RegistryEntry]) -> List[str]:
    seen: List[str] = []
    for entry in entries:
        if entry.module not in seen:
            seen.append(entry.module)
    return seen


__all__ = ["GENERATED_MARKER", "RegistryEmitter"]
