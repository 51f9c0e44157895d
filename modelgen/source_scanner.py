"""Model package scanning and parsing utilities."""

from __future__ import annotations

import ast
import keyword
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Collection, Iterable, Iterator, List, Sequence

from .errors import DiscoveryError, ParseError
from .logging import get_logger
from .models import PackageScan, SourceUnit

_SOURCE_SUFFIX = ".py"

_EXCLUDED_FILES = {
    "__init__.py",
}

logger = get_logger("scanner")


def _is_importable(stem: str) -> bool:
    return stem.isidentifier() and not keyword.iskeyword(stem)


def _should_exclude(name: str, patterns: Sequence[str]) -> bool:
    return any(fnmatchcase(name, pattern) for pattern in patterns)


def _iter_source_files(
    root: Path, patterns: Sequence[str], skip: Collection[Path] = ()
) -> Iterator[Path]:
    try:
        entries = sorted(root.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise DiscoveryError(f"Cannot list model directory {root}: {exc}", path=root) from exc

    for path in entries:
        if path.suffix != _SOURCE_SUFFIX or not path.is_file():
            continue
        if path.name in _EXCLUDED_FILES:
            continue
        if path.resolve() in skip:
            logger.debug("Skipping %s (generated registry output)", path.name)
            continue
        if _should_exclude(path.name, patterns):
            logger.debug("Skipping %s (excluded by configuration)", path.name)
            continue
        if not _is_importable(path.stem):
            logger.debug("Skipping %s (not an importable module name)", path.name)
            continue
        yield path


def _parse_file(path: Path) -> ast.Module:
    try:
        source = path.read_bytes()
    except OSError as exc:
        raise DiscoveryError(f"Cannot read source file {path}: {exc}", path=path) from exc

    try:
        # Bytes input lets the parser honour PEP 263 encoding declarations.
        return ast.parse(source, filename=str(path))
    except SyntaxError as exc:
        raise ParseError(path, exc.msg or str(exc), lineno=exc.lineno) from exc
    except ValueError as exc:
        raise ParseError(path, str(exc)) from exc


class SourceScanner:
    """Parses every module directly inside a model directory."""

    def __init__(self, exclude_paths: Sequence[str] | None = None) -> None:
        self.exclude_paths: List[str] = list(exclude_paths or [])

    def scan(self, directory: str | Path, *, skip: Iterable[Path] = ()) -> PackageScan:
        """Return one parsed unit per module, ordered by file name.

        Files in ``skip``, typically the generated registry itself, are left out.
        """
        root = Path(directory).expanduser().resolve()
        if not root.exists():
            raise DiscoveryError(f"Model directory not found: {directory}", path=root)
        if not root.is_dir():
            raise DiscoveryError(f"Model path is not a directory: {directory}", path=root)

        skipped = {Path(path).expanduser().resolve() for path in skip}
        units: List[SourceUnit] = []
        for path in _iter_source_files(root, self.exclude_paths, skipped):
            tree = _parse_file(path)
            units.append(SourceUnit(path=path, module=path.stem, tree=tree))
            logger.debug("Parsed %s", path.name)

        logger.debug("Scanned %d module(s) in %s", len(units), root)
        return PackageScan(root=root, units=units)


__all__ = ["SourceScanner"]
