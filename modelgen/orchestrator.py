"""Pipeline orchestration for generate/check/list flows."""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .config import ModelGenConfig, RegistryConfig, apply_overrides, load_config
from .declarations import DeclarationFilter
from .emitter import RegistryEmitter
from .errors import EmitError
from .logging import get_logger
from .models import GeneratedFile, PackageScan, RegistryEntry
from .source_scanner import SourceScanner


@dataclass
class GenerateOutcome:
    """Result of a registry generation run."""

    path: Path
    entries: List[RegistryEntry]
    changed: bool
    diff: str
    dry_run: bool
    generated: GeneratedFile


class Orchestrator:
    """Runs the scan, filter and emit stages once per call."""

    def __init__(
        self,
        scanner: SourceScanner | None = None,
        declaration_filter: DeclarationFilter | None = None,
        emitter: RegistryEmitter | None = None,
    ) -> None:
        self._scanner_override = scanner
        self.declaration_filter = declaration_filter or DeclarationFilter()
        self._emitter_override = emitter
        self.logger = get_logger("orchestrator")

    def run_generate(
        self,
        path: str = ".",
        *,
        source_dir: Optional[str] = None,
        output: Optional[str] = None,
        package: Optional[str] = None,
        dry_run: bool = False,
    ) -> GenerateOutcome:
        """Regenerate the registry module for the project rooted at ``path``."""
        config = self.load_config(path, source_dir=source_dir, output=output, package=package)
        return self.generate(config, dry_run=dry_run)

    def run_check(
        self,
        path: str = ".",
        *,
        source_dir: Optional[str] = None,
        output: Optional[str] = None,
        package: Optional[str] = None,
    ) -> GenerateOutcome:
        """Render without writing; ``changed`` tells whether the file on disk is stale."""
        config = self.load_config(path, source_dir=source_dir, output=output, package=package)
        outcome = self._render(config, dry_run=True)
        if outcome.changed:
            self.logger.info("Registry at %s is out of date", outcome.path)
        else:
            self.logger.info("Registry at %s is up to date", outcome.path)
        return outcome

    def list_declarations(
        self,
        path: str = ".",
        *,
        source_dir: Optional[str] = None,
    ) -> List[RegistryEntry]:
        """Return every type declaration with its shape and selection flag."""
        config = self.load_config(path, source_dir=source_dir)
        scan = self._scanner(config).scan(config.source_dir, skip=[config.output_path])
        return self.declaration_filter.entries(scan)

    def load_config(
        self,
        path: str,
        *,
        source_dir: Optional[str] = None,
        output: Optional[str] = None,
        package: Optional[str] = None,
    ) -> ModelGenConfig:
        project_root = Path(path).expanduser().resolve()
        config = load_config(project_root)
        return apply_overrides(config, source_dir=source_dir, output=output, package=package)

    def generate(self, config: ModelGenConfig, *, dry_run: bool = False) -> GenerateOutcome:
        """Scan, filter and emit using an already resolved configuration."""
        outcome = self._render(config, dry_run=dry_run)
        if dry_run:
            self.logger.info("Dry-run completed; %s not written", outcome.path)
            return outcome

        written = self._emitter(config).write(outcome.generated)
        if written:
            self.logger.info(
                "Registry with %d model(s) written to %s", len(outcome.entries), outcome.path
            )
        else:
            self.logger.info("Registry at %s already up to date; skipping write", outcome.path)
        outcome.changed = written
        return outcome

    def _render(self, config: ModelGenConfig, *, dry_run: bool) -> GenerateOutcome:
        output_path = config.output_path
        self.logger.info("Scanning %s", config.source_dir)
        scan = self._scanner(config).scan(config.source_dir, skip=[output_path])
        self.logger.debug("Scanner parsed %d module(s)", len(scan.units))

        entries = self.declaration_filter.select(scan)
        self.logger.debug("Selected %d record type(s)", len(entries))

        emitter = self._emitter(config)
        generated = emitter.render(
            entries,
            output_path,
            package=config.package_name,
            relative=_is_inside(output_path, scan),
        )

        previous = _read_existing(output_path)
        changed = previous != generated.data
        diff = _unified_diff(previous, generated) if changed else ""

        return GenerateOutcome(output_path, entries, changed, diff, dry_run, generated)

    def _scanner(self, config: ModelGenConfig) -> SourceScanner:
        if self._scanner_override is not None:
            return self._scanner_override
        return SourceScanner(exclude_paths=config.exclude_paths)

    def _emitter(self, config: ModelGenConfig) -> RegistryEmitter:
        if self._emitter_override is not None:
            return self._emitter_override
        return RegistryEmitter(name=config.registry.name, style=config.registry.style)


def generate_registry(
    source_dir: str | Path,
    output: str | Path,
    *,
    package: Optional[str] = None,
    name: str = "MODELS",
    style: str = "instances",
    exclude_paths: Optional[List[str]] = None,
) -> GenerateOutcome:
    """Generate a registry module without reading any configuration file."""
    source_path = Path(source_dir).expanduser().resolve()
    config = apply_overrides(
        ModelGenConfig(
            root=source_path.parent,
            source_dir=source_path,
            exclude_paths=list(exclude_paths or []),
            registry=RegistryConfig(name=name, style=style),
        ),
        output=str(output),
        package=package,
    )
    return Orchestrator().generate(config)


def _is_inside(output_path: Path, scan: PackageScan) -> bool:
    return output_path.parent.resolve() == scan.root


def _read_existing(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return b""
    except OSError as exc:
        raise EmitError(f"Cannot read existing registry {path}: {exc}", path=path) from exc


def _unified_diff(previous: bytes, generated: GeneratedFile) -> str:
    name = generated.path.name
    return "".join(
        difflib.unified_diff(
            previous.decode("utf-8", errors="replace").splitlines(keepends=True),
            generated.content.splitlines(keepends=True),
            fromfile=f"a/{name}",
            tofile=f"b/{name}",
        )
    )


__all__ = ["GenerateOutcome", "Orchestrator", "generate_registry"]
