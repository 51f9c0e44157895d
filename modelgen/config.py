"""Configuration loading for modelgen (.modelgen.yml)."""

from __future__ import annotations

import keyword
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".modelgen.yml"
DEFAULT_SOURCE_DIR = "entity"
DEFAULT_OUTPUT_NAME = "models.py"
REGISTRY_STYLES = ("instances", "classes")

_ENV_SOURCE_DIR = "MODELGEN_SOURCE_DIR"
_ENV_OUTPUT = "MODELGEN_OUTPUT"
_ENV_PACKAGE = "MODELGEN_PACKAGE"


@dataclass
class RegistryConfig:
    """Shape of the generated collection."""

    name: str = "MODELS"
    style: str = "instances"


@dataclass
class ModelGenConfig:
    """Represents the settings defined in .modelgen.yml plus overrides."""

    root: Path
    source_dir: Path
    output: Optional[Path] = None
    package: Optional[str] = None
    exclude_paths: List[str] = field(default_factory=list)
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    @property
    def output_path(self) -> Path:
        if self.output is not None:
            return self.output
        return self.source_dir / DEFAULT_OUTPUT_NAME

    @property
    def package_name(self) -> str:
        return self.package or self.source_dir.name


def load_config(
    config_path: Path, *, environ: Optional[Mapping[str, str]] = None
) -> ModelGenConfig:
    """Load configuration from disk, then apply environment overrides."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    env = os.environ if environ is None else environ

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)

    registry_data = _as_dict(data.get("registry"))
    registry = RegistryConfig()
    if registry_data:
        registry.name = _as_str(registry_data.get("name")) or registry.name
        registry.style = _as_str(registry_data.get("style")) or registry.style

    source_dir = _as_str(env.get(_ENV_SOURCE_DIR)) or _as_str(data.get("source_dir"))
    output = _as_str(env.get(_ENV_OUTPUT)) or _as_str(data.get("output"))
    package = _as_str(env.get(_ENV_PACKAGE)) or _as_str(data.get("package"))

    config = ModelGenConfig(
        root=root,
        source_dir=_resolve_path(root, source_dir or DEFAULT_SOURCE_DIR),
        output=_resolve_path(root, output) if output else None,
        package=package,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        registry=registry,
    )
    _validate(config)
    return config


def apply_overrides(
    config: ModelGenConfig,
    *,
    source_dir: Optional[str] = None,
    output: Optional[str] = None,
    package: Optional[str] = None,
) -> ModelGenConfig:
    """Return a copy of ``config`` with command-line values taking precedence."""
    updated = config
    if source_dir:
        updated = replace(updated, source_dir=Path(source_dir).expanduser().resolve())
    if output:
        updated = replace(updated, output=Path(output).expanduser().resolve())
    if package:
        updated = replace(updated, package=package)
    _validate(updated)
    return updated


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_path(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")
    return loaded


def _validate(config: ModelGenConfig) -> None:
    name = config.registry.name
    if not name.isidentifier() or keyword.iskeyword(name):
        raise ConfigError(f"registry.name must be a Python identifier, got {name!r}")
    if config.registry.style not in REGISTRY_STYLES:
        allowed = ", ".join(REGISTRY_STYLES)
        raise ConfigError(
            f"registry.style must be one of {allowed}, got {config.registry.style!r}"
        )
    if config.package is not None and not is_module_path(config.package):
        raise ConfigError(f"package must be a dotted Python module path, got {config.package!r}")


def is_module_path(value: str) -> bool:
    """Return True when ``value`` is an importable dotted module path."""
    return all(part.isidentifier() and not keyword.iskeyword(part) for part in value.split("."))


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (int, float, bool)):
        return str(value)
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
