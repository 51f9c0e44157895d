"""Exception hierarchy for the registry generator.

Every failure is fatal to a run. Callers catch ``ModelGenError`` to report a
single line and exit non-zero; nothing is written when one is raised.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ModelGenError(RuntimeError):
    """Base exception for all modelgen errors."""


class DiscoveryError(ModelGenError):
    """Raised when the model directory is missing or cannot be listed."""

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path


class ParseError(ModelGenError):
    """Raised when a source file cannot be decoded or parsed."""

    def __init__(self, path: Path, diagnostic: str, *, lineno: Optional[int] = None) -> None:
        location = f"{path}:{lineno}" if lineno else str(path)
        super().__init__(f"Failed to parse {location}: {diagnostic}")
        self.path = path
        self.diagnostic = diagnostic
        self.lineno = lineno


class EmitError(ModelGenError):
    """Raised when the generated registry cannot be rendered or written."""

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path


class ConfigError(ModelGenError):
    """Raised when the configuration file cannot be parsed or is invalid."""


__all__ = [
    "ConfigError",
    "DiscoveryError",
    "EmitError",
    "ModelGenError",
    "ParseError",
]
