"""Tests for modelgen.emitter."""

from __future__ import annotations

import ast
import os
import stat
from pathlib import Path

import pytest

from modelgen.emitter import GENERATED_MARKER, RegistryEmitter
from modelgen.errors import EmitError
from modelgen.models import GeneratedFile, RegistryEntry, ShapeKind


def _entry(module: str, name: str, selected: bool = True) -> RegistryEntry:
    shape = ShapeKind.RECORD if selected else ShapeKind.ALIAS
    return RegistryEntry(name=name, module=module, selected=selected, shape=shape)


def test_render_lists_blank_instances_in_order(tmp_path: Path) -> None:
    entries = [_entry("book", "Book"), _entry("user", "User")]

    generated = RegistryEmitter().render(entries, tmp_path / "models.py", package="entity")

    assert generated.content == (
        f"{GENERATED_MARKER}\n"
        '"""Record types declared in the ``entity`` package, in declaration order."""\n'
        "\n"
        "from . import book\n"
        "from . import user\n"
        "\n"
        "MODELS = [\n"
        "    book.Book.__new__(book.Book),\n"
        "    user.User.__new__(user.User),\n"
        "]\n"
    )


def test_render_skips_unselected_entries(tmp_path: Path) -> None:
    entries = [_entry("book", "Book"), _entry("book", "Status", selected=False)]

    generated = RegistryEmitter().render(entries, tmp_path / "models.py", package="entity")

    assert "Status" not in generated.content
    assert generated.content.count("from . import book") == 1


def test_render_empty_registry_is_valid_python(tmp_path: Path) -> None:
    generated = RegistryEmitter().render([], tmp_path / "models.py", package="entity")

    tree = ast.parse(generated.content)
    assert generated.content.endswith("MODELS = []\n")
    assert "import" not in generated.content
    assert isinstance(tree.body[-1], ast.Assign)


def test_render_keeps_duplicate_names_distinct(tmp_path: Path) -> None:
    entries = [_entry("archive", "Book"), _entry("book", "Book")]

    generated = RegistryEmitter().render(entries, tmp_path / "models.py", package="entity")

    assert "    archive.Book.__new__(archive.Book),\n" in generated.content
    assert "    book.Book.__new__(book.Book),\n" in generated.content


def test_render_uses_absolute_imports_outside_package(tmp_path: Path) -> None:
    generated = RegistryEmitter().render(
        [_entry("book", "Book")],
        tmp_path / "registry.py",
        package="app.entity",
        relative=False,
    )

    assert "from app.entity import book\n" in generated.content


def test_render_rejects_invalid_package_for_absolute_imports(tmp_path: Path) -> None:
    with pytest.raises(EmitError):
        RegistryEmitter().render(
            [_entry("book", "Book")],
            tmp_path / "registry.py",
            package="my-models",
            relative=False,
        )


def test_render_class_style_and_custom_name(tmp_path: Path) -> None:
    emitter = RegistryEmitter(name="TABLES", style="classes")

    generated = emitter.render([_entry("book", "Book")], tmp_path / "models.py", package="entity")

    assert "TABLES = [\n    book.Book,\n]\n" in generated.content


def test_render_is_deterministic(tmp_path: Path) -> None:
    entries = [_entry("book", "Book"), _entry("user", "User")]
    emitter = RegistryEmitter()

    first = emitter.render(entries, tmp_path / "models.py", package="entity")
    second = emitter.render(list(entries), tmp_path / "models.py", package="entity")

    assert first.data == second.data


def test_write_replaces_existing_content(tmp_path: Path) -> None:
    target = tmp_path / "models.py"
    target.write_text("stale = True\n", encoding="utf-8")

    written = RegistryEmitter().write(GeneratedFile(path=target, content="MODELS = []\n"))

    assert written is True
    assert target.read_text(encoding="utf-8") == "MODELS = []\n"
    assert [path.name for path in tmp_path.iterdir()] == ["models.py"]


def test_write_skips_identical_content(tmp_path: Path) -> None:
    target = tmp_path / "models.py"
    target.write_text("MODELS = []\n", encoding="utf-8")
    before = target.stat().st_mtime_ns

    written = RegistryEmitter().write(GeneratedFile(path=target, content="MODELS = []\n"))

    assert written is False
    assert target.stat().st_mtime_ns == before


def test_write_creates_world_readable_file(tmp_path: Path) -> None:
    target = tmp_path / "models.py"

    RegistryEmitter().write(GeneratedFile(path=target, content="MODELS = []\n"))

    assert stat.S_IMODE(target.stat().st_mode) == 0o644


def test_write_reports_missing_directory(tmp_path: Path) -> None:
    target = tmp_path / "missing" / "models.py"

    with pytest.raises(EmitError) as excinfo:
        RegistryEmitter().write(GeneratedFile(path=target, content="MODELS = []\n"))

    assert excinfo.value.path == target
    assert not target.parent.exists()


def test_write_failure_leaves_previous_file_untouched(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "models.py"
    target.write_text("previous = True\n", encoding="utf-8")

    def _fail_replace(src, dst) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", _fail_replace)

    with pytest.raises(EmitError, match="disk full"):
        RegistryEmitter().write(GeneratedFile(path=target, content="MODELS = []\n"))

    assert target.read_text(encoding="utf-8") == "previous = True\n"
    assert [path.name for path in tmp_path.iterdir()] == ["models.py"]
