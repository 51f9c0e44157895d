"""CLI parser and exit status tests."""

from __future__ import annotations

import pytest

from modelgen.cli import _build_parser, main
from modelgen.logging import configure_logging


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["check", "--verbose"])
    assert args.verbose is True
    assert args.command == "check"


def test_cli_accepts_location_overrides() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["generate", "proj", "--source-dir", "proj/entity", "--output", "out.py", "--dry-run"]
    )
    assert args.path == "proj"
    assert args.source_dir == "proj/entity"
    assert args.output == "out.py"
    assert args.dry_run is True


def test_cli_list_has_no_output_option() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["list", "--output", "out.py"])


def test_main_generate_writes_registry(package_builder, capsys) -> None:
    package_builder.write({"book.py": "class Book:\n    pass\n"})

    main(["generate", str(package_builder.root)])

    assert "written to" in capsys.readouterr().out
    assert package_builder.output.exists()


def test_main_check_exits_non_zero_when_stale(package_builder, capsys) -> None:
    package_builder.write({"book.py": "class Book:\n    pass\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(package_builder.root)])

    assert excinfo.value.code == 1
    assert "out of date" in capsys.readouterr().err

    main(["generate", str(package_builder.root)])
    main(["check", str(package_builder.root)])
    assert "is up to date" in capsys.readouterr().out


def test_main_reports_parse_errors(package_builder, capsys) -> None:
    package_builder.write({"book.py": "class Book(:\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(package_builder.root)])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "modelgen generate failed" in err
    assert "book.py" in err
    assert not package_builder.output.exists()


def test_main_list_marks_selected_declarations(package_builder, capsys) -> None:
    package_builder.write({"book.py": "Status = str\n\n\nclass Book:\n    pass\n"})

    main(["list", str(package_builder.root)])

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("  book.py:1:1")
    assert lines[0].split()[-2:] == ["alias", "Status"]
    assert lines[1].startswith("* book.py:4:1")
    assert lines[1].split()[-2:] == ["record", "Book"]


def test_cli_accepts_log_file_before_command(tmp_path) -> None:
    parser = _build_parser()
    args = parser.parse_args(["--log-file", str(tmp_path / "run.log"), "check"])
    assert args.log_file == tmp_path / "run.log"
    assert args.command == "check"


def test_cli_accepts_log_file_after_command(tmp_path) -> None:
    parser = _build_parser()
    args = parser.parse_args(["list", "--log-file", str(tmp_path / "run.log")])
    assert args.log_file == tmp_path / "run.log"


def test_main_writes_log_file(package_builder, tmp_path) -> None:
    package_builder.write({"book.py": "class Book:\n    pass\n"})
    log_file = tmp_path / "modelgen.log"

    try:
        main(["generate", str(package_builder.root), "--log-file", str(log_file)])
    finally:
        configure_logging()

    text = log_file.read_text(encoding="utf-8")
    assert "INFO modelgen.orchestrator" in text
    assert "written to" in text
