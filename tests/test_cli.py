"""Tests for the clang-xref command line."""

import json

import pytest

from clang_xref import diagnostics
from clang_xref.cli import main
from clang_xref.diagnostics import DiagnosticLevel
from tests.utils.test_helpers import temp_compile_commands, temp_config_file


def _facts(text):
    return [json.loads(line) for line in text.splitlines() if line.strip()]


class TestCli:
    """End-to-end runs of main()."""

    def test_stdout_json_lines(self, write_source, tmp_path, capsys):
        path = write_source("main.cpp", "struct S{ int x; }; void f(){ S s; s.x = 1; }\n")

        exit_code = main([path, "-C", str(tmp_path), "--flag=-std=c++17"])

        assert exit_code == 0
        facts = _facts(capsys.readouterr().out)
        symbols = [f for f in facts if f["type"] == "symbol"]
        references = [f for f in facts if f["type"] == "reference"]
        assert {s["qualified_name"] for s in symbols} == {"S", "S::x", "f"}
        assert len(references) == 1
        assert references[0]["kind"] == "member_access"
        assert references[0]["target"]["decl_kind"] == "FIELD_DECL"

    def test_defines_and_include_paths(self, write_source, tmp_path, capsys):
        write_source("include/settings.h", "const int LIMIT_VALUE = 3;\n")
        write_source(
            "main.cpp",
            '#include "settings.h"\n'
            "#ifdef ENABLE_EXTRA\nint extra() { return LIMIT_VALUE; }\n#endif\n",
        )

        exit_code = main(["main.cpp", "-C", str(tmp_path), "-I", "include", "-D", "ENABLE_EXTRA"])

        assert exit_code == 0
        facts = _facts(capsys.readouterr().out)
        names = {f["qualified_name"] for f in facts if f["type"] == "symbol"}
        assert {"extra", "LIMIT_VALUE"} <= names

    def test_output_file(self, write_source, tmp_path, capsys):
        path = write_source("main.cpp", "int value;\n")
        output = tmp_path / "facts.jsonl"

        exit_code = main([path, "-o", str(output)])

        assert exit_code == 0
        assert capsys.readouterr().out == ""
        facts = _facts(output.read_text())
        assert [f["qualified_name"] for f in facts] == ["value"]

    def test_missing_file_exit_code(self, tmp_path, capsys):
        exit_code = main([str(tmp_path / "missing.cpp")])

        assert exit_code == 1
        assert capsys.readouterr().out == ""

    def test_main_file_only_and_locals(self, write_source, tmp_path, capsys):
        write_source("shape.h", "struct Shape { int sides; };\n")
        path = write_source("main.cpp", '#include "shape.h"\nint count(Shape s) { return s.sides; }\n')

        main([path, "-C", str(tmp_path), "--main-file-only", "--locals"])

        facts = _facts(capsys.readouterr().out)
        names = [f["qualified_name"] for f in facts if f["type"] == "symbol"]
        assert names == ["count", "count::s"]

    def test_unsaved_buffer(self, write_source, tmp_path, capsys):
        path = write_source("main.cpp", "int saved;\n")
        buffer = write_source("buffer.cpp", "int unsaved;\n")

        main([path, "--unsaved", buffer])

        facts = _facts(capsys.readouterr().out)
        assert [f["qualified_name"] for f in facts] == ["unsaved"]

    def test_compile_commands(self, write_source, tmp_path, capsys):
        write_source("src/main.cpp", "#ifdef FROM_DB\nint configured;\n#endif\n")
        temp_compile_commands(tmp_path, [
            {"file": "src/main.cpp", "arguments": ["clang++", "-DFROM_DB", "-c", "src/main.cpp"]}
        ])

        exit_code = main(["-C", str(tmp_path), "-p", "compile_commands.json"])

        assert exit_code == 0
        facts = _facts(capsys.readouterr().out)
        assert [f["qualified_name"] for f in facts] == ["configured"]

    def test_config_file_option(self, write_source, tmp_path, capsys):
        path = write_source("main.cpp", "int f(int arg) { return arg; }\n")
        config = temp_config_file(tmp_path, {"index_locals": True}, name="custom.json")

        main([path, "--config", str(config)])

        facts = _facts(capsys.readouterr().out)
        assert "f::arg" in {f.get("qualified_name") for f in facts}


class TestCliDiagnostics:
    """Interplay of -v with the configuration file's diagnostics level."""

    def test_config_level_kept_without_verbose(self, write_source, tmp_path, capsys):
        path = write_source("main.cpp", "int value;\n")
        config = temp_config_file(tmp_path, {"diagnostics": {"level": "error"}}, name="quiet.json")

        main([path, "--config", str(config)])

        assert diagnostics.get_logger().level == DiagnosticLevel.ERROR
        assert "[INFO]" not in capsys.readouterr().err

    def test_warning_level_without_config_or_verbose(self, write_source, tmp_path, capsys):
        path = write_source("main.cpp", "int value;\n")

        main([path, "-C", str(tmp_path)])

        assert diagnostics.get_logger().level == DiagnosticLevel.WARNING
        assert "[INFO]" not in capsys.readouterr().err

    def test_verbose_overrides_config_level(self, write_source, tmp_path, capsys):
        path = write_source("main.cpp", "int value;\n")
        config = temp_config_file(tmp_path, {"diagnostics": {"level": "error"}}, name="quiet.json")

        main([path, "--config", str(config), "-v"])

        assert diagnostics.get_logger().level == DiagnosticLevel.INFO
        assert "[INFO] Indexed 1/1 files" in capsys.readouterr().err


class TestCliUsageErrors:
    """argparse usage errors exit with status 2."""

    def test_no_sources(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["-C", str(tmp_path)])

        assert exc_info.value.code == 2

    def test_unsaved_with_two_sources(self, write_source):
        first = write_source("a.cpp", "int a;\n")
        second = write_source("b.cpp", "int b;\n")

        with pytest.raises(SystemExit) as exc_info:
            main([first, second, "--unsaved", first])

        assert exc_info.value.code == 2
