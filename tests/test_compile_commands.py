"""Tests for the compile_commands.json loader."""

import os

from clang_xref.compile_commands import CompileCommandsDatabase
from tests.utils.test_helpers import temp_compile_commands


class TestCompileCommandsDatabase:
    """Loading entries and filtering their arguments."""

    def test_arguments_entry(self, tmp_path):
        """Compiler, -c, -o <out> and the source file are stripped."""
        path = temp_compile_commands(tmp_path, [
            {
                "file": "src/main.cpp",
                "arguments": [
                    "/usr/bin/clang++", "-std=c++17", "-I", "include", "-DFOO=1",
                    "-c", "src/main.cpp", "-o", "build/main.o",
                ],
            }
        ])

        database = CompileCommandsDatabase(str(path))
        source = str(tmp_path / "src" / "main.cpp")

        assert database.get_flags(source) == ["-std=c++17", "-I", "include", "-DFOO=1"]
        assert database.get_directory(source) == str(tmp_path)

    def test_command_string_entry(self, tmp_path):
        """Command strings are split with shell quoting rules."""
        path = temp_compile_commands(tmp_path, [
            {
                "file": str(tmp_path / "a.cc"),
                "command": 'g++-13 -DMSG="hello world" -Iinc -c a.cc -oa.o',
            }
        ])

        database = CompileCommandsDatabase(str(path))

        assert database.get_flags(str(tmp_path / "a.cc")) == ["-DMSG=hello world", "-Iinc"]

    def test_options_starting_with_o_kept(self, tmp_path):
        """Only the joined -o<file> form names the output; -objc* flags stay."""
        path = temp_compile_commands(tmp_path, [
            {
                "file": "view.mm",
                "arguments": [
                    "clang++", "-objcmt-migrate-literals", "-ObjC++", "-c", "view.mm", "-oview.o",
                ],
            }
        ])

        database = CompileCommandsDatabase(str(path))

        assert database.get_flags(str(tmp_path / "view.mm")) == ["-objcmt-migrate-literals", "-ObjC++"]

    def test_flags_without_compiler(self, tmp_path):
        """An argument list starting with a flag keeps its first element."""
        path = temp_compile_commands(tmp_path, [
            {"file": "x.c", "arguments": ["-std=c11", "x.c"]}
        ])

        database = CompileCommandsDatabase(str(path))

        assert database.get_flags(str(tmp_path / "x.c")) == ["-std=c11"]

    def test_malformed_entries_skipped(self, tmp_path):
        path = temp_compile_commands(tmp_path, [
            {"arguments": ["clang", "-c", "nofile.c"]},
            {"file": "ok.c", "arguments": ["clang", "-c", "ok.c"]},
        ])
        # A non-object entry as well
        path.write_text(path.read_text().replace("[\n", '[\n  "junk",\n', 1))

        database = CompileCommandsDatabase(str(path))

        assert database.get_all_files() == [os.path.realpath(str(tmp_path / "ok.c"))]

    def test_unknown_file(self, tmp_path):
        path = temp_compile_commands(tmp_path, [{"file": "ok.c", "arguments": ["clang", "ok.c"]}])

        database = CompileCommandsDatabase(str(path))

        assert database.get_flags(str(tmp_path / "other.c")) is None
        assert database.get_directory(str(tmp_path / "other.c")) is None

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "compile_commands.json"
        path.write_text('{"file": "x.c"}')

        assert len(CompileCommandsDatabase(str(path))) == 0

    def test_missing_database(self, tmp_path):
        assert len(CompileCommandsDatabase(str(tmp_path / "compile_commands.json"))) == 0
