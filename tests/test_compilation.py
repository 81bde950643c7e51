"""Tests for the compilation descriptor and the single-entry database."""

import os

import pytest

from clang_xref.compilation import CompilationUnit, SingleFileCompilationDatabase, build


class TestBuild:
    """Building a CompilationUnit from a path and flags."""

    def test_relative_source_resolves_against_working_directory(self, tmp_path):
        """A relative source path is taken relative to the working directory."""
        unit = build("src/main.cpp", ["-std=c++17"], working_directory=str(tmp_path))

        assert unit.source_file == os.path.join(str(tmp_path), "src", "main.cpp")
        assert unit.working_directory == str(tmp_path)

    def test_defaults_to_process_cwd(self, tmp_path, monkeypatch):
        """Without a working directory the process cwd is used."""
        monkeypatch.chdir(tmp_path)
        unit = build("main.cpp")

        assert unit.working_directory == os.getcwd()
        assert unit.source_file == os.path.join(os.getcwd(), "main.cpp")

    def test_flags_pass_through_verbatim(self, tmp_path):
        """Flags are kept in order, nothing is validated or added."""
        flags = ["-std=c++20", "-I", "include", "-DNAME=1", "--not-a-real-flag"]
        unit = build(str(tmp_path / "a.cpp"), flags)

        assert unit.flags == tuple(flags)

    def test_empty_source_rejected(self):
        """A unit names exactly one source file."""
        with pytest.raises(ValueError):
            build("", ["-std=c++17"])

    def test_unsaved_content(self, tmp_path):
        """Unsaved content is carried as-is."""
        unit = build(str(tmp_path / "a.cpp"), unsaved_content="int x;")

        assert unit.has_unsaved_content
        assert unit.unsaved_content == "int x;"
        assert not build(str(tmp_path / "a.cpp")).has_unsaved_content

    def test_unit_is_immutable(self, tmp_path):
        """CompilationUnit is frozen."""
        unit = build(str(tmp_path / "a.cpp"))
        with pytest.raises(Exception):
            unit.source_file = "other.cpp"


class TestSingleFileCompilationDatabase:
    """The database answers for exactly one file."""

    def test_command_for_the_unit_file(self, tmp_path):
        """The only command carries the flags plus the working directory."""
        unit = build(str(tmp_path / "main.cpp"), ["-std=c++17", "-Iinc"], working_directory=str(tmp_path))
        database = SingleFileCompilationDatabase(unit)

        commands = database.get_compile_commands(str(tmp_path / "main.cpp"))

        assert len(commands) == 1
        command = commands[0]
        assert command.filename == unit.source_file
        assert command.directory == str(tmp_path)
        assert command.arguments == ("-std=c++17", "-Iinc", f"-working-directory={tmp_path}")
        assert command.mapped_sources == ()

    def test_other_files_have_no_command(self, tmp_path):
        """Any other path yields an empty list."""
        database = SingleFileCompilationDatabase(build(str(tmp_path / "main.cpp")))

        assert database.get_compile_commands(str(tmp_path / "other.cpp")) == []

    def test_path_comparison_uses_real_path(self, tmp_path):
        """The same file reached through a symlinked directory matches."""
        real_dir = tmp_path / "real"
        real_dir.mkdir()
        (real_dir / "main.cpp").write_text("int x;")
        link_dir = tmp_path / "link"
        os.symlink(str(real_dir), str(link_dir))

        database = SingleFileCompilationDatabase(build(str(real_dir / "main.cpp")))

        assert len(database.get_compile_commands(str(link_dir / "main.cpp"))) == 1

    def test_all_files_and_commands(self, tmp_path):
        """get_all_files/get_all_compile_commands expose the single entry."""
        unit = build(str(tmp_path / "main.cpp"))
        database = SingleFileCompilationDatabase(unit)

        assert database.get_all_files() == [unit.source_file]
        assert len(database.get_all_compile_commands()) == 1

    def test_unsaved_content_is_mapped(self, tmp_path):
        """Unsaved content becomes a mapped source for the unit file."""
        unit = build(str(tmp_path / "main.cpp"), unsaved_content="int y;")
        command = SingleFileCompilationDatabase(unit).get_all_compile_commands()[0]

        assert command.mapped_sources == ((unit.source_file, "int y;"),)

    def test_accepts_unit_built_by_hand(self, tmp_path):
        """Any CompilationUnit works, not only ones from build()."""
        unit = CompilationUnit(source_file=str(tmp_path / "x.c"), working_directory=str(tmp_path))

        assert SingleFileCompilationDatabase(unit).get_all_files() == [str(tmp_path / "x.c")]
