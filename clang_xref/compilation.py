"""Compilation descriptor: one source file plus the flags to compile it with.

The flags are assembled by the caller (CLI, compile_commands.json loader)
and passed through verbatim. Nothing here validates them; libclang reports
bad flags as diagnostics when the unit is parsed.
"""

import os
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class CompilationUnit:
    """Everything needed to parse exactly one translation unit."""
    source_file: str
    working_directory: str
    flags: Tuple[str, ...] = ()
    unsaved_content: Optional[str] = None

    @property
    def has_unsaved_content(self) -> bool:
        return self.unsaved_content is not None


@dataclass(frozen=True)
class CompileCommand:
    """A single compile command as handed to libclang."""
    directory: str
    filename: str
    arguments: Tuple[str, ...]
    mapped_sources: Tuple[Tuple[str, str], ...] = ()


def build(
    source_file: str,
    flags: Sequence[str] = (),
    unsaved_content: Optional[str] = None,
    working_directory: Optional[str] = None,
) -> CompilationUnit:
    """Build a CompilationUnit for one source file.

    Args:
        source_file: Path of the file to index; relative paths are taken
                     relative to working_directory
        flags: Complete compiler flag list (language standard, -I, -D, ...)
        unsaved_content: Editor buffer to use instead of the on-disk bytes
        working_directory: Directory the flags are relative to (default: cwd)

    Raises:
        ValueError: If source_file is empty
    """
    if not source_file:
        raise ValueError("A compilation unit needs exactly one source file")

    directory = os.path.abspath(working_directory or os.getcwd())
    path = source_file
    if not os.path.isabs(path):
        path = os.path.join(directory, path)

    return CompilationUnit(
        source_file=os.path.normpath(path),
        working_directory=directory,
        flags=tuple(flags),
        unsaved_content=unsaved_content,
    )


def _same_file(left: str, right: str) -> bool:
    # The unit's file may only exist as an unsaved buffer, so no os.path.samefile.
    return os.path.realpath(left) == os.path.realpath(right)


class SingleFileCompilationDatabase:
    """A compilation database holding exactly one command for one file."""

    def __init__(self, unit: CompilationUnit):
        self.unit = unit
        arguments = list(unit.flags)
        arguments.append(f"-working-directory={unit.working_directory}")
        mapped = ()
        if unit.unsaved_content is not None:
            mapped = ((unit.source_file, unit.unsaved_content),)
        self._command = CompileCommand(
            directory=unit.working_directory,
            filename=unit.source_file,
            arguments=tuple(arguments),
            mapped_sources=mapped,
        )

    def get_compile_commands(self, file_path: str) -> List[CompileCommand]:
        """Return the command for file_path, or [] for any other file."""
        if _same_file(file_path, self.unit.source_file):
            return self.get_all_compile_commands()
        return []

    def get_all_files(self) -> List[str]:
        return [self.unit.source_file]

    def get_all_compile_commands(self) -> List[CompileCommand]:
        return [self._command]
