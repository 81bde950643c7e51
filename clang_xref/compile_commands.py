"""
Loader for compile_commands.json compilation databases.

Turns each entry into the flag list the indexer passes to libclang: the
compiler executable, ``-c``, ``-o <out>`` and the source file itself are
stripped, everything else is kept verbatim. Relative paths in the flags stay
relative; the entry's directory becomes the unit's working directory.

Supports orjson for faster JSON parsing (optional dependency).
"""

import json
import os
import shlex
import time
from typing import Any, Dict, List, Optional

from . import diagnostics

# Try to import orjson for faster JSON parsing (optional)
try:
    import orjson
    HAS_ORJSON = True
except ImportError:
    HAS_ORJSON = False

COMPILER_NAMES = {"gcc", "g++", "clang", "clang++", "cc", "c++", "cl"}
SOURCE_EXTENSIONS = (".c", ".cc", ".cpp", ".cxx", ".c++", ".m", ".mm")

# Driver options that begin with -o but do not name the output file
NON_OUTPUT_O_PREFIXES = ("-objc", "-object", "-offload")


def _is_joined_output(arg: str) -> bool:
    """True for the -o<file> spelling of the output option."""
    return arg.startswith("-o") and not arg.startswith(NON_OUTPUT_O_PREFIXES)


def _is_compiler(arg: str) -> bool:
    basename = arg.replace("\\", "/").split("/")[-1].lower()
    if basename.endswith(".exe"):
        basename = basename[:-4]
    # Versioned drivers such as clang++-17 or g++-13
    return basename in COMPILER_NAMES or basename.rsplit("-", 1)[0] in COMPILER_NAMES


class CompileCommandsDatabase:
    """Per-file flags loaded from a compile_commands.json file."""

    def __init__(self, path: str):
        self.path = os.path.abspath(path)
        self._commands: Dict[str, Dict[str, Any]] = {}
        self._load()

    def _load(self) -> None:
        start_time = time.time()
        try:
            if HAS_ORJSON:
                with open(self.path, "rb") as f:
                    data = orjson.loads(f.read())
                diagnostics.debug("Using orjson for fast JSON parsing")
            else:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
        except (OSError, ValueError) as e:
            diagnostics.error(f"Error loading {self.path}: {e}")
            return

        if not isinstance(data, list):
            diagnostics.error("compile_commands.json must contain a list of commands")
            return

        self._parse_commands(data)
        diagnostics.info(
            f"Loaded {len(self._commands)} compile commands in {time.time() - start_time:.2f}s"
        )

    def _parse_commands(self, commands: List[Any]) -> None:
        for i, cmd in enumerate(commands):
            if not isinstance(cmd, dict):
                diagnostics.warning(f"Skipping invalid command at index {i}")
                continue
            if "file" not in cmd:
                diagnostics.warning(f"Skipping command without 'file' field at index {i}")
                continue

            directory = cmd.get("directory") or os.path.dirname(self.path)
            file_path = self._normalize_path(cmd["file"], directory)

            arguments = cmd.get("arguments")
            if not arguments:
                command = cmd.get("command", "")
                try:
                    arguments = shlex.split(command)
                except ValueError as e:
                    diagnostics.warning(f"Skipping unparsable command at index {i}: {e}")
                    continue

            # Later entries for the same file win
            self._commands[file_path] = {
                "directory": directory,
                "arguments": self._filter_arguments(arguments, file_path, directory),
            }

    @staticmethod
    def _normalize_path(file_path: str, directory: str) -> str:
        """Normalize file path to absolute path."""
        if not os.path.isabs(file_path):
            file_path = os.path.join(directory, file_path)
        return os.path.realpath(file_path)

    def _filter_arguments(self, arguments: List[str], file_path: str, directory: str) -> List[str]:
        """Strip the compiler executable, -c, -o <file> and the source file."""
        args = [arg for arg in arguments if arg.strip()]
        filtered = []
        i = 1 if args and _is_compiler(args[0]) else 0

        while i < len(args):
            arg = args[i]

            if arg == "-o":
                i += 2  # Skip -o and output file
                continue
            if arg == "-c" or _is_joined_output(arg):
                i += 1
                continue
            if not arg.startswith("-"):
                if self._normalize_path(arg, directory) == file_path or arg.lower().endswith(SOURCE_EXTENSIONS):
                    i += 1
                    continue

            filtered.append(arg)
            i += 1

        return filtered

    def _lookup(self, file_path: str) -> Optional[Dict[str, Any]]:
        return self._commands.get(os.path.realpath(os.path.abspath(file_path)))

    def get_flags(self, file_path: str) -> Optional[List[str]]:
        """Flags for file_path, or None when the database has no entry."""
        entry = self._lookup(file_path)
        return list(entry["arguments"]) if entry else None

    def get_directory(self, file_path: str) -> Optional[str]:
        entry = self._lookup(file_path)
        return entry["directory"] if entry else None

    def get_all_files(self) -> List[str]:
        return list(self._commands)

    def __len__(self) -> int:
        return len(self._commands)
