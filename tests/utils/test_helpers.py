#!/usr/bin/env python3
"""
Test helper functions for the clang-xref test suite.

Utilities for writing compilation databases and config files, and for
locating cursors and facts in indexing results.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add the project root to the path
import sys
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from clang_xref.facts import ReferenceKind


def temp_compile_commands(project_root: Path, files: List[Dict[str, Any]]) -> Path:
    """
    Create a compile_commands.json file in the project root.

    Args:
        project_root: Root directory of the project
        files: List of file compilation entries

    Returns:
        Path: Path to the created compile_commands.json

    Example:
        files = [
            {
                "file": "src/main.cpp",
                "arguments": ["clang++", "-std=c++17", "-I", "include", "-c", "src/main.cpp"]
            }
        ]
        compile_commands_path = temp_compile_commands(project_root, files)
    """
    compile_commands_path = project_root / "compile_commands.json"

    processed_files = []
    for file_entry in files:
        entry = file_entry.copy()
        if "directory" not in entry:
            entry["directory"] = str(project_root)
        processed_files.append(entry)

    compile_commands_path.write_text(json.dumps(processed_files, indent=2))
    return compile_commands_path


def temp_config_file(project_root: Path, config: Any, name: str = ".clang-xref.json") -> Path:
    """
    Create a .clang-xref.json file in the project root.

    Args:
        project_root: Root directory of the project
        config: Configuration value (normally a dict) serialized as JSON
        name: File name to write

    Returns:
        Path: Path to the created config file
    """
    config_path = project_root / name
    config_path.write_text(json.dumps(config, indent=2))
    return config_path


def find_cursor(root, spelling: str, kind=None, definition: Optional[bool] = None):
    """Return the first cursor below root with the given spelling (and kind)."""
    for cursor in root.walk_preorder():
        if cursor.spelling != spelling:
            continue
        if kind is not None and cursor.kind != kind:
            continue
        if definition is not None and cursor.is_definition() != definition:
            continue
        return cursor
    raise AssertionError(f"No cursor named {spelling!r} found")


def references_of(sink, kind: ReferenceKind, target_name: Optional[str] = None):
    """Filter a ListSink's references by kind and (optionally) target name."""
    matches = []
    for reference in sink.references:
        if reference.kind != kind:
            continue
        if target_name is not None:
            if reference.target is None or reference.target.qualified_name != target_name:
                continue
        matches.append(reference)
    return matches


def single_symbol(sink, qualified_name: str, is_definition: Optional[bool] = None):
    """Return the only symbol with the given name (and definition flag)."""
    symbols = sink.find_symbols(qualified_name)
    if is_definition is not None:
        symbols = [s for s in symbols if s.is_definition == is_definition]
    assert len(symbols) == 1, f"Expected one symbol {qualified_name!r}, got {symbols}"
    return symbols[0]
