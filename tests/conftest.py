#!/usr/bin/env python3
"""
Pytest configuration and shared fixtures for the clang-xref test suite.

Sources are written into pytest's tmp_path and indexed with the real libclang.
"""

import os
import sys
from typing import Iterable

import pytest

# Add the project root to the path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from clang_xref import diagnostics
from clang_xref.compilation import build
from clang_xref.frontend import FrontEndDriver
from clang_xref.indexer import IndexJob
from clang_xref.indexer_config import IndexerConfig
from clang_xref.sinks import ListSink


DEFAULT_FLAGS = ("-std=c++17",)


# ============================================================================
# Environment isolation
# ============================================================================

@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """
    Keep tests independent of the developer's environment and of each other.

    Removes config/diagnostic environment variables and resets the global
    diagnostic logger after every test.
    """
    monkeypatch.delenv("CLANG_XREF_CONFIG", raising=False)
    monkeypatch.delenv("CLANG_XREF_DIAGNOSTIC_LEVEL", raising=False)
    yield
    if diagnostics._global_logger is not None:
        diagnostics._global_logger.set_output_stream(sys.stderr)
    diagnostics._global_logger = None


# ============================================================================
# Source and configuration fixtures
# ============================================================================

@pytest.fixture
def write_source(tmp_path):
    """
    Write a source or header file below tmp_path.

    Example:
        def test_something(write_source):
            path = write_source("main.cpp", "int main() { return 0; }")
    """
    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return str(path)

    return _write


@pytest.fixture
def make_config(tmp_path):
    """Create an IndexerConfig rooted at tmp_path with explicit overrides."""
    def _make(**overrides) -> IndexerConfig:
        return IndexerConfig(search_dir=tmp_path, overrides=overrides)

    return _make


@pytest.fixture
def index_source(tmp_path, write_source, make_config):
    """
    Write code to tmp_path/<name>, index it and return (result, sink).

    Example:
        def test_symbols(index_source):
            result, sink = index_source("int add(int a, int b) { return a + b; }")
            assert sink.find_symbols("add")
    """
    def _index(
        code: str,
        name: str = "main.cpp",
        flags: Iterable[str] = DEFAULT_FLAGS,
        **overrides,
    ):
        path = write_source(name, code)
        sink = ListSink()
        unit = build(path, tuple(flags), working_directory=str(tmp_path))
        result = IndexJob(unit, sink, make_config(**overrides)).run()
        return result, sink

    return _index


@pytest.fixture
def parse_source(tmp_path, write_source, make_config):
    """Write code to tmp_path and return the ParsedUnit."""
    def _parse(code: str, name: str = "main.cpp", flags: Iterable[str] = DEFAULT_FLAGS):
        path = write_source(name, code)
        unit = build(path, tuple(flags), working_directory=str(tmp_path))
        return FrontEndDriver(make_config()).parse(unit)

    return _parse

