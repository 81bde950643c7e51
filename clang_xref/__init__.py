"""Cross-reference indexing of C/C++ translation units with libclang."""

__version__ = "0.1.0"

from .compilation import CompilationUnit, build
from .errors import ClangXrefError, ParseFailure
from .facts import FileLocation, Reference, ReferenceKind, Symbol, SymbolKind, Target
from .indexer import IndexJob, IndexResult, index_file, index_many
from .indexer_config import IndexerConfig
from .sinks import FactSink, JsonLinesSink, ListSink

__all__ = [
    "ClangXrefError",
    "CompilationUnit",
    "FactSink",
    "FileLocation",
    "IndexJob",
    "IndexResult",
    "IndexerConfig",
    "JsonLinesSink",
    "ListSink",
    "ParseFailure",
    "Reference",
    "ReferenceKind",
    "Symbol",
    "SymbolKind",
    "Target",
    "build",
    "index_file",
    "index_many",
]
