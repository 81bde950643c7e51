"""Indexing entry points: one job per translation unit, optionally many in parallel."""

import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from . import compilation, diagnostics
from .compilation import CompilationUnit
from .frontend import FrontEndDriver
from .indexer_config import IndexerConfig
from .sinks import FactSink, ListSink
from .traversal import TraversalCoordinator


@dataclass
class IndexResult:
    """Outcome of indexing one translation unit."""
    source_file: str
    symbols: int = 0
    references: int = 0
    aborted: bool = False
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    includes: List[str] = field(default_factory=list)
    elapsed: float = 0.0
    sink: Optional[FactSink] = None


class IndexJob:
    """Parses one CompilationUnit and streams its facts into a sink.

    A job is single-threaded and owns its abort flag. abort() may be called
    from any thread (or from the sink while facts are flowing); the
    traversal then stops emitting and run() returns with aborted=True.
    """

    def __init__(self, unit: CompilationUnit, sink: FactSink, config: Optional[IndexerConfig] = None):
        self.unit = unit
        self.sink = sink
        self.config = config or IndexerConfig()
        self._abort_event = threading.Event()

    @property
    def aborted(self) -> bool:
        return self._abort_event.is_set()

    def abort(self) -> None:
        self._abort_event.set()

    def _file_filter(self):
        if not self.config.get_main_file_only():
            return None
        main_file = os.path.realpath(self.unit.source_file)
        return lambda path: path == main_file

    def run(self) -> IndexResult:
        """Parse and traverse the unit.

        Raises:
            ParseFailure: If the unit could not be parsed
        """
        start_time = time.time()
        parsed = FrontEndDriver(self.config).parse(self.unit)

        coordinator = TraversalCoordinator(
            self.sink,
            parsed.tracker,
            self.config,
            abort_event=self._abort_event,
            file_filter=self._file_filter(),
        )
        coordinator.run(parsed.root)

        result = IndexResult(
            source_file=self.unit.source_file,
            symbols=coordinator.emitter.symbol_count,
            references=coordinator.emitter.reference_count,
            aborted=self.aborted,
            errors=parsed.errors,
            warnings=parsed.warnings,
            includes=parsed.includes,
            elapsed=time.time() - start_time,
            sink=self.sink,
        )
        diagnostics.debug(
            f"{result.source_file}: {result.symbols} symbols, {result.references} references "
            f"in {result.elapsed:.2f}s" + (" (aborted)" if result.aborted else "")
        )
        return result


def index_file(
    source_file: str,
    flags: Sequence[str] = (),
    sink: Optional[FactSink] = None,
    unsaved_content: Optional[str] = None,
    working_directory: Optional[str] = None,
    config: Optional[IndexerConfig] = None,
) -> IndexResult:
    """Index a single source file.

    When no sink is given the facts are collected in a ListSink, available
    as ``result.sink``.
    """
    unit = compilation.build(source_file, flags, unsaved_content, working_directory)
    return IndexJob(unit, sink if sink is not None else ListSink(), config).run()


def index_many(
    units: Iterable[CompilationUnit],
    sink: FactSink,
    config: Optional[IndexerConfig] = None,
    max_workers: Optional[int] = None,
) -> Tuple[List[IndexResult], List[Tuple[str, str]]]:
    """Index several units concurrently into one shared sink.

    Returns:
        (results, failures) - failures are (source_file, message) pairs; a
        failing unit never stops the others
    """
    config = config or IndexerConfig()
    results: List[IndexResult] = []
    failures: List[Tuple[str, str]] = []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_file = {
            executor.submit(IndexJob(unit, sink, config).run): unit.source_file
            for unit in units
        }
        for future in as_completed(future_to_file):
            file_path = future_to_file[future]
            try:
                results.append(future.result())
            except Exception as exc:
                diagnostics.error(f"Error indexing {file_path}: {exc}")
                failures.append((file_path, str(exc)))

    return results, failures
