"""Turns cursors into Symbol/Reference facts and hands them to a sink."""

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from clang.cindex import Cursor

from . import cursor_utils
from .facts import FileLocation, Reference, ReferenceKind, Symbol, SymbolKind, Target
from .file_tracker import PreprocessorFileTracker
from .sinks import FactSink


class FactEmitter:
    """Builds facts for one invocation.

    Every site location is routed through the file tracker, so facts are
    attributed to whatever file the tracker reports as current. Once the abort
    event is set every fact is dropped.
    """

    def __init__(
        self,
        sink: FactSink,
        tracker: PreprocessorFileTracker,
        abort_event: threading.Event,
        file_filter: Optional[Callable[[str], bool]] = None,
    ):
        self.sink = sink
        self.tracker = tracker
        self.abort_event = abort_event
        self.file_filter = file_filter
        self.symbol_count = 0
        self.reference_count = 0
        self._containers: List[str] = []

    @property
    def aborted(self) -> bool:
        return self.abort_event.is_set()

    @property
    def container_usr(self) -> str:
        return self._containers[-1] if self._containers else ""

    @contextmanager
    def container(self, cursor: Cursor) -> Iterator[None]:
        """Attribute references emitted inside the block to cursor."""
        self._containers.append(cursor_utils.usr_of(cursor))
        try:
            yield
        finally:
            self._containers.pop()

    def site_location(self, cursor: Cursor) -> Optional[FileLocation]:
        """Location of cursor in the tracker's current file."""
        location = cursor.location
        if location is None:
            return None
        current = self.tracker.observe(location.file.name if location.file else None)
        if current is None:
            return None
        return FileLocation(
            file=current,
            line=location.line,
            column=location.column,
            offset=location.offset,
        )

    def _accepts(self, location: Optional[FileLocation]) -> bool:
        if location is None or self.aborted:
            return False
        return self.file_filter is None or self.file_filter(location.file)

    def target_for(self, cursor: Optional[Cursor]) -> Optional[Target]:
        if cursor is None:
            return None
        kind = cursor_utils.safe_kind(cursor)
        return Target(
            qualified_name=cursor_utils.qualified_name(cursor),
            location=cursor_utils.location_of(cursor, self.tracker.working_directory),
            decl_kind=kind.name if kind is not None else "",
            usr=cursor_utils.usr_of(cursor),
        )

    def symbol(
        self,
        cursor: Cursor,
        kind: SymbolKind,
        definition: Optional[Cursor] = None,
        type_location: Optional[FileLocation] = None,
        type_name: str = "",
    ) -> Optional[Symbol]:
        """Emit a Symbol for a declaration cursor.

        Args:
            cursor: The declaration
            kind: Symbol kind to report
            definition: Defining occurrence; defaults to cursor.get_definition()
            type_location: Where the declared type is defined
            type_name: Spelling of the declared type

        Returns:
            The emitted Symbol, or None when it was filtered or dropped
        """
        location = self.site_location(cursor)
        if not self._accepts(location):
            return None

        if definition is None:
            definition = cursor.get_definition()
        decl_kind = cursor_utils.safe_kind(cursor)
        symbol = Symbol(
            qualified_name=cursor_utils.qualified_name(cursor),
            name=cursor.spelling or "",
            kind=kind,
            location=location,
            is_definition=cursor.is_definition(),
            usr=cursor_utils.usr_of(cursor),
            decl_kind=decl_kind.name if decl_kind is not None else "",
            definition=cursor_utils.location_of(definition, self.tracker.working_directory),
            type_location=type_location,
            type_name=type_name,
        )
        self.sink.symbol(symbol)
        self.symbol_count += 1
        return symbol

    def reference(
        self, kind: ReferenceKind, site: Cursor, target: Optional[Cursor]
    ) -> Optional[Reference]:
        """Emit a Reference from site to target (None when unresolved)."""
        location = self.site_location(site)
        if not self._accepts(location):
            return None

        reference = Reference(
            kind=kind,
            site=location,
            target=self.target_for(target),
            container_usr=self.container_usr,
        )
        self.sink.reference(reference)
        self.reference_count += 1
        return reference
