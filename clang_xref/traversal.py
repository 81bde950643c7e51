"""Traversal coordinator: drives visitation from the translation-unit root."""

import threading
from typing import Callable, Optional, Set, Tuple

from clang.cindex import Cursor

from . import cursor_utils
from .decl_visitor import DeclarationVisitor
from .emitter import FactEmitter
from .file_tracker import PreprocessorFileTracker
from .indexer_config import IndexerConfig
from .sinks import FactSink
from .stmt_visitor import StatementVisitor
from .type_resolver import TypeResolver


class TraversalCoordinator:
    """Walks declarations and dispatches each one to the DeclarationVisitor.

    The generic walk only descends through declaration cursors. Function
    bodies and initializers belong to the StatementVisitor, which hands any
    declaration it meets back to traverse_decl, so every declaration is
    visited exactly once.
    """

    def __init__(
        self,
        sink: FactSink,
        tracker: PreprocessorFileTracker,
        config: IndexerConfig,
        abort_event: Optional[threading.Event] = None,
        file_filter: Optional[Callable[[str], bool]] = None,
    ):
        self.tracker = tracker
        self.abort_event = abort_event or threading.Event()
        self.emitter = FactEmitter(sink, tracker, self.abort_event, file_filter)
        self._visited_tags: Set[Tuple[str, Optional[str], int]] = set()
        self.statements = StatementVisitor(self.emitter, self.traverse_decl, config)
        self.declarations = DeclarationVisitor(
            self.emitter,
            self.statements,
            TypeResolver(
                max_depth=config.get_max_type_depth(),
                working_directory=tracker.working_directory,
            ),
            config,
        )

    @property
    def aborted(self) -> bool:
        return self.abort_event.is_set()

    def abort(self) -> None:
        """Stop dispatching; the walk unwinds without emitting anything further."""
        self.abort_event.set()

    def run(self, root: Cursor) -> None:
        self.traverse_decl(root)

    def traverse_decl(self, cursor: Optional[Cursor]) -> None:
        if cursor is None or self.aborted:
            return
        file_name = cursor_utils.file_name(cursor)
        if file_name:
            self.tracker.observe(file_name)

        kind = cursor_utils.safe_kind(cursor)
        if kind in cursor_utils.TAG_KINDS and self._seen_tag_definition(cursor, file_name):
            return
        if kind is not None:
            self.declarations.visit(cursor)

        for child in cursor.get_children():
            if self.aborted:
                return
            child_kind = cursor_utils.safe_kind(child)
            # Cursors the bindings cannot name are walked through transparently
            if child_kind is None or child_kind.is_declaration():
                self.traverse_decl(child)

    def _seen_tag_definition(self, cursor: Cursor, file_name: Optional[str]) -> bool:
        """True when this record or enum definition was already traversed.

        libclang reports a tag defined inside a declarator twice: beside the
        declarator and again among its children (`typedef struct {...} T;`,
        `struct S {...} v;`, the same inside a DECL_STMT).
        """
        if not cursor.is_definition():
            return False
        key = (cursor_utils.usr_of(cursor), file_name, cursor.extent.start.offset)
        if key in self._visited_tags:
            return True
        self._visited_tags.add(key)
        return False
