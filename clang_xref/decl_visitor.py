"""Declaration visitor: one handler per declaration cursor kind."""

from typing import Callable, Dict

from clang.cindex import Cursor, CursorKind

from . import cursor_utils, diagnostics
from .emitter import FactEmitter
from .facts import ReferenceKind, SymbolKind
from .indexer_config import IndexerConfig
from .stmt_visitor import StatementVisitor
from .type_resolver import TypeResolver

Handler = Callable[[Cursor], None]

_STRUCTURAL_KINDS = cursor_utils.kinds(
    "LINKAGE_SPEC",
    "CXX_ACCESS_SPEC_DECL",
    "FRIEND_DECL",
    "USING_DIRECTIVE",
    "USING_DECLARATION",
    "UNEXPOSED_DECL",
)


class DeclarationVisitor:
    """Emits Symbols for declarations and hands their operands to the StatementVisitor.

    visit() is called once per declaration cursor by the traversal
    coordinator; it never descends into member declarations itself.
    """

    def __init__(
        self,
        emitter: FactEmitter,
        statements: StatementVisitor,
        type_resolver: TypeResolver,
        config: IndexerConfig,
    ):
        self.emitter = emitter
        self.statements = statements
        self.type_resolver = type_resolver
        self.index_locals = config.get_index_locals()
        self.index_type_references = config.get_index_type_references()
        self._handlers = self._build_handlers()

    def _build_handlers(self) -> Dict[CursorKind, Handler]:
        handlers: Dict[CursorKind, Handler] = {}
        for kind in cursor_utils.FUNCTION_KINDS:
            handlers[kind] = self._visit_function
        for kind in cursor_utils.RECORD_KINDS:
            handlers[kind] = self._named(SymbolKind.RECORD)
        for kind in cursor_utils.CLASS_TEMPLATE_KINDS | cursor_utils.kinds("TYPE_ALIAS_TEMPLATE_DECL"):
            handlers[kind] = self._named(SymbolKind.TEMPLATE)
        for kind in cursor_utils.TEMPLATE_PARAMETER_KINDS | _STRUCTURAL_KINDS:
            handlers[kind] = self._visit_operands
        for kind in cursor_utils.kinds("TYPEDEF_DECL", "TYPE_ALIAS_DECL"):
            handlers[kind] = self._visit_typedef
        for kind in cursor_utils.kinds("STATIC_ASSERT"):
            handlers[kind] = self._visit_operands

        handlers[CursorKind.ENUM_DECL] = self._named(SymbolKind.ENUM)
        handlers[CursorKind.NAMESPACE] = self._named(SymbolKind.NAMESPACE)
        handlers[CursorKind.NAMESPACE_ALIAS] = self._named(SymbolKind.NAMESPACE_ALIAS)
        handlers[CursorKind.ENUM_CONSTANT_DECL] = self._named(SymbolKind.ENUM_CONSTANT)
        handlers[CursorKind.VAR_DECL] = self._visit_variable
        handlers[CursorKind.FIELD_DECL] = self._visit_variable
        handlers[CursorKind.PARM_DECL] = self._visit_variable
        return handlers

    def visit(self, cursor: Cursor) -> None:
        if cursor is None or self.emitter.aborted:
            return
        kind = cursor_utils.safe_kind(cursor)
        if kind is None:
            return
        handler = self._handlers.get(kind)
        if handler is None:
            diagnostics.debug(f"No declaration handler for {kind.name}")
            return
        handler(cursor)

    def _named(self, symbol_kind: SymbolKind) -> Handler:
        """Handler emitting symbol_kind for named declarations."""

        def handler(cursor: Cursor) -> None:
            if not cursor_utils.is_anonymous(cursor):
                self.emitter.symbol(cursor, symbol_kind)
            self._visit_operands(cursor)

        return handler

    def _visit_operands(self, cursor: Cursor) -> None:
        """Visit the expressions hanging off a declaration.

        Initializers, bit widths, array bounds, default arguments and
        static_assert operands all show up as direct expression children.
        """
        for child in cursor.get_children():
            kind = cursor_utils.safe_kind(child)
            if kind is None:
                continue
            if kind in cursor_utils.TYPE_REFERENCE_KINDS:
                if self.index_type_references:
                    self.emitter.reference(ReferenceKind.TYPE_USE, child, child.referenced)
            elif kind == CursorKind.CXX_BASE_SPECIFIER:
                if self.index_type_references:
                    self._base_type_references(child)
            elif kind.is_expression() or kind.is_statement():
                self.statements.visit(child)

    def _base_type_references(self, base: Cursor) -> None:
        for child in base.get_children():
            if cursor_utils.safe_kind(child) in cursor_utils.TYPE_REFERENCE_KINDS:
                self.emitter.reference(ReferenceKind.TYPE_USE, child, child.referenced)

    def _visit_function(self, cursor: Cursor) -> None:
        self.emitter.symbol(cursor, SymbolKind.FUNCTION)

        is_constructor = cursor.kind == CursorKind.CONSTRUCTOR
        name_offset = cursor.location.offset
        with self.emitter.container(cursor):
            for child in cursor.get_children():
                if self.emitter.aborted:
                    return
                kind = cursor_utils.safe_kind(child)
                if kind is None:
                    continue
                if is_constructor and kind == CursorKind.MEMBER_REF:
                    # Member initializer: `x(0)` names the field
                    self.emitter.reference(ReferenceKind.MEMBER_ACCESS, child, child.referenced)
                elif kind in cursor_utils.TYPE_REFERENCE_KINDS:
                    if is_constructor and child.location.offset > name_offset:
                        # Base or delegating initializer
                        self.emitter.reference(ReferenceKind.TYPE_USE, child, child.referenced)
                    elif self.index_type_references:
                        self.emitter.reference(ReferenceKind.TYPE_USE, child, child.referenced)
                elif kind.is_expression() or kind.is_statement():
                    self.statements.visit(child)

    def _visit_variable(self, cursor: Cursor) -> None:
        if self.index_locals or not cursor_utils.is_local(cursor):
            if cursor.kind == CursorKind.FIELD_DECL:
                symbol_kind = SymbolKind.FIELD
            else:
                symbol_kind = SymbolKind.VARIABLE
            self.emitter.symbol(
                cursor,
                symbol_kind,
                definition=cursor_utils.variable_definition(cursor),
                type_location=self.type_resolver.resolve_location(cursor.type),
                type_name=cursor.type.spelling,
            )
        self._visit_operands(cursor)

    def _visit_typedef(self, cursor: Cursor) -> None:
        aliased = cursor.underlying_typedef_type
        self.emitter.symbol(
            cursor,
            SymbolKind.TYPEDEF,
            type_location=self.type_resolver.resolve_location(aliased),
            type_name=aliased.spelling,
        )
        self._visit_operands(cursor)
