"""Statement/expression visitor: walks function bodies and initializers.

The walk uses an explicit stack, so arbitrarily deep expression trees (long
operator chains, generated code) cannot hit the interpreter's recursion limit.
"""

from typing import Callable, Dict, List, Optional, Tuple

from clang.cindex import Cursor, CursorKind

from . import cursor_utils
from .emitter import FactEmitter
from .facts import ReferenceKind
from .indexer_config import IndexerConfig

# A pending node and the declaration whose name reference must not be re-emitted
Frame = Tuple[Cursor, Optional[Cursor]]


class StatementVisitor:
    """Emits references found in statements and expressions.

    Declarations met on the way (declaration statements, lambda parameters,
    condition variables) are handed to visit_decl, the same entry point the
    traversal coordinator uses, so each is visited exactly once.
    """

    def __init__(
        self,
        emitter: FactEmitter,
        visit_decl: Callable[[Cursor], None],
        config: IndexerConfig,
    ):
        self.emitter = emitter
        self.visit_decl = visit_decl
        self.index_locals = config.get_index_locals()
        self.index_type_references = config.get_index_type_references()
        self._handlers: Dict[CursorKind, Callable[[Cursor, Optional[Cursor]], Optional[Cursor]]] = {
            CursorKind.DECL_REF_EXPR: self._variable_read,
            CursorKind.MEMBER_REF_EXPR: self._member_access,
        }
        for kind in cursor_utils.TYPE_REFERENCE_KINDS:
            self._handlers[kind] = self._type_use

    def visit(self, cursor: Optional[Cursor]) -> None:
        if cursor is None:
            return
        stack: List[Frame] = [(cursor, None)]
        while stack:
            if self.emitter.aborted:
                return
            node, suppress = stack.pop()
            kind = cursor_utils.safe_kind(node)

            if kind == CursorKind.DECL_STMT:
                for child in node.get_children():
                    self.visit_decl(child)
                continue
            if kind is not None and kind.is_declaration():
                self.visit_decl(node)
                continue
            if kind == CursorKind.CALL_EXPR:
                stack.extend(reversed(self._call(node)))
                continue

            handler = self._handlers.get(kind) if kind is not None else None
            if handler is not None:
                suppress = handler(node, suppress)
            stack.extend((child, suppress) for child in reversed(list(node.get_children())))

    def _skip_target(self, referenced: Optional[Cursor]) -> bool:
        return referenced is None or (not self.index_locals and cursor_utils.is_local(referenced))

    def _name_reference(
        self, kind: ReferenceKind, node: Cursor, suppress: Optional[Cursor]
    ) -> Optional[Cursor]:
        referenced = node.referenced
        if suppress is not None and referenced is not None and referenced == suppress:
            # The callee's own name; its operands (the object expression) are fair game
            return None
        if not self._skip_target(referenced):
            self.emitter.reference(kind, node, cursor_utils.variable_definition(referenced))
        return suppress

    def _variable_read(self, node: Cursor, suppress: Optional[Cursor]) -> Optional[Cursor]:
        return self._name_reference(ReferenceKind.VARIABLE_READ, node, suppress)

    def _member_access(self, node: Cursor, suppress: Optional[Cursor]) -> Optional[Cursor]:
        return self._name_reference(ReferenceKind.MEMBER_ACCESS, node, suppress)

    def _type_use(self, node: Cursor, suppress: Optional[Cursor]) -> Optional[Cursor]:
        if self.index_type_references:
            self.emitter.reference(ReferenceKind.TYPE_USE, node, node.referenced)
        return suppress

    def _call(self, node: Cursor) -> List[Frame]:
        """Emit the call reference and return the child frames to visit."""
        referenced = node.referenced
        if referenced is not None and cursor_utils.is_implicit_function_declaration(referenced):
            # Only a definition later in the unit makes the call resolvable
            self.emitter.reference(ReferenceKind.CALL, node, referenced.get_definition())
        elif referenced is None:
            self.emitter.reference(ReferenceKind.CALL, node, None)
        elif not cursor_utils.is_implicit_member(referenced):
            if cursor_utils.safe_kind(referenced) in cursor_utils.FUNCTION_KINDS:
                target = referenced.canonical
            else:
                target = cursor_utils.variable_definition(referenced)
            if not self._skip_target(referenced):
                self.emitter.reference(ReferenceKind.CALL, node, target)

        arguments = list(node.get_arguments())
        frames = []
        for child in node.get_children():
            if child in arguments:
                frames.append((child, None))
            else:
                frames.append((child, referenced))
        return frames
