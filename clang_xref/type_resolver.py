"""Locates the declaration that canonically defines a type.

Used for go-to-type-definition: a variable of type ``const Widget *&`` should
point at ``Widget``'s definition, a ``std::vector<T>`` at the class template.
"""

from typing import List, Optional

from clang.cindex import Cursor, CursorKind, Type, TypeKind

from . import cursor_utils, diagnostics
from .facts import FileLocation

_INDIRECT_KINDS = (TypeKind.POINTER, TypeKind.LVALUEREFERENCE, TypeKind.RVALUEREFERENCE)
_REFERENCE_KINDS = (TypeKind.LVALUEREFERENCE, TypeKind.RVALUEREFERENCE)

_TEMPLATE_DECL_KINDS = cursor_utils.kinds(
    "CLASS_TEMPLATE",
    "CLASS_TEMPLATE_PARTIAL_SPECIALIZATION",
    "TYPE_ALIAS_TEMPLATE_DECL",
    "TEMPLATE_TEMPLATE_PARAMETER",
)


def _type_kind(clang_type: Type) -> Optional[TypeKind]:
    try:
        return clang_type.kind
    except ValueError as e:
        diagnostics.debug(f"Unknown type kind: {e}")
        return None


def _declaration(clang_type: Type) -> Optional[Cursor]:
    declaration = clang_type.get_declaration()
    if declaration is None or cursor_utils.safe_kind(declaration) in (None, CursorKind.NO_DECL_FOUND):
        return None
    return declaration


def _record_declaration(clang_type: Type) -> Optional[Cursor]:
    """Declaration of a struct/class/union type, preferring its definition."""
    canonical = clang_type.get_canonical()
    if _type_kind(canonical) != TypeKind.RECORD:
        return None
    declaration = _declaration(canonical)
    if declaration is None:
        return None
    return declaration.get_definition() or declaration


def _template_declaration(clang_type: Type) -> Optional[Cursor]:
    declaration = _declaration(clang_type)
    if declaration is not None and declaration.kind in _TEMPLATE_DECL_KINDS:
        return declaration
    return None


class TypeResolver:
    """Resolves types to their defining declarations.

    Each resolution keeps its own list of visited types (libclang types are
    comparable but not hashable) and stops at max_depth, so it terminates on
    self-referential types. Holding no per-call state, one resolver can serve
    a whole traversal.
    """

    def __init__(self, max_depth: int = 32, working_directory: Optional[str] = None):
        self.max_depth = max_depth
        self.working_directory = working_directory

    def resolve_location(self, clang_type: Optional[Type]) -> Optional[FileLocation]:
        return cursor_utils.location_of(self.resolve_declaration(clang_type), self.working_directory)

    def resolve_declaration(self, clang_type: Optional[Type]) -> Optional[Cursor]:
        if clang_type is None:
            return None
        return self._resolve(clang_type, [], 0)

    def _resolve(self, clang_type: Type, visited: List[Type], depth: int) -> Optional[Cursor]:
        if depth > self.max_depth:
            diagnostics.debug(
                f"Type resolution of '{clang_type.spelling}' stopped at depth {self.max_depth}"
            )
            return None
        if clang_type in visited:
            return None
        visited.append(clang_type)

        kind = _type_kind(clang_type)
        if kind is None or kind == TypeKind.INVALID:
            return None

        record = _record_declaration(clang_type)
        if record is not None:
            return record

        if kind in _INDIRECT_KINDS:
            record = _record_declaration(clang_type.get_pointee())
            if record is not None:
                return record

        if kind == TypeKind.POINTER:
            return self._resolve_pointee(clang_type, visited, depth)

        template = _template_declaration(clang_type)
        if template is not None:
            return template

        if kind in _REFERENCE_KINDS:
            return self._resolve_pointee(clang_type, visited, depth)

        canonical = clang_type.get_canonical()
        if canonical == clang_type:
            return None
        return self._resolve(canonical, visited, depth + 1)

    def _resolve_pointee(self, clang_type: Type, visited: List[Type], depth: int) -> Optional[Cursor]:
        pointee = clang_type.get_pointee().get_canonical()
        if pointee == clang_type:
            return None
        return self._resolve(pointee, visited, depth + 1)
