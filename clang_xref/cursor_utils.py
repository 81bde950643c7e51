"""Helpers over libclang cursors shared by the visitors and the emitter."""

from typing import FrozenSet, Optional

from clang.cindex import Cursor, CursorKind

from . import diagnostics
from .facts import FileLocation
from .file_tracker import normalize_path


def kinds(*names: str) -> FrozenSet[CursorKind]:
    """Collect the named cursor kinds that the installed bindings define.

    Older bindings lack some kinds (STATIC_ASSERT, FRIEND_DECL, CONCEPT_DECL);
    a missing name simply drops out of the set.
    """
    return frozenset(getattr(CursorKind, name) for name in names if hasattr(CursorKind, name))


FUNCTION_KINDS = kinds(
    "FUNCTION_DECL",
    "CXX_METHOD",
    "CONSTRUCTOR",
    "DESTRUCTOR",
    "CONVERSION_FUNCTION",
    "FUNCTION_TEMPLATE",
)
RECORD_KINDS = kinds("STRUCT_DECL", "CLASS_DECL", "UNION_DECL")
# Declarations a declarator can define inline: `struct S { ... } v;`
TAG_KINDS = RECORD_KINDS | kinds("ENUM_DECL")
CLASS_TEMPLATE_KINDS = kinds("CLASS_TEMPLATE", "CLASS_TEMPLATE_PARTIAL_SPECIALIZATION")
TEMPLATE_PARAMETER_KINDS = kinds(
    "TEMPLATE_TYPE_PARAMETER",
    "TEMPLATE_NON_TYPE_PARAMETER",
    "TEMPLATE_TEMPLATE_PARAMETER",
)
TYPE_REFERENCE_KINDS = kinds("TYPE_REF", "TEMPLATE_REF")

# Declaration contexts whose names make up a qualified name
_SCOPE_KINDS = (
    FUNCTION_KINDS
    | RECORD_KINDS
    | CLASS_TEMPLATE_KINDS
    | kinds("NAMESPACE", "ENUM_DECL")
)
_IMPLICIT_MEMBER_KINDS = kinds("CONSTRUCTOR", "DESTRUCTOR", "CXX_METHOD")


def safe_kind(cursor: Cursor) -> Optional[CursorKind]:
    """Return the cursor kind, or None when the bindings do not know it.

    This can happen when the libclang library supports newer language
    features than the Python bindings' cursor kind enum.
    """
    try:
        return cursor.kind
    except ValueError as e:
        diagnostics.debug(f"Skipping cursor with unknown kind: {e}")
        return None


def is_declaration(cursor: Cursor) -> bool:
    kind = safe_kind(cursor)
    return kind is not None and kind.is_declaration()


def file_name(cursor: Cursor) -> Optional[str]:
    """Name of the file holding the cursor's expansion location."""
    location = cursor.location
    if location is None or location.file is None:
        return None
    return location.file.name


def location_of(
    cursor: Optional[Cursor], working_directory: Optional[str] = None
) -> Optional[FileLocation]:
    """Canonical location of a cursor, or None for builtin/implicit ones.

    Relative file names are taken relative to working_directory.
    """
    if cursor is None:
        return None
    location = cursor.location
    if location is None or location.file is None:
        return None
    return FileLocation(
        file=normalize_path(location.file.name, working_directory),
        line=location.line,
        column=location.column,
        offset=location.offset,
    )


def is_anonymous(cursor: Cursor) -> bool:
    spelling = cursor.spelling or ""
    return not spelling or "(unnamed" in spelling or "(anonymous" in spelling


def _scope_name(cursor: Cursor) -> str:
    if not is_anonymous(cursor):
        return cursor.spelling
    if cursor.kind == CursorKind.NAMESPACE:
        return "(anonymous namespace)"
    return "(anonymous)"


def qualified_name(cursor: Cursor) -> str:
    """Build ``outer::inner::name`` from the cursor's semantic parents."""
    parts = [cursor.spelling or ""]
    parent = cursor.semantic_parent
    while parent is not None:
        kind = safe_kind(parent)
        if kind is None or kind == CursorKind.TRANSLATION_UNIT:
            break
        # Enumerators of an anonymous enum live in the enclosing scope
        if kind in _SCOPE_KINDS and not (kind == CursorKind.ENUM_DECL and is_anonymous(parent)):
            parts.append(_scope_name(parent))
        parent = parent.semantic_parent
    return "::".join(reversed(parts))


def usr_of(cursor: Cursor) -> str:
    return cursor.get_usr() or ""


def variable_definition(cursor: Optional[Cursor]) -> Optional[Cursor]:
    """Substitute a variable declaration by its definition when one exists."""
    if cursor is None:
        return None
    if safe_kind(cursor) == CursorKind.VAR_DECL:
        definition = cursor.get_definition()
        if definition is not None:
            return definition
    return cursor


def is_local(cursor: Cursor) -> bool:
    """True for parameters, template parameters and function-local variables."""
    kind = safe_kind(cursor)
    if kind == CursorKind.PARM_DECL or kind in TEMPLATE_PARAMETER_KINDS:
        return True
    if kind != CursorKind.VAR_DECL:
        return False
    parent = cursor.semantic_parent
    return parent is not None and safe_kind(parent) in FUNCTION_KINDS


def _position(cursor: Cursor):
    location = cursor.location
    return (file_name(cursor), location.line, location.column)


def is_implicit_function_declaration(cursor: Cursor) -> bool:
    """True for a function the compiler declared at its first call.

    C before C99 lets `undeclared_fn();` declare the function implicitly.
    That declaration spans only the name token, while a written function
    declaration always covers its parameter list or a leading type.
    """
    if safe_kind(cursor) != CursorKind.FUNCTION_DECL:
        return False
    canonical = cursor.canonical
    location = canonical.location
    extent = canonical.extent
    if extent is None or location.file is None:
        return False
    return (
        extent.start.offset == location.offset
        and extent.end.offset - extent.start.offset <= len(canonical.spelling or "")
    )


def is_implicit_member(cursor: Cursor) -> bool:
    """True for compiler-generated special members.

    Implicit constructors, destructors and assignment operators are declared
    at the class name's location, which no user-written member shares. A
    lambda's call operator sits at its closure's location too but is written
    by the user.
    """
    if safe_kind(cursor) not in _IMPLICIT_MEMBER_KINDS or cursor.spelling == "operator()":
        return False
    parent = cursor.semantic_parent
    if parent is None:
        return False
    return _position(cursor) == _position(parent)
