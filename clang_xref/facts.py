"""Fact data structures emitted by the indexer."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class SymbolKind(str, Enum):
    """Kinds of indexable declarations."""
    FUNCTION = "function"
    VARIABLE = "variable"
    FIELD = "field"
    RECORD = "record"
    ENUM = "enum"
    ENUM_CONSTANT = "enum_constant"
    NAMESPACE = "namespace"
    NAMESPACE_ALIAS = "namespace_alias"
    TYPEDEF = "typedef"
    TEMPLATE = "template"


class ReferenceKind(str, Enum):
    """Kinds of use-site facts."""
    CALL = "call"
    MEMBER_ACCESS = "member_access"
    VARIABLE_READ = "variable_read"
    TYPE_USE = "type_use"


@dataclass(frozen=True)
class FileLocation:
    """A position in a physical file (path is normalized with realpath)."""
    file: str
    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "offset": self.offset,
        }


@dataclass(frozen=True)
class Target:
    """The declaration a reference resolves to."""
    qualified_name: str
    location: Optional[FileLocation]
    decl_kind: str  # libclang cursor kind name, e.g. "FIELD_DECL"
    usr: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "qualified_name": self.qualified_name,
            "location": self.location.to_dict() if self.location else None,
            "decl_kind": self.decl_kind,
            "usr": self.usr,
        }


@dataclass
class Symbol:
    """A declaration occurrence found in a translation unit."""
    qualified_name: str
    name: str
    kind: SymbolKind
    location: FileLocation
    is_definition: bool = False
    usr: str = ""  # Unified Symbol Resolution - unique identifier
    decl_kind: str = ""
    definition: Optional[FileLocation] = None  # Defining occurrence reachable from this node
    type_location: Optional[FileLocation] = None  # Where the declared type is defined
    type_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "type": "symbol",
            "qualified_name": self.qualified_name,
            "name": self.name,
            "kind": self.kind.value,
            "location": self.location.to_dict(),
            "is_definition": self.is_definition,
            "usr": self.usr,
            "decl_kind": self.decl_kind,
            "definition": self.definition.to_dict() if self.definition else None,
            "type_location": self.type_location.to_dict() if self.type_location else None,
            "type_name": self.type_name,
        }


@dataclass
class Reference:
    """A use site and, when the front-end resolved it, the referenced declaration."""
    kind: ReferenceKind
    site: FileLocation
    target: Optional[Target] = None
    container_usr: str = ""  # USR of the enclosing function, "" at file scope

    @property
    def is_resolved(self) -> bool:
        return self.target is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "type": "reference",
            "kind": self.kind.value,
            "site": self.site.to_dict(),
            "target": self.target.to_dict() if self.target else None,
            "container_usr": self.container_usr,
        }
