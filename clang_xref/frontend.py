"""Front-end driver: one libclang parse per call."""

import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from . import diagnostics
from .compilation import CompilationUnit, SingleFileCompilationDatabase
from .errors import ParseFailure
from .file_tracker import Inclusion, PreprocessorFileTracker, normalize_path
from .indexer_config import IndexerConfig

try:
    from clang.cindex import Cursor, Index, TranslationUnit, TranslationUnitLoadError
except ImportError:
    diagnostics.fatal("clang package not found. Install with: pip install libclang")
    raise

# Severity levels: Ignored=0, Note=1, Warning=2, Error=3, Fatal=4
_SEVERITY_NAMES = {0: "ignored", 1: "note", 2: "warning", 3: "error", 4: "fatal"}
_SEVERITY_WARNING = 2
_SEVERITY_ERROR = 3
_SEVERITY_FATAL = 4

_SYSTEM_HEADER_PATTERNS = (
    "/usr/include/",
    "/usr/local/include/",
    "lib/clang/",  # Clang builtin headers (e.g., arm_acle.h, arm_neon.h)
    "/Library/Developer/CommandLineTools/",  # macOS
    "C:\\Program Files",  # Windows system
    "/opt/homebrew/",  # macOS Homebrew
)


def _is_system_header_diagnostic(diag) -> bool:
    """Check if a diagnostic originates from a system header."""
    if not diag.location.file:
        return False
    file_path = str(diag.location.file)
    return any(pattern in file_path for pattern in _SYSTEM_HEADER_PATTERNS)


def format_diagnostics(diagnostics_list, max_count: int = 5) -> str:
    """Format libclang diagnostics into a readable string.

    Args:
        diagnostics_list: List of libclang diagnostic objects
        max_count: Maximum number of diagnostics to include

    Returns:
        One "[severity] file:line:col: message" line per diagnostic
    """
    if not diagnostics_list:
        return ""

    messages = []
    for diag in diagnostics_list[:max_count]:
        if diag.location.file:
            location = f"{diag.location.file}:{diag.location.line}:{diag.location.column}"
        else:
            location = "unknown location"
        severity_name = _SEVERITY_NAMES.get(diag.severity, "unknown")
        messages.append(f"[{severity_name}] {location}: {diag.spelling}")

    total = len(diagnostics_list)
    if total > max_count:
        messages.append(f"... and {total - max_count} more")

    return "\n".join(messages)


@dataclass
class ParsedUnit:
    """A parsed translation unit together with its file tracker."""
    translation_unit: TranslationUnit
    unit: CompilationUnit
    tracker: PreprocessorFileTracker
    includes: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def root(self) -> Cursor:
        return self.translation_unit.cursor

    @staticmethod
    def format_location(cursor: Cursor) -> str:
        location = cursor.location
        file_name = location.file.name if location.file else "<unknown>"
        return f"{file_name}:{location.line}:{location.column}"


class FrontEndDriver:
    """Runs libclang over a CompilationUnit.

    Stateless between calls: every parse creates its own Index, database and
    tracker, so one driver may be shared by concurrent jobs.
    """

    def __init__(self, config: Optional[IndexerConfig] = None):
        self.config = config or IndexerConfig()

    def _extract_diagnostics(self, tu):
        """Split diagnostics into (fatal, errors, warnings).

        Errors from system headers are downgraded to warnings; they are
        usually compiler intrinsics libclang does not know about.
        """
        fatal, errors, warnings = [], [], []
        for diag in tu.diagnostics:
            severity = diag.severity
            if severity >= _SEVERITY_ERROR and _is_system_header_diagnostic(diag):
                warnings.append(diag)
            elif severity >= _SEVERITY_FATAL:
                fatal.append(diag)
            elif severity == _SEVERITY_ERROR:
                errors.append(diag)
            elif severity == _SEVERITY_WARNING:
                warnings.append(diag)
        return fatal, errors, warnings

    def parse(
        self,
        unit: CompilationUnit,
        on_include: Optional[Callable[[Inclusion], None]] = None,
    ) -> ParsedUnit:
        """Parse unit and replay its preprocessor events into a fresh tracker.

        Raises:
            ParseFailure: The file is missing, libclang gave up, or a fatal
                          diagnostic was produced (unless fail_on_fatal is off)
        """
        source_file = unit.source_file
        if not unit.has_unsaved_content and not os.path.exists(source_file):
            error_msg = f"Source file does not exist: {source_file}"
            diagnostics.error(error_msg)
            raise ParseFailure(source_file, error_msg)

        database = SingleFileCompilationDatabase(unit)
        command = database.get_all_compile_commands()[0]

        tracker = PreprocessorFileTracker(on_include=on_include, working_directory=unit.working_directory)
        tracker.file_changed(source_file)

        try:
            tu = Index.create().parse(
                command.filename,
                args=list(command.arguments),
                unsaved_files=list(command.mapped_sources) or None,
                options=self.config.get_parse_options(),
            )
        except TranslationUnitLoadError as e:
            diagnostics.error(f"Failed to parse {source_file}")
            diagnostics.error(f"  Error: TranslationUnitLoadError: {e}")
            diagnostics.error(f"  Compilation args ({len(command.arguments)} total):")
            for i, arg in enumerate(command.arguments[:10]):
                diagnostics.error(f"    [{i}] {arg}")
            raise ParseFailure(source_file, f"TranslationUnitLoadError: {e}") from e

        fatal, errors, warnings = self._extract_diagnostics(tu)
        if fatal and self.config.get_fail_on_fatal():
            summary = format_diagnostics(fatal + errors, max_count=5)
            diagnostics.error(f"{source_file}: fatal error(s):\n{summary}")
            raise ParseFailure(source_file, summary)

        errors = fatal + errors
        if errors:
            formatted = format_diagnostics(errors, max_count=5)
            # libclang provides a usable partial AST even with errors
            diagnostics.warning(f"{source_file}: Continuing despite {len(errors)} error(s):\n{formatted}")
        if warnings:
            formatted = format_diagnostics(warnings, max_count=3)
            diagnostics.debug(f"{source_file}: {len(warnings)} warning(s):\n{formatted}")

        includes = []
        for inclusion in tu.get_includes():
            included = normalize_path(inclusion.include.name, unit.working_directory)
            includes.append(included)
            tracker.inclusion_directive(
                Inclusion(
                    source=normalize_path(inclusion.source.name, unit.working_directory),
                    included=included,
                    line=inclusion.location.line,
                    column=inclusion.location.column,
                    depth=inclusion.depth,
                )
            )

        return ParsedUnit(
            translation_unit=tu,
            unit=unit,
            tracker=tracker,
            includes=includes,
            errors=[format_diagnostics([d]) for d in errors],
            warnings=[format_diagnostics([d]) for d in warnings],
        )
