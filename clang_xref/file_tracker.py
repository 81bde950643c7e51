"""Preprocessor file tracking for one parse.

libclang has no live preprocessor callbacks, so the driver replays the
events it can observe: the primary file is announced before anything else,
every inclusion directive recorded in the translation unit is fed to the
inclusion hook, and during the walk each cursor's file is routed through
``observe`` which raises a file-changed event whenever the file differs.

The tracker holds one piece of state, the current file (kept both as
reported by libclang and normalized). It belongs to a single invocation and
is never shared between threads.
"""

import os
from dataclasses import dataclass
from typing import Callable, Optional


def normalize_path(file_name: str, working_directory: Optional[str] = None) -> str:
    """Real path of a file name reported by libclang.

    Headers found through a relative include path are reported relative to
    the unit's working directory, not to the process cwd.
    """
    if working_directory and not os.path.isabs(file_name):
        file_name = os.path.join(working_directory, file_name)
    return os.path.realpath(file_name)


@dataclass(frozen=True)
class Inclusion:
    """An ``#include`` seen while parsing."""
    source: str  # File containing the directive
    included: str
    line: int
    column: int
    depth: int


class PreprocessorFileTracker:
    """Knows which physical file is current at any point of the walk."""

    def __init__(
        self,
        on_include: Optional[Callable[[Inclusion], None]] = None,
        working_directory: Optional[str] = None,
    ):
        self.working_directory = working_directory
        self._reported_name: Optional[str] = None
        self._current_file: Optional[str] = None
        self._on_include = on_include

    @property
    def current_file(self) -> Optional[str]:
        return self._current_file

    def file_changed(self, file_name: Optional[str]) -> None:
        """Record a new current file; an empty name clears it."""
        if not file_name:
            self._reported_name = None
            self._current_file = None
        else:
            self._reported_name = file_name
            self._current_file = normalize_path(file_name, self.working_directory)

    def inclusion_directive(self, inclusion: Inclusion) -> None:
        """Extension point for include-graph consumers. Emits no fact."""
        if self._on_include is not None:
            self._on_include(inclusion)

    def observe(self, file_name: Optional[str]) -> Optional[str]:
        """Route a location's file through the tracker and return the current file.

        A file-changed event is raised only when the reported name differs
        from the current one, so consecutive cursors in one file cost a
        string compare.
        """
        if file_name != self._reported_name:
            self.file_changed(file_name)
        return self._current_file
