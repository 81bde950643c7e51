"""Exception types raised by the indexer."""


class ClangXrefError(Exception):
    """Base class for indexer errors."""


class ParseFailure(ClangXrefError):
    """libclang could not produce a usable translation unit.

    Attributes:
        source_file: The file that failed to parse
        summary: Human-readable diagnostic summary
    """

    def __init__(self, source_file: str, summary: str):
        super().__init__(f"{source_file}: {summary}")
        self.source_file = source_file
        self.summary = summary
