"""
commscope/errors.py
Exception taxonomy. Soft failures (unmatched lines, empty identities,
empty names) are never raised - they are skipped by the extractor.
"""


class CommScopeError(Exception):
    """Base class for every error raised by commscope."""


class MalformedSheetError(CommScopeError, ValueError):
    """Header row missing or not a sequence of strings. Aborts the load."""


class ReadFailure(CommScopeError, OSError):
    """The source file could not be read or decoded as a workbook."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause
