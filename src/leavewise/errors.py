"""Failures raised while extracting holidays from a document.

The set of failures is closed: every error is one of the subclasses below
and carries the matching :class:`ExtractionErrorKind`.
"""

from __future__ import annotations

import enum


class ExtractionErrorKind(enum.Enum):
    NO_DATES = "NO_DATES"
    SCANNED_PDF = "SCANNED_PDF"
    WORKER_FAILED = "WORKER_FAILED"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    PARSE_ERROR = "PARSE_ERROR"


class ExtractionError(Exception):
    """Base class; not raised directly."""

    kind: ExtractionErrorKind

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class NoDatesError(ExtractionError):
    kind = ExtractionErrorKind.NO_DATES


class ScannedPdfError(ExtractionError):
    kind = ExtractionErrorKind.SCANNED_PDF


class WorkerFailedError(ExtractionError):
    kind = ExtractionErrorKind.WORKER_FAILED


class UnsupportedFormatError(ExtractionError):
    kind = ExtractionErrorKind.UNSUPPORTED_FORMAT


class ParseError(ExtractionError):
    kind = ExtractionErrorKind.PARSE_ERROR
