"""Pull holiday dates out of a holiday calendar document.

Company holiday lists are usually one holiday per line, in whatever date
format the HR team prefers.  Documents are UTF-8 text or PDFs with a text
layer (read with ``pypdf``).  The extractor recognises:

  * ``M/D/YYYY`` and ``D-M-YYYY`` (day first when the first part is > 12)
  * ``YYYY-MM-DD``
  * ``Month DD, YYYY``
  * ``DD Month YYYY``

and takes the first capitalised words on the same line as the holiday name.
"""

from __future__ import annotations

import datetime
import io
import re
import threading
from typing import NamedTuple

from loguru import logger
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from leavewise.errors import (
    NoDatesError,
    ParseError,
    ScannedPdfError,
    UnsupportedFormatError,
    WorkerFailedError,
)

MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_CALENDAR_WORDS = frozenset(
    [
        *MONTHS,
        "january",
        "february",
        "march",
        "april",
        "june",
        "july",
        "august",
        "sept",
        "september",
        "october",
        "november",
        "december",
        "mon",
        "tue",
        "wed",
        "thu",
        "fri",
        "sat",
        "sun",
        "monday",
        "tuesday",
        "wednesday",
        "thursday",
        "friday",
        "saturday",
        "sunday",
    ]
)

_MONTH = r"(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?"

_PATTERN_SOURCES: list[tuple[str, str]] = [
    ("numeric", r"\b(\d{1,2})[-/](\d{1,2})[-/](\d{2,4})\b"),
    ("iso", r"\b(\d{4})[-/](\d{1,2})[-/](\d{1,2})\b"),
    ("month_first", rf"\b{_MONTH}\s+(\d{{1,2}}),?\s+(\d{{4}})\b"),
    ("day_first", rf"\b(\d{{1,2}})\s+{_MONTH}\s+(\d{{4}})\b"),
]

_NAME_RE = re.compile(r"([A-Z][a-z']+\.?(?:\s+[A-Z][a-z']+\.?)*)")


class ParsedHoliday(NamedTuple):
    date: datetime.date
    name: str | None = None


def _year(raw: str) -> int:
    value = int(raw)
    return value + 2000 if value < 100 else value


def _to_date(kind: str, match: re.Match[str]) -> datetime.date:
    """Build a date from a pattern match; raises ``ValueError`` if impossible."""
    g = match.groups()
    if kind == "numeric":
        first, second, year = int(g[0]), int(g[1]), _year(g[2])
        if first > 12:
            return datetime.date(year, second, first)
        return datetime.date(year, first, second)
    if kind == "iso":
        return datetime.date(int(g[0]), int(g[1]), int(g[2]))
    if kind == "month_first":
        return datetime.date(int(g[2]), MONTHS[g[0][:3].lower()], int(g[1]))
    return datetime.date(int(g[2]), MONTHS[g[1][:3].lower()], int(g[0]))


def _is_calendar_word(word: str) -> bool:
    return word.rstrip(".").lower() in _CALENDAR_WORDS


def _guess_name(line: str, match: re.Match[str]) -> str | None:
    rest = f"{line[: match.start()]} {line[match.end():]}"
    for run in _NAME_RE.finditer(rest):
        words = run.group(1).split()
        while words and _is_calendar_word(words[0]):
            words.pop(0)
        if words:
            return " ".join(words).rstrip(".")
    return None


def _pdf_text(data: bytes, filename: str) -> str:
    """Join the text of every page; raises when the PDF has none or is unreadable."""
    detail = filename or None
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError, KeyError) as exc:
        raise WorkerFailedError("The PDF could not be read.", str(exc)) from exc

    text = "\n".join(pages)
    logger.debug(f"Read {len(text)} characters from {len(pages)} PDF page(s)")
    if not text.strip():
        raise ScannedPdfError(
            "The PDF looks like a scanned image and has no readable text.", detail
        )
    return text


def _decode(data: bytes, filename: str) -> str:
    detail = filename or None
    if data.startswith(b"%PDF"):
        return _pdf_text(data, filename)
    if b"\x00" in data:
        raise UnsupportedFormatError("Binary documents are not supported.", detail)
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError("The document is not valid UTF-8 text.", str(exc)) from exc


class HolidayExtractor:
    """Reusable extractor handle.

    The date patterns are compiled on first use; concurrent first callers
    wait for a single initialisation.  *window* is an optional inclusive
    ``(first, last)`` range outside of which dates are dropped.
    """

    def __init__(self, window: tuple[datetime.date, datetime.date] | None = None):
        self.window = window
        self._patterns: list[tuple[str, re.Pattern[str]]] | None = None
        self._lock = threading.Lock()

    def _compiled(self) -> list[tuple[str, re.Pattern[str]]]:
        with self._lock:
            if self._patterns is None:
                try:
                    self._patterns = [
                        (kind, re.compile(src, re.IGNORECASE))
                        for kind, src in _PATTERN_SOURCES
                    ]
                except re.error as exc:
                    raise WorkerFailedError(
                        "The date extractor could not be initialised.", str(exc)
                    ) from exc
                logger.debug(f"Compiled {len(self._patterns)} date patterns")
            return self._patterns

    def _in_window(self, d: datetime.date) -> bool:
        if self.window is None:
            return True
        first, last = self.window
        return first <= d <= last

    def extract(self, data: bytes, filename: str = "") -> list[ParsedHoliday]:
        """Return the holidays found in *data*, sorted and de-duplicated by day.

        Raises an :class:`~leavewise.errors.ExtractionError` subclass when the
        document cannot be read or holds no usable dates.
        """
        text = _decode(data, filename)
        patterns = self._compiled()

        found: dict[datetime.date, ParsedHoliday] = {}
        for line in text.splitlines():
            for kind, pattern in patterns:
                for match in pattern.finditer(line):
                    try:
                        d = _to_date(kind, match)
                    except ValueError:
                        logger.debug(f"Skipping invalid date {match.group(0)!r}")
                        continue
                    if not self._in_window(d) or d in found:
                        continue
                    found[d] = ParsedHoliday(d, _guess_name(line, match))

        if not found:
            raise NoDatesError("No holiday dates were found in the document.", filename or None)

        logger.debug(f"Extracted {len(found)} holidays from {filename or 'document'}")
        return sorted(found.values(), key=lambda h: h.date)
