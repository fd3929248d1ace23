"""
Stage 1: Read Daily Export

Reads the reservation system's daily facility schedule and performs:
1. Delimiter detection by trial parse (comma, semicolon, tab).
2. Header resolution: each logical field is located by case-insensitive
   substring match against a synonym set (config/column_mappings.py).
3. Cell cleanup: non-breaking spaces, runs of whitespace, and repeated
   comma segments ("Smith, Smith") are collapsed.

Lines with more fields than the header (an unquoted comma in a name, for
instance) are skipped and counted rather than failing the whole parse.

An export that cannot be parsed at all, or whose first line matches no
known header, raises ExportReadError. An export that parses but lacks
some required columns is returned with the missing fields listed so the
caller can emit a scaffold board.
"""

import io
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from ..config.column_mappings import (
    CANDIDATE_DELIMITERS,
    FIELD_RESOLUTION_ORDER,
    HEADER_SYNONYMS,
    REQUIRED_FIELDS,
)

_WS = re.compile(r"\s+")

# Fields whose text repeats itself when the export joins multi-valued cells
_DEDUPE_SEGMENT_FIELDS = ("reservee", "purpose")


class ExportReadError(ValueError):
    """The export file is missing, empty, or not tabular."""


@dataclass
class ExportData:
    """Parsed export, reduced to the logical fields the pipeline uses."""

    rows: pd.DataFrame
    header_map: Dict[str, str]
    delimiter: str
    missing_fields: List[str] = field(default_factory=list)
    malformed_rows: int = 0

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields


def clean_text(value) -> str:
    """Trim, swap NBSP for spaces, and collapse whitespace."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return _WS.sub(" ", str(value).replace("\u00a0", " ")).strip()


def collapse_repeated_segments(text: str) -> str:
    """Drop comma segments that repeat an earlier one ("X, X" -> "X")."""
    if not text:
        return ""
    seen = set()
    parts = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        key = part.lower()
        if key in seen:
            continue
        seen.add(key)
        parts.append(part)
    return ", ".join(parts)


def normalize_header(header: str) -> str:
    """Lowercase, strip trailing colon, collapse whitespace."""
    return clean_text(header).lower().rstrip(":").strip()


def map_headers(headers: List[str]) -> Dict[str, str]:
    """
    Resolve logical fields to export headers.

    Each header is claimed by at most one field. Fields are resolved in
    FIELD_RESOLUTION_ORDER so that loose synonyms ("time", "purpose")
    don't steal a column a more specific field needs.
    """
    normalized = [(h, normalize_header(h)) for h in headers]
    claimed = set()
    header_map = {}

    for logical in FIELD_RESOLUTION_ORDER:
        for synonym in HEADER_SYNONYMS[logical]:
            match = next(
                (raw for raw, norm in normalized if raw not in claimed and synonym in norm),
                None,
            )
            if match is not None:
                header_map[logical] = match
                claimed.add(match)
                break

    return header_map


@dataclass
class _TrialParse:
    """One delimiter's parse: header cells, body rows, and skipped lines."""

    delimiter: str
    headers: List[str]
    body: pd.DataFrame
    malformed_rows: int


def _trial_parse(raw: str, delimiter: str) -> Optional[_TrialParse]:
    """
    Parse ``raw`` with ``delimiter``, treating the first line as the header.

    The header is read as an ordinary row so its width fixes the column
    count; body lines with more fields than the header are skipped and
    counted instead of failing the parse or shifting columns into an index.
    """
    skipped = []

    def _skip(fields):
        skipped.append(fields)
        return None

    try:
        table = pd.read_csv(
            io.StringIO(raw),
            sep=delimiter,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_skip,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError):
        return None
    if table.empty:
        return None

    headers = [clean_text(v) for v in table.iloc[0]]
    body = table.iloc[1:].reset_index(drop=True)
    body.columns = range(len(headers))
    return _TrialParse(delimiter, headers, body, len(skipped))


def detect_delimiter(raw: str) -> _TrialParse:
    """
    Pick the delimiter whose parse resolves the most logical fields.

    Ties go to the parse with fewer skipped lines, then more columns,
    then the earlier entry in CANDIDATE_DELIMITERS.
    """
    best = None
    for rank, delimiter in enumerate(CANDIDATE_DELIMITERS):
        parsed = _trial_parse(raw, delimiter)
        if parsed is None:
            continue
        resolved = len(map_headers(parsed.headers))
        score = (resolved, -parsed.malformed_rows, len(parsed.headers), -rank)
        if best is None or score > best[0]:
            best = (score, parsed)

    if best is None:
        raise ExportReadError("Export could not be parsed with any known delimiter")
    return best[1]


def parse_export_text(raw: str) -> ExportData:
    """Parse export text into logical-field rows."""
    if not raw or not raw.strip():
        raise ExportReadError("Export is empty")

    parsed = detect_delimiter(raw)
    header_map = map_headers(parsed.headers)
    if not header_map:
        raise ExportReadError("Export has no recognizable header row")
    missing = [f for f in REQUIRED_FIELDS if f not in header_map]

    df = parsed.body
    rows = pd.DataFrame(index=df.index)
    for logical in REQUIRED_FIELDS:
        if logical in header_map:
            position = parsed.headers.index(header_map[logical])
            rows[logical] = df[position].map(clean_text)
        else:
            rows[logical] = ""

    for logical in _DEDUPE_SEGMENT_FIELDS:
        rows[logical] = rows[logical].map(collapse_repeated_segments)

    return ExportData(
        rows=rows.reset_index(drop=True),
        header_map=header_map,
        delimiter=parsed.delimiter,
        missing_fields=missing,
        malformed_rows=parsed.malformed_rows,
    )


def read_export(filepath: Union[str, Path]) -> ExportData:
    """Load the raw export file."""
    filepath = Path(filepath)
    print(f"Loading data from: {filepath.name}")
    try:
        raw = filepath.read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        raise ExportReadError(f"Export not found: {filepath}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ExportReadError(f"Export could not be read: {filepath} ({exc})") from exc

    export = parse_export_text(raw)
    shown = "\\t" if export.delimiter == "\t" else export.delimiter
    print(f"  Loaded {len(export.rows):,} rows | delimiter=\"{shown}\"")
    print(f"  Detected headers: {', '.join(export.header_map.values()) or '(none)'}")
    if export.missing_fields:
        print(f"  Warning: missing required columns: {export.missing_fields}")
    if export.malformed_rows:
        print(f"  Skipped {export.malformed_rows:,} malformed rows (too many fields)")
    return export
