"""Repeat-issue report ingestion — raw spreadsheet rows to typed entries.

The report's column order is not fixed, so columns are resolved from the
header row by name.  Decoding the spreadsheet file itself is the caller's
job; this module starts from rows of cells.

Usage::

    entries = parse_report_rows(rows)   # rows: list of lists of cells
"""

import logging
import math
import re
import unicodedata
from typing import Any, List, Optional, Sequence

from qa_matrix.schemas.report import DefectReportEntry

logger = logging.getLogger(__name__)

# Header names used to spot the header row among the first rows.
KNOWN_HEADERS = (
    "defect description",
    "defect code",
    "gravity",
    "location details",
    "quantity",
)
HEADER_SCAN_ROWS = 10
MIN_HEADER_HITS = 3

_LEADING_INT = re.compile(r"\s*([-+]?\d+)")
_SPACING = re.compile(r"[_\s]+")


def normalize_header(value: Any) -> str:
    """Trim, lowercase, strip accents, collapse underscores/whitespace."""
    text = "" if value is None else str(value)
    text = unicodedata.normalize("NFD", text.strip().lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return _SPACING.sub(" ", text)


def find_column(headers: Sequence[str], *names: str) -> int:
    """Index of the first header matching any name: exact, then prefix, then substring."""
    for name in names:
        nm = normalize_header(name)
        if nm in headers:
            return headers.index(nm)
        for i, h in enumerate(headers):
            if h.startswith(nm):
                return i
        for i, h in enumerate(headers):
            if nm in h:
                return i
    return -1


def find_header_row(rows: Sequence[Sequence[Any]]) -> int:
    """First row (of the first ten) naming at least three known headers, else 0."""
    for i, row in enumerate(rows[:HEADER_SCAN_ROWS]):
        if not row:
            continue
        normalized = [normalize_header(c) for c in row]
        hits = sum(1 for kh in KNOWN_HEADERS if any(kh in h for h in normalized))
        if hits >= MIN_HEADER_HITS:
            return i
    return 0


def parse_quantity(value: Any) -> int:
    """Cell → quantity; missing, zero, negative, non-finite or unparsable cells count as 1."""
    if isinstance(value, bool):
        return 1
    if isinstance(value, float) and not math.isfinite(value):
        return 1
    if isinstance(value, (int, float)):
        qty = int(value)
    else:
        m = _LEADING_INT.match("" if value is None else str(value))
        qty = int(m.group(1)) if m else 0
    return qty if qty >= 1 else 1


def gravity_to_rating(gravity: str) -> int:
    """Report gravity grade → defect rating (A → 5, B → 3, else 1)."""
    grade = gravity.strip().upper()
    if grade == "A":
        return 5
    if grade == "B":
        return 3
    return 1


def _cell(row: Sequence[Any], col: int) -> str:
    if col < 0 or col >= len(row):
        return ""
    value = row[col]
    return "" if value is None else str(value).strip()


def parse_report_rows(rows: Sequence[Sequence[Any]]) -> List[DefectReportEntry]:
    """Resolve columns from the header row and build one entry per data row.

    Rows without a description, a description detail and a location are
    skipped.
    """
    if len(rows) < 2:
        return []

    header_idx = find_header_row(rows)
    headers = [normalize_header(h) for h in (rows[header_idx] or [])]

    # exact header first so "Defect Description" never lands on "... Details"
    desc_col = (
        headers.index("defect description")
        if "defect description" in headers
        else find_column(headers, "Defect Description")
    )
    cols = {
        "date": find_column(headers, "Date"),
        "location": find_column(headers, "Location Details", "Location"),
        "defect_code": find_column(headers, "Defect Code"),
        "description": desc_col,
        "description_detail": find_column(headers, "Defect Description Details"),
        "gravity": find_column(headers, "Gravity"),
        "source": find_column(headers, "Source"),
        "responsible": find_column(headers, "Responsible"),
        "pof_family": find_column(headers, "POF Family"),
        "pof_code": find_column(headers, "POF CODE", "POF Code"),
    }
    qty_col = find_column(headers, "Quantity")
    logger.debug("Report header row %d, columns %s, quantity %d", header_idx, cols, qty_col)

    entries: List[DefectReportEntry] = []
    skipped = 0
    for row in rows[header_idx + 1:]:
        if not row:
            continue
        values = {name: _cell(row, col) for name, col in cols.items()}
        if not (values["description"] or values["description_detail"] or values["location"]):
            skipped += 1
            continue
        qty_cell: Optional[Any] = row[qty_col] if 0 <= qty_col < len(row) else None
        entries.append(DefectReportEntry(quantity=parse_quantity(qty_cell), **values))

    logger.info("Parsed %d report entries (%d empty rows skipped)", len(entries), skipped)
    return entries
