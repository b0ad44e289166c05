"""
record_parser.py — Parse NASA POWER daily exports into DailyRecord lists.

Expected layout (comma- or tab-delimited):

    -BEGIN HEADER-
    NASA/POWER ... free-form metadata ...
    -END HEADER-
    YEAR,DOY,T2M_RANGE,PRECTOTCORR
    2001,1,8.41,0.0
    2001,2,9.02,1.37
    ...

Rules:
    • Everything before the exact line ``-END HEADER-`` is ignored.
    • Repeated column-header lines (``YEAR,DOY`` / ``YEAR<TAB>DOY``) are skipped.
    • Rows need at least four fields; extra columns are ignored.
    • Rows with a non-numeric or non-finite field are dropped silently.
    • Rows with a day-of-year outside 1..366 or negative precipitation
      are dropped as well.

The parser never raises on malformed text. An empty list means "no valid
records" and it is the caller's job to treat that as a failure.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Iterable, List, Optional

from backend.app.calendar.models import DailyRecord

logger = logging.getLogger(__name__)

HEADER_SENTINEL = "-END HEADER-"
COLUMN_HEADER_PREFIXES = ("YEAR,DOY", "YEAR\tDOY")
MIN_FIELDS = 4
MAX_DAY_OF_YEAR = 366

_DELIMITER = re.compile(r"[,\t]")


def _to_float(token: str) -> Optional[float]:
    try:
        value = float(token)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_row(line: str) -> Optional[DailyRecord]:
    """Parse a single data row, or return None if it is unusable."""
    parts = _DELIMITER.split(line.strip())
    if len(parts) < MIN_FIELDS:
        return None

    values = [_to_float(p) for p in parts[:MIN_FIELDS]]
    if any(v is None for v in values):
        return None

    year, doy, temp_range, precip = values
    if not year.is_integer() or not doy.is_integer():
        return None
    # DOY outside the calendar or negative precipitation (POWER fill value -999)
    if not 1 <= doy <= MAX_DAY_OF_YEAR or precip < 0:
        return None

    return DailyRecord(
        year=int(year),
        day_of_year=int(doy),
        temp_range=temp_range,
        precip=precip,
    )


def iter_records(lines: Iterable[str]) -> Iterable[DailyRecord]:
    """Yield records from an iterable of lines (file handle, list, ...)."""
    header_found = False
    for raw in lines:
        line = raw.strip()
        if not line:
            continue

        if line == HEADER_SENTINEL:
            header_found = True
            continue

        if not header_found or line.startswith(COLUMN_HEADER_PREFIXES):
            continue

        record = parse_row(line)
        if record is not None:
            yield record


def parse_records(text: str) -> List[DailyRecord]:
    """
    Parse a raw text blob into daily records (unsorted, file order).

    Parameters
    ----------
    text : str
        Full export, header region included.

    Returns
    -------
    List[DailyRecord]
        Possibly empty; never raises for malformed content.
    """
    records = list(iter_records(text.splitlines()))
    if not records:
        logger.warning(
            "No valid records parsed (sentinel present: %s)",
            HEADER_SENTINEL in text,
        )
    else:
        logger.info("Parsed %d daily records", len(records), extra={"records": len(records)})
    return records
