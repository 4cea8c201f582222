"""Stooq CSV parsing — turns a daily CSV export into validated bars."""

import csv
import io
import logging
import math
from pathlib import Path

from stocksignal.analysis.models import Bar

logger = logging.getLogger("stocksignal.parser")

# Stooq serves either English or Polish column headers, same column order.
KNOWN_HEADERS = (
    ("date", "open", "high", "low", "close", "volume"),
    ("data", "otwarcie", "najwyzszy", "najnizszy", "zamkniecie", "wolumen"),
)


def _to_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def _is_known_header(columns: list[str]) -> bool:
    names = tuple(c.strip().lower() for c in columns[:6])
    return names in KNOWN_HEADERS


def parse_stooq_csv(text: str) -> list[Bar]:
    """Parse Stooq CSV text into bars, oldest first.

    Expected columns (English or Polish headers):
        Date,Open,High,Low,Close,Volume
        Data,Otwarcie,Najwyzszy,Najnizszy,Zamkniecie,Wolumen

    The first line is always treated as the header; an unrecognised header
    is logged and the rows are still read by column position.  Rows with
    fewer than six columns are skipped; unparseable or non-finite numbers
    become ``0.0``; rows without a date or with a non-positive close are
    dropped.  Source order is preserved.
    """
    rows = list(csv.reader(io.StringIO(text.strip())))
    if not rows:
        return []

    if len(rows) > 1 and not _is_known_header(rows[0]):
        logger.warning(
            "Unrecognised CSV header %r; reading columns by position",
            ",".join(rows[0]),
        )

    bars: list[Bar] = []
    skipped = 0
    for columns in rows[1:]:
        if len(columns) < 6:
            skipped += 1
            continue
        bar = Bar(
            date=columns[0].strip(),
            open=_to_float(columns[1]),
            high=_to_float(columns[2]),
            low=_to_float(columns[3]),
            close=_to_float(columns[4]),
            volume=_to_float(columns[5]),
        )
        if not bar.date or bar.close <= 0:
            skipped += 1
            continue
        bars.append(bar)

    logger.debug("Parsed %d valid bars (%d rows skipped)", len(bars), skipped)
    return bars


def load_csv_file(path: str | Path) -> list[Bar]:
    """Read and parse a Stooq CSV export from disk.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not UTF-8 text.
    """
    return parse_stooq_csv(Path(path).read_text(encoding="utf-8"))
