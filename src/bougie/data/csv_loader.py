"""
CSV Bar Loader

Reads daily OHLCV bars from CSV exports and narrows them to a date range.

The file must carry a header row naming `Date, Open, High, Low, Close,
Volume` (any case, any column order, quoted or not). Rows that cannot be
parsed, or whose high is below their low, are skipped. The returned list is
sorted by date. Bars whose open or close falls outside their high-low range
are kept and reported in a warning.
"""

import csv
import datetime as dt
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..exceptions import DataLoadError
from ..models.market_data import RawBar


logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("date", "open", "high", "low", "close", "volume")

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%d-%b-%Y",
    "%d-%b-%y",
    "%b %d, %Y",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
)


def _clean(value: Optional[str]) -> str:
    if value is None:
        return ""
    return value.strip().strip('"').strip()


def parse_date(value: str) -> Optional[dt.date]:
    """Parse a date cell, returning None when no known format fits."""
    value = _clean(value)
    if not value:
        return None

    for fmt in DATE_FORMATS:
        try:
            return dt.datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    try:
        return dt.datetime.fromisoformat(value).date()
    except ValueError:
        return None


def parse_price(value: str) -> Optional[float]:
    """Parse a price cell, tolerating currency symbols and thousands separators."""
    value = _clean(value).replace(",", "").lstrip("$")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def parse_volume(value: str) -> Optional[int]:
    """Parse a volume cell; a fractional part such as '12345.0' is dropped."""
    value = _clean(value).replace(",", "")
    if "." in value:
        value = value.split(".")[0]
    if not value:
        return None
    try:
        volume = int(value)
    except ValueError:
        return None
    return volume if volume >= 0 else None


def _column_index(header: Sequence[str]) -> Dict[str, int]:
    index = {}
    for position, name in enumerate(header):
        index.setdefault(_clean(name).lower(), position)
    return index


def _parse_row(row: Sequence[str], columns: Dict[str, int]) -> Optional[RawBar]:
    if len(row) <= max(columns[name] for name in REQUIRED_COLUMNS):
        return None

    date = parse_date(row[columns["date"]])
    open_price = parse_price(row[columns["open"]])
    high = parse_price(row[columns["high"]])
    low = parse_price(row[columns["low"]])
    close = parse_price(row[columns["close"]])
    volume = parse_volume(row[columns["volume"]])

    if None in (date, open_price, high, low, close, volume):
        return None
    if high < low:
        return None

    return RawBar(date=date, open=open_price, high=high, low=low, close=close, volume=volume)


def read_candlesticks(path: Union[str, Path]) -> List[RawBar]:
    """
    Read bars from a CSV file.

    Args:
        path: CSV file path

    Returns:
        Bars sorted by date; empty for a file without content

    Raises:
        DataLoadError: File missing or required headers absent
    """
    csv_path = Path(path)
    if not csv_path.is_file():
        raise DataLoadError("Bar data file not found", path=str(csv_path))

    bars: List[RawBar] = []
    skipped = 0
    inconsistent = 0

    with open(csv_path, "r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.reader(handle)
        header = next(reader, None)
        if not header or not any(cell.strip() for cell in header):
            logger.warning(f"No header row in {csv_path}")
            return bars

        columns = _column_index(header)
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise DataLoadError(
                "CSV missing required headers: Date, Open, High, Low, Close, Volume",
                path=str(csv_path)
            )

        for row in reader:
            if not row or not any(cell.strip() for cell in row):
                continue

            bar = _parse_row(row, columns)
            if bar is None:
                skipped += 1
                continue
            if not bar.has_valid_ohlc():
                inconsistent += 1
            bars.append(bar)

    bars.sort(key=lambda bar: bar.date)

    if skipped:
        logger.warning(f"Skipped {skipped} malformed rows in {csv_path}")
    if inconsistent:
        logger.warning(f"Kept {inconsistent} bars with open or close outside the high-low range in {csv_path}")
    logger.info(f"Loaded {len(bars)} bars from {csv_path}")

    return bars


def filter_by_date(bars: Optional[Iterable[RawBar]],
                   start: Optional[dt.date] = None,
                   end: Optional[dt.date] = None) -> List[RawBar]:
    """
    Keep bars dated within `[start, end]`, both ends inclusive.

    A missing bound leaves that side open. An inverted range yields no bars.
    """
    if bars is None:
        return []
    if start is not None and end is not None and start > end:
        return []

    return [
        bar for bar in bars
        if (start is None or bar.date >= start) and (end is None or bar.date <= end)
    ]
