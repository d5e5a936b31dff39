"""
common/cell_logic.py
--------------------
Spreadsheet cell coercion shared by every page.
Cells arrive as strings (or numbers) straight from the sheet, any of them
may be missing, so each helper falls back to 0 or a sentinel instead of raising.
"""
import math
import re
from datetime import datetime, timezone

CURRENCY_PREFIX = "TSh"

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)", re.ASCII)
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)

# Accepted date layouts, tried in order. Day-first for slashes (en-GB sheets).
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %I:%M:%S %p",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d.%m.%Y",
)


def parse_currency(value) -> float:
    """
    Parse a money cell such as "TSh12,345", "1,200.50" or "500/=".
    After dropping the TSh prefix and commas the leading number is read,
    trailing text ("/=", " TZS") is ignored.

    Returns:
        float: parsed amount, 0.0 when the cell is empty or not a number
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = str(value).replace(CURRENCY_PREFIX, "").replace(",", "")
        m = _FLOAT_PREFIX.match(cleaned)
        if not m:
            return 0.0
        number = float(m.group(1))
    if not math.isfinite(number):
        return 0.0
    return number


def parse_int(value) -> int:
    """Quantity cells: leading base-10 integer ("12", "12 pcs", "12.7" -> 12), else 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    m = _INT_PREFIX.match(str(value))
    if not m:
        return 0
    return int(m.group(1))


def text_or(value, default: str) -> str:
    """Cell as trimmed text, or the sentinel when the cell is absent/empty."""
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default


def cell_at(row, index: int):
    """row[index] without IndexError (short rows are normal in sheet data)."""
    if row is None or index < 0 or index >= len(row):
        return None
    return row[index]


def parse_sheet_date(value):
    """
    Parse a date / timestamp cell.

    "2024-03-01", "01/03/2024 10:30", "2024-03-01T08:00:00" ... are accepted.
    When the whole string does not parse, the first token is tried so that
    "2024-03-01 Unknown Time" still sorts by its date.

    Returns:
        datetime | None: None when nothing parses
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return None

    parsed = _parse_text_date(text)
    if parsed is None and " " in text:
        parsed = _parse_text_date(text.split(" ", 1)[0])
    return parsed


def _parse_text_date(text):
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    # keep everything naive (UTC for offset-aware stamps) so dated rows stay comparable
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.replace(tzinfo=None)


def format_currency(amount) -> str:
    """12345 -> "TSh12,345", 1234.5 -> "TSh1,234.5"."""
    number = parse_currency(amount)
    if number == int(number):
        return f"{CURRENCY_PREFIX}{int(number):,}"
    text = f"{number:,.2f}".rstrip("0").rstrip(".")
    return f"{CURRENCY_PREFIX}{text}"


def format_currency_with_scale(amount) -> str:
    """Dashboard style: 1_500_000 -> "TSh1.5M", 2500 -> "TSh2.5K"."""
    number = parse_currency(amount)
    if number >= 1_000_000:
        return f"{CURRENCY_PREFIX}{number / 1_000_000:.1f}M"
    if number >= 1000:
        return f"{CURRENCY_PREFIX}{number / 1000:.1f}K"
    return format_currency(number)
