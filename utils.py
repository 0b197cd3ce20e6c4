"""
Utility functions for the application.
"""
from datetime import datetime, date
from typing import Optional


DATE_FORMATS = (
    '%Y-%m-%d',  # ISO format / HTML date input: 2023-12-31
    '%d/%m/%Y',  # 31/12/2023
    '%d.%m.%Y',  # 31.12.2023
)


def parse_date(date_str: str, default: Optional[date] = None) -> Optional[date]:
    """
    Parse date string in multiple formats.

    Supports formats:
    - yyyy-mm-dd (ISO format, also what browsers submit)
    - dd/mm/yyyy
    - dd.mm.yyyy

    ISO timestamps coming back from a backend (``2023-12-31T10:00:00Z``) are
    reduced to their date part.

    Args:
        date_str: Date string to parse
        default: Default value to return if parsing fails (default: None)

    Returns:
        Parsed date object or default value if parsing fails

    Examples:
        >>> parse_date('2023-12-31')
        datetime.date(2023, 12, 31)
        >>> parse_date('31/12/2023')
        datetime.date(2023, 12, 31)
        >>> parse_date('invalid')
        None
    """
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str
    if not date_str or not date_str.strip():
        return default

    date_str = date_str.strip()
    if 'T' in date_str:
        date_str = date_str.split('T', 1)[0]

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    # If no format matched, return default
    return default


def parse_numeric(value_str: str, default: Optional[float] = None) -> Optional[float]:
    """
    Amounts, areas and prices as float. Accepts a comma as decimal separator
    (``'1250,50'``) and numbers that already arrived typed from a backend.
    """
    if isinstance(value_str, (int, float)) and not isinstance(value_str, bool):
        return float(value_str)
    text = str(value_str or '').strip().replace(',', '.')
    if not text:
        return default
    try:
        return float(text)
    except ValueError:
        return default


def parse_integer(value_str: str, default: Optional[int] = None) -> Optional[int]:
    """Whole numbers (counts, floor numbers, metric values); ``default`` when not one."""
    if isinstance(value_str, int) and not isinstance(value_str, bool):
        return value_str
    text = str(value_str or '').strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        return default


def parse_bool(value) -> bool:
    """Interpret checkbox / query-string values ('1', 'true', 'on', 'yes')."""
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() in ('1', 'true', 'yes', 'on')


def age_on(born: date, today: Optional[date] = None) -> int:
    """Full years between ``born`` and ``today``."""
    today = today or date.today()
    years = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        years -= 1
    return years


def format_date(value, fmt: str = '%d/%m/%Y') -> str:
    """Render a date for tables and printouts; blank for missing values."""
    parsed = parse_date(value) if value else None
    return parsed.strftime(fmt) if parsed else ''
