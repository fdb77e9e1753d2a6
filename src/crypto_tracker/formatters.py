"""Display formatting for prices, percentages, supply figures and dates.

Pure functions, no I/O. Currency strings follow the en-ZA dashboard style
("R 1,234.56"): currency symbol, a space, comma-grouped digits and a dot as
decimal separator. Negative amounts put the sign before the symbol.

Missing (None) or non-finite numbers render as PLACEHOLDER instead of
raising, so a half-populated upstream record still renders.
"""

import math
from datetime import datetime

PLACEHOLDER = "-"
INVALID_DATE = "Invalid date"

DATE_FORMAT = "%Y/%m/%d"
DATETIME_FORMAT = "%Y/%m/%d %H:%M:%S"

CURRENCY_SYMBOLS: dict[str, str] = {
    "ZAR": "R",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "INR": "₹",
    "KRW": "₩",
    "AUD": "A$",
    "CAD": "CA$",
    "NZD": "NZ$",
    "BRL": "R$",
    "CHF": "CHF",
    "NGN": "₦",
    "BTC": "₿",
}


def currency_symbol(currency_code: str) -> str:
    """Return the display symbol for a currency code, or the upper-cased code."""
    code = currency_code.upper()
    return CURRENCY_SYMBOLS.get(code, code)


def _is_number(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def _format_money(amount: float | None, currency_code: str, digits: int) -> str:
    if not _is_number(amount):
        return PLACEHOLDER
    sign = "-" if amount < 0 and round(abs(amount), digits) != 0 else ""
    return f"{sign}{currency_symbol(currency_code)} {abs(amount):,.{digits}f}"


def format_currency(amount: float | None, currency_code: str) -> str:
    """Format an amount with exactly 2 fractional digits (e.g. "R 1,234.56")."""
    return _format_money(amount, currency_code, 2)


def format_currency_no_fraction(amount: float | None, currency_code: str) -> str:
    """Format a large amount (market cap, volume) without fractional digits."""
    return _format_money(amount, currency_code, 0)


def format_plain_number(value: float | None) -> str:
    """Format a supply figure as grouped digits with no currency symbol."""
    if not _is_number(value):
        return PLACEHOLDER
    return f"{value:,.0f}"


def format_percentage(value: float | None) -> str:
    """Format a percentage change with 2 decimals and an explicit sign.

    Zero counts as non-negative and gets a "+" prefix.
    """
    if not _is_number(value):
        return PLACEHOLDER
    if value >= 0:
        return f"+{abs(value):.2f}%"
    return f"-{abs(value):.2f}%"


def _parse_iso(iso_string: str | None) -> datetime | None:
    if not iso_string or not isinstance(iso_string, str):
        return None
    try:
        return datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(iso_string: str | None) -> str:
    """Format an ISO-8601 timestamp as a calendar date, or INVALID_DATE."""
    parsed = _parse_iso(iso_string)
    if parsed is None:
        return INVALID_DATE
    return parsed.strftime(DATE_FORMAT)


def format_datetime(iso_string: str | None) -> str:
    """Format an ISO-8601 timestamp as date and time, or INVALID_DATE."""
    parsed = _parse_iso(iso_string)
    if parsed is None:
        return INVALID_DATE
    return parsed.strftime(DATETIME_FORMAT)
