"""
Currency helpers - minor-unit conversion and display lookup.

Every price that crosses a computation boundary is an integer in minor
units (cents for EUR/USD). Conversion from a human-entered decimal happens
here and only here, always rounding half-up at the currency exponent.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional


# ISO 4217 minor units. Unknown codes fall back to EUR.
CURRENCY_MINOR_UNITS = {
    'EUR': 2, 'USD': 2, 'RON': 2, 'GBP': 2, 'CHF': 2,
    'SEK': 2, 'NOK': 2, 'DKK': 2, 'PLN': 2, 'CZK': 2,
    'HUF': 2, 'BGN': 2, 'HRK': 2, 'TRY': 2,
}

CURRENCY_METADATA = {
    'EUR': {'label': 'Euro', 'symbol': None, 'selectable': True},
    'USD': {'label': 'US Dollar', 'symbol': None, 'selectable': True},
    'RON': {'label': 'Romanian Leu', 'symbol': 'lei', 'selectable': True},
    'GBP': {'label': 'Pound Sterling', 'symbol': '£', 'selectable': True},
    'CHF': {'label': 'Swiss Franc', 'symbol': None, 'selectable': True},
    'SEK': {'label': 'Swedish Krona', 'symbol': 'kr', 'selectable': True},
    'NOK': {'label': 'Norwegian Krone', 'symbol': 'kr', 'selectable': True},
    'DKK': {'label': 'Danish Krone', 'symbol': 'kr', 'selectable': True},
    'PLN': {'label': 'Polish Zloty', 'symbol': 'zł', 'selectable': True},
    'CZK': {'label': 'Czech Koruna', 'symbol': 'Kč', 'selectable': True},
    'HUF': {'label': 'Hungarian Forint', 'symbol': 'Ft', 'selectable': True},
    'BGN': {'label': 'Bulgarian Lev', 'symbol': 'лв', 'selectable': True},
    'HRK': {'label': 'Croatian Kuna (legacy)', 'symbol': 'kn', 'selectable': False},
    'TRY': {'label': 'Turkish Lira', 'symbol': '₺', 'selectable': True},
}

# Currencies shown with an icon in the console still need a text symbol
FALLBACK_SYMBOLS = {'EUR': '€', 'USD': '$', 'GBP': '£'}

DEFAULT_CURRENCY = 'EUR'


def normalize_currency_code(currency: Optional[str]) -> str:
    """Upper-case a currency code; unknown or empty codes become EUR."""
    code = str(currency or '').strip().upper()
    if code in CURRENCY_MINOR_UNITS:
        return code
    return DEFAULT_CURRENCY


def get_minor_units(currency: Optional[str]) -> int:
    """Number of decimal places (minor-unit exponent) for a currency."""
    return CURRENCY_MINOR_UNITS[normalize_currency_code(currency)]


def round_half_up(value: Decimal | int | float | str) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_decimal(value: Decimal | int | float | str | None) -> Optional[Decimal]:
    """Parse a numeric input into a finite Decimal, or None."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
    if not parsed.is_finite():
        return None
    return parsed


def to_minor(amount: Decimal | int | float | str | None, currency: Optional[str] = 'eur') -> int:
    """
    Convert a display price (e.g. 2.99) to integer minor units (e.g. 299).

    Empty or unparsable input converts to 0.
    """
    value = to_decimal(amount)
    if value is None or value == 0:
        return 0
    return round_half_up(value.scaleb(get_minor_units(currency)))


def from_minor(amount_minor: Optional[int], currency: Optional[str] = 'eur') -> Decimal:
    """Convert integer minor units (e.g. 299) to a display Decimal (e.g. 2.99)."""
    if not amount_minor:
        return Decimal(0)
    return Decimal(int(amount_minor)).scaleb(-get_minor_units(currency))


def currency_symbol(currency: Optional[str]) -> str:
    """
    Text symbol for a currency code (case-insensitive).

    Falls back to the upper-cased code itself when no symbol is known.
    """
    code = str(currency or '').strip().upper()
    meta = CURRENCY_METADATA.get(code)
    if meta and meta['symbol']:
        return meta['symbol']
    return FALLBACK_SYMBOLS.get(code, code)


def currency_label(currency: Optional[str]) -> str:
    code = str(currency or '').strip().upper()
    meta = CURRENCY_METADATA.get(code)
    return meta['label'] if meta else code


def format_minor(amount_minor: int, currency: Optional[str] = 'eur') -> str:
    """Format minor units for display, e.g. 2550 EUR -> '€25.50'."""
    places = get_minor_units(currency)
    value = from_minor(amount_minor, currency)
    return f"{currency_symbol(currency)}{value:.{places}f}"


def list_currencies(selectable_only: bool = True) -> list[dict]:
    """Entries for a currency picker."""
    entries = []
    for code, meta in CURRENCY_METADATA.items():
        if selectable_only and not meta['selectable']:
            continue
        entries.append({
            'code': code,
            'label': meta['label'],
            'symbol': currency_symbol(code),
            'minor_units': CURRENCY_MINOR_UNITS[code],
        })
    return entries
