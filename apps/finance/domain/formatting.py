"""
Display formatting for money amounts.
Numbers are rendered with Babel's CLDR data so grouping, decimal marks and
symbol placement follow the requested locale.
"""

import copy
from decimal import ROUND_HALF_UP, Decimal

from babel import Locale
from babel.numbers import parse_pattern

from apps.finance.domain.models import BASE_CURRENCY, CurrencyCode, coerce_decimal

DEFAULT_LOCALE = "en-AE"

CURRENCY_SYMBOLS = {
    CurrencyCode.AED: "د.إ",
    CurrencyCode.USD: "$",
    CurrencyCode.EUR: "€",
    CurrencyCode.GBP: "£",
}


def _parse_locale(locale: str) -> Locale:
    return Locale.parse(locale.replace("-", "_"))


def _round_half_up(value: Decimal, precision: int) -> Decimal:
    # Babel quantizes half-to-even; display money rounds halves away from zero
    if not value.is_finite():
        return value
    return value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


def _with_precision(pattern_text: str, precision: int):
    pattern = copy.copy(parse_pattern(pattern_text))
    pattern.frac_prec = (precision, precision)
    return pattern


def format_currency_advanced(
    amount,
    currency,
    *,
    locale: str = DEFAULT_LOCALE,
    show_symbol: bool = True,
    precision: int = 2,
) -> str:
    """
    Format an amount for display.

    Args:
        amount: Amount to format
        currency: Currency code (e.g. "USD")
        locale: Locale id, "en-AE" and "en_AE" are both accepted
        show_symbol: When False only the grouped number is rendered
        precision: Exact number of fraction digits

    Example:
        >>> format_currency_advanced(1234.56, "USD", show_symbol=False)
        '1,234.56'
    """
    babel_locale = _parse_locale(locale)
    value = _round_half_up(coerce_decimal(amount), precision)

    if not show_symbol:
        pattern = _with_precision(babel_locale.decimal_formats[None].pattern, precision)
        return pattern.apply(value, babel_locale, currency_digits=False)

    pattern = _with_precision(babel_locale.currency_formats["standard"].pattern, precision)
    return pattern.apply(value, babel_locale, currency=str(currency), currency_digits=False)


def format_currency(amount, currency=BASE_CURRENCY, locale: str = DEFAULT_LOCALE) -> str:
    """Two-decimal currency string, the default money display."""
    return format_currency_advanced(amount, currency, locale=locale)


def get_currency_symbol(currency) -> str:
    """Symbol for a supported currency; anything else is returned as-is."""
    try:
        return CURRENCY_SYMBOLS[CurrencyCode.parse(currency)]
    except ValueError:
        return currency


def get_all_currencies() -> list[CurrencyCode]:
    return list(CurrencyCode)
