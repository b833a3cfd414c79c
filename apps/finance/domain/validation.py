"""
Validation of (amount, currency) pairs and the large-conversion warning.
"""

from decimal import Decimal, InvalidOperation

from apps.finance.domain.models import CurrencyCode, ValidationResult, coerce_decimal, same_currency

MAX_AMOUNT = Decimal("999999999")

ERROR_NOT_A_NUMBER = "Amount must be a valid number"
ERROR_NEGATIVE = "Amount cannot be negative"
ERROR_TOO_LARGE = "Amount is too large"
ERROR_UNSUPPORTED_CURRENCY = "Unsupported currency"

# Amounts at or above these (in the source currency) get a double-check banner.
CONVERSION_WARNING_THRESHOLDS = {
    CurrencyCode.AED: Decimal("50000"),
    CurrencyCode.USD: Decimal("15000"),
    CurrencyCode.EUR: Decimal("12000"),
    CurrencyCode.GBP: Decimal("10000"),
}
DEFAULT_WARNING_THRESHOLD = CONVERSION_WARNING_THRESHOLDS[CurrencyCode.AED]


def validate_currency_amount(amount, currency) -> ValidationResult:
    """
    Validate an amount/currency pair.

    Errors accumulate so a form can show every problem at once; nothing is
    raised for bad input.
    """
    errors = []

    if amount is None:
        value = Decimal("NaN")
    else:
        try:
            value = coerce_decimal(amount)
        except (InvalidOperation, TypeError, ValueError):
            value = Decimal("NaN")

    if not value.is_finite():
        errors.append(ERROR_NOT_A_NUMBER)

    # NaN does not order against anything
    if not value.is_nan():
        if value < 0:
            errors.append(ERROR_NEGATIVE)
        if value > MAX_AMOUNT:
            errors.append(ERROR_TOO_LARGE)

    if not CurrencyCode.is_supported(currency):
        errors.append(ERROR_UNSUPPORTED_CURRENCY)

    return ValidationResult(is_valid=not errors, errors=tuple(errors))


def needs_conversion_warning(amount, from_currency, to_currency) -> bool:
    """Advisory only: true when a cross-currency amount is large enough to double check."""
    if same_currency(from_currency, to_currency):
        return False

    try:
        threshold = CONVERSION_WARNING_THRESHOLDS[CurrencyCode.parse(from_currency)]
    except ValueError:
        threshold = DEFAULT_WARNING_THRESHOLD

    value = coerce_decimal(amount)
    if value.is_nan():
        return False
    return value >= threshold
