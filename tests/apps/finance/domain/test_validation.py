import pytest
from decimal import Decimal

from apps.finance.domain.models import CurrencyCode
from apps.finance.domain.validation import needs_conversion_warning, validate_currency_amount


class TestValidateCurrencyAmount:

    def test_valid_amount_and_currency(self):
        result = validate_currency_amount(1000, "USD")

        assert result.is_valid is True
        assert result.errors == ()

    def test_rejects_negative_amount(self):
        result = validate_currency_amount(-100, "USD")

        assert result.is_valid is False
        assert "Amount cannot be negative" in result.errors

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), Decimal("NaN"), "abc", None])
    def test_rejects_non_finite_amount(self, amount):
        result = validate_currency_amount(amount, "USD")

        assert result.is_valid is False
        assert "Amount must be a valid number" in result.errors

    def test_rejects_amount_that_is_too_large(self):
        result = validate_currency_amount(1_000_000_000, "USD")

        assert result.is_valid is False
        assert "Amount is too large" in result.errors

    def test_upper_bound_is_inclusive(self):
        assert validate_currency_amount(999_999_999, "AED").is_valid

    def test_rejects_unsupported_currency(self):
        result = validate_currency_amount(1000, "JPY")

        assert result.is_valid is False
        assert "Unsupported currency" in result.errors

    def test_errors_accumulate(self):
        result = validate_currency_amount(float("-inf"), "JPY")

        assert result.errors == (
            "Amount must be a valid number",
            "Amount cannot be negative",
            "Unsupported currency",
        )


class TestNeedsConversionWarning:

    @pytest.mark.parametrize("currency", list(CurrencyCode))
    @pytest.mark.parametrize("amount", [0, 20000, 10**8])
    def test_same_currency_never_warns(self, currency, amount):
        assert needs_conversion_warning(amount, currency, currency) is False

    def test_currency_case_is_ignored(self):
        assert needs_conversion_warning(100000, "usd", "USD") is False
        assert needs_conversion_warning(20000, " usd", "aed") is True

    def test_warns_for_large_usd_amount(self):
        assert needs_conversion_warning(20000, "USD", "AED") is True

    def test_no_warning_below_threshold(self):
        assert needs_conversion_warning(10000, "USD", "AED") is False

    @pytest.mark.parametrize("currency, threshold", [
        ("AED", 50000),
        ("USD", 15000),
        ("EUR", 12000),
        ("GBP", 10000),
    ])
    def test_threshold_is_inclusive(self, currency, threshold):
        target = "USD" if currency == "AED" else "AED"

        assert needs_conversion_warning(threshold, currency, target) is True
        assert needs_conversion_warning(threshold - 1, currency, target) is False

    def test_unknown_currency_uses_aed_threshold(self):
        assert needs_conversion_warning(49999, "JPY", "AED") is False
        assert needs_conversion_warning(50000, "JPY", "AED") is True
