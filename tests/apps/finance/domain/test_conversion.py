import asyncio
import pytest
from decimal import Decimal

from apps.finance.domain.conversion import batch_convert_currency, convert
from apps.finance.domain.exceptions import ConversionUnavailable
from apps.finance.domain.models import CurrencyCode


class TestConvert:

    @pytest.mark.parametrize("currency", list(CurrencyCode))
    def test_same_currency_skips_converter(self, converter, currency):
        result = asyncio.run(convert(Decimal("1234.5"), currency, currency, converter))

        assert result == Decimal("1234.5")
        assert converter.calls == []

    def test_currency_case_does_not_matter(self, converter):
        result = asyncio.run(convert(Decimal("10"), "usd", CurrencyCode.USD, converter))

        assert result == Decimal("10")
        assert converter.calls == []

    def test_uses_converter_for_other_pairs(self, converter):
        result = asyncio.run(convert(100, "USD", "AED", converter))

        assert result == Decimal("350")
        assert converter.calls == [(Decimal("100"), "USD", "AED")]

    def test_conversion_failure_propagates(self, failing_converter):
        with pytest.raises(ConversionUnavailable):
            asyncio.run(convert(100, "USD", "AED", failing_converter))


class TestBatchConvertCurrency:

    def test_results_follow_input_order(self, converter):
        conversions = [
            (100, "USD"),
            (10, "EUR", "AED"),
            (7, "AED", "AED"),
            (40, "AED", "USD"),
        ]

        result = asyncio.run(batch_convert_currency(conversions, converter))

        assert result == [Decimal("350"), Decimal("40"), Decimal("7"), Decimal("10")]

    def test_empty_batch(self, converter):
        assert asyncio.run(batch_convert_currency([], converter)) == []

    def test_first_failure_propagates(self, converter):
        with pytest.raises(ConversionUnavailable):
            asyncio.run(batch_convert_currency([(100, "USD"), (5, "GBP", "EUR")], converter))
