import asyncio
import pytest
from decimal import Decimal

from apps.finance.application.summaries import summarize_transaction
from apps.finance.domain.exceptions import ConversionUnavailable
from apps.finance.domain.models import (
    CarTransaction,
    CurrencyCode,
    Expense,
    ExpenseCategory,
    Money,
)


class TestSummarizeTransaction:

    def test_sold_car(self, converter):
        transaction = CarTransaction(
            purchase_price=Money.of(10000, "USD"),
            sale_price=Money.of(50000, "AED"),
            expenses=(
                Expense(Money.of(500, "EUR"), ExpenseCategory.CUSTOMS),
                Expense(Money.of(3000, "AED"), ExpenseCategory.REPAIR),
            ),
        )

        summary = asyncio.run(summarize_transaction(transaction, converter=converter))

        assert summary.currency == "AED"
        assert summary.total_cost == Decimal("40000")
        assert summary.sale_price == Decimal("50000")
        assert summary.profit == Decimal("10000")
        assert summary.roi == 25
        assert summary.profit_margin == 25
        assert summary.sale_margin == 20
        assert summary.conversion_warning is False

    def test_unsold_car_only_has_total_cost(self, converter):
        transaction = CarTransaction(
            purchase_price=Money.of(10000, "USD"),
            expenses=(Expense(Money.of(1000, "AED")),),
        )

        summary = asyncio.run(summarize_transaction(transaction, converter=converter))

        assert summary.total_cost == Decimal("36000")
        assert summary.sale_price is None
        assert summary.profit is None
        assert summary.roi == 0
        assert summary.conversion_warning is False

    def test_loss_gives_negative_ratios(self, converter):
        transaction = CarTransaction(
            purchase_price=Money.of(40000, "AED"),
            sale_price=Money.of(35000, "AED"),
        )

        summary = asyncio.run(summarize_transaction(transaction, converter=converter))

        assert summary.profit == Decimal("-5000")
        assert summary.roi == Decimal("-12.5")
        assert summary.conversion_warning is False

    def test_other_report_currency(self, converter):
        transaction = CarTransaction(
            purchase_price=Money.of(40000, "AED"),
            sale_price=Money.of(60000, "AED"),
        )

        summary = asyncio.run(
            summarize_transaction(transaction, converter=converter, target=CurrencyCode.USD)
        )

        assert summary.currency == "USD"
        assert summary.total_cost == Decimal("10000")
        assert summary.profit == Decimal("5000")
        assert summary.conversion_warning is True

    def test_missing_rate_propagates(self, failing_converter):
        transaction = CarTransaction(purchase_price=Money.of(10000, "USD"))

        with pytest.raises(ConversionUnavailable):
            asyncio.run(summarize_transaction(transaction, converter=failing_converter))
