from decimal import Decimal
from datetime import date

from apps.finance.application.dto import (
    ConversionRequestDTO,
    ConversionResultDTO,
    RateSyncResultDTO,
    TransactionSummaryDTO,
)


class TestDTOs:

    def test_conversion_request_defaults(self):
        dto = ConversionRequestDTO(
            source_currency="USD",
            exchanged_currency="AED",
            amount=Decimal("100")
        )

        assert dto.valuation_date is None

    def test_conversion_result_from_dict(self):
        dto = ConversionResultDTO.from_dict({
            "source_currency": "USD",
            "exchanged_currency": "AED",
            "amount": Decimal("100"),
            "rate": Decimal("3.672500"),
            "converted_amount": Decimal("367.250000"),
            "valuation_date": date(2024, 1, 15),
        })

        assert dto.converted_amount == Decimal("367.250000")
        assert dto.valuation_date == date(2024, 1, 15)

    def test_transaction_summary_defaults(self):
        dto = TransactionSummaryDTO(currency="AED", total_cost=Decimal("42000"))

        assert dto.profit is None
        assert dto.roi == 0
        assert dto.conversion_warning is False

    def test_rate_sync_result_as_dict(self):
        dto = RateSyncResultDTO(True, 12, ("AED", "USD"), ["No rate for GBP/EUR"])

        assert dto.as_dict() == {
            "success": True,
            "rates_synced": 12,
            "currencies_processed": ["AED", "USD"],
            "errors": ["No rate for GBP/EUR"],
            "message": None,
        }

    def test_rate_sync_results_do_not_share_errors(self):
        first = RateSyncResultDTO(False, 0, [])
        first.errors.append("boom")

        assert RateSyncResultDTO(False, 0, []).errors == []
