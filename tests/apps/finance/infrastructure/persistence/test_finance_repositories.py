import pytest
from decimal import Decimal
from datetime import date

from apps.finance.infrastructure.persistence.models import (
    Currency,
    CurrencyExchangeRate,
    Provider,
    ProviderName,
)
from apps.finance.infrastructure.persistence.repositories import (
    CurrencyExchangeRateRepository,
    CurrencyRepository,
    ProviderRepository,
)


@pytest.mark.django_db(transaction=True)
class TestCurrencyRepository:

    def test_ensure_supported_creates_all_four(self):
        currencies = CurrencyRepository.ensure_supported()

        assert [c.code for c in currencies] == ["AED", "USD", "EUR", "GBP"]
        assert Currency.objects.get(code="GBP").name == "British Pound"

    def test_ensure_supported_keeps_existing_rows(self):
        Currency.objects.create(code="USD", name="Dollar", symbol="US$")

        CurrencyRepository.ensure_supported()

        assert Currency.objects.count() == 4
        assert Currency.objects.get(code="USD").name == "Dollar"

    def test_get_by_code(self):
        CurrencyRepository.ensure_supported()

        assert CurrencyRepository.get_by_code("eur").code == "EUR"
        assert CurrencyRepository.get_by_code("JPY") is None

    def test_get_all(self):
        CurrencyRepository.ensure_supported()

        assert [c.code for c in CurrencyRepository.get_all()] == ["AED", "EUR", "GBP", "USD"]


@pytest.mark.django_db(transaction=True)
class TestCurrencyExchangeRateRepository:

    @pytest.fixture
    def currencies(self):
        return {c.code: c for c in CurrencyRepository.ensure_supported()}

    def test_save_and_read_rate(self, currencies):
        test_date = date(2024, 5, 21)

        CurrencyExchangeRateRepository.save_rate(
            currencies["USD"], currencies["AED"], test_date, Decimal("3.672500")
        )

        assert CurrencyExchangeRateRepository.exists("USD", "AED", test_date)
        assert not CurrencyExchangeRateRepository.exists("AED", "USD", test_date)
        assert CurrencyExchangeRateRepository.get_rate_value("USD", "AED", test_date) == Decimal("3.672500")
        assert CurrencyExchangeRateRepository.get_rate_value("USD", "AED", date(2024, 5, 22)) is None

    def test_get_rate_returns_stored_row(self, currencies):
        test_date = date(2024, 5, 21)
        CurrencyExchangeRateRepository.save_rate(
            currencies["AED"], currencies["USD"], test_date, Decimal("0.272300")
        )

        stored = CurrencyExchangeRateRepository.get_rate("AED", "USD", test_date)

        assert stored.source_currency.code == "AED"
        assert stored.to_domain().inverse().rate_value == Decimal("3.672420")
        assert CurrencyExchangeRateRepository.get_rate("USD", "AED", test_date) is None

    def test_save_rate_keeps_first_quote_of_the_day(self, currencies):
        test_date = date(2024, 5, 21)

        CurrencyExchangeRateRepository.save_rate(currencies["USD"], currencies["AED"], test_date, Decimal("3.67"))
        CurrencyExchangeRateRepository.save_rate(currencies["USD"], currencies["AED"], test_date, Decimal("3.70"))

        assert CurrencyExchangeRate.objects.count() == 1
        assert CurrencyExchangeRateRepository.get_rate_value("USD", "AED", test_date) == Decimal("3.67")

    def test_bulk_create_ignores_duplicates(self, currencies):
        test_date = date(2024, 5, 21)
        row = {
            "source_currency": currencies["EUR"],
            "exchanged_currency": currencies["AED"],
            "valuation_date": test_date,
            "rate_value": Decimal("4.000000"),
        }
        CurrencyExchangeRateRepository.bulk_create([row])

        CurrencyExchangeRateRepository.bulk_create([
            row,
            {**row, "source_currency": currencies["GBP"], "rate_value": Decimal("4.600000")},
        ])

        assert CurrencyExchangeRate.objects.count() == 2


@pytest.mark.django_db(transaction=True)
class TestProviderRepository:

    def test_get_active_ordered(self):
        Provider.objects.create(name=ProviderName.STATIC, priority=2, is_active=True)
        Provider.objects.create(name=ProviderName.EXCHANGE_RATE, priority=1, is_active=True)
        Provider.objects.create(name=ProviderName.CURRENCY_BEACON, priority=0, is_active=False)

        names = [p.name for p in ProviderRepository.get_active_ordered()]

        assert names == [ProviderName.EXCHANGE_RATE, ProviderName.STATIC]
