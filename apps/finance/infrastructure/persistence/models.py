"""
Django ORM models for persistence.
Infrastructure layer: the provider side's record of currencies, quotes and
rate sources. The database enforces the same rules as the domain values:
only the four dealership currencies, strictly positive rates and no
currency quoted against itself.
"""

import uuid
from django.db import models
from django.db.models import F, Q

from apps.finance.domain.models import CurrencyCode, ExchangeRate

CURRENCY_CODE_CHOICES = [(code.value, code.value) for code in CurrencyCode]


class BaseModel(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Currency(BaseModel):
    """One of the currencies cars are bought, sold and expensed in."""

    code = models.CharField(max_length=3, unique=True, choices=CURRENCY_CODE_CHOICES)
    name = models.CharField(max_length=40)
    symbol = models.CharField(max_length=10)

    class Meta:
        app_label = "finance"
        verbose_name_plural = "currencies"
        ordering = ["code"]
        constraints = [
            models.CheckConstraint(
                condition=Q(code__in=[code.value for code in CurrencyCode]),
                name="finance_currency_supported_code",
            ),
        ]

    def __str__(self):
        return f"{self.code} ({self.symbol})"

    @property
    def currency_code(self) -> CurrencyCode:
        return CurrencyCode.parse(self.code)


class CurrencyExchangeRate(BaseModel):
    """Stored quote: 1 source_currency buys rate_value exchanged_currency on valuation_date."""

    source_currency = models.ForeignKey(
        Currency,
        related_name="quotes_as_source",
        on_delete=models.PROTECT,
    )
    exchanged_currency = models.ForeignKey(
        Currency,
        related_name="quotes_as_target",
        on_delete=models.PROTECT,
    )
    valuation_date = models.DateField(db_index=True)
    # six decimal places, the precision every conversion is quantized to
    rate_value = models.DecimalField(max_digits=18, decimal_places=6)

    class Meta:
        app_label = "finance"
        ordering = ["-valuation_date", "source_currency__code", "exchanged_currency__code"]
        constraints = [
            models.UniqueConstraint(
                fields=["source_currency", "exchanged_currency", "valuation_date"],
                name="finance_one_quote_per_pair_and_day",
            ),
            models.CheckConstraint(
                condition=Q(rate_value__gt=0),
                name="finance_rate_value_positive",
            ),
            models.CheckConstraint(
                condition=~Q(source_currency=F("exchanged_currency")),
                name="finance_rate_distinct_currencies",
            ),
        ]

    def __str__(self):
        return (
            f"1 {self.source_currency.code} = {self.rate_value} "
            f"{self.exchanged_currency.code} on {self.valuation_date}"
        )

    def to_domain(self) -> ExchangeRate:
        return ExchangeRate(
            source_currency=self.source_currency.code,
            exchanged_currency=self.exchanged_currency.code,
            valuation_date=self.valuation_date,
            rate_value=self.rate_value,
        )


class ProviderName(models.TextChoices):
    """
    Rate sources the fallback chain can use.
    Each value must have an adapter in PROVIDER_REGISTRY (providers/registry.py).
    """

    EXCHANGE_RATE = "exchange_rate", "ExchangeRate-API"
    CURRENCY_BEACON = "currency_beacon", "CurrencyBeacon"
    STATIC = "static", "Static fallback table"


class Provider(BaseModel):
    """A rate source switched on or off by the back office, tried in priority order."""

    name = models.CharField(max_length=50, choices=ProviderName.choices, unique=True)
    priority = models.PositiveSmallIntegerField(
        unique=True,
        help_text="Tried in ascending order; 0 is asked first.",
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        app_label = "finance"
        ordering = ["priority"]

    def __str__(self):
        state = "on" if self.is_active else "off"
        return f"#{self.priority} {self.get_name_display()} [{state}]"
