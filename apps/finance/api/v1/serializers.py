"""
Serializers for the finance API.
Handles validation and transformation between HTTP payloads, the ORM and
the domain values.
"""

from rest_framework import serializers

from apps.finance.domain.formatting import DEFAULT_LOCALE
from apps.finance.domain.models import (
    BASE_CURRENCY,
    CarTransaction,
    CurrencyCode,
    Expense,
    ExpenseCategory,
    Money,
)
from apps.finance.domain.validation import ERROR_UNSUPPORTED_CURRENCY, validate_currency_amount
from apps.finance.infrastructure.persistence.models import (
    Currency,
    CurrencyExchangeRate,
    Provider,
)

CURRENCY_CHOICES = [code.value for code in CurrencyCode]


class CurrencySerializer(serializers.ModelSerializer):
    class Meta:
        model = Currency
        fields = ["id", "code", "name", "symbol", "created_at", "updated_at"]
        read_only_fields = fields


class CurrencyExchangeRateSerializer(serializers.ModelSerializer):
    source_currency = serializers.CharField(source="source_currency.code", read_only=True)
    exchanged_currency = serializers.CharField(source="exchanged_currency.code", read_only=True)

    class Meta:
        model = CurrencyExchangeRate
        fields = [
            "id",
            "source_currency",
            "exchanged_currency",
            "valuation_date",
            "rate_value",
            "created_at",
        ]
        read_only_fields = fields


class ProviderSerializer(serializers.ModelSerializer):
    name_display = serializers.CharField(
        source="get_name_display",
        read_only=True,
    )

    class Meta:
        model = Provider
        fields = ["id", "name", "name_display", "priority", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]
        # validate_priority replaces the generic unique check with a clearer message
        extra_kwargs = {"priority": {"validators": []}}

    def validate_priority(self, value):
        existing = Provider.objects.filter(priority=value)

        if self.instance:
            existing = existing.exclude(pk=self.instance.pk)

        taken_by = existing.first()
        if taken_by is not None:
            raise serializers.ValidationError(
                f"Priority {value} is already assigned to {taken_by.get_name_display()}. "
                f"Please choose a different priority or update the existing provider first."
            )

        return value


class MoneySerializer(serializers.Serializer):
    """Validates an amount/currency pair and returns a domain Money."""

    amount = serializers.CharField()
    currency = serializers.CharField(max_length=3)

    def validate(self, attrs):
        result = validate_currency_amount(attrs["amount"], attrs["currency"])
        if not result.is_valid:
            errors = {}
            for error in result.errors:
                field = "currency" if error == ERROR_UNSUPPORTED_CURRENCY else "amount"
                errors.setdefault(field, []).append(error)
            raise serializers.ValidationError(errors)
        return Money(amount=attrs["amount"], currency=attrs["currency"])


class ExpenseSerializer(serializers.Serializer):
    amount = MoneySerializer()
    category = serializers.ChoiceField(
        choices=[c.value for c in ExpenseCategory],
        default=ExpenseCategory.OTHER.value,
    )
    date = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        return Expense(
            amount=attrs["amount"],
            category=ExpenseCategory(attrs["category"]),
            date=attrs.get("date"),
        )


class TransactionSummaryRequestSerializer(serializers.Serializer):
    purchase_price = MoneySerializer()
    sale_price = MoneySerializer(required=False, allow_null=True)
    expenses = ExpenseSerializer(many=True, required=False)
    sale_date = serializers.DateField(required=False, allow_null=True)
    target_currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, default=BASE_CURRENCY.value)
    valuation_date = serializers.DateField(required=False, allow_null=True)

    def to_transaction(self) -> CarTransaction:
        data = self.validated_data
        return CarTransaction(
            purchase_price=data["purchase_price"],
            sale_price=data.get("sale_price"),
            expenses=tuple(data.get("expenses", [])),
            sale_date=data.get("sale_date"),
        )


class FormatRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=None, decimal_places=None)
    currency = serializers.CharField(max_length=3)
    locale = serializers.CharField(default=DEFAULT_LOCALE)
    show_symbol = serializers.BooleanField(default=True)
    precision = serializers.IntegerField(min_value=0, max_value=10, default=2)


class ConversionWarningRequestSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=None, decimal_places=None)
    from_currency = serializers.CharField(max_length=3)
    to_currency = serializers.CharField(max_length=3)
