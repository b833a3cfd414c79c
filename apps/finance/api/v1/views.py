"""
ViewSets for the finance API v1.
Currencies, rates and providers are exposed through the DRF router; the
calculation endpoints wrap the domain functions.
"""

import logging
from decimal import Decimal, InvalidOperation
from datetime import datetime

from asgiref.sync import async_to_sync
from babel.core import UnknownLocaleError
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.finance.api.v1.serializers import (
    ConversionWarningRequestSerializer,
    CurrencyExchangeRateSerializer,
    CurrencySerializer,
    FormatRequestSerializer,
    ProviderSerializer,
    TransactionSummaryRequestSerializer,
)
from apps.finance.application.dto import ConversionRequestDTO, ConversionResultDTO
from apps.finance.application.summaries import summarize_transaction
from apps.finance.domain.exceptions import ConversionUnavailable
from apps.finance.domain.formatting import format_currency_advanced, get_currency_symbol
from apps.finance.domain.models import CurrencyCode
from apps.finance.domain.services import ExchangeRateService, get_default_converter
from apps.finance.domain.validation import needs_conversion_warning, validate_currency_amount
from apps.finance.infrastructure.persistence.models import (
    Currency,
    CurrencyExchangeRate,
    Provider,
)

logger = logging.getLogger(__name__)

FINANCIAL_DATA_UNAVAILABLE = "Could not load financial data"


@extend_schema(tags=['Currencies'])
class CurrencyViewSet(viewsets.ReadOnlyModelViewSet):

    queryset = Currency.objects.all()
    serializer_class = CurrencySerializer


@extend_schema(tags=['Rates'])
class CurrencyExchangeRateViewSet(viewsets.ReadOnlyModelViewSet):

    queryset = CurrencyExchangeRate.objects.select_related(
        "source_currency",
        "exchanged_currency",
    ).all()
    serializer_class = CurrencyExchangeRateSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter("source_currency", OpenApiTypes.STR, required=True, description="Source currency code (e.g. USD)"),
            OpenApiParameter("exchanged_currency", OpenApiTypes.STR, required=True, description="Target currency code (e.g. AED)"),
            OpenApiParameter("amount", OpenApiTypes.DECIMAL, required=True, description="Amount to convert"),
            OpenApiParameter("valuation_date", OpenApiTypes.DATE, description="Date for the rate (optional, defaults to today)"),
        ],
        description="Convert amount from one currency to another"
    )
    @action(detail=False, methods=['get'], url_path='convert')
    def convert(self, request):
        source_currency_code = request.query_params.get('source_currency')
        exchanged_currency_code = request.query_params.get('exchanged_currency')
        amount_str = request.query_params.get('amount')
        valuation_date_str = request.query_params.get('valuation_date')

        if not all([source_currency_code, exchanged_currency_code, amount_str]):
            return Response(
                {"error": "source_currency, exchanged_currency, and amount are required"},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            return Response(
                {"error": "Invalid amount. Must be a number"},
                status=status.HTTP_400_BAD_REQUEST
            )

        for code in (source_currency_code, exchanged_currency_code):
            result = validate_currency_amount(amount, code)
            if not result.is_valid:
                return Response({"error": list(result.errors)}, status=status.HTTP_400_BAD_REQUEST)

        valuation_date = None
        if valuation_date_str:
            try:
                valuation_date = datetime.strptime(valuation_date_str, "%Y-%m-%d").date()
            except ValueError:
                return Response(
                    {"error": "Invalid date format. Use YYYY-MM-DD"},
                    status=status.HTTP_400_BAD_REQUEST
                )

        conversion = ConversionRequestDTO(
            source_currency=source_currency_code.upper(),
            exchanged_currency=exchanged_currency_code.upper(),
            amount=amount,
            valuation_date=valuation_date,
        )
        result = ExchangeRateService.convert_amount(
            conversion.source_currency,
            conversion.exchanged_currency,
            conversion.amount,
            conversion.valuation_date
        )

        if result is None:
            return Response(
                {"error": FINANCIAL_DATA_UNAVAILABLE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        dto = ConversionResultDTO.from_dict(result)
        return Response({
            "source_currency": dto.source_currency,
            "exchanged_currency": dto.exchanged_currency,
            "amount": str(dto.amount),
            "rate": str(dto.rate),
            "converted_amount": str(dto.converted_amount),
            "valuation_date": dto.valuation_date.strftime("%Y-%m-%d"),
            "warning": needs_conversion_warning(dto.amount, dto.source_currency, dto.exchanged_currency),
        })


@extend_schema(tags=['Providers'])
class ProviderViewSet(viewsets.ModelViewSet):

    queryset = Provider.objects.all()
    serializer_class = ProviderSerializer


@extend_schema(tags=['Calculations'])
class CalculationViewSet(viewsets.ViewSet):

    @extend_schema(description="Validate an amount/currency pair; every violation is returned")
    @action(detail=False, methods=['post'], url_path='validate')
    def validate_amount(self, request):
        if "amount" not in request.data or "currency" not in request.data:
            return Response(
                {"error": "amount and currency are required"},
                status=status.HTTP_400_BAD_REQUEST
            )

        result = validate_currency_amount(request.data["amount"], request.data["currency"])
        return Response(result.as_dict())

    @extend_schema(request=FormatRequestSerializer, description="Format an amount for display")
    @action(detail=False, methods=['post'], url_path='format')
    def format_amount(self, request):
        serializer = FormatRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            formatted = format_currency_advanced(
                data["amount"],
                data["currency"].upper(),
                locale=data["locale"],
                show_symbol=data["show_symbol"],
                precision=data["precision"],
            )
        except (UnknownLocaleError, ValueError) as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "formatted": formatted,
            "symbol": get_currency_symbol(data["currency"].upper()),
        })

    @extend_schema(request=ConversionWarningRequestSerializer, description="Whether a cross-currency amount deserves a double check")
    @action(detail=False, methods=['post'], url_path='conversion-warning')
    def conversion_warning(self, request):
        serializer = ConversionWarningRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        return Response({
            "warning": needs_conversion_warning(
                data["amount"],
                data["from_currency"].upper(),
                data["to_currency"].upper(),
            )
        })

    @extend_schema(request=TransactionSummaryRequestSerializer, description="Total cost, profit, ROI and margins of a car")
    @action(detail=False, methods=['post'], url_path='transaction-summary')
    def transaction_summary(self, request):
        serializer = TransactionSummaryRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        transaction = serializer.to_transaction()
        target = CurrencyCode.parse(serializer.validated_data["target_currency"])
        converter = get_default_converter(serializer.validated_data.get("valuation_date"))

        try:
            summary = async_to_sync(summarize_transaction)(
                transaction,
                converter=converter,
                target=target,
            )
        except ConversionUnavailable as e:
            logger.warning("Transaction summary failed: %s", e)
            return Response(
                {"error": FINANCIAL_DATA_UNAVAILABLE},
                status=status.HTTP_503_SERVICE_UNAVAILABLE
            )

        return Response({
            "currency": summary.currency,
            "total_cost": str(summary.total_cost),
            "sale_price": None if summary.sale_price is None else str(summary.sale_price),
            "profit": None if summary.profit is None else str(summary.profit),
            "roi": str(summary.roi),
            "profit_margin": str(summary.profit_margin),
            "sale_margin": str(summary.sale_margin),
            "conversion_warning": summary.conversion_warning,
        })
