from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.finance.api.v1.views import (
    CalculationViewSet,
    CurrencyExchangeRateViewSet,
    CurrencyViewSet,
    ProviderViewSet,
)

router = DefaultRouter()
router.register(r'currencies', CurrencyViewSet, basename='currency')
router.register(r'rates', CurrencyExchangeRateViewSet, basename='exchange-rate')
router.register(r'providers', ProviderViewSet, basename='provider')
router.register(r'calculations', CalculationViewSet, basename='calculation')

urlpatterns = [
    path('', include(router.urls)),
]
